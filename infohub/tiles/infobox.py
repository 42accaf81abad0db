from __future__ import annotations

from typing import Any, Mapping

from infohub.rich_text import render_body
from infohub.tiles.base import Field, TileType, text_of

INFOBOX_CSS = """
.tile-infobox ul, .tile-infobox ol { margin: 0 0 12px 1.25em; }
.tile-infobox li { margin-bottom: 4px; }
.tile-infobox code { background: rgba(0,0,0,0.05); padding: 1px 4px; border-radius: 4px; }
""".strip()


class InfoboxTile(TileType):
    key = "infobox"
    name = "Infobox"
    description = "Simple text box with title and description"
    fields = (
        Field("title", "text", "Title", required=True, placeholder="Enter a title..."),
        Field("showTitle", "checkbox", "Show title on page", default=True),
        Field("description", "textarea", "Description", placeholder="Enter the text..."),
        Field(
            "format",
            "select",
            "Text format",
            default="plain",
            options=(("plain", "Plain text"), ("markdown", "Markdown")),
        ),
    )

    def render(self, data: Mapping[str, Any]) -> str:
        body = render_body(text_of(data, "description"), text_of(data, "format", "plain"))
        html_out = self.title_html(data, default_show=True)
        if body:
            html_out += body + "\n"
        return html_out

    def css(self) -> str:
        return INFOBOX_CSS
