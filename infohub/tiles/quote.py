from __future__ import annotations

from typing import Any, Mapping

from infohub.escaping import esc, nl2br, safe_href
from infohub.tiles.base import Field, TileType, text_of

QUOTE_CSS = """
.tile .quote-link { display: block; color: inherit; }
.tile .quote-link:hover { text-decoration: none; }
.quote-text { font-size: 1.15rem; font-style: italic; border-left: 4px solid var(--accent-color); padding-left: 16px; margin: 0 0 12px; }
.quote-source { display: block; font-size: 0.9rem; color: var(--text-light); font-style: normal; }
.quote-source::before { content: "\\2014\\00a0"; }
""".strip()


class QuoteTile(TileType):
    key = "quote"
    name = "Quote"
    description = "Quote or verse with source"
    fields = (
        Field("title", "text", "Title", placeholder='e.g. "Verse of the week"'),
        Field("showTitle", "checkbox", "Show title", default=True),
        Field("quote", "textarea", "Quote", required=True, max_length=2000),
        Field("source", "text", "Source", placeholder='e.g. "John 3:16"'),
        Field("link", "url", "Link", allow_relative=False, hint="Makes the whole tile clickable"),
    )

    def render(self, data: Mapping[str, Any]) -> str:
        quote = text_of(data, "quote")
        source = text_of(data, "source")
        link = text_of(data, "link").strip()

        html_out = self.title_html(data, default_show=True, css_class="quote-title")
        if link:
            html_out += f'<a href="{safe_href(link)}" class="quote-link" target="_blank" rel="noopener noreferrer">\n'
        html_out += f'<blockquote class="quote-text">\n    <p>{nl2br(quote)}</p>\n</blockquote>\n'
        if source:
            html_out += f'<cite class="quote-source">{esc(source)}</cite>\n'
        if link:
            html_out += "</a>\n"
        return html_out

    def css(self) -> str:
        return QUOTE_CSS
