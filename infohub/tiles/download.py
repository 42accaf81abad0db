from __future__ import annotations

from typing import Any, Mapping

from infohub.escaping import esc, file_extension, nl2br, safe_href
from infohub.tiles.base import Field, TileType, text_of

DOWNLOAD_EXTENSIONS = ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "zip", "rar", "txt")

FILE_ICONS = {
    "pdf": "\U0001f4c4",
    "doc": "\U0001f4dd",
    "docx": "\U0001f4dd",
    "xls": "\U0001f4ca",
    "xlsx": "\U0001f4ca",
    "ppt": "\U0001f4fd️",
    "pptx": "\U0001f4fd️",
    "zip": "\U0001f4e6",
    "rar": "\U0001f4e6",
    "txt": "\U0001f4c3",
}
DEFAULT_FILE_ICON = "\U0001f4ce"

DOWNLOAD_CSS = """
.tile-download { text-align: center; }
.tile-download .download-content { text-align: left; }
.tile-download .download-action { margin-top: auto; padding-top: 12px; text-align: center; }
.tile-download.style-flat .download-action { margin-top: 12px; }
.tile .download-btn { display: inline-flex; align-items: center; gap: 8px; background: var(--accent-color); color: white; padding: 12px 24px; border-radius: 8px; transition: filter 0.2s ease, transform 0.2s ease; }
.tile .download-btn:hover { filter: brightness(0.9); transform: translateY(-1px); text-decoration: none; }
""".strip()


def file_icon(path: str) -> str:
    return FILE_ICONS.get(file_extension(path), DEFAULT_FILE_ICON)


class DownloadTile(TileType):
    key = "download"
    name = "Download"
    description = "File offered for download"
    fields = (
        Field("title", "text", "Title", required=True, placeholder="e.g. Registration form"),
        Field("showTitle", "checkbox", "Show title on page", default=True),
        Field("description", "textarea", "Description", placeholder="What is in the file..."),
        Field("file", "file", "File", required=True, extensions=DOWNLOAD_EXTENSIONS),
        Field("buttonText", "text", "Button text", default="Download", max_length=100),
    )

    def render(self, data: Mapping[str, Any]) -> str:
        path = text_of(data, "file").strip()
        description = text_of(data, "description")
        button_text = text_of(data, "buttonText").strip() or "Download"

        html_out = '<div class="download-content">\n'
        html_out += self.title_html(data, default_show=True)
        if description:
            html_out += f"<p>{nl2br(description)}</p>\n"
        html_out += "</div>\n"
        html_out += (
            '<div class="download-action">\n'
            f'<a href="{safe_href(path)}" class="download-btn" download>\n'
            f'    <span class="download-icon">{file_icon(path)}</span>\n'
            f"    <span>{esc(button_text)}</span>\n"
            "</a>\n"
            "</div>\n"
        )
        return html_out

    def css(self) -> str:
        return DOWNLOAD_CSS
