from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlparse

from infohub.escaping import esc, nl2br, safe_href
from infohub.tiles.base import Field, TileType, flag, text_of

LINK_CSS = """
.tile .link-card { display: flex; flex-direction: column; gap: 8px; color: inherit; height: 100%; }
.tile .link-card:hover { text-decoration: none; }
.link-header { display: flex; align-items: center; justify-content: space-between; gap: 12px; }
.link-header h3 { margin-bottom: 0; }
.link-icon-circle { display: inline-flex; align-items: center; justify-content: center; width: 36px; height: 36px; border-radius: 50%; background: rgba(0,0,0,0.05); flex-shrink: 0; }
.link-cta { font-weight: 600; color: var(--accent-color); }
.link-domain, .link-hint { font-size: 0.8rem; color: var(--text-light); }
""".strip()


def is_external_url(url: str) -> bool:
    return urlparse(url).scheme.lower() in ("http", "https")


def url_domain(url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https"):
        return ""
    return parsed.netloc


class LinkTile(TileType):
    key = "link"
    name = "Link"
    description = "Link to an external or internal page"
    fields = (
        Field("title", "text", "Title", required=True, placeholder="e.g. Town website"),
        Field("showTitle", "checkbox", "Show title on page", default=True),
        Field("description", "textarea", "Description", placeholder="Short description..."),
        Field("url", "url", "URL", required=True, placeholder="https://example.com"),
        Field("linkText", "text", "Link text", default="Learn more", placeholder="Learn more"),
        Field("external", "checkbox", "Open in new tab", hint="Detected from the URL when unset"),
        Field("showDomain", "checkbox", "Show link preview", default=True),
    )

    def render(self, data: Mapping[str, Any]) -> str:
        url = text_of(data, "url").strip()
        description = text_of(data, "description")
        link_text = text_of(data, "linkText").strip() or "Learn more"
        show_domain = flag(data, "showDomain", True)

        external = data.get("external")
        is_external = bool(external) if external is not None else is_external_url(url)
        target = ' target="_blank" rel="noopener noreferrer"' if is_external else ""
        external_class = " link-external" if is_external else ""
        external_icon = '<span class="external-icon">↗</span>' if is_external else ""
        domain = url_domain(url)

        html_out = f'<a href="{safe_href(url)}"{target} class="link-card{external_class}">\n'
        html_out += '<div class="link-header">\n'
        html_out += self.title_html(data, default_show=True, css_class="link-title")
        html_out += '    <span class="link-icon-circle">\U0001f517</span>\n'
        html_out += "</div>\n"
        html_out += '<div class="link-content">\n'
        if description:
            html_out += f'    <p class="link-description">{nl2br(description)}</p>\n'
        html_out += f'    <span class="link-cta">→ {esc(link_text)}{external_icon}</span>\n'
        html_out += "</div>\n"

        if show_domain and domain:
            html_out += f'<span class="link-domain">{esc(domain)}</span>\n'
        elif is_external and not show_domain:
            html_out += '<span class="link-hint">opens in a new tab →</span>\n'

        html_out += "</a>\n"
        return html_out

    def css(self) -> str:
        return LINK_CSS
