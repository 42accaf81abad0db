from __future__ import annotations

import logging
from typing import Any, Mapping

from infohub.escaping import esc, safe_href
from infohub.tiles.base import Field, TileType, flag, text_of

logger = logging.getLogger(__name__)

RATIO_PADDING = {"16:9": "56.25%", "4:3": "75%", "1:1": "100%"}
MIN_CUSTOM_HEIGHT = 100
MAX_CUSTOM_HEIGHT = 2000
DEFAULT_CUSTOM_HEIGHT = 500

IFRAME_CSS = """
.tile-iframe-container { position: relative; width: 100%; height: 0; overflow: hidden; border-radius: 8px; }
.tile-iframe-container iframe { position: absolute; inset: 0; width: 100%; height: 100%; border: 0; }
.iframe-modal-trigger { display: inline-flex; align-items: center; gap: 8px; background: var(--accent-color); color: white; border: 0; padding: 12px 24px; border-radius: 8px; font: inherit; cursor: pointer; }
.iframe-modal { display: none; position: fixed; inset: 0; background: rgba(0,0,0,0.7); z-index: 1000; align-items: center; justify-content: center; }
.iframe-modal.active { display: flex; }
.iframe-modal-content { background: #fff; border-radius: var(--border-radius); width: min(900px, 94vw); height: min(80vh, 900px); display: flex; flex-direction: column; overflow: hidden; }
.iframe-modal-header { display: flex; align-items: center; justify-content: space-between; padding: 12px 16px; border-bottom: 1px solid rgba(0,0,0,0.08); }
.iframe-modal-close { background: none; border: 0; font-size: 1.6rem; cursor: pointer; }
.iframe-modal-body { flex-grow: 1; }
.iframe-modal-body iframe { width: 100%; height: 100%; border: 0; }
""".strip()

IFRAME_JS = """
function initIframeModals() {
    const triggers = document.querySelectorAll('.iframe-modal-trigger[data-iframe-url]');
    if (triggers.length === 0) return;

    const modal = document.createElement('div');
    modal.className = 'iframe-modal';
    modal.innerHTML = '<div class="iframe-modal-content">' +
        '<div class="iframe-modal-header"><h3 class="iframe-modal-title"></h3>' +
        '<button type="button" class="iframe-modal-close">\\u00d7</button></div>' +
        '<div class="iframe-modal-body"><iframe src="about:blank"></iframe></div></div>';
    document.body.appendChild(modal);

    const titleEl = modal.querySelector('.iframe-modal-title');
    const frame = modal.querySelector('iframe');

    function hide() {
        modal.classList.remove('active');
        frame.src = 'about:blank';
        document.body.style.overflow = '';
    }

    triggers.forEach(trigger => {
        trigger.addEventListener('click', () => {
            const title = trigger.dataset.iframeTitle || '';
            titleEl.textContent = title;
            titleEl.style.display = title.trim() ? '' : 'none';
            frame.src = trigger.dataset.iframeUrl;
            modal.classList.add('active');
            document.body.style.overflow = 'hidden';
        });
    });
    modal.querySelector('.iframe-modal-close').addEventListener('click', hide);
    modal.addEventListener('click', (e) => {
        if (e.target === modal) hide();
    });
    document.addEventListener('keydown', (e) => {
        if (e.key === 'Escape') hide();
    });
}
""".strip()


def _custom_height(value: Any) -> int | None:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


class IframeTile(TileType):
    key = "iframe"
    name = "Iframe"
    description = "Embed external content such as forms or widgets"
    fields = (
        Field("title", "text", "Title", required=True, placeholder="Title for the editor overview"),
        Field("showTitle", "checkbox", "Show title on page", default=False),
        Field("url", "url", "Iframe URL", required=True, allow_relative=False, placeholder="https://forms.example.com/..."),
        Field("description", "textarea", "Description", hint="Shown as a preview in modal mode"),
        Field(
            "displayMode",
            "select",
            "Display mode",
            default="inline",
            options=(("inline", "Inline (embedded)"), ("modal", "Modal (opens on click)")),
        ),
        Field(
            "aspectRatio",
            "select",
            "Aspect ratio",
            default="16:9",
            options=(("16:9", "16:9 (wide)"), ("4:3", "4:3 (standard)"), ("1:1", "1:1 (square)"), ("custom", "Custom height")),
        ),
        Field("customHeight", "number", "Height in pixels", default=DEFAULT_CUSTOM_HEIGHT, hint="Only for custom height"),
    )

    def validate_extra(self, data: Mapping[str, Any]) -> list[str]:
        url = text_of(data, "url")
        if url.lower().startswith("http://"):
            logger.warning("Iframe URL uses http, browsers may block it as mixed content: %s", url)

        if data.get("aspectRatio") == "custom":
            height = _custom_height(data.get("customHeight"))
            if height is None or not MIN_CUSTOM_HEIGHT <= height <= MAX_CUSTOM_HEIGHT:
                return [f"Height must be between {MIN_CUSTOM_HEIGHT} and {MAX_CUSTOM_HEIGHT} pixels"]
        return []

    def render(self, data: Mapping[str, Any]) -> str:
        url = safe_href(text_of(data, "url").strip(), placeholder="about:blank")
        description = text_of(data, "description")
        mode = "modal" if data.get("displayMode") == "modal" else "inline"
        ratio = text_of(data, "aspectRatio", "16:9")

        html_out = self.title_html(data, default_show=False)

        if mode == "modal":
            modal_title = esc(text_of(data, "title")) if flag(data, "showTitle", False) else ""
            if description:
                html_out += f'<p class="tile-description">{esc(description)}</p>\n'
            html_out += (
                f'<button type="button" class="iframe-modal-trigger" data-iframe-url="{url}" '
                f'data-iframe-title="{modal_title}">\n'
                '    <span class="iframe-modal-icon">↗</span>\n'
                "    <span>Open form</span>\n"
                "</button>\n"
            )
            return html_out

        if ratio == "custom":
            height = _custom_height(data.get("customHeight")) or DEFAULT_CUSTOM_HEIGHT
            style = f"height: {height}px; padding-bottom: 0;"
        else:
            style = f"padding-bottom: {RATIO_PADDING.get(ratio, RATIO_PADDING['16:9'])};"

        html_out += (
            f'<div class="tile-iframe-container" style="{style}">\n'
            f'    <iframe src="{url}" allowfullscreen loading="lazy"></iframe>\n'
            "</div>\n"
        )
        if description:
            html_out += f'<p class="tile-caption">{esc(description)}</p>\n'
        return html_out

    def css(self) -> str:
        return IFRAME_CSS

    def js(self) -> str:
        return IFRAME_JS

    def init_function(self) -> str | None:
        return "initIframeModals"
