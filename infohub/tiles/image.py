from __future__ import annotations

from typing import Any, Mapping

from infohub.escaping import esc, safe_href
from infohub.tiles.base import IMAGE_EXTENSIONS, Field, TileType, flag, text_of

IMAGE_CSS = """
.tile-image-container { display: block; overflow: hidden; border-radius: 8px; }
.tile-image-lightbox { cursor: zoom-in; }
.tile-caption { margin-top: 8px; font-size: 0.9rem; color: var(--text-light); }
.lightbox { display: none; position: fixed; inset: 0; background: rgba(0,0,0,0.85); z-index: 1000; align-items: center; justify-content: center; cursor: zoom-out; }
.lightbox.active { display: flex; }
.lightbox img { max-width: 92vw; max-height: 92vh; border-radius: 8px; }
.lightbox-close { position: absolute; top: 16px; right: 24px; color: #fff; font-size: 2rem; }
""".strip()

IMAGE_JS = """
function initLightbox() {
    const triggers = document.querySelectorAll('[data-lightbox-src]');
    if (triggers.length === 0) return;

    const overlay = document.createElement('div');
    overlay.className = 'lightbox';
    const close = document.createElement('span');
    close.className = 'lightbox-close';
    close.textContent = '\\u00d7';
    const img = document.createElement('img');
    img.alt = '';
    overlay.appendChild(close);
    overlay.appendChild(img);
    document.body.appendChild(overlay);

    function hide() {
        overlay.classList.remove('active');
        img.src = '';
        document.body.style.overflow = '';
    }

    triggers.forEach(trigger => {
        trigger.addEventListener('click', () => {
            img.src = trigger.dataset.lightboxSrc;
            img.alt = trigger.dataset.lightboxAlt || '';
            overlay.classList.add('active');
            document.body.style.overflow = 'hidden';
        });
    });
    overlay.addEventListener('click', hide);
    document.addEventListener('keydown', (e) => {
        if (e.key === 'Escape') hide();
    });
}
""".strip()


class ImageTile(TileType):
    key = "image"
    name = "Image"
    description = "Image with optional lightbox or link"
    fields = (
        Field("title", "text", "Title", required=True, placeholder="Title for the editor overview"),
        Field("showTitle", "checkbox", "Show title on page", default=False),
        Field("image", "image", "Image", required=True, extensions=IMAGE_EXTENSIONS),
        Field("caption", "text", "Caption", placeholder="Text below the image"),
        Field("lightbox", "checkbox", "Enable lightbox", default=True),
        Field("link", "url", "Link URL", hint="Only used without lightbox", placeholder="https://example.com"),
    )

    def render(self, data: Mapping[str, Any]) -> str:
        title = esc(text_of(data, "title"))
        src = safe_href(text_of(data, "image"), placeholder="")
        caption = text_of(data, "caption")
        link = text_of(data, "link").strip()

        html_out = self.title_html(data, default_show=False)
        img = f'<img src="{src}" alt="{title}" loading="lazy">'

        if flag(data, "lightbox", True):
            html_out += (
                f'<div class="tile-image-container tile-image-lightbox" role="button" tabindex="0" '
                f'data-lightbox-src="{src}" data-lightbox-alt="{title}">\n    {img}\n</div>\n'
            )
        elif link:
            html_out += (
                f'<a href="{safe_href(link)}" class="tile-image-container tile-image-link" '
                f'target="_blank" rel="noopener noreferrer">\n    {img}\n</a>\n'
            )
        else:
            html_out += f'<div class="tile-image-container">\n    {img}\n</div>\n'

        if caption:
            html_out += f'<p class="tile-caption">{esc(caption)}</p>\n'
        return html_out

    def css(self) -> str:
        return IMAGE_CSS

    def js(self) -> str:
        return IMAGE_JS

    def init_function(self) -> str | None:
        return "initLightbox"
