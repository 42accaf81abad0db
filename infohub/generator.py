"""Assemble the static page from settings and tiles.

``PageGenerator.compose`` is the single composition routine: preview returns its
output, publish writes the same string to ``public/index.html``. The page has no
generation timestamp, so both are identical for unchanged data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from infohub import site_paths
from infohub.errors import RenderError, UnknownTypeError
from infohub.escaping import esc, is_hex_color, nl2br, safe_href
from infohub.settings_store import DEFAULT_THEME, FOCUS_POINTS, SettingsStore
from infohub.storage import archive_copy, path_lock, write_text_atomic
from infohub.tile_store import COLOR_SCHEMES, SIZES, STYLES, TileStore
from infohub.tiles import TileRegistry, TileType
from infohub.visibility import is_published, schedule_of

logger = logging.getLogger(__name__)

DEFAULT_PAGE_TITLE = "Info-Hub"

FAVICON = (
    "data:image/svg+xml,<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 100 100'>"
    "<text y='.9em' font-size='90'>\U0001f4cc</text></svg>"
)

BASE_CSS = """
* { box-sizing: border-box; margin: 0; padding: 0; }
html { background-color: var(--bg-color); overscroll-behavior: none; scroll-behavior: smooth; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, sans-serif;
    background-color: var(--bg-color);
    color: var(--text-color);
    line-height: 1.6;
    min-height: 100vh;
    display: flex;
    flex-direction: column;
    -webkit-font-smoothing: antialiased;
}

/* Header */
.site-header { position: relative; text-align: center; margin-bottom: calc(var(--spacing) * 0.5); }
.site-header .header-image { width: 100%; height: 320px; overflow: hidden; }
.site-header .header-image img { width: 100%; height: 100%; object-fit: cover; }
.site-header .site-title {
    position: absolute;
    bottom: 24px;
    left: 50%;
    transform: translateX(-50%);
    color: white;
    text-shadow: 0 2px 12px rgba(0, 0, 0, 0.35);
    font-size: clamp(1.5rem, 4vw, 2.5rem);
    font-weight: 700;
    padding: 12px 32px;
    background: rgba(0, 0, 0, 0.3);
    backdrop-filter: blur(10px);
    border-radius: var(--border-radius);
    max-width: 90%;
}
.site-header--minimal { padding: 48px 24px; background: var(--accent-color); }
.site-header--minimal .site-title {
    position: static;
    transform: none;
    background: none;
    text-shadow: none;
    font-size: clamp(1.5rem, 4vw, 2.2rem);
}

/* Grid: 4 columns */
.tile-grid {
    display: grid;
    grid-template-columns: repeat(4, 1fr);
    gap: var(--spacing);
    width: 100%;
    max-width: var(--max-width);
    margin: 0 auto;
    padding: var(--spacing);
    flex-grow: 1;
    align-content: start;
}
.tile {
    display: flex;
    flex-direction: column;
    padding: var(--spacing);
    border-radius: var(--border-radius);
    transition: transform 0.2s ease, box-shadow 0.2s ease;
}
.tile:hover { transform: translateY(-2px); }
.tile.size-small { grid-column: span 1; }
.tile.size-medium { grid-column: span 2; }
.tile.size-large { grid-column: span 3; }
.tile.size-full { grid-column: 1 / -1; }

@media (max-width: 900px) {
    .tile-grid { grid-template-columns: repeat(2, 1fr); }
    .tile.size-small { grid-column: span 1; }
    .tile.size-medium, .tile.size-large { grid-column: span 2; }
    .site-header .header-image { height: 260px; }
}

@media (max-width: 600px) {
    :root { --spacing: 16px; --border-radius: 12px; }
    .tile-grid { grid-template-columns: 1fr; gap: 16px; }
    .tile.size-small, .tile.size-medium, .tile.size-large, .tile.size-full { grid-column: span 1; }
    .tile:hover { transform: none; }
    .site-header .header-image { height: 200px; }
    .site-header--minimal { padding: 32px 16px; }
}

/* Styles and color schemes */
.tile.style-card { justify-content: center; background: var(--card-bg); box-shadow: var(--card-shadow); }
.tile.style-card:hover { box-shadow: var(--card-shadow-hover); }
.tile.style-flat { justify-content: flex-start; background: transparent; border-radius: 8px; box-shadow: none; }
.tile.style-flat:hover { transform: none; }
.tile.color-default { background-color: transparent; }
.tile.color-white { background-color: var(--card-bg); }
.tile.color-accent1 { background-color: var(--accent-color); }
.tile.color-accent2 { background-color: var(--accent-color-2); }
.tile.color-accent3 { background-color: var(--accent-color-3); }
.tile.style-card.color-default { background-color: var(--card-bg); }

/* Content */
.tile h3 { margin-bottom: 12px; font-size: 1.2rem; font-weight: 600; }
.tile p { margin-bottom: 12px; }
.tile p:last-child { margin-bottom: 0; }
.tile img { max-width: 100%; display: block; border-radius: 8px; }
.tile a { color: var(--accent-color); text-decoration: none; font-weight: 500; }
.tile a:hover { text-decoration: underline; }

.site-footer {
    text-align: center;
    padding: 32px 24px;
    color: var(--text-light);
    margin-top: auto;
    font-size: 0.875rem;
    border-top: 1px solid rgba(0,0,0,0.06);
}
::selection { background: var(--accent-color); color: white; }
@media (prefers-reduced-motion: reduce) {
    *, *::before, *::after { animation-duration: 0.01ms !important; transition-duration: 0.01ms !important; }
    html { scroll-behavior: auto; }
}
""".strip()

RUNTIME_JS = """
function adjustTextContrast() {
    function luminance(color) {
        color = (color || '').trim();
        const rgb = color.match(/rgba?\\(\\s*(\\d+)\\s*,\\s*(\\d+)\\s*,\\s*(\\d+)/);
        if (rgb) return 0.299 * rgb[1] + 0.587 * rgb[2] + 0.114 * rgb[3];
        let hex = color.replace('#', '');
        if (hex.length === 3) hex = hex[0] + hex[0] + hex[1] + hex[1] + hex[2] + hex[2];
        if (hex.length !== 6) return 128;
        const r = parseInt(hex.substr(0, 2), 16);
        const g = parseInt(hex.substr(2, 2), 16);
        const b = parseInt(hex.substr(4, 2), 16);
        if (isNaN(r) || isNaN(g) || isNaN(b)) return 128;
        return 0.299 * r + 0.587 * g + 0.114 * b;
    }

    const styles = getComputedStyle(document.documentElement);
    const vars = {
        'color-accent1': '--accent-color',
        'color-accent2': '--accent-color-2',
        'color-accent3': '--accent-color-3'
    };
    document.querySelectorAll('.tile.color-accent1, .tile.color-accent2, .tile.color-accent3').forEach(tile => {
        const cls = Object.keys(vars).find(c => tile.classList.contains(c));
        const text = luminance(styles.getPropertyValue(vars[cls])) > 150 ? '#333333' : '#ffffff';
        tile.style.color = text;
        tile.querySelectorAll('h3, p').forEach(el => el.style.color = text);
    });
}

function applyUrlParams(params) {
    if (params.get('embedded') === 'true') {
        const header = document.querySelector('.site-header');
        const footer = document.querySelector('.site-footer');
        if (header) header.style.display = 'none';
        if (footer) footer.style.display = 'none';
        document.body.style.minHeight = 'auto';
    }
    const style = params.get('style') || '';
    if (style.includes('clean')) {
        document.body.style.backgroundColor = 'transparent';
        document.documentElement.style.backgroundColor = 'transparent';
    }
    if (style.includes('minimalbox')) {
        document.querySelectorAll('.tile').forEach(tile => {
            tile.style.backgroundColor = 'white';
            tile.style.color = '#333333';
            tile.querySelectorAll('h3, h4, p, span, a, label, .tile-description, .tile-caption').forEach(el => {
                el.style.color = '#333333';
            });
        });
    }
}

function initScheduledVisibility() {
    const tiles = document.querySelectorAll('[data-show-from], [data-show-until]');
    if (tiles.length === 0) return;

    function update() {
        const now = new Date();
        tiles.forEach(tile => {
            if (tile.dataset.expired === 'true') return;
            const from = tile.dataset.showFrom ? new Date(tile.dataset.showFrom) : null;
            const until = tile.dataset.showUntil ? new Date(tile.dataset.showUntil) : null;
            const show = (!from || now >= from) && (!until || now <= until);
            tile.style.display = show ? '' : 'none';
        });
    }

    update();
    setInterval(update, 60000);
}

document.addEventListener('DOMContentLoaded', () => {
    const params = new URLSearchParams(window.location.search);
    applyUrlParams(params);
    if (!(params.get('style') || '').includes('minimalbox')) {
        adjustTextContrast();
    }
    initScheduledVisibility();
});
""".strip()

@dataclass
class PageBuild:
    html: str
    published: list[str] = field(default_factory=list)
    skipped: list[dict[str, str]] = field(default_factory=list)
    used_types: set[str] = field(default_factory=set)


def _theme_vars(theme: Mapping[str, Any]) -> str:
    colors = {key: theme.get(key) if is_hex_color(theme.get(key)) else default for key, default in DEFAULT_THEME.items()}
    return (
        ":root {\n"
        f"    --bg-color: {colors['backgroundColor']};\n"
        f"    --accent-color: {colors['accentColor']};\n"
        f"    --accent-color-2: {colors['accentColor2']};\n"
        f"    --accent-color-3: {colors['accentColor3']};\n"
        "    --text-color: #2d3748;\n"
        "    --text-light: #718096;\n"
        "    --card-bg: #ffffff;\n"
        "    --card-shadow: 0 1px 3px rgba(0,0,0,0.05), 0 4px 14px rgba(0,0,0,0.06);\n"
        "    --card-shadow-hover: 0 2px 6px rgba(0,0,0,0.06), 0 10px 24px rgba(0,0,0,0.1);\n"
        "    --border-radius: 14px;\n"
        "    --spacing: 24px;\n"
        "    --max-width: 1200px;\n"
        "}"
    )


def render_header(site: Mapping[str, Any]) -> str:
    title = str(site.get("title") or "")
    header_image = str(site.get("headerImage") or "")
    title_html = f'<h1 class="site-title">{esc(title)}</h1>' if title else ""

    if header_image:
        focus = site.get("headerFocusPoint")
        if focus not in FOCUS_POINTS:
            focus = "center center"
        return (
            '<header class="site-header">\n'
            '    <div class="header-image">\n'
            f'        <img src="{safe_href(header_image, placeholder="")}" alt="" style="object-position: {focus};">\n'
            "    </div>\n"
            f"    {title_html}\n"
            "</header>\n"
        )
    if title:
        return f'<header class="site-header site-header--minimal">\n    {title_html}\n</header>\n'
    return ""


def render_footer(site: Mapping[str, Any]) -> str:
    footer = str(site.get("footerText") or "")
    if not footer:
        return ""
    return f'<footer class="site-footer">{nl2br(footer)}</footer>\n'


def page_title(site: Mapping[str, Any]) -> str:
    return str(site.get("pageTitle") or site.get("title") or DEFAULT_PAGE_TITLE)


def schedule_attributes(tile: Mapping[str, Any]) -> str:
    schedule = schedule_of(tile)
    attrs = ""
    if "showFrom" in schedule:
        attrs += f' data-show-from="{esc(schedule["showFrom"])}"'
    if "showUntil" in schedule:
        attrs += f' data-show-until="{esc(schedule["showUntil"])}"'
    return attrs


def wrap_tile(tile: Mapping[str, Any], tile_type: TileType, fragment: str) -> str:
    data = tile.get("data") or {}
    size = tile_type.forced_size or (tile.get("size") if tile.get("size") in SIZES else "medium")
    style = tile.get("style") if tile.get("style") in STYLES else "card"
    scheme = tile.get("colorScheme") if tile.get("colorScheme") in COLOR_SCHEMES else "default"
    classes = ["tile", f"tile-{tile_type.key}", f"size-{size}", f"style-{style}", f"color-{scheme}"]
    classes.extend(esc(extra) for extra in tile_type.wrapper_classes(data))

    schedule = schedule_attributes(tile)
    hidden = ' style="display:none;"' if schedule else ""
    return (
        f'<div class="{" ".join(classes)}"{schedule}{hidden} data-tile-id="{esc(tile.get("id", ""))}">\n'
        f"{fragment}"
        "</div>\n"
    )


class PageGenerator:
    def __init__(
        self,
        base_dir: Path,
        tile_store: TileStore,
        settings_store: SettingsStore,
        registry: TileRegistry | None = None,
    ):
        self.base_dir = base_dir
        self.tile_store = tile_store
        self.settings_store = settings_store
        self.registry = registry or tile_store.registry
        self.output_path = site_paths.page_path(base_dir)
        self._lock = path_lock(self.output_path)

    def _render_tile(self, tile: Mapping[str, Any], build: PageBuild) -> str | None:
        """Wrapped markup for one tile, or None after recording why it was skipped."""
        tile_id = str(tile.get("id", ""))

        def skip(reason: str) -> None:
            build.skipped.append({"id": tile_id, "type": str(tile.get("type", "")), "reason": reason})

        try:
            tile_type = self.registry.resolve(tile.get("type"))
        except UnknownTypeError as exc:
            logger.warning("Skipping tile %s: %s", tile_id, exc)
            skip("unknown type")
            return None

        data = tile.get("data") or {}
        try:
            errors = tile_type.validate(data)
            if errors:
                logger.warning("Skipping invalid tile %s (%s): %s", tile_id, tile_type.key, "; ".join(errors))
                skip("invalid data")
                return None
            html_out = wrap_tile(tile, tile_type, tile_type.render(data))
        except Exception as exc:
            logger.error("%s", RenderError(tile_id, tile_type.key, exc), exc_info=exc)
            skip("render error")
            return None

        build.published.append(tile_id)
        build.used_types.add(tile_type.key)
        return html_out

    def compose(self) -> PageBuild:
        settings = self.settings_store.get()
        tiles = [tile for tile in self.tile_store.list_tiles() if is_published(tile)]

        build = PageBuild(html="")
        fragments = [self._render_tile(tile, build) for tile in tiles]
        tiles_html = "".join(fragment for fragment in fragments if fragment)
        build.html = self.render_page(settings, tiles_html, build.used_types)
        return build

    def render_page(self, settings: Mapping[str, Any], tiles_html: str, used: set[str]) -> str:
        site = settings.get("site") or {}
        theme = settings.get("theme") or {}

        used_types = [tile_type for tile_type in self.registry if tile_type.key in used]
        tile_css = "\n".join(t.css() for t in used_types if t.css())
        tile_js = "\n\n".join(t.js() for t in used_types if t.js())
        init_calls = [f"{t.init_function()}();" for t in used_types if t.init_function()]

        script = RUNTIME_JS
        if tile_js:
            script += "\n\n" + tile_js
        if init_calls:
            script += "\n\ndocument.addEventListener('DOMContentLoaded', () => {\n    "
            script += "\n    ".join(init_calls)
            script += "\n});"

        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '<meta charset="UTF-8">\n'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            f"<title>{esc(page_title(site))}</title>\n"
            f'<link rel="icon" href="{FAVICON}">\n'
            "<style>\n"
            f"{_theme_vars(theme)}\n"
            f"{BASE_CSS}\n"
            + (f"{tile_css}\n" if tile_css else "")
            + "</style>\n"
            "</head>\n"
            "<body>\n"
            f"{render_header(site)}"
            '<main class="tile-grid">\n'
            f"{tiles_html}"
            "</main>\n"
            f"{render_footer(site)}"
            f"<script>\n{script}\n</script>\n"
            "</body>\n"
            "</html>\n"
        )

    def generate(self) -> dict[str, Any]:
        """Publish: compose, back up tiles, archive the old page, write the new one atomically."""
        logger.info("Starting page generation")
        with self._lock:
            build = self.compose()
            self.tile_store.backup()
            archive_copy(self.output_path, site_paths.archive_root(self.base_dir), "index", ".html")
            written = write_text_atomic(self.output_path, build.html)

        logger.info(
            "Page generated: %d tiles published, %d skipped, %d bytes",
            len(build.published),
            len(build.skipped),
            written,
        )
        return {
            "success": True,
            "tilesPublishedCount": len(build.published),
            "skipped": build.skipped,
            "path": str(self.output_path),
        }


class PreviewService:
    def __init__(self, generator: PageGenerator):
        self.generator = generator

    def preview(self) -> str:
        return self.generator.compose().html
