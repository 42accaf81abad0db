from __future__ import annotations

from typing import Any, Mapping

from infohub.escaping import esc, nl2br
from infohub.tiles.base import Field, TileType, flag, text_of

MAX_SECTIONS = 10
AUTO_SCROLL_MODES = ("always", "mobile", "never")

ACCORDION_CSS = """
.tile.tile-full-row { grid-column: 1 / -1; }
.accordion { display: flex; flex-direction: column; gap: 8px; }
.accordion-item { border: 1px solid rgba(0,0,0,0.08); border-radius: 8px; overflow: hidden; }
.accordion-header { display: flex; width: 100%; align-items: center; justify-content: space-between; gap: 12px; padding: 12px 16px; background: transparent; border: 0; font: inherit; font-weight: 600; color: inherit; text-align: left; cursor: pointer; }
.accordion-icon::before { content: "+"; font-weight: 700; }
.accordion-item.open .accordion-icon::before { content: "\\2212"; }
.accordion-content { display: none; padding: 0 16px 12px; }
.accordion-item.open .accordion-content { display: block; }
""".strip()

ACCORDION_JS = """
function initAccordions() {
    function setOpen(item, open) {
        item.classList.toggle('open', open);
        const header = item.querySelector('.accordion-header');
        if (header) header.setAttribute('aria-expanded', open ? 'true' : 'false');
    }

    function shouldAutoScroll(setting) {
        if (setting === 'always') return true;
        if (setting === 'mobile') return window.innerWidth < 768;
        return false;
    }

    document.querySelectorAll('.accordion').forEach(accordion => {
        const singleOpen = accordion.dataset.singleOpen === 'true';
        const autoScroll = accordion.dataset.autoScroll || 'mobile';

        accordion.querySelectorAll('.accordion-header').forEach(header => {
            header.addEventListener('click', () => {
                const item = header.closest('.accordion-item');
                const wasOpen = item.classList.contains('open');
                if (singleOpen && !wasOpen) {
                    accordion.querySelectorAll('.accordion-item.open').forEach(other => setOpen(other, false));
                }
                setOpen(item, !wasOpen);
                if (!wasOpen && shouldAutoScroll(autoScroll)) {
                    setTimeout(() => item.scrollIntoView({ behavior: 'smooth', block: 'nearest' }), 100);
                }
            });
        });
    });
}
""".strip()


def _section_fields() -> tuple[Field, ...]:
    result = []
    for i in range(1, MAX_SECTIONS + 1):
        result.append(Field(f"section{i}_heading", "text", f"Section {i} heading", group="sections"))
        result.append(Field(f"section{i}_content", "textarea", f"Section {i} content", group="sections"))
    return tuple(result)


def _default_open_options() -> tuple[tuple[str, str], ...]:
    return (("-1", "All closed"),) + tuple((str(i), f"Section {i + 1}") for i in range(MAX_SECTIONS))


def sections(data: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Complete heading/content pairs in display order."""
    pairs = []
    for i in range(1, MAX_SECTIONS + 1):
        heading = text_of(data, f"section{i}_heading").strip()
        content = text_of(data, f"section{i}_content").strip()
        if heading and content:
            pairs.append((heading, content))
    return pairs


class AccordionTile(TileType):
    key = "accordion"
    name = "Accordion"
    description = "Collapsible sections, e.g. for FAQs"
    fields = (
        Field("title", "text", "Title", placeholder='e.g. "Frequently asked questions"'),
        Field("showTitle", "checkbox", "Show title", default=True),
        *_section_fields(),
        Field("singleOpen", "checkbox", "Only one section open at a time", default=True, group="options"),
        Field(
            "autoScroll",
            "select",
            "Scroll to the opened section",
            default="mobile",
            options=(("always", "Always"), ("mobile", "Mobile only"), ("never", "Never")),
            group="options",
        ),
        Field("defaultOpen", "select", "Initially open section", default="-1", options=_default_open_options(), group="options"),
        Field(
            "fullRow",
            "checkbox",
            "Full grid row",
            default=False,
            hint="Recommended when several sections can be open at once",
            group="options",
        ),
    )

    def validate_extra(self, data: Mapping[str, Any]) -> list[str]:
        errors = []
        for i in range(1, MAX_SECTIONS + 1):
            heading = text_of(data, f"section{i}_heading").strip()
            content = text_of(data, f"section{i}_content").strip()
            if heading and not content:
                errors.append(f"Section {i}: content is missing")
            elif content and not heading:
                errors.append(f"Section {i}: heading is missing")
        if not sections(data):
            errors.append("At least one section with heading and content is required")
        return errors

    def render(self, data: Mapping[str, Any]) -> str:
        single_open = "true" if flag(data, "singleOpen", True) else "false"
        auto_scroll = data.get("autoScroll") if data.get("autoScroll") in AUTO_SCROLL_MODES else "mobile"
        try:
            default_open = int(data.get("defaultOpen", -1))
        except (TypeError, ValueError):
            default_open = -1

        html_out = self.title_html(data, default_show=True, css_class="accordion-title")
        html_out += f'<div class="accordion" data-single-open="{single_open}" data-auto-scroll="{auto_scroll}">\n'
        for index, (heading, content) in enumerate(sections(data)):
            is_open = index == default_open
            html_out += (
                f'    <div class="accordion-item{" open" if is_open else ""}">\n'
                f'        <button type="button" class="accordion-header" aria-expanded="{"true" if is_open else "false"}">\n'
                f'            <span class="accordion-header-text">{esc(heading)}</span>\n'
                '            <span class="accordion-icon"></span>\n'
                "        </button>\n"
                '        <div class="accordion-content">\n'
                f'            <div class="accordion-content-inner">{nl2br(content)}</div>\n'
                "        </div>\n"
                "    </div>\n"
            )
        html_out += "</div>\n"
        return html_out

    def wrapper_classes(self, data: Mapping[str, Any]) -> list[str]:
        return ["tile-full-row"] if flag(data, "fullRow", False) else []

    def css(self) -> str:
        return ACCORDION_CSS

    def js(self) -> str:
        return ACCORDION_JS

    def init_function(self) -> str | None:
        return "initAccordions"
