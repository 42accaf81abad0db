from __future__ import annotations

from typing import Any, Mapping

from infohub.tiles.base import Field, TileType, flag

LINE_WIDTHS = ("small", "medium", "large")
LINE_STYLES = ("solid", "dashed", "dotted")
DEFAULT_HEIGHT = 40

SEPARATOR_CSS = """
.tile.tile-separator { padding: 0; background: transparent; box-shadow: none; justify-content: center; }
.tile.tile-separator:hover { transform: none; box-shadow: none; }
.separator-content { display: flex; align-items: center; justify-content: center; }
.separator-line { border: 0; border-top: 2px solid rgba(0,0,0,0.15); margin: 0 auto; }
.separator-line.line-small { width: 30%; }
.separator-line.line-medium { width: 60%; }
.separator-line.line-large { width: 100%; }
.separator-line.style-dashed { border-top-style: dashed; }
.separator-line.style-dotted { border-top-style: dotted; }
""".strip()


class SeparatorTile(TileType):
    key = "separator"
    name = "Separator"
    description = "Section break with optional line"
    forced_size = "full"
    fields = (
        Field("height", "number", "Height (px)", default=DEFAULT_HEIGHT, minimum=0, maximum=500, placeholder="40"),
        Field("showLine", "checkbox", "Show line", default=False),
        Field(
            "lineWidth",
            "select",
            "Line width",
            default="medium",
            options=(("small", "Short (30%)"), ("medium", "Medium (60%)"), ("large", "Full (100%)")),
        ),
        Field(
            "lineStyle",
            "select",
            "Line style",
            default="solid",
            options=(("solid", "Solid"), ("dashed", "Dashed"), ("dotted", "Dotted")),
        ),
    )

    def render(self, data: Mapping[str, Any]) -> str:
        try:
            height = int(float(data.get("height", DEFAULT_HEIGHT)))
        except (TypeError, ValueError):
            height = DEFAULT_HEIGHT
        width = data.get("lineWidth") if data.get("lineWidth") in LINE_WIDTHS else "medium"
        style = data.get("lineStyle") if data.get("lineStyle") in LINE_STYLES else "solid"

        style_attr = f' style="height: {height}px;"' if height > 0 else ""
        line = f'<hr class="separator-line line-{width} style-{style}">' if flag(data, "showLine", False) else ""
        return f'<div class="separator-content"{style_attr}>{line}</div>\n'

    def css(self) -> str:
        return SEPARATOR_CSS
