from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from infohub import site_paths
from infohub.errors import PersistenceError, ValidationError
from infohub.escaping import has_allowed_extension, is_hex_color, is_valid_path
from infohub.storage import JsonDocument
from infohub.tiles.base import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

SITE_KEYS = ("title", "pageTitle", "headerImage", "headerFocusPoint", "footerText")
THEME_KEYS = ("backgroundColor", "accentColor", "accentColor2", "accentColor3")

DEFAULT_SITE = {
    "title": "",
    "pageTitle": "",
    "headerImage": "",
    "headerFocusPoint": "center center",
    "footerText": "",
}
DEFAULT_THEME = {
    "backgroundColor": "#f5f5f5",
    "accentColor": "#667eea",
    "accentColor2": "#48bb78",
    "accentColor3": "#ed8936",
}

FOCUS_POINTS = tuple(f"{x} {y}" for y in ("top", "center", "bottom") for x in ("left", "center", "right"))

MAX_TITLE_LENGTH = 200
MAX_FOOTER_LENGTH = 1000


def _section(raw: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name)
    return dict(value) if isinstance(value, Mapping) else {}


def merge_defaults(raw: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Settings as the page and editor see them: known keys only, defaults filled in."""
    site = _section(raw, "site")
    theme = _section(raw, "theme")
    # Older files stored the first accent as primaryColor.
    if not theme.get("accentColor") and theme.get("primaryColor"):
        theme["accentColor"] = theme["primaryColor"]

    merged_site = {key: site.get(key) or default for key, default in DEFAULT_SITE.items()}
    merged_theme = {key: theme.get(key) or default for key, default in DEFAULT_THEME.items()}
    return {"site": merged_site, "theme": merged_theme}


def validate_settings(site: Mapping[str, Any], theme: Mapping[str, Any]) -> list[str]:
    errors: list[str] = []
    for key, value in site.items():
        if not isinstance(value, str):
            errors.append(f"site.{key} must be text")
    for key, value in theme.items():
        if not is_hex_color(value):
            errors.append(f"Invalid color for {key} (#RRGGBB expected)")
    if errors:
        return errors

    for key in ("title", "pageTitle"):
        if len(site.get(key, "")) > MAX_TITLE_LENGTH:
            errors.append(f"site.{key} must be at most {MAX_TITLE_LENGTH} characters")
    if len(site.get("footerText", "")) > MAX_FOOTER_LENGTH:
        errors.append(f"site.footerText must be at most {MAX_FOOTER_LENGTH} characters")

    header_image = site.get("headerImage", "")
    if header_image and not (is_valid_path(header_image) and has_allowed_extension(header_image, IMAGE_EXTENSIONS)):
        errors.append("Invalid header image path")

    focus = site.get("headerFocusPoint", "")
    if focus and focus not in FOCUS_POINTS:
        errors.append(f"Invalid header focus point: {focus}")
    return errors


class SettingsStore:
    def __init__(self, base_dir: Path):
        self.document = JsonDocument(
            site_paths.settings_path(base_dir),
            site_paths.archive_root(base_dir),
            default=dict,
        )

    def _load(self) -> dict[str, Any]:
        raw = self.document.read()
        if not isinstance(raw, dict):
            raise PersistenceError(f"{self.document.path.name} must contain a JSON object")
        return raw

    def get(self) -> dict[str, dict[str, Any]]:
        return merge_defaults(self._load())

    def save(self, payload: Any) -> dict[str, dict[str, Any]]:
        """Merge allow-listed site and theme keys into the stored record."""
        if not isinstance(payload, Mapping):
            raise ValidationError(["Settings must be an object"])

        incoming_site = _section(payload, "site")
        incoming_theme = _section(payload, "theme")
        site = {key: incoming_site[key] for key in SITE_KEYS if incoming_site.get(key) is not None}
        theme = {key: incoming_theme[key] for key in THEME_KEYS if incoming_theme.get(key) is not None}

        errors = validate_settings(site, theme)
        if errors:
            logger.warning("Settings rejected: %s", "; ".join(errors))
            raise ValidationError(errors)

        with self.document.locked():
            raw = self._load()
            stored_site = _section(raw, "site")
            stored_site.update(site)
            stored_theme = _section(raw, "theme")
            stored_theme.update(theme)
            raw["site"] = stored_site
            raw["theme"] = stored_theme
            self.document.write(raw)

        logger.info("Settings saved")
        return merge_defaults(raw)
