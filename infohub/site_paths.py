"""Path helpers for the BASE_DIR layout (data, archive, public, logs)."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path

from infohub import config

TILES_DOCUMENT = "tiles.json"
SETTINGS_DOCUMENT = "settings.json"
PAGE_NAME = "index.html"


class PathValidationError(ValueError):
    """Raised when a relative path is invalid or unsafe."""


def resolve_base_dir(cli_base_dir: str | None = None) -> Path:
    """Resolve BASE_DIR with priority: CLI -> env -> config."""
    if cli_base_dir:
        return Path(cli_base_dir).expanduser()

    env_value = os.getenv(config.BASE_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()

    return Path(config.BASE_DIR).expanduser()


def data_root(base_dir: Path) -> Path:
    return base_dir / "data"


def archive_root(base_dir: Path) -> Path:
    return base_dir / "archive"


def site_root(base_dir: Path) -> Path:
    return base_dir / "public"


def logs_root(base_dir: Path) -> Path:
    return base_dir / "logs"


def tiles_path(base_dir: Path) -> Path:
    return data_root(base_dir) / TILES_DOCUMENT


def settings_path(base_dir: Path) -> Path:
    return data_root(base_dir) / SETTINGS_DOCUMENT


def page_path(base_dir: Path) -> Path:
    return site_root(base_dir) / PAGE_NAME


def normalize_rel_path(rel_path: str) -> str:
    """Normalize a site-relative path and reject traversal or empties."""
    value = (rel_path or "").strip().replace("\\", "/")
    if not value:
        raise PathValidationError("Path is empty")

    value = value.lstrip("/")
    normalized = posixpath.normpath(value)

    if normalized in ("", ".", ".."):
        raise PathValidationError("Path is empty or invalid")
    if normalized.startswith("../"):
        raise PathValidationError("Path traversal is not allowed")

    return normalized


def resolve_site_path(base_dir: Path, rel_path: str) -> Path:
    """Resolve a request path inside the public directory."""
    rel = normalize_rel_path(rel_path)
    root = site_root(base_dir).resolve()
    target = (root / Path(rel)).resolve()
    if target == root or str(target).startswith(str(root) + os.sep):
        return target
    raise PathValidationError("Resolved path escapes the public directory")
