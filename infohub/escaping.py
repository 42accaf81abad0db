"""Escaping and format checks used by every tile type and the page template."""

from __future__ import annotations

import html
import posixpath
import re
from datetime import datetime
from typing import Iterable
from urllib.parse import urlparse

SAFE_SCHEMES = ("http", "https")

PATH_RE = re.compile(r"^/[a-zA-Z0-9_\-/.]+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")
HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
WHITESPACE_CONTROL_RE = re.compile(r"[\x00-\x20\x7f]")


def esc(value: object) -> str:
    """HTML-escape any value for text or a quoted attribute."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def nl2br(value: object) -> str:
    escaped = esc(value).replace("\r\n", "\n").replace("\r", "\n")
    return escaped.replace("\n", "<br>\n")


def is_safe_href(url: object) -> bool:
    """Allow http(s) URLs with a host and same-origin absolute paths only."""
    if not isinstance(url, str):
        return False
    value = url.strip()
    if not value or WHITESPACE_CONTROL_RE.search(value):
        return False

    if value.startswith("/"):
        # "//host" and "/\host" are protocol-relative in browsers.
        return not value.startswith("//") and not value.startswith("/\\")

    if "\\" in value:
        return False
    parsed = urlparse(value)
    return parsed.scheme.lower() in SAFE_SCHEMES and bool(parsed.netloc)


def safe_href(url: object, placeholder: str = "#") -> str:
    """Escaped URL for an attribute, or the placeholder when the scheme is not allowed."""
    if not is_safe_href(url):
        return placeholder
    return esc(str(url).strip())


def is_valid_url(url: object) -> bool:
    if not isinstance(url, str) or not url or WHITESPACE_CONTROL_RE.search(url):
        return False
    parsed = urlparse(url)
    return parsed.scheme.lower() in SAFE_SCHEMES and bool(parsed.netloc)


def is_valid_path(path: object) -> bool:
    """Same-origin absolute file path such as /media/images/a.jpg."""
    if not isinstance(path, str) or not PATH_RE.match(path):
        return False
    if path.startswith("//"):
        return False
    return ".." not in path.split("/") and posixpath.normpath(path) != "/"


def has_allowed_extension(path: str, allowed: Iterable[str]) -> bool:
    ext = posixpath.splitext(path or "")[1].lower().lstrip(".")
    return bool(ext) and ext in {a.lower() for a in allowed}


def file_extension(path: object) -> str:
    if not isinstance(path, str):
        return ""
    return posixpath.splitext(path)[1].lower().lstrip(".")


def is_valid_date(value: object) -> bool:
    if not isinstance(value, str) or not DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_time(value: object) -> bool:
    if not isinstance(value, str) or not TIME_RE.match(value):
        return False
    hours, minutes = (int(part) for part in value.split(":"))
    return hours < 24 and minutes < 60


def is_hex_color(value: object) -> bool:
    return isinstance(value, str) and HEX_COLOR_RE.match(value) is not None


def is_valid_email(value: object) -> bool:
    return isinstance(value, str) and len(value) <= 254 and EMAIL_RE.match(value) is not None
