"""Decide whether a tile is published and whether a reader currently sees it.

Only the manual ``visible`` flag removes a tile from the generated page. The
schedule window is evaluated again in the browser by the page runtime, because a
static page cannot be updated after download; the server-side evaluation here
backs the editor's status badges.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

MANUAL = "manual"
NOT_YET = "not_yet"
EXPIRED = "expired"
VISIBLE = "visible"

# The subset of ISO-8601 that both datetime.fromisoformat and the browser's Date parse
# the same way. Date-only values are left out: JS reads them as UTC midnight.
TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{3})?)?(Z|[+-]\d{2}:\d{2})?$")


@dataclass(frozen=True)
class VisibilityStatus:
    hidden_from_output: bool
    hidden_from_viewer: bool
    reason: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "hiddenFromOutput": self.hidden_from_output,
            "hiddenFromViewer": self.hidden_from_viewer,
            "reason": self.reason,
        }


def parse_timestamp(value: object) -> datetime | None:
    """Parse ``YYYY-MM-DDTHH:MM[:SS[.mmm]][Z|+HH:MM]``; naive values are local time like ``new Date()``."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not TIMESTAMP_RE.match(text):
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def schedule_of(tile: Mapping[str, Any]) -> dict[str, str]:
    schedule = tile.get("visibilitySchedule")
    if not isinstance(schedule, Mapping):
        return {}
    return {key: schedule[key] for key in ("showFrom", "showUntil") if parse_timestamp(schedule.get(key)) is not None}


def is_published(tile: Mapping[str, Any]) -> bool:
    return tile.get("visible") is not False


def effective_status(tile: Mapping[str, Any], now: datetime | None = None) -> VisibilityStatus:
    if not is_published(tile):
        return VisibilityStatus(True, True, MANUAL)

    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.astimezone()

    schedule = schedule_of(tile)
    show_from = parse_timestamp(schedule.get("showFrom"))
    if show_from is not None and now < show_from:
        return VisibilityStatus(False, True, NOT_YET)

    show_until = parse_timestamp(schedule.get("showUntil"))
    if show_until is not None and now > show_until:
        return VisibilityStatus(False, True, EXPIRED)

    return VisibilityStatus(False, False, VISIBLE)
