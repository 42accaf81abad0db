"""CRUD over the tile collection stored as one JSON list.

Every mutation is a read-modify-write of the whole list under the document
lock, validated before anything touches the disk.
"""

from __future__ import annotations

import logging
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from infohub import site_paths
from infohub.errors import NotFoundError, PersistenceError, ValidationError
from infohub.storage import JsonDocument
from infohub.tiles import TileRegistry, default_registry
from infohub.visibility import parse_timestamp

logger = logging.getLogger(__name__)

SIZES = ("small", "medium", "large", "full")
STYLES = ("flat", "card")
COLOR_SCHEMES = ("default", "white", "accent1", "accent2", "accent3")

DEFAULT_POSITION = 10
DEFAULT_SIZE = "medium"
DEFAULT_STYLE = "card"
DEFAULT_COLOR_SCHEME = "default"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def new_tile_id() -> str:
    return f"tile_{int(time.time())}_{secrets.token_hex(4)}"


def sort_tiles(tiles: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    # sorted() is stable, so equal positions keep their stored order.
    return sorted(tiles, key=lambda tile: _position_key(tile.get("position")))


def _position_key(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _coerce_position(value: Any, errors: list[str]) -> int:
    if value is None or value == "":
        return DEFAULT_POSITION
    if isinstance(value, bool):
        errors.append("Position must be an integer")
        return DEFAULT_POSITION
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    errors.append("Position must be an integer")
    return DEFAULT_POSITION


def _choice(payload: Mapping[str, Any], key: str, allowed: tuple[str, ...], default: str, errors: list[str]) -> str:
    value = payload.get(key)
    if value is None or value == "":
        return default
    if value not in allowed:
        errors.append(f"Invalid {key}: {value}")
        return default
    return value


def _schedule(value: Any, errors: list[str]) -> dict[str, str] | None:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        errors.append("Visibility schedule must be an object")
        return None

    schedule: dict[str, str] = {}
    for key in ("showFrom", "showUntil"):
        raw = value.get(key)
        if raw is None or raw == "":
            continue
        if parse_timestamp(raw) is None:
            errors.append(f"Invalid timestamp for {key}: {raw} (YYYY-MM-DDTHH:MM expected)")
            continue
        schedule[key] = raw.strip()

    if "showFrom" in schedule and "showUntil" in schedule:
        start = parse_timestamp(schedule["showFrom"])
        end = parse_timestamp(schedule["showUntil"])
        if start is not None and end is not None and start > end:
            errors.append("showFrom must not be after showUntil")
    return schedule or None


class TileStore:
    def __init__(self, base_dir: Path, registry: TileRegistry | None = None):
        self.registry = registry or default_registry()
        self.document = JsonDocument(
            site_paths.tiles_path(base_dir),
            site_paths.archive_root(base_dir),
            default=list,
        )

    def _load(self) -> list[dict[str, Any]]:
        tiles = self.document.read()
        if not isinstance(tiles, list):
            raise PersistenceError(f"{self.document.path.name} must contain a JSON list")
        return [tile for tile in tiles if isinstance(tile, dict)]

    def list_tiles(self) -> list[dict[str, Any]]:
        return sort_tiles(self._load())

    def get(self, tile_id: str) -> dict[str, Any]:
        for tile in self._load():
            if tile.get("id") == tile_id:
                return tile
        raise NotFoundError(f"Tile not found: {tile_id}")

    def _canonical(self, payload: Mapping[str, Any], existing: Mapping[str, Any] | None) -> dict[str, Any]:
        errors: list[str] = []

        if not payload.get("type"):
            raise ValidationError(["Tile type is required"])
        tile_type = self.registry.resolve(payload.get("type"))
        if existing is not None and existing.get("type") != tile_type.key:
            errors.append("Tile type cannot be changed")

        data = payload.get("data")
        if data is None:
            data = {}
        errors.extend(tile_type.validate(data))

        position = payload.get("position")
        if position is None and existing is not None:
            position = existing.get("position")

        record: dict[str, Any] = {
            "id": existing["id"] if existing is not None else new_tile_id(),
            "type": tile_type.key,
            "position": _coerce_position(position, errors),
            "size": _choice(payload, "size", SIZES, DEFAULT_SIZE, errors),
            "style": _choice(payload, "style", STYLES, DEFAULT_STYLE, errors),
            "colorScheme": _choice(payload, "colorScheme", COLOR_SCHEMES, DEFAULT_COLOR_SCHEME, errors),
            "data": data,
        }

        visible = payload.get("visible")
        if visible is not None:
            if isinstance(visible, bool):
                record["visible"] = visible
            else:
                errors.append("visible must be true or false")

        schedule = _schedule(payload.get("visibilitySchedule"), errors)
        if schedule:
            record["visibilitySchedule"] = schedule

        if errors:
            raise ValidationError(errors)

        if tile_type.forced_size:
            record["size"] = tile_type.forced_size
        if record["style"] == "flat" and record["colorScheme"] == "white":
            record["colorScheme"] = DEFAULT_COLOR_SCHEME

        now = _utc_now_iso()
        record["created"] = existing.get("created", now) if existing is not None else now
        record["updated"] = now
        return record

    def save(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Create (no id) or replace (existing id) a tile and return the stored record."""
        if not isinstance(payload, Mapping):
            raise ValidationError(["Tile must be an object"])

        tile_id = payload.get("id") or None
        with self.document.locked():
            tiles = self._load()
            index = None
            if tile_id is not None:
                index = next((i for i, tile in enumerate(tiles) if tile.get("id") == tile_id), None)
                if index is None:
                    raise NotFoundError(f"Tile not found: {tile_id}")

            existing = tiles[index] if index is not None else None
            try:
                record = self._canonical(payload, existing)
            except ValidationError as exc:
                logger.warning("Tile validation failed (%s): %s", tile_id or "new", exc)
                raise

            if index is None:
                tiles.append(record)
            else:
                tiles[index] = record
            self.document.write(sort_tiles(tiles))

        logger.info("Tile saved: %s (%s, new=%s)", record["id"], record["type"], existing is None)
        return record

    def delete(self, tile_id: str) -> None:
        with self.document.locked():
            tiles = self._load()
            remaining = [tile for tile in tiles if tile.get("id") != tile_id]
            if len(remaining) == len(tiles):
                raise NotFoundError(f"Tile not found: {tile_id}")
            self.document.write(remaining)
        logger.info("Tile deleted: %s", tile_id)

    def update_positions(self, positions: Any) -> int:
        """Apply ``[{"id", "position"}, ...]``; unknown ids are ignored. Returns how many tiles moved."""
        if not isinstance(positions, list):
            raise ValidationError(["positions must be a list"])

        errors: list[str] = []
        updates: dict[str, int] = {}
        for entry in positions:
            if not isinstance(entry, Mapping) or not isinstance(entry.get("id"), str):
                errors.append("Each position entry needs an id and a position")
                continue
            if entry.get("position") is None:
                errors.append(f"Missing position for {entry['id']}")
                continue
            updates[entry["id"]] = _coerce_position(entry.get("position"), errors)
        if errors:
            raise ValidationError(errors)

        with self.document.locked():
            tiles = self._load()
            moved = 0
            for tile in tiles:
                if tile.get("id") in updates:
                    tile["position"] = updates[tile["id"]]
                    moved += 1
            self.document.write(sort_tiles(tiles))

        logger.info("Positions updated: %d tiles", moved)
        return moved

    def backup(self) -> Path | None:
        return self.document.backup()
