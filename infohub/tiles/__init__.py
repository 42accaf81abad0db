"""Tile types and the registry that maps type keys to them."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from infohub.errors import UnknownTypeError
from infohub.tiles.accordion import AccordionTile
from infohub.tiles.base import Field, TileType
from infohub.tiles.contact import ContactTile
from infohub.tiles.countdown import CountdownTile
from infohub.tiles.download import DownloadTile
from infohub.tiles.iframe import IframeTile
from infohub.tiles.image import ImageTile
from infohub.tiles.infobox import InfoboxTile
from infohub.tiles.link import LinkTile
from infohub.tiles.quote import QuoteTile
from infohub.tiles.separator import SeparatorTile

BUILTIN_TILE_TYPES = (
    InfoboxTile,
    ImageTile,
    LinkTile,
    DownloadTile,
    IframeTile,
    ContactTile,
    CountdownTile,
    QuoteTile,
    AccordionTile,
    SeparatorTile,
)


class TileRegistry:
    def __init__(self, tile_types: Iterable[TileType] = ()):
        self._types: dict[str, TileType] = {}
        for tile_type in tile_types:
            self.register(tile_type)

    def register(self, tile_type: TileType) -> None:
        key = tile_type.key
        if not key:
            raise ValueError(f"{type(tile_type).__name__} has no key")
        if key in self._types:
            raise ValueError(f"Tile type already registered: {key}")
        self._types[key] = tile_type

    def get(self, key: str) -> TileType | None:
        return self._types.get(key)

    def resolve(self, key: Any) -> TileType:
        tile_type = self._types.get(key) if isinstance(key, str) else None
        if tile_type is None:
            raise UnknownTypeError(str(key))
        return tile_type

    def keys(self) -> list[str]:
        return list(self._types)

    def describe(self) -> dict[str, dict[str, Any]]:
        return {key: tile_type.describe() for key, tile_type in self._types.items()}

    def __iter__(self) -> Iterator[TileType]:
        return iter(self._types.values())

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def __len__(self) -> int:
        return len(self._types)


def default_registry() -> TileRegistry:
    return TileRegistry(cls() for cls in BUILTIN_TILE_TYPES)


__all__ = ["BUILTIN_TILE_TYPES", "Field", "TileRegistry", "TileType", "default_registry"]
