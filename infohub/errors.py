"""Error taxonomy shared by the stores, the generator and the HTTP layer."""

from __future__ import annotations

from typing import Iterable


class InfoHubError(Exception):
    """Base class for expected, user-reportable failures."""


class ValidationError(InfoHubError):
    """Input failed a tile type's or the settings' rules. Nothing was written."""

    def __init__(self, errors: Iterable[str]):
        self.errors = [str(e) for e in errors]
        super().__init__("; ".join(self.errors) or "Validation failed")


class UnknownTypeError(ValidationError):
    def __init__(self, tile_type: object):
        self.tile_type = tile_type
        super().__init__([f"Unknown tile type: {tile_type}"])


class NotFoundError(InfoHubError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PersistenceError(InfoHubError):
    """A read, write, backup or rename on disk failed."""


class RenderError(InfoHubError):
    def __init__(self, tile_id: str, tile_type: str, cause: BaseException):
        super().__init__(f"Tile {tile_id} ({tile_type}) failed to render: {cause}")
        self.tile_id = tile_id
        self.tile_type = tile_type
        self.cause = cause
