"""Exceptions raised by the photo catalog."""

from __future__ import annotations

from os import PathLike
from pathlib import Path
from uuid import UUID


class CatalogError(Exception):
    """Base class for every catalog failure, including storage errors."""


class SchemaVersionError(CatalogError):
    """The catalog file was written with an unsupported schema version."""

    def __init__(self, found: int, expected: int) -> None:
        super().__init__(
            f"schema version {found} not supported (this build expects {expected})"
        )
        self.found = found
        self.expected = expected


class PhotoNotFoundError(CatalogError):
    """No photo with the given id is catalogued."""

    def __init__(self, photo_id: UUID) -> None:
        super().__init__(f"photo not found: {photo_id}")
        self.photo_id = photo_id


class RecordNotFoundError(CatalogError):
    """A required record is missing; ``path`` names where it was looked for."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        super().__init__(f"path error for {str(self.path)!r}")


class SerializationError(CatalogError):
    """A stored record could not be decoded."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"serialization error: {detail}")
        self.detail = detail