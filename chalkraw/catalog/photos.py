"""Photo records stored in the catalog."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from uuid import UUID

from chalkraw.catalog.database import (
    COLLECTION_PHOTOS_TABLE,
    EDITS_TABLE,
    PHOTOS_TABLE,
    CatalogDatabase,
)
from chalkraw.catalog.errors import PhotoNotFoundError
from chalkraw.core.photo import Flag, ImageFormat, Photo

_ID_LENGTH = 16


@dataclass
class PhotoPathUpdate:
    """New location and metadata for a photo whose source file moved."""

    new_path: Path
    new_hash: bytes
    width: int
    height: int
    format: ImageFormat
    thumbnail: bytes = b""

    def __post_init__(self) -> None:
        self.new_path = Path(self.new_path)
        self.new_hash = bytes(self.new_hash)
        self.thumbnail = bytes(self.thumbnail)


class PhotosMixin(CatalogDatabase):
    """Catalog operations on photo records."""

    def insert_photo(self, photo: Photo) -> None:
        self._store(PHOTOS_TABLE, photo.id.bytes, photo.to_dict())

    def insert_photos(self, photos: Iterable[Photo]) -> None:
        """Write several photos in a single transaction."""
        encoded = [(photo.id.bytes, self._encode(photo.to_dict())) for photo in photos]
        if not encoded:
            return
        with self._transaction() as tables:
            for key, value in encoded:
                tables.put(PHOTOS_TABLE, key, value)

    def get_photo(self, photo_id: UUID) -> Photo:
        photo = self._load(PHOTOS_TABLE, photo_id.bytes, Photo.from_dict)
        if photo is None:
            raise PhotoNotFoundError(photo_id)
        return photo

    def list_photos(self) -> list[Photo]:
        return self._load_all(PHOTOS_TABLE, Photo.from_dict)

    def update_flag(self, photo_id: UUID, flag: Flag) -> None:
        photo = self.get_photo(photo_id)
        photo.flag = Flag(flag)
        self.insert_photo(photo)

    def remove_photo_with_edit(self, photo_id: UUID) -> None:
        """Drop the photo, its edit and its collection memberships.

        The original file on disk is left untouched.
        """
        key = photo_id.bytes
        with self._transaction() as tables:
            tables.delete(PHOTOS_TABLE, key)
            tables.delete(EDITS_TABLE, key)
            for member in tables.keys(COLLECTION_PHOTOS_TABLE):
                if bytes(member)[_ID_LENGTH:] == key:
                    tables.delete(COLLECTION_PHOTOS_TABLE, member)

    def update_photo_path(self, photo_id: UUID, update: PhotoPathUpdate) -> Photo:
        """Relink a photo to a new file and return the updated record."""
        photo = dataclasses.replace(
            self.get_photo(photo_id),
            original_path=update.new_path,
            file_hash=update.new_hash,
            width=update.width,
            height=update.height,
            format=update.format,
            thumbnail=update.thumbnail,
        )
        self.insert_photo(photo)
        return photo

    def find_photo_by_hash(self, file_hash: bytes) -> Photo | None:
        wanted = bytes(file_hash)
        return next(
            (photo for photo in self.list_photos() if photo.file_hash == wanted), None
        )