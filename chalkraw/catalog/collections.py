"""Collections and their photo memberships stored in the catalog."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from chalkraw.catalog.database import (
    COLLECTION_PHOTOS_TABLE,
    COLLECTIONS_TABLE,
    CatalogDatabase,
)
from chalkraw.catalog.errors import RecordNotFoundError
from chalkraw.core.collection import Collection

_ID_LENGTH = 16


def _member_key(collection_id: UUID, photo_id: UUID) -> bytes:
    return collection_id.bytes + photo_id.bytes


def _key_collection(key: bytes) -> bytes:
    return bytes(key)[:_ID_LENGTH]


def _key_photo(key: bytes) -> bytes:
    return bytes(key)[_ID_LENGTH:]


class CollectionsMixin(CatalogDatabase):
    """Catalog operations on collections."""

    def create_collection(self, name: str) -> Collection:
        collection = Collection(name)
        self.insert_collection(collection)
        return collection

    def insert_collection(self, collection: Collection) -> None:
        self._store(COLLECTIONS_TABLE, collection.id.bytes, collection.to_dict())

    def rename_collection(self, collection_id: UUID, name: str) -> Collection:
        collection = self.get_collection(collection_id)
        collection.rename(name)
        self.insert_collection(collection)
        return collection

    def get_collection(self, collection_id: UUID) -> Collection:
        collection = self._load(COLLECTIONS_TABLE, collection_id.bytes, Collection.from_dict)
        if collection is None:
            raise RecordNotFoundError(self.path() / f"collection:{collection_id}")
        return collection

    def list_collections(self) -> list[Collection]:
        """All collections, oldest first."""
        collections = self._load_all(COLLECTIONS_TABLE, Collection.from_dict)
        collections.sort(key=lambda collection: collection.created_at)
        return collections

    def delete_collection(self, collection_id: UUID) -> None:
        """Remove a collection and all of its memberships."""
        prefix = collection_id.bytes
        with self._transaction() as tables:
            tables.delete(COLLECTIONS_TABLE, prefix)
            for key in tables.keys(COLLECTION_PHOTOS_TABLE):
                if _key_collection(key) == prefix:
                    tables.delete(COLLECTION_PHOTOS_TABLE, key)

    def add_photo_to_collection(self, collection_id: UUID, photo_id: UUID) -> None:
        self.add_photos_to_collection(collection_id, [photo_id])

    def add_photos_to_collection(
        self, collection_id: UUID, photo_ids: Iterable[UUID]
    ) -> None:
        with self._transaction() as tables:
            for photo_id in photo_ids:
                tables.put(COLLECTION_PHOTOS_TABLE, _member_key(collection_id, photo_id), b"")

    def remove_photo_from_collection(self, collection_id: UUID, photo_id: UUID) -> None:
        self._remove(COLLECTION_PHOTOS_TABLE, _member_key(collection_id, photo_id))

    def list_collection_photo_ids(self, collection_id: UUID) -> list[UUID]:
        prefix = collection_id.bytes
        with self._transaction() as tables:
            keys = tables.keys(COLLECTION_PHOTOS_TABLE)
        return [
            UUID(bytes=_key_photo(key)) for key in keys if _key_collection(key) == prefix
        ]

    def remove_photo_from_all_collections(self, photo_id: UUID) -> None:
        wanted = photo_id.bytes
        with self._transaction() as tables:
            for key in tables.keys(COLLECTION_PHOTOS_TABLE):
                if _key_photo(key) == wanted:
                    tables.delete(COLLECTION_PHOTOS_TABLE, key)