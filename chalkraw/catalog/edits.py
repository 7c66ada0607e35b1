"""Per-photo develop state stored in the catalog."""

from __future__ import annotations

from uuid import UUID

from chalkraw.catalog.database import EDITS_TABLE, CatalogDatabase
from chalkraw.core.edit import EditState


class EditsMixin(CatalogDatabase):
    """Catalog operations on develop edits."""

    def upsert_edit(self, photo_id: UUID, edit: EditState) -> None:
        self._store(EDITS_TABLE, photo_id.bytes, edit.to_dict())

    def get_edit(self, photo_id: UUID) -> EditState:
        """Return the stored edit, or a default one if none was ever stored."""
        edit = self._load(EDITS_TABLE, photo_id.bytes, EditState.from_dict)
        return EditState() if edit is None else edit