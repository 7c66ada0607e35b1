"""Develop presets stored in the catalog."""

from __future__ import annotations

from uuid import UUID

from chalkraw.catalog.database import PRESETS_TABLE, CatalogDatabase
from chalkraw.core.edit import Preset


class PresetsMixin(CatalogDatabase):
    """Catalog operations on develop presets."""

    def insert_preset(self, preset: Preset) -> None:
        self._store(PRESETS_TABLE, preset.id.bytes, preset.to_dict())

    def list_presets(self) -> list[Preset]:
        """All presets, newest first."""
        presets = self._load_all(PRESETS_TABLE, Preset.from_dict)
        presets.sort(key=lambda preset: preset.created_at, reverse=True)
        return presets

    def delete_preset(self, preset_id: UUID) -> None:
        self._remove(PRESETS_TABLE, preset_id.bytes)