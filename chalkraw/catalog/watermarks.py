"""Watermark presets stored in the catalog."""

from __future__ import annotations

from uuid import UUID

from chalkraw.catalog.database import WATERMARKS_TABLE, CatalogDatabase
from chalkraw.core.watermark import WatermarkPreset


class WatermarksMixin(CatalogDatabase):
    """Catalog operations on watermark presets."""

    def insert_watermark(self, preset: WatermarkPreset) -> None:
        self._store(WATERMARKS_TABLE, preset.id.bytes, preset.to_dict())

    def list_watermarks(self) -> list[WatermarkPreset]:
        """All watermark presets, newest first."""
        presets = self._load_all(WATERMARKS_TABLE, WatermarkPreset.from_dict)
        presets.sort(key=lambda preset: preset.created_at, reverse=True)
        return presets

    def delete_watermark(self, watermark_id: UUID) -> None:
        self._remove(WATERMARKS_TABLE, watermark_id.bytes)