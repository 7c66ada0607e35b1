"""Core data model: photos, edit state, presets, collections, watermarks and ids."""

__all__ = ["collection", "edit", "ids", "photo", "watermark"]