"""Single-file photo catalog: photos, edits, presets, watermarks and collections."""

__all__ = [
    "catalog",
    "collections",
    "database",
    "edits",
    "errors",
    "photos",
    "presets",
    "watermarks",
]