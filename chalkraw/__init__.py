"""Photo catalog, edit model and image decoding for a raw photo developer."""

__version__ = "0.25.5"

__all__ = ["catalog", "core", "imaging"]