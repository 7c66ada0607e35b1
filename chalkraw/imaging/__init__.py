"""Image decoding into linear-light RGBA, sensor-data demosaicing and thumbnails."""

__all__ = ["decode", "exceptions", "fixture", "raw"]