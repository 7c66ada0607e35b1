"""The photo catalog with every record operation."""

from __future__ import annotations

from chalkraw.catalog.collections import CollectionsMixin
from chalkraw.catalog.edits import EditsMixin
from chalkraw.catalog.photos import PhotosMixin
from chalkraw.catalog.presets import PresetsMixin
from chalkraw.catalog.watermarks import WatermarksMixin


class Catalog(
    PhotosMixin,
    EditsMixin,
    CollectionsMixin,
    PresetsMixin,
    WatermarksMixin,
):
    """A catalog file holding photos, edits, collections and presets.

    Obtain one with :meth:`Catalog.open_or_create`; it is a context manager
    that closes the file on exit.
    """