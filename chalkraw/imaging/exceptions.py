"""Exceptions raised while decoding source images.

Operating-system failures other than a missing file surface as plain
:class:`OSError`.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path


class ImagingError(Exception):
    """Base class for image decoding failures."""

    def __init__(self, message: str, path: str | PathLike[str]) -> None:
        super().__init__(message)
        self.path = Path(path)


class ImageNotFoundError(ImagingError):
    """The source file does not exist."""

    def __init__(self, path: str | PathLike[str]) -> None:
        super().__init__(f"file not found: {Path(path)}", path)


class UnsupportedFormatError(ImagingError):
    """The source is not a JPEG, PNG, TIFF or known RAW file."""

    def __init__(self, path: str | PathLike[str]) -> None:
        super().__init__(f"unsupported format for {Path(path)}", path)


class DecodeFailedError(ImagingError):
    """The source was recognised but could not be decoded or encoded."""

    def __init__(self, path: str | PathLike[str], reason: object) -> None:
        super().__init__(f"decode failed for {Path(path)}: {reason}", path)
        self.reason = reason