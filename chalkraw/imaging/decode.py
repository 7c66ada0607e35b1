"""Decode JPEG, PNG, TIFF and RAW sources into linear-light RGBA images."""

from __future__ import annotations

import dataclasses
import io
import logging
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from chalkraw.core.photo import ImageFormat, RawFormat
from chalkraw.imaging.exceptions import (
    DecodeFailedError,
    ImageNotFoundError,
    UnsupportedFormatError,
)
from chalkraw.imaging.raw import find_embedded_jpeg, raw_format_from_extension

logger = logging.getLogger(__name__)

SourceFormat = Union[ImageFormat, RawFormat]

THUMBNAIL_LONG_EDGE = 256
THUMBNAIL_QUALITY = 80
_EXIF_ORIENTATION = 0x0112
_EMBEDDED = "<embedded>"
_THUMBNAIL_CTX = "<thumbnail-encode>"

_DETECTED_FORMATS = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "PNG": ImageFormat.PNG,
    "TIFF": ImageFormat.TIFF,
}


@dataclass
class LinearImage:
    """A decoded source in linear sRGB.

    ``pixels`` is a float32 array of shape ``(height, width, 4)`` holding
    R, G, B, A in 0..1. ``format`` is the :class:`ImageFormat` of a JPEG,
    PNG or TIFF source, or the :class:`RawFormat` of a RAW source.
    """

    width: int
    height: int
    format: SourceFormat
    pixels: np.ndarray

    def stride_bytes(self) -> int:
        """Bytes per row of float32 RGBA pixels."""
        return self.width * 4 * np.dtype(np.float32).itemsize


def apply_orientation(image: Image.Image, orientation: int) -> Image.Image:
    """Apply an EXIF orientation (1-8); other values leave the image as is."""
    flip_h = Image.Transpose.FLIP_LEFT_RIGHT
    clockwise = Image.Transpose.ROTATE_270
    counter_clockwise = Image.Transpose.ROTATE_90
    if orientation == 2:
        return image.transpose(flip_h)
    if orientation == 3:
        return image.transpose(Image.Transpose.ROTATE_180)
    if orientation == 4:
        return image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
    if orientation == 5:
        return image.transpose(flip_h).transpose(clockwise)
    if orientation == 6:
        return image.transpose(clockwise)
    if orientation == 7:
        return image.transpose(flip_h).transpose(counter_clockwise)
    if orientation == 8:
        return image.transpose(counter_clockwise)
    return image


def _read_orientation(image: Image.Image) -> int:
    try:
        value = image.getexif().get(_EXIF_ORIENTATION, 1)
    except Exception:  # malformed EXIF is treated as absent
        return 1
    return value if isinstance(value, int) else 1


def _to_linear(rgba: Image.Image) -> np.ndarray:
    values = np.asarray(rgba, dtype=np.float32) / np.float32(255.0)
    linear = np.where(
        values <= 0.04045,
        values / np.float32(12.92),
        np.power((values + np.float32(0.055)) / np.float32(1.055), np.float32(2.4)),
    )
    return linear.astype(np.float32)


def _convert_icc_to_srgb(ctx: Path, rgba: Image.Image, icc: bytes | None) -> Image.Image:
    if not icc:
        return rgba
    try:
        from PIL import ImageCms
    except ImportError:
        logger.warning("decode_image %s: colour management unavailable, treating as sRGB", ctx)
        return rgba
    try:
        source = ImageCms.ImageCmsProfile(io.BytesIO(icc))
    except (ImageCms.PyCMSError, OSError, ValueError):
        logger.warning(
            "decode_image %s: embedded ICC profile could not be parsed, treating as sRGB", ctx
        )
        return rgba
    try:
        description = ImageCms.getProfileDescription(source) or ""
    except ImageCms.PyCMSError:
        description = ""
    if "srgb" in description.lower():
        logger.debug("decode_image %s: embedded ICC profile is sRGB, no transform needed", ctx)
        return rgba
    try:
        transform = ImageCms.buildTransform(
            source, ImageCms.createProfile("sRGB"), "RGBA", "RGBA", renderingIntent=0
        )
        converted = ImageCms.applyTransform(rgba, transform)
    except (ImageCms.PyCMSError, OSError, ValueError):
        logger.warning("decode_image %s: ICC to sRGB transform failed, treating as sRGB", ctx)
        return rgba
    logger.info(
        "decode_image %s: applying embedded ICC profile (%d bytes) to sRGB", ctx, len(icc)
    )
    return converted if converted is not None else rgba


def decode_raw(path: str | PathLike[str], raw_format: RawFormat) -> LinearImage:
    """Decode a RAW file from the camera preview JPEG embedded in it."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        raise ImageNotFoundError(path) from None
    preview = find_embedded_jpeg(data)
    if preview is not None:
        try:
            linear = decode_image_bytes(preview)
        except (DecodeFailedError, UnsupportedFormatError) as exc:
            logger.warning("decode_raw %s: embedded JPEG decode failed: %s", path, exc)
        else:
            logger.info("decode_raw %s: using embedded JPEG preview", path)
            return dataclasses.replace(linear, format=raw_format)
    raise DecodeFailedError(path, "no decodable embedded preview")


def decode_image_from_bytes(ctx: str | PathLike[str], data: bytes) -> LinearImage:
    """Decode image bytes; ``ctx`` routes RAW extensions and names errors.

    A RAW ``ctx`` is decoded from the file it names, not from ``data``.
    """
    ctx = Path(ctx)
    raw_format = raw_format_from_extension(ctx)
    if raw_format is not None:
        return decode_raw(ctx, raw_format)

    try:
        image = Image.open(io.BytesIO(bytes(data)))
    except UnidentifiedImageError:
        raise UnsupportedFormatError(ctx) from None
    fmt = _DETECTED_FORMATS.get(image.format or "")
    if fmt is None:
        raise UnsupportedFormatError(ctx)
    try:
        image.load()
        orientation = _read_orientation(image)
        icc = image.info.get("icc_profile")
        rgba = image.convert("RGBA")
    except Exception as exc:
        raise DecodeFailedError(ctx, exc) from exc
    rgba = apply_orientation(rgba, orientation)
    rgba = _convert_icc_to_srgb(ctx, rgba, icc)
    return LinearImage(
        width=rgba.width, height=rgba.height, format=fmt, pixels=_to_linear(rgba)
    )


def decode_image(path: str | PathLike[str]) -> LinearImage:
    """Decode the image file at ``path``."""
    path = Path(path)
    raw_format = raw_format_from_extension(path)
    if raw_format is not None:
        return decode_raw(path, raw_format)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        raise ImageNotFoundError(path) from None
    return decode_image_from_bytes(path, data)


def decode_image_bytes(data: bytes) -> LinearImage:
    """Decode an in-memory JPEG, PNG or TIFF."""
    return decode_image_from_bytes(_EMBEDDED, data)


def make_thumbnail(linear: LinearImage) -> bytes:
    """Encode a JPEG thumbnail whose long edge is 256 pixels."""
    width, height = linear.width, linear.height
    pixels = np.asarray(linear.pixels, dtype=np.float32)
    if width <= 0 or height <= 0 or pixels.size != width * height * 4:
        raise DecodeFailedError(_THUMBNAIL_CTX, "image dimensions do not match pixel data")
    scale = THUMBNAIL_LONG_EDGE / max(width, height)
    new_w = max(int(width * scale), 1)
    new_h = max(int(height * scale), 1)

    values = np.clip(pixels.reshape(height, width, 4), 0.0, 1.0)
    srgb = np.where(
        values <= 0.0031308,
        values * 12.92,
        1.055 * np.power(values, 1.0 / 2.4) - 0.055,
    )
    bytes8 = np.clip(np.floor(srgb * 255.0 + 0.5), 0, 255).astype(np.uint8)

    try:
        buffer = Image.fromarray(bytes8)
        resized = buffer.resize((new_w, new_h), Image.Resampling.BILINEAR)
        out = io.BytesIO()
        resized.convert("RGB").save(out, format="JPEG", quality=THUMBNAIL_QUALITY)
    except (OSError, ValueError) as exc:
        raise DecodeFailedError(_THUMBNAIL_CTX, exc) from exc
    return out.getvalue()