"""RAW sensor data: format detection, embedded previews and demosaicing."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

import numpy as np

from chalkraw.core.photo import RawFormat

_RAW_EXTENSIONS = {
    "cr2": RawFormat.CANON_CR2,
    "cr3": RawFormat.CANON_CR3,
    "nef": RawFormat.NIKON_NEF,
    "arw": RawFormat.SONY_ARW,
    "raf": RawFormat.FUJI_RAF,
    "pef": RawFormat.PENTAX_PEF,
    "orf": RawFormat.OLYMPUS_ORF,
}

_CFA_CODES = {"R": 0, "G": 1, "B": 2, "E": 3}

# XYZ (D65) to linear sRGB, IEC 61966-2-1 rounded form.
_XYZ_TO_SRGB_BILINEAR = np.array(
    [
        [3.2406, -1.5372, -0.4986],
        [-0.9689, 1.8758, 0.0415],
        [0.0557, -0.2040, 1.0570],
    ],
    dtype=np.float32,
)

# XYZ (D65) to linear sRGB, full precision.
_XYZ_TO_SRGB = np.array(
    [
        [3.240454, -1.5371385, -0.4985314],
        [-0.969266, 1.8760108, 0.041556],
        [0.0556434, -0.2040259, 1.0572252],
    ],
    dtype=np.float32,
)

_DIAGONAL_AND_CROSS = (
    (-1, -1),
    (-1, 1),
    (1, -1),
    (1, 1),
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
)
_CROSS = ((-1, 0), (1, 0), (0, -1), (0, 1))
_WINDOW = tuple((dy, dx) for dy in (-1, 0, 1) for dx in (-1, 0, 1))


def _identity_cam_to_xyz() -> list[list[float]]:
    return [[1.0, 0.0, 0.0, 0.0], [0.0, 1.0, 0.0, 0.0], [0.0, 0.0, 1.0, 0.0]]


@dataclass
class RawImage:
    """Sensor samples of a RAW file.

    ``data`` holds ``width * height * cpp`` samples row-major; integer
    samples are normalised with the per-channel black and white levels,
    float samples are taken as already in 0..1. ``cfa`` is the colour
    filter pattern read row by row (``R``, ``G``, ``B`` or ``E``) with
    ``cfa_width`` columns; an empty pattern means a monochrome sensor.
    ``cam_to_xyz`` is the normalised 3x4 camera-to-XYZ matrix.
    """

    width: int
    height: int
    data: np.ndarray
    cfa: str = "RGGB"
    cfa_width: int = 2
    blacklevels: Sequence[int] = (0, 0, 0, 0)
    whitelevels: Sequence[int] = (65535, 65535, 65535, 65535)
    cpp: int = 1
    cam_to_xyz: Sequence[Sequence[float]] = field(default_factory=_identity_cam_to_xyz)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("raw dimensions must not be negative")
        self.data = np.asarray(self.data).reshape(-1)
        if self.data.dtype.kind not in "iuf":
            raise ValueError("raw samples must be integers or floats")
        expected = self.width * self.height * self.cpp
        if self.data.size != expected:
            raise ValueError(f"expected {expected} raw samples, got {self.data.size}")
        self.cfa = self.cfa.upper()
        if any(ch not in _CFA_CODES for ch in self.cfa):
            raise ValueError(f"invalid CFA pattern {self.cfa!r}")
        if self.cfa and (self.cfa_width <= 0 or len(self.cfa) % self.cfa_width):
            raise ValueError("CFA pattern length must be a multiple of its width")
        self.blacklevels = tuple(int(v) for v in self.blacklevels)
        self.whitelevels = tuple(int(v) for v in self.whitelevels)
        if len(self.blacklevels) != 4 or len(self.whitelevels) != 4:
            raise ValueError("black and white levels need four channels")
        matrix = np.asarray(self.cam_to_xyz, dtype=np.float32)
        if matrix.shape != (3, 4):
            raise ValueError("cam_to_xyz must be a 3x4 matrix")
        self.cam_to_xyz = matrix

    @property
    def is_integer(self) -> bool:
        return self.data.dtype.kind in "iu"

    @property
    def cfa_is_valid(self) -> bool:
        return bool(self.cfa)

    def color_at(self, row: int, col: int) -> int:
        """Channel at a sensor site: 0 red, 1 green, 2 blue, 3 emerald."""
        if not self.cfa:
            raise ValueError("monochrome sensor has no colour filter")
        pattern_height = len(self.cfa) // self.cfa_width
        index = (row % pattern_height) * self.cfa_width + col % self.cfa_width
        return _CFA_CODES[self.cfa[index]]

    def _plane(self) -> np.ndarray:
        return self.data[: self.width * self.height].reshape(self.height, self.width)

    def _colors(self) -> np.ndarray:
        codes = np.array([_CFA_CODES[ch] for ch in self.cfa], dtype=np.int64)
        pattern = codes.reshape(-1, self.cfa_width)
        reps = (-(-self.height // pattern.shape[0]), -(-self.width // pattern.shape[1]))
        return np.tile(pattern, reps)[: self.height, : self.width]


def raw_format_from_extension(path: str | PathLike[str]) -> RawFormat | None:
    """The RAW format named by a file extension, case-insensitively."""
    suffix = Path(path).suffix
    return _RAW_EXTENSIONS.get(suffix[1:].lower()) if suffix else None


def find_embedded_jpeg(data: bytes) -> bytes | None:
    """Return the largest JPEG stream (SOI ... EOI) embedded in ``data``."""
    data = bytes(data)
    best: tuple[int, int] | None = None
    start = data.find(b"\xff\xd8\xff")
    while start != -1 and start + 4 < len(data):
        eoi = data.find(b"\xff\xd9", start + 2)
        if eoi != -1:
            end = eoi + 2
            if best is None or end - start >= best[1] - best[0]:
                best = (start, end)
        start = data.find(b"\xff\xd8\xff", start + 1)
    return None if best is None else data[best[0] : best[1]]


def _normalised(raw: RawImage, colors: np.ndarray) -> np.ndarray:
    plane = raw._plane().astype(np.float32)
    if not raw.is_integer:
        return np.clip(plane, 0.0, 1.0)
    channel = np.minimum(colors, 3)
    black = np.asarray(raw.blacklevels, dtype=np.float32)[channel]
    white = np.asarray(raw.whitelevels, dtype=np.float32)[channel]
    span = np.maximum(white - black, np.float32(1.0))
    return np.clip((plane - black) / span, 0.0, 1.0)


def _shifted(values: np.ndarray, dy: int, dx: int, fill: object) -> np.ndarray:
    """``values`` read at (y + dy, x + dx), ``fill`` outside the image."""
    height, width = values.shape
    padded = np.pad(values, 1, constant_values=fill)
    return padded[1 + dy : 1 + dy + height, 1 + dx : 1 + dx + width]


def _masked_sum(
    values: np.ndarray, mask: np.ndarray, offsets: Sequence[tuple[int, int]]
) -> tuple[np.ndarray, np.ndarray]:
    total = np.zeros(values.shape, dtype=np.float32)
    count = np.zeros(values.shape, dtype=np.int64)
    for dy, dx in offsets:
        hit = _shifted(mask, dy, dx, False)
        total += np.where(hit, _shifted(values, dy, dx, 0.0), np.float32(0.0))
        count += hit
    return total, count


def _apply_matrix(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    out = np.einsum("ij,hwj->hwi", matrix.astype(np.float32), rgb)
    return np.clip(out, 0.0, 1.0).astype(np.float32)


def demosaic_bilinear(raw: RawImage) -> np.ndarray | None:
    """Full-resolution 3x3 bilinear Bayer demosaic to linear sRGB.

    Returns an ``(height, width, 3)`` float array, or None for monochrome,
    multi-component or images smaller than 2x2.
    """
    if raw.cpp != 1 or not raw.cfa_is_valid or raw.width < 2 or raw.height < 2:
        return None
    colors = raw._colors()
    plane = _normalised(raw, colors) if raw.is_integer else np.clip(
        raw._plane().astype(np.float32), 0.0, 1.0
    )
    if raw.is_integer:
        # This path subtracts the black level of the site's own channel.
        black = np.asarray(raw.blacklevels, dtype=np.float32)[colors]
        white = np.asarray(raw.whitelevels, dtype=np.float32)[colors]
        span = np.maximum(white - black, np.float32(1.0))
        plane = np.clip((raw._plane().astype(np.float32) - black) / span, 0.0, 1.0)
    channels = []
    for channel in range(3):
        here = colors == channel
        total, count = _masked_sum(plane, here, _WINDOW)
        average = np.where(count > 0, total / np.maximum(count, 1), np.float32(0.0))
        channels.append(np.where(here, plane, average))
    rgb = np.stack(channels, axis=-1).astype(np.float32)
    matrix = _XYZ_TO_SRGB_BILINEAR @ raw.cam_to_xyz[:, :3]
    return _apply_matrix(rgb, matrix)


def _reconstruct_green(plane: np.ndarray, colors: np.ndarray) -> np.ndarray:
    height, width = plane.shape
    green = colors == 1

    total, count = _masked_sum(plane, green, _CROSS)
    bilinear = np.where(count > 0, total / np.maximum(count, 1), plane)

    directional = bilinear.copy()
    c = plane[2:-2, 2:-2]
    left1, right1 = plane[2:-2, 1:-3], plane[2:-2, 3:-1]
    left2, right2 = plane[2:-2, 0:-4], plane[2:-2, 4:]
    up1, down1 = plane[1:-3, 2:-2], plane[3:-1, 2:-2]
    up2, down2 = plane[0:-4, 2:-2], plane[4:, 2:-2]
    curve_h = 2.0 * c - left2 - right2
    curve_v = 2.0 * c - up2 - down2
    g_h = (left1 + right1) * 0.5 + curve_h * 0.25
    g_v = (up1 + down1) * 0.5 + curve_v * 0.25
    grad_h = np.abs(left1 - right1) + np.abs(curve_h)
    grad_v = np.abs(up1 - down1) + np.abs(curve_v)
    directional[2:-2, 2:-2] = np.where(grad_h <= grad_v, g_h, g_v)

    interior = np.zeros((height, width), dtype=bool)
    interior[2:-2, 2:-2] = True
    values = np.where(green, plane, np.where(interior, directional, bilinear))
    return np.clip(values, 0.0, 1.0).astype(np.float32)


def _reconstruct_by_difference(
    plane: np.ndarray, green: np.ndarray, colors: np.ndarray, channel: int
) -> np.ndarray:
    here = colors == channel
    total, count = _masked_sum(plane - green, here, _DIAGONAL_AND_CROSS)
    estimate = np.clip(green + total / np.maximum(count, 1), 0.0, 1.0)
    filled = np.where(count > 0, estimate, green)
    return np.where(here, plane, filled).astype(np.float32)


def demosaic_ahd(raw: RawImage) -> np.ndarray | None:
    """Directional (AHD-style) Bayer demosaic to linear sRGB.

    Green is interpolated along the smoother of the horizontal and vertical
    directions with a curvature correction; red and blue follow from
    colour differences to green. Returns an ``(height, width, 3)`` float
    array, or None for monochrome, multi-component or images under 4x4.
    """
    if raw.width < 4 or raw.height < 4 or raw.cpp != 1 or not raw.cfa_is_valid:
        return None
    colors = raw._colors()
    plane = _normalised(raw, colors)
    green = _reconstruct_green(plane, colors)
    red = _reconstruct_by_difference(plane, green, colors, 0)
    blue = _reconstruct_by_difference(plane, green, colors, 2)
    rgb = np.stack([red, green, blue], axis=-1)
    matrix = _XYZ_TO_SRGB @ raw.cam_to_xyz[:, :3]
    return _apply_matrix(rgb, matrix)


def half_res_demosaic(raw: RawImage) -> np.ndarray:
    """Average each 2x2 sensor cell into one grey RGBA pixel.

    Returns a ``(height // 2, width // 2, 4)`` float array with alpha 1.
    Raises ValueError for images smaller than 2x2.
    """
    if raw.width < 2 or raw.height < 2:
        raise ValueError(f"raw image {raw.width}x{raw.height} too small to decode")
    half_w, half_h = raw.width // 2, raw.height // 2
    cells = raw._plane()[: half_h * 2, : half_w * 2].astype(np.float32)
    average = cells.reshape(half_h, 2, half_w, 2).sum(axis=(1, 3)) / np.float32(4.0)
    if raw.is_integer:
        average = average / np.float32(max(raw.whitelevels))
    grey = np.clip(average, 0.0, 1.0).astype(np.float32)
    alpha = np.ones_like(grey)
    return np.stack([grey, grey, grey, alpha], axis=-1)