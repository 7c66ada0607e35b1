"""Generate the striped sample JPEG used by the decoder tests."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from os import PathLike
from pathlib import Path

import numpy as np
from PIL import Image

FIXTURE_WIDTH = 1024
FIXTURE_HEIGHT = 768
DEFAULT_PATH = Path("tests/fixtures/sample.jpg")

_STRIPE_WIDTH = 64
_BASE = (40, 80, 120)
_STRIPE = (220, 200, 120)


def generate_fixture(width: int = FIXTURE_WIDTH, height: int = FIXTURE_HEIGHT) -> Image.Image:
    """A teal RGB image with yellow vertical stripes every 64 pixels."""
    columns = np.arange(width)
    stripe = (columns // _STRIPE_WIDTH) % 2 == 0
    row = np.where(stripe[:, None], np.array(_STRIPE), np.array(_BASE)).astype(np.uint8)
    pixels = np.broadcast_to(row, (height, width, 3)).copy()
    return Image.fromarray(pixels)


def write_fixture(path: str | PathLike[str]) -> Path:
    """Write the 1024x768 sample JPEG to ``path``, creating its directory."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    generate_fixture().save(path, format="JPEG")
    return path


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Write the sample JPEG fixture.")
    parser.add_argument("path", nargs="?", type=Path, default=DEFAULT_PATH)
    args = parser.parse_args(argv)
    written = write_fixture(args.path)
    print(f"Wrote {written}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())