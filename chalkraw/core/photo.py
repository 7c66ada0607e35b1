"""Photo records and their image formats."""

from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar
from uuid import UUID

from chalkraw.core.ids import uuid7

_HASH_LENGTH = 32
_U32_LIMIT = 1 << 32
_STANDARD_KINDS = ("jpeg", "png", "tiff")


class RawFormat(Enum):
    CANON_CR2 = "canon_cr2"
    CANON_CR3 = "canon_cr3"
    NIKON_NEF = "nikon_nef"
    SONY_ARW = "sony_arw"
    FUJI_RAF = "fuji_raf"
    PENTAX_PEF = "pentax_pef"
    OLYMPUS_ORF = "olympus_orf"


@dataclass(frozen=True)
class ImageFormat:
    """Source format: ``jpeg``, ``png``, ``tiff`` or ``raw`` with a camera format."""

    kind: str
    raw: RawFormat | None = None

    JPEG: ClassVar[ImageFormat]
    PNG: ClassVar[ImageFormat]
    TIFF: ClassVar[ImageFormat]

    def __post_init__(self) -> None:
        if self.kind == "raw":
            if not isinstance(self.raw, RawFormat):
                raise ValueError("a raw image format needs a RawFormat")
        elif self.kind in _STANDARD_KINDS:
            if self.raw is not None:
                raise ValueError(f"{self.kind} format takes no raw format")
        else:
            raise ValueError(f"unknown image format kind {self.kind!r}")


ImageFormat.JPEG = ImageFormat("jpeg")
ImageFormat.PNG = ImageFormat("png")
ImageFormat.TIFF = ImageFormat("tiff")


class Flag(Enum):
    NONE = "none"
    PICK = "pick"
    REJECT = "reject"


@dataclass
class ExifMetadata:
    camera_make: str | None = None
    camera_model: str | None = None
    lens: str | None = None
    iso: int | None = None
    shutter_speed: str | None = None
    aperture: float | None = None
    focal_length: float | None = None
    captured_at: datetime | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Photo:
    """A catalogued source image."""

    original_path: Path
    file_hash: bytes
    width: int
    height: int
    format: ImageFormat
    id: UUID = field(default_factory=uuid7)
    imported_at: datetime = field(default_factory=_utcnow)
    exif: ExifMetadata = field(default_factory=ExifMetadata)
    thumbnail: bytes = b""
    flag: Flag = Flag.NONE

    def __post_init__(self) -> None:
        self.original_path = Path(self.original_path)
        self.file_hash = bytes(self.file_hash)
        if len(self.file_hash) != _HASH_LENGTH:
            raise ValueError(
                f"file hash must be {_HASH_LENGTH} bytes, got {len(self.file_hash)}"
            )
        for label, value in (("width", self.width), ("height", self.height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{label} must be an integer")
            if not 0 <= value < _U32_LIMIT:
                raise ValueError(f"{label} out of range: {value}")
        if not isinstance(self.format, ImageFormat):
            raise ValueError("format must be an ImageFormat")
        self.thumbnail = bytes(self.thumbnail)
        self.flag = Flag(self.flag)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "original_path": str(self.original_path),
            "file_hash": self.file_hash.hex(),
            "imported_at": self.imported_at.isoformat(),
            "width": self.width,
            "height": self.height,
            "format": _format_to_value(self.format),
            "exif": _exif_to_dict(self.exif),
            "thumbnail": base64.b64encode(self.thumbnail).decode("ascii"),
            "flag": self.flag.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Photo:
        owner = cls.__name__
        path = _require(data, "original_path", owner)
        if not isinstance(path, str):
            raise ValueError(f"{owner}: original_path must be a string")
        return cls(
            original_path=Path(path),
            file_hash=bytes.fromhex(_require_str(data, "file_hash", owner)),
            width=_require(data, "width", owner),
            height=_require(data, "height", owner),
            format=_format_from_value(_require(data, "format", owner)),
            id=UUID(_require_str(data, "id", owner)),
            imported_at=_parse_timestamp(_require_str(data, "imported_at", owner)),
            exif=_exif_from_dict(_require(data, "exif", owner)),
            thumbnail=base64.b64decode(_require_str(data, "thumbnail", owner), validate=True),
            flag=Flag(_require(data, "flag", owner)),
        )


def _require(data: Any, key: str, owner: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"{owner}: expected a mapping, got {type(data).__name__}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"{owner}: missing field {key!r}") from None


def _require_str(data: Any, key: str, owner: str) -> str:
    value = _require(data, key, owner)
    if not isinstance(value, str):
        raise ValueError(f"{owner}: {key} must be a string")
    return value


def _parse_timestamp(raw: str) -> datetime:
    stamp = datetime.fromisoformat(raw)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)


def _format_to_value(fmt: ImageFormat) -> str:
    return f"raw:{fmt.raw.value}" if fmt.raw is not None else fmt.kind


def _format_from_value(raw: Any) -> ImageFormat:
    if not isinstance(raw, str):
        raise ValueError(f"image format must be a string, got {raw!r}")
    kind, sep, detail = raw.partition(":")
    if kind == "raw" and sep:
        return ImageFormat("raw", RawFormat(detail))
    return ImageFormat(raw)


def _exif_to_dict(exif: ExifMetadata) -> dict[str, Any]:
    data = asdict(exif)
    data["captured_at"] = None if exif.captured_at is None else exif.captured_at.isoformat()
    return data


def _optional(data: Any, key: str, kinds: tuple[type, ...]) -> Any:
    value = _require(data, key, "ExifMetadata")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, kinds):
        raise ValueError(f"ExifMetadata.{key}: unexpected value {value!r}")
    return value


def _exif_from_dict(data: Any) -> ExifMetadata:
    aperture = _optional(data, "aperture", (int, float))
    focal_length = _optional(data, "focal_length", (int, float))
    captured_at = _optional(data, "captured_at", (str,))
    return ExifMetadata(
        camera_make=_optional(data, "camera_make", (str,)),
        camera_model=_optional(data, "camera_model", (str,)),
        lens=_optional(data, "lens", (str,)),
        iso=_optional(data, "iso", (int,)),
        shutter_speed=_optional(data, "shutter_speed", (str,)),
        aperture=None if aperture is None else float(aperture),
        focal_length=None if focal_length is None else float(focal_length),
        captured_at=None if captured_at is None else _parse_timestamp(captured_at),
    )