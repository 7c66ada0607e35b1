"""Watermark presets made of image and text layers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Union
from uuid import UUID

from chalkraw.core.ids import uuid7


class WatermarkAnchor(Enum):
    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    TOP_RIGHT = "top_right"
    CENTER_LEFT = "center_left"
    CENTER = "center"
    CENTER_RIGHT = "center_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_CENTER = "bottom_center"
    BOTTOM_RIGHT = "bottom_right"


@dataclass
class ImageLayer:
    """A PNG stamped onto the output image."""

    png_path: Path = field(default_factory=Path)
    anchor: WatermarkAnchor = WatermarkAnchor.BOTTOM_RIGHT
    size_pct: float = 15.0  # percent of output long edge, 1..50
    opacity: float = 0.8  # 0..1
    margin_pct: float = 3.0  # percent of output long edge, 0..20
    rotation_deg: float = 0.0  # -180..180

    def __post_init__(self) -> None:
        self.png_path = Path(self.png_path)
        self.anchor = WatermarkAnchor(self.anchor)


@dataclass(frozen=True)
class TextColor:
    """RGBA colour, each channel 0..255."""

    r: int = 255
    g: int = 255
    b: int = 255
    a: int = 255

    def __post_init__(self) -> None:
        for channel in ("r", "g", "b", "a"):
            value = getattr(self, channel)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"TextColor.{channel} must be an integer")
            if not 0 <= value <= 255:
                raise ValueError(f"TextColor.{channel} out of range: {value}")


@dataclass
class TextLayer:
    """A line of text rendered onto the output image."""

    text: str = "© Studio"
    font_size_pct: float = 3.0  # percent of output long edge, 0.5..10
    color: TextColor = field(default_factory=TextColor)
    anchor: WatermarkAnchor = WatermarkAnchor.BOTTOM_RIGHT
    opacity: float = 0.85
    margin_pct: float = 3.0
    rotation_deg: float = 0.0

    def __post_init__(self) -> None:
        self.anchor = WatermarkAnchor(self.anchor)
        if not isinstance(self.color, TextColor):
            raise ValueError("TextLayer.color must be a TextColor")


WatermarkLayer = Union[ImageLayer, TextLayer]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WatermarkPreset:
    """A named, ordered stack of watermark layers."""

    name: str
    layers: list[WatermarkLayer] = field(default_factory=list)
    id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "layers": [_layer_to_dict(layer) for layer in self.layers],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> WatermarkPreset:
        owner = cls.__name__
        name = _require_str(data, "name", owner)
        layers = _require(data, "layers", owner)
        if not isinstance(layers, Sequence) or isinstance(layers, (str, bytes)):
            raise ValueError(f"{owner}: layers must be a list")
        return cls(
            name=name,
            layers=[_layer_from_dict(item) for item in layers],
            id=UUID(_require_str(data, "id", owner)),
            created_at=_parse_timestamp(_require_str(data, "created_at", owner)),
        )


# ── serialisation helpers ────────────────────────────────────────────────────

_IMAGE_TAG = "image"
_TEXT_TAG = "text"


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


def _require_float(data: Any, key: str, owner: str) -> float:
    value = _require(data, key, owner)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{owner}.{key}: expected a number, got {value!r}")
    return float(value)


def _parse_timestamp(raw: str) -> datetime:
    stamp = datetime.fromisoformat(raw)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)


def _layer_to_dict(layer: WatermarkLayer) -> dict[str, Any]:
    if isinstance(layer, ImageLayer):
        return {
            "type": _IMAGE_TAG,
            "png_path": str(layer.png_path),
            "anchor": layer.anchor.value,
            "size_pct": layer.size_pct,
            "opacity": layer.opacity,
            "margin_pct": layer.margin_pct,
            "rotation_deg": layer.rotation_deg,
        }
    if isinstance(layer, TextLayer):
        color = layer.color
        return {
            "type": _TEXT_TAG,
            "text": layer.text,
            "font_size_pct": layer.font_size_pct,
            "color": {"r": color.r, "g": color.g, "b": color.b, "a": color.a},
            "anchor": layer.anchor.value,
            "opacity": layer.opacity,
            "margin_pct": layer.margin_pct,
            "rotation_deg": layer.rotation_deg,
        }
    raise ValueError(f"unknown watermark layer {layer!r}")


def _color_from_dict(data: Any) -> TextColor:
    channels = {key: _require(data, key, "TextColor") for key in ("r", "g", "b", "a")}
    return TextColor(**channels)


def _layer_from_dict(data: Any) -> WatermarkLayer:
    kind = _require(data, "type", "WatermarkLayer")
    if kind == _IMAGE_TAG:
        owner = "ImageLayer"
        return ImageLayer(
            png_path=Path(_require_str(data, "png_path", owner)),
            anchor=WatermarkAnchor(_require(data, "anchor", owner)),
            size_pct=_require_float(data, "size_pct", owner),
            opacity=_require_float(data, "opacity", owner),
            margin_pct=_require_float(data, "margin_pct", owner),
            rotation_deg=_require_float(data, "rotation_deg", owner),
        )
    if kind == _TEXT_TAG:
        owner = "TextLayer"
        return TextLayer(
            text=_require_str(data, "text", owner),
            font_size_pct=_require_float(data, "font_size_pct", owner),
            color=_color_from_dict(_require(data, "color", owner)),
            anchor=WatermarkAnchor(_require(data, "anchor", owner)),
            opacity=_require_float(data, "opacity", owner),
            margin_pct=_require_float(data, "margin_pct", owner),
            rotation_deg=_require_float(data, "rotation_deg", owner),
        )
    raise ValueError(f"unknown watermark layer type {kind!r}")