"""Develop adjustments, tone curves and reusable develop presets."""

from __future__ import annotations

import copy
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from chalkraw.core.ids import uuid7

EDIT_SCHEMA_VERSION = 2
MAX_HISTORY = 50

_F32_EPSILON = 1.1920929e-07
_HSL_COUNT = 8


@dataclass
class WhiteBalance:
    temp_kelvin: float = 5500.0
    tint: float = 0.0  # -150..150


@dataclass
class Tone:
    exposure: float = 0.0  # EV stops, -5..5
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0


@dataclass
class Presence:
    texture: float = 0.0
    clarity: float = 0.0
    dehaze: float = 0.0


@dataclass
class ColorMix:
    vibrance: float = 0.0
    saturation: float = 0.0


@dataclass
class CurvePoint:
    x: float  # input 0..1
    y: float  # output 0..1


def _linear_points() -> list[CurvePoint]:
    return [CurvePoint(0.0, 0.0), CurvePoint(1.0, 1.0)]


@dataclass
class Curve:
    """A point curve; the default is the identity ramp y = x."""

    points: list[CurvePoint] = field(default_factory=_linear_points)


@dataclass
class ToneCurve:
    rgb: Curve = field(default_factory=Curve)
    red: Curve = field(default_factory=Curve)
    green: Curve = field(default_factory=Curve)
    blue: Curve = field(default_factory=Curve)


@dataclass
class ParametricCurve:
    shadows: float = 0.0
    darks: float = 0.0
    lights: float = 0.0
    highlights: float = 0.0


@dataclass
class HslAdjustment:
    hue: float = 0.0
    saturation: float = 0.0
    luminance: float = 0.0


class HslColor(Enum):
    """Colour bands of the HSL panel; the value indexes ``EditState.hsl``."""

    RED = 0
    ORANGE = 1
    YELLOW = 2
    GREEN = 3
    AQUA = 4
    BLUE = 5
    PURPLE = 6
    MAGENTA = 7


@dataclass
class GradeTone:
    hue: float = 0.0  # 0..360
    saturation: float = 0.0  # 0..100
    luminance: float = 0.0  # -100..100


@dataclass
class ColorGrading:
    shadows: GradeTone = field(default_factory=GradeTone)
    midtones: GradeTone = field(default_factory=GradeTone)
    highlights: GradeTone = field(default_factory=GradeTone)
    global_: GradeTone = field(default_factory=GradeTone)
    blending: float = 50.0
    balance: float = 0.0


@dataclass
class Sharpening:
    amount: float = 0.0  # 0..150
    radius: float = 1.0  # 0.5..3.0
    detail: float = 25.0
    masking: float = 0.0


@dataclass
class NoiseReduction:
    luminance: float = 0.0
    color: float = 0.0


@dataclass
class Detail:
    sharpening: Sharpening = field(default_factory=Sharpening)
    noise_reduction: NoiseReduction = field(default_factory=NoiseReduction)


@dataclass
class Vignette:
    amount: float = 0.0
    midpoint: float = 50.0
    feather: float = 50.0
    roundness: float = 0.0


@dataclass
class Grain:
    amount: float = 0.0
    size: float = 25.0
    roughness: float = 50.0


@dataclass
class Effects:
    vignette: Vignette = field(default_factory=Vignette)
    grain: Grain = field(default_factory=Grain)


@dataclass
class LensCorrection:
    distortion: float = 0.0
    vignetting: float = 0.0
    auto_profile: bool = False


@dataclass
class Crop:
    x_pct: float
    y_pct: float
    w_pct: float
    h_pct: float
    rotation_deg: float


def _default_hsl() -> list[HslAdjustment]:
    return [HslAdjustment() for _ in range(_HSL_COUNT)]


@dataclass
class EditSnapshot:
    state: EditState
    label: str


@dataclass
class EditState:
    """Full per-photo develop state."""

    white_balance: WhiteBalance = field(default_factory=WhiteBalance)
    tone: Tone = field(default_factory=Tone)
    presence: Presence = field(default_factory=Presence)
    color: ColorMix = field(default_factory=ColorMix)
    tone_curve: ToneCurve = field(default_factory=ToneCurve)
    parametric_curve: ParametricCurve = field(default_factory=ParametricCurve)
    hsl: list[HslAdjustment] = field(default_factory=_default_hsl)
    color_grading: ColorGrading = field(default_factory=ColorGrading)
    detail: Detail = field(default_factory=Detail)
    effects: Effects = field(default_factory=Effects)
    lens_correction: LensCorrection = field(default_factory=LensCorrection)
    crop: Crop | None = None
    history: deque[EditSnapshot] = field(default_factory=deque)
    version: int = EDIT_SCHEMA_VERSION

    def is_identity(self) -> bool:
        """True if every adjustment is at its no-op value (history is ignored)."""
        default = EditState()
        return all(
            getattr(self, name) == getattr(default, name)
            for name in (*_DEVELOP_FIELDS, "lens_correction", "crop")
        )

    def apply_preset(self, preset: DevelopPreset) -> None:
        """Overlay preset fields; crop, lens correction, history and version are kept."""
        for name in _DEVELOP_FIELDS:
            setattr(self, name, copy.deepcopy(getattr(preset, name)))

    def to_dict(self) -> dict[str, Any]:
        data = _dump_develop(self)
        data["lens_correction"] = asdict(self.lens_correction)
        data["crop"] = None if self.crop is None else asdict(self.crop)
        data["history"] = [
            {"state": snapshot.state.to_dict(), "label": snapshot.label}
            for snapshot in self.history
        ]
        data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EditState:
        owner = cls.__name__
        kwargs = _load_develop(data, owner)
        kwargs["lens_correction"] = _load(
            LensCorrection, _require(data, "lens_correction", owner)
        )
        crop = _require(data, "crop", owner)
        kwargs["crop"] = None if crop is None else _load(Crop, crop)
        history = _require(data, "history", owner)
        if not isinstance(history, Sequence) or isinstance(history, (str, bytes)):
            raise ValueError(f"{owner}: history must be a list")
        kwargs["history"] = deque(_load_snapshot(item) for item in history)
        version = _require(data, "version", owner)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValueError(f"{owner}: version must be an integer")
        kwargs["version"] = version
        return cls(**kwargs)


@dataclass
class DevelopPreset:
    """Reusable develop adjustments without per-photo state."""

    white_balance: WhiteBalance = field(default_factory=WhiteBalance)
    tone: Tone = field(default_factory=Tone)
    presence: Presence = field(default_factory=Presence)
    color: ColorMix = field(default_factory=ColorMix)
    tone_curve: ToneCurve = field(default_factory=ToneCurve)
    hsl: list[HslAdjustment] = field(default_factory=_default_hsl)
    color_grading: ColorGrading = field(default_factory=ColorGrading)
    detail: Detail = field(default_factory=Detail)
    effects: Effects = field(default_factory=Effects)
    parametric_curve: ParametricCurve = field(default_factory=ParametricCurve)

    @classmethod
    def from_edit(cls, edit: EditState) -> DevelopPreset:
        return cls(**{name: copy.deepcopy(getattr(edit, name)) for name in _DEVELOP_FIELDS})

    def to_dict(self) -> dict[str, Any]:
        return _dump_develop(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DevelopPreset:
        return cls(**_load_develop(data, cls.__name__))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Preset:
    """A named develop preset stored in the catalog."""

    name: str
    develop: DevelopPreset = field(default_factory=DevelopPreset)
    id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "develop": self.develop.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Preset:
        owner = cls.__name__
        name = _require(data, "name", owner)
        if not isinstance(name, str):
            raise ValueError(f"{owner}: name must be a string")
        return cls(
            name=name,
            develop=DevelopPreset.from_dict(_require(data, "develop", owner)),
            id=_parse_uuid(_require(data, "id", owner), owner),
            created_at=_parse_timestamp(_require(data, "created_at", owner), owner),
        )


def interpolate_curve(points: Sequence[CurvePoint], x: float) -> float:
    """Piecewise-linear lookup of ``x`` in sorted control points.

    An empty curve is the identity; inputs outside the control points clamp
    to the first or last output value.
    """
    if not points:
        return x
    first, last = points[0], points[-1]
    if x <= first.x:
        return first.y
    if x >= last.x:
        return last.y
    for p1, p2 in zip(points, points[1:]):
        if p1.x <= x <= p2.x:
            span = p2.x - p1.x
            t = (x - p1.x) / span if span > _F32_EPSILON else 0.0
            return p1.y + (p2.y - p1.y) * t
    return x


def curve_is_identity(curve: Curve) -> bool:
    """True when ``curve`` is exactly the linear ramp [(0, 0), (1, 1)]."""
    if len(curve.points) != 2:
        return False
    start, end = curve.points
    return (
        abs(start.x) < 1e-6
        and abs(start.y) < 1e-6
        and abs(end.x - 1.0) < 1e-6
        and abs(end.y - 1.0) < 1e-6
    )


# ── serialisation helpers ────────────────────────────────────────────────────

_DEVELOP_FIELDS = (
    "white_balance",
    "tone",
    "presence",
    "color",
    "tone_curve",
    "hsl",
    "color_grading",
    "detail",
    "effects",
    "parametric_curve",
)

_SECTION_TYPES: dict[str, type] = {
    "white_balance": WhiteBalance,
    "tone": Tone,
    "presence": Presence,
    "color": ColorMix,
    "tone_curve": ToneCurve,
    "color_grading": ColorGrading,
    "detail": Detail,
    "effects": Effects,
    "parametric_curve": ParametricCurve,
}

_NESTED_TYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (
        WhiteBalance,
        Tone,
        Presence,
        ColorMix,
        CurvePoint,
        ToneCurve,
        ParametricCurve,
        HslAdjustment,
        GradeTone,
        ColorGrading,
        Sharpening,
        NoiseReduction,
        Detail,
        Vignette,
        Grain,
        Effects,
        LensCorrection,
        Crop,
    )
}


def _require(data: Any, key: str, owner: str) -> Any:
    if not isinstance(data, Mapping):
        raise ValueError(f"{owner}: expected a mapping, got {type(data).__name__}")
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"{owner}: missing field {key!r}") from None


def _as_float(raw: Any, owner: str, name: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"{owner}.{name}: expected a number, got {raw!r}")
    return float(raw)


def _load_curve(raw: Any) -> Curve:
    points = _require(raw, "points", "Curve")
    if not isinstance(points, Sequence) or isinstance(points, (str, bytes)):
        raise ValueError("Curve.points must be a list")
    return Curve([_load(CurvePoint, point) for point in points])


def _load_value(type_name: str, raw: Any, owner: str, name: str) -> Any:
    if type_name == "float":
        return _as_float(raw, owner, name)
    if type_name == "bool":
        if not isinstance(raw, bool):
            raise ValueError(f"{owner}.{name}: expected a boolean, got {raw!r}")
        return raw
    if type_name == "Curve":
        return _load_curve(raw)
    return _load(_NESTED_TYPES[type_name], raw)


def _load(cls: type, data: Any) -> Any:
    owner = cls.__name__
    kwargs = {
        f.name: _load_value(str(f.type), _require(data, f.name, owner), owner, f.name)
        for f in fields(cls)
    }
    return cls(**kwargs)


def _load_hsl(raw: Any) -> list[HslAdjustment]:
    if not isinstance(raw, Sequence) or isinstance(raw, (str, bytes)):
        raise ValueError("hsl must be a list")
    if len(raw) != _HSL_COUNT:
        raise ValueError(f"hsl must hold {_HSL_COUNT} entries, got {len(raw)}")
    return [_load(HslAdjustment, item) for item in raw]


def _dump_develop(source: Any) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for name in _DEVELOP_FIELDS:
        value = getattr(source, name)
        data[name] = [asdict(item) for item in value] if name == "hsl" else asdict(value)
    return data


def _load_develop(data: Any, owner: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for name in _DEVELOP_FIELDS:
        raw = _require(data, name, owner)
        kwargs[name] = _load_hsl(raw) if name == "hsl" else _load(_SECTION_TYPES[name], raw)
    return kwargs


def _load_snapshot(raw: Any) -> EditSnapshot:
    label = _require(raw, "label", "EditSnapshot")
    if not isinstance(label, str):
        raise ValueError("EditSnapshot.label must be a string")
    return EditSnapshot(
        state=EditState.from_dict(_require(raw, "state", "EditSnapshot")), label=label
    )


def _parse_uuid(raw: Any, owner: str) -> UUID:
    if not isinstance(raw, str):
        raise ValueError(f"{owner}: id must be a string")
    return UUID(raw)


def _parse_timestamp(raw: Any, owner: str) -> datetime:
    if not isinstance(raw, str):
        raise ValueError(f"{owner}: timestamp must be an ISO 8601 string")
    stamp = datetime.fromisoformat(raw)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)