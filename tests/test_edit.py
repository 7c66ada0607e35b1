import json
from datetime import timezone

import pytest

from chalkraw.core.edit import (
    EDIT_SCHEMA_VERSION,
    Crop,
    Curve,
    CurvePoint,
    DevelopPreset,
    EditSnapshot,
    EditState,
    HslColor,
    Preset,
    curve_is_identity,
    interpolate_curve,
)
from chalkraw.core.ids import uuid_version


def _json_round_trip(data):
    return json.loads(json.dumps(data))


def test_default_is_identity():
    s = EditState()
    assert s.is_identity()
    assert s.version == EDIT_SCHEMA_VERSION
    assert s.white_balance.temp_kelvin == 5500.0
    assert s.tone.exposure == 0.0
    assert len(s.tone_curve.rgb.points) == 2
    assert s.effects.grain.size == 25.0
    assert s.effects.grain.roughness == 50.0
    assert s.color_grading.blending == 50.0


def test_exposure_change_breaks_identity():
    s = EditState()
    s.tone.exposure = 1.0
    assert not s.is_identity()


def test_parametric_curve_change_breaks_identity():
    s = EditState()
    s.parametric_curve.shadows = 50.0
    assert not s.is_identity()
    s2 = EditState()
    s2.parametric_curve.highlights = -30.0
    assert not s2.is_identity()


def test_crop_breaks_identity_but_history_does_not():
    with_history = EditState()
    with_history.history.append(EditSnapshot(state=EditState(), label="Exposure"))
    assert with_history.is_identity()
    cropped = EditState(crop=Crop(0.1, 0.1, 0.5, 0.5, 0.0))
    assert not cropped.is_identity()


def test_defaults_do_not_share_mutable_state():
    a = EditState()
    b = EditState()
    a.hsl[HslColor.BLUE.value].hue = 10.0
    assert b.hsl[HslColor.BLUE.value].hue == 0.0
    assert b.is_identity()


def test_edit_state_round_trips_through_dict():
    s = EditState()
    s.tone.exposure = 0.5
    s.white_balance.temp_kelvin = 6500.0
    back = EditState.from_dict(_json_round_trip(s.to_dict()))
    assert back == s


def test_edit_state_round_trips_history_crop_and_curves():
    s = EditState(crop=Crop(0.1, 0.2, 0.5, 0.5, 3.0))
    s.tone_curve.red = Curve([CurvePoint(0.0, 0.0), CurvePoint(0.5, 0.8), CurvePoint(1.0, 1.0)])
    s.lens_correction.auto_profile = True
    s.history.append(EditSnapshot(state=EditState(), label="Import"))
    back = EditState.from_dict(_json_round_trip(s.to_dict()))
    assert back == s
    assert back.history[0].label == "Import"


def test_from_dict_missing_field_raises():
    data = EditState().to_dict()
    del data["tone"]
    with pytest.raises(ValueError):
        EditState.from_dict(data)


def test_from_dict_wrong_hsl_length_raises():
    data = EditState().to_dict()
    data["hsl"] = data["hsl"][:7]
    with pytest.raises(ValueError):
        EditState.from_dict(data)


def test_from_dict_non_numeric_value_raises():
    data = EditState().to_dict()
    data["tone"]["exposure"] = "bright"
    with pytest.raises(ValueError):
        EditState.from_dict(data)


def test_interpolate_curve_linear_default_is_identity():
    curve = Curve()
    assert interpolate_curve(curve.points, 0.0) == 0.0
    assert interpolate_curve(curve.points, 0.5) == 0.5
    assert interpolate_curve(curve.points, 1.0) == 1.0


def test_interpolate_curve_three_points_lerps():
    curve = Curve([CurvePoint(0.0, 0.0), CurvePoint(0.5, 0.8), CurvePoint(1.0, 1.0)])
    assert interpolate_curve(curve.points, 0.25) == pytest.approx(0.4, abs=1e-5)
    assert interpolate_curve(curve.points, 0.5) == pytest.approx(0.8, abs=1e-5)


def test_interpolate_curve_empty_returns_input():
    assert interpolate_curve([], 0.37) == 0.37


def test_interpolate_curve_clamps_outside_control_points():
    points = [CurvePoint(0.2, 0.3), CurvePoint(0.8, 0.9)]
    assert interpolate_curve(points, 0.0) == 0.3
    assert interpolate_curve(points, 1.0) == 0.9


def test_curve_is_identity():
    assert curve_is_identity(Curve())
    assert not curve_is_identity(
        Curve([CurvePoint(0.0, 0.0), CurvePoint(0.5, 0.8), CurvePoint(1.0, 1.0)])
    )
    assert not curve_is_identity(Curve([CurvePoint(0.0, 0.1), CurvePoint(1.0, 1.0)]))


def test_preset_roundtrip_through_edit_state():
    original = EditState()
    original.tone.exposure = 1.5
    original.color.saturation = -25.0
    preset = DevelopPreset.from_edit(original)

    target = EditState(crop=Crop(0.1, 0.1, 0.5, 0.5, 0.0))
    target.apply_preset(preset)

    assert target.tone.exposure == 1.5
    assert target.color.saturation == -25.0
    assert target.crop is not None
    assert target.crop.w_pct == 0.5


def test_apply_preset_keeps_per_photo_state():
    target = EditState()
    target.lens_correction.distortion = 12.0
    target.history.append(EditSnapshot(state=EditState(), label="Before"))
    source = EditState()
    source.presence.clarity = 40.0
    target.apply_preset(DevelopPreset.from_edit(source))
    assert target.presence.clarity == 40.0
    assert target.lens_correction.distortion == 12.0
    assert len(target.history) == 1
    assert target.version == EDIT_SCHEMA_VERSION


def test_develop_preset_is_an_independent_copy():
    original = EditState()
    original.tone.exposure = 1.5
    preset = DevelopPreset.from_edit(original)
    preset.tone.exposure = 3.0
    assert original.tone.exposure == 1.5


def test_develop_preset_round_trips_through_dict():
    edit = EditState()
    edit.effects.vignette.amount = -20.0
    preset = DevelopPreset.from_edit(edit)
    assert DevelopPreset.from_dict(_json_round_trip(preset.to_dict())) == preset


def test_preset_round_trips_and_has_v7_id():
    preset = Preset("Warm Pop", DevelopPreset())
    back = Preset.from_dict(_json_round_trip(preset.to_dict()))
    assert back == preset
    assert back.name == "Warm Pop"
    assert uuid_version(back.id) == 7
    assert back.created_at.tzinfo == timezone.utc


def test_preset_from_dict_rejects_bad_id():
    data = Preset("Cold").to_dict()
    data["id"] = "nope"
    with pytest.raises(ValueError):
        Preset.from_dict(data)


def test_hsl_colors_cover_every_band_in_order():
    names = [color.name for color in HslColor]
    assert names == ["RED", "ORANGE", "YELLOW", "GREEN", "AQUA", "BLUE", "PURPLE", "MAGENTA"]
    assert len(EditState().hsl) == len(names)