import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from chalkraw.core.ids import uuid_version
from chalkraw.core.photo import ExifMetadata, Flag, ImageFormat, Photo, RawFormat


def test_photo_new_assigns_v7_uuid_and_now():
    before = datetime.now(timezone.utc)
    p = Photo(Path("/tmp/a.jpg"), bytes(32), 1024, 768, ImageFormat.JPEG)
    after = datetime.now(timezone.utc)
    assert p.width == 1024
    assert p.height == 768
    assert p.format == ImageFormat.JPEG
    assert p.flag is Flag.NONE
    assert before <= p.imported_at <= after
    assert uuid_version(p.id) == 7
    assert p.exif == ExifMetadata()
    assert p.thumbnail == b""


def test_photo_roundtrips_through_dict():
    p = Photo(
        Path("/tmp/a.jpg"),
        bytes([7]) * 32,
        100,
        100,
        ImageFormat("raw", RawFormat.CANON_CR2),
    )
    back = Photo.from_dict(json.loads(json.dumps(p.to_dict())))
    assert back == p
    assert back.format.raw is RawFormat.CANON_CR2


def test_photo_roundtrips_exif_thumbnail_and_flag():
    p = Photo("/x/b.png", bytes([1]) * 32, 2, 2, ImageFormat.PNG)
    p.exif = ExifMetadata(
        camera_make="Maker",
        camera_model="Model",
        lens="50mm",
        iso=400,
        shutter_speed="1/125",
        aperture=2.8,
        focal_length=50.0,
        captured_at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
    )
    p.thumbnail = bytes([1, 2, 3, 4, 5])
    p.flag = Flag.PICK
    back = Photo.from_dict(json.loads(json.dumps(p.to_dict())))
    assert back == p
    assert back.thumbnail == bytes([1, 2, 3, 4, 5])
    assert back.flag is Flag.PICK


def test_string_path_is_converted():
    p = Photo("/tmp/a.jpg", bytes(32), 1, 1, ImageFormat.JPEG)
    assert p.original_path == Path("/tmp/a.jpg")


def test_short_hash_is_rejected():
    with pytest.raises(ValueError):
        Photo(Path("/tmp/a.jpg"), bytes(31), 1, 1, ImageFormat.JPEG)


def test_negative_dimension_is_rejected():
    with pytest.raises(ValueError):
        Photo(Path("/tmp/a.jpg"), bytes(32), -1, 1, ImageFormat.JPEG)


def test_image_format_validation():
    with pytest.raises(ValueError):
        ImageFormat("raw")
    with pytest.raises(ValueError):
        ImageFormat("jpeg", RawFormat.SONY_ARW)
    with pytest.raises(ValueError):
        ImageFormat("gif")


def test_image_format_equality_includes_raw_kind():
    nef = ImageFormat("raw", RawFormat.NIKON_NEF)
    assert nef == ImageFormat("raw", RawFormat.NIKON_NEF)
    assert (nef == ImageFormat("raw", RawFormat.SONY_ARW)) is False
    assert (ImageFormat.JPEG == ImageFormat.PNG) is False


def test_from_dict_missing_field_raises():
    data = Photo(Path("/tmp/a.jpg"), bytes(32), 1, 1, ImageFormat.JPEG).to_dict()
    del data["width"]
    with pytest.raises(ValueError):
        Photo.from_dict(data)


def test_from_dict_unknown_format_raises():
    data = Photo(Path("/tmp/a.jpg"), bytes(32), 1, 1, ImageFormat.TIFF).to_dict()
    data["format"] = "raw:unknown_camera"
    with pytest.raises(ValueError):
        Photo.from_dict(data)