from pathlib import Path

import pytest

from chalkraw.imaging.exceptions import (
    DecodeFailedError,
    ImageNotFoundError,
    ImagingError,
    UnsupportedFormatError,
)


def test_not_found_message_and_path():
    err = ImageNotFoundError("photo.jpg")
    assert str(err) == "file not found: photo.jpg"
    assert err.path == Path("photo.jpg")


def test_unsupported_format_message():
    err = UnsupportedFormatError(Path("notes.txt"))
    assert str(err) == "unsupported format for notes.txt"
    assert err.path == Path("notes.txt")


def test_decode_failed_keeps_reason():
    cause = ValueError("truncated stream")
    err = DecodeFailedError("broken.png", cause)
    assert err.reason is cause
    assert str(err) == "decode failed for broken.png: truncated stream"


@pytest.mark.parametrize(
    ("err", "message"),
    [
        (ImageNotFoundError("a.jpg"), "file not found: a.jpg"),
        (UnsupportedFormatError("a.bmp"), "unsupported format for a.bmp"),
        (DecodeFailedError("a.png", "bad"), "decode failed for a.png: bad"),
    ],
)
def test_all_errors_share_base(err, message):
    with pytest.raises(ImagingError) as excinfo:
        raise err
    assert excinfo.value is err
    assert str(excinfo.value) == message