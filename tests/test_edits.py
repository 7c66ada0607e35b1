import sqlite3
import uuid
from contextlib import closing

import pytest

from chalkraw.catalog.database import EDITS_TABLE
from chalkraw.catalog.edits import EditsMixin
from chalkraw.catalog.errors import SerializationError
from chalkraw.core.edit import Crop, EditState


@pytest.fixture
def cat(tmp_path):
    catalog = EditsMixin.open_or_create(tmp_path / "t.chalkraw", "t")
    yield catalog
    catalog.close()


def test_missing_edit_returns_default(cat):
    edit = cat.get_edit(uuid.uuid4())
    assert edit.is_identity()
    assert edit == EditState()


def test_upsert_then_get_round_trips_exposure(cat):
    photo_id = uuid.uuid4()
    edit = EditState()
    edit.tone.exposure = 1.25
    cat.upsert_edit(photo_id, edit)
    assert cat.get_edit(photo_id).tone.exposure == 1.25


def test_upsert_overwrites_previous_edit(cat):
    photo_id = uuid.uuid4()
    first = EditState()
    first.tone.exposure = 1.0
    cat.upsert_edit(photo_id, first)
    second = EditState()
    second.crop = Crop(0.1, 0.1, 0.5, 0.5, 0.0)
    cat.upsert_edit(photo_id, second)
    assert cat.get_edit(photo_id) == second


def test_edits_are_per_photo(cat):
    edited, untouched = uuid.uuid4(), uuid.uuid4()
    edit = EditState()
    edit.presence.clarity = 100.0
    cat.upsert_edit(edited, edit)
    assert cat.get_edit(untouched).is_identity()
    assert not cat.get_edit(edited).is_identity()


def test_edit_survives_reopen(tmp_path):
    path = tmp_path / "t.chalkraw"
    photo_id = uuid.uuid4()
    edit = EditState()
    edit.tone.exposure = 1.7
    with EditsMixin.open_or_create(path, "t") as cat:
        cat.upsert_edit(photo_id, edit)
    with EditsMixin.open_or_create(path, "ignored") as cat:
        back = cat.get_edit(photo_id)
    assert back.tone.exposure == 1.7
    assert back.white_balance.temp_kelvin == 5500.0


def test_corrupt_edit_raises_serialization_error(tmp_path):
    path = tmp_path / "t.chalkraw"
    photo_id = uuid.uuid4()
    EditsMixin.open_or_create(path, "t").close()
    with closing(sqlite3.connect(path)) as conn, conn:
        conn.execute(
            f"INSERT INTO {EDITS_TABLE} (key, value) VALUES (?, ?)",
            (photo_id.bytes, b"not json"),
        )
    with EditsMixin.open_or_create(path, "t") as cat:
        with pytest.raises(SerializationError):
            cat.get_edit(photo_id)