import time
import uuid

import pytest

from chalkraw.core.ids import uuid7, uuid_version


def test_uuid7_has_version_seven_and_rfc_variant():
    value = uuid7()
    assert uuid_version(value) == 7
    assert value.variant == uuid.RFC_4122


def test_uuid7_embeds_current_millisecond_timestamp():
    before = time.time_ns() // 1_000_000
    value = uuid7()
    after = time.time_ns() // 1_000_000
    assert before <= value.int >> 80 <= after


def test_uuid7_sorts_chronologically():
    first = uuid7()
    time.sleep(0.005)
    second = uuid7()
    assert first < second


def test_uuid7_values_are_unique():
    values = {uuid7() for _ in range(1000)}
    assert len(values) == 1000


def test_uuid_version_accepts_strings_and_other_versions():
    v4 = uuid.uuid4()
    assert uuid_version(v4) == 4
    v7 = uuid7()
    assert uuid_version(str(v7)) == uuid_version(v7)


def test_uuid_version_rejects_garbage():
    with pytest.raises(ValueError):
        uuid_version("not-a-uuid")