"""Time-ordered identifiers for catalog records."""

from __future__ import annotations

import os
import time
import uuid

_MASK_48 = (1 << 48) - 1
_MASK_62 = (1 << 62) - 1


def uuid7() -> uuid.UUID:
    """Return a new version 7 UUID.

    The first 48 bits hold the Unix time in milliseconds, so identifiers
    created in different milliseconds sort chronologically.
    """
    millis = time.time_ns() // 1_000_000
    rand = int.from_bytes(os.urandom(10), "big")
    rand_a = (rand >> 68) & 0xFFF
    rand_b = rand & _MASK_62
    value = (
        (millis & _MASK_48) << 80
        | 7 << 76
        | rand_a << 64
        | 0b10 << 62
        | rand_b
    )
    return uuid.UUID(int=value)


def uuid_version(value: uuid.UUID | str) -> int | None:
    """Return the RFC 4122 version of a UUID, or None for other variants."""
    if not isinstance(value, uuid.UUID):
        value = uuid.UUID(str(value))
    return value.version