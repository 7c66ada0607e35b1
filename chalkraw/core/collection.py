"""Named collections of photos."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from chalkraw.core.ids import uuid7

_UNTITLED = "Untitled Collection"


def normalise_collection_name(name: str) -> str:
    """Trim whitespace; a blank name becomes the untitled placeholder."""
    trimmed = name.strip()
    return trimmed or _UNTITLED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Collection:
    name: str
    id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        self.name = normalise_collection_name(self.name)

    def rename(self, name: str) -> None:
        self.name = normalise_collection_name(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self.name,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Collection:
        if not isinstance(data, Mapping):
            raise ValueError(f"Collection: expected a mapping, got {type(data).__name__}")
        values = {}
        for key in ("id", "name", "created_at"):
            try:
                value = data[key]
            except KeyError:
                raise ValueError(f"Collection: missing field {key!r}") from None
            if not isinstance(value, str):
                raise ValueError(f"Collection: {key} must be a string")
            values[key] = value
        created_at = datetime.fromisoformat(values["created_at"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            name=values["name"],
            id=UUID(values["id"]),
            created_at=created_at.astimezone(timezone.utc),
        )