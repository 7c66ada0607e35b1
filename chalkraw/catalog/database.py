"""Catalog storage: an SQLite file with one key/value table per record kind."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from os import PathLike
from pathlib import Path
from typing import Any, TypeVar

from chalkraw.catalog.errors import (
    CatalogError,
    RecordNotFoundError,
    SchemaVersionError,
    SerializationError,
)

SCHEMA_VERSION = 1
APP_VERSION = "0.25.5"

PHOTOS_TABLE = "photos"
EDITS_TABLE = "edits"
META_TABLE = "meta"
PRESETS_TABLE = "presets"
WATERMARKS_TABLE = "watermarks"
COLLECTIONS_TABLE = "collections"
COLLECTION_PHOTOS_TABLE = "collection_photos"

META_KEY = "meta"

_RECORD_TABLES = (
    PHOTOS_TABLE,
    EDITS_TABLE,
    PRESETS_TABLE,
    WATERMARKS_TABLE,
    COLLECTIONS_TABLE,
    COLLECTION_PHOTOS_TABLE,
)
_ALL_TABLES = frozenset((*_RECORD_TABLES, META_TABLE))

T = TypeVar("T")


@dataclass
class CatalogMeta:
    name: str
    created_at: datetime
    app_version: str
    schema_version: int


def _meta_to_dict(meta: CatalogMeta) -> dict[str, Any]:
    return {
        "name": meta.name,
        "created_at": meta.created_at.isoformat(),
        "app_version": meta.app_version,
        "schema_version": meta.schema_version,
    }


def _meta_from_dict(data: Any) -> CatalogMeta:
    if not isinstance(data, Mapping):
        raise ValueError("catalog meta must be a mapping")
    name, created_at, app_version = (data["name"], data["created_at"], data["app_version"])
    version = data["schema_version"]
    if not all(isinstance(value, str) for value in (name, created_at, app_version)):
        raise ValueError("catalog meta text fields must be strings")
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError("catalog meta schema_version must be an integer")
    stamp = datetime.fromisoformat(created_at)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return CatalogMeta(
        name=name,
        created_at=stamp.astimezone(timezone.utc),
        app_version=app_version,
        schema_version=version,
    )


def _checked(table: str) -> str:
    if table not in _ALL_TABLES:
        raise CatalogError(f"unknown table {table!r}")
    return table


class _Tables:
    """Key/value access to the catalog tables inside one transaction."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def create(self, table: str, key_type: str) -> None:
        self._connection.execute(
            f"CREATE TABLE IF NOT EXISTS {_checked(table)} "
            f"(key {key_type} PRIMARY KEY, value BLOB NOT NULL)"
        )

    def get(self, table: str, key: bytes | str) -> bytes | None:
        row = self._connection.execute(
            f"SELECT value FROM {_checked(table)} WHERE key = ?", (key,)
        ).fetchone()
        return None if row is None else bytes(row[0])

    def put(self, table: str, key: bytes | str, value: bytes) -> None:
        self._connection.execute(
            f"INSERT OR REPLACE INTO {_checked(table)} (key, value) VALUES (?, ?)",
            (key, value),
        )

    def delete(self, table: str, key: bytes | str) -> None:
        self._connection.execute(f"DELETE FROM {_checked(table)} WHERE key = ?", (key,))

    def items(self, table: str) -> list[tuple[Any, bytes]]:
        rows = self._connection.execute(
            f"SELECT key, value FROM {_checked(table)} ORDER BY key"
        ).fetchall()
        return [(key, bytes(value)) for key, value in rows]

    def keys(self, table: str) -> list[Any]:
        rows = self._connection.execute(
            f"SELECT key FROM {_checked(table)} ORDER BY key"
        ).fetchall()
        return [key for (key,) in rows]


class CatalogDatabase:
    """An open catalog file. Use :meth:`open_or_create` to obtain one."""

    def __init__(self, connection: sqlite3.Connection, path: Path) -> None:
        self._connection = connection
        self._path = path

    @classmethod
    def open_or_create(cls, path: str | PathLike[str], name: str):
        """Open an existing catalog or create a new one named ``name``."""
        path = Path(path)
        existed = path.exists()
        try:
            connection = sqlite3.connect(path)
        except sqlite3.Error as exc:
            raise CatalogError(f"storage error: {exc}") from exc
        catalog = cls(connection, path)
        try:
            catalog._initialise(name, existed)
            meta = catalog.meta()
        except BaseException:
            connection.close()
            raise
        if meta.schema_version != SCHEMA_VERSION:
            connection.close()
            raise SchemaVersionError(meta.schema_version, SCHEMA_VERSION)
        return catalog

    def path(self) -> Path:
        return self._path

    def meta(self) -> CatalogMeta:
        with self._transaction() as tables:
            raw = tables.get(META_TABLE, META_KEY)
        if raw is None:
            raise RecordNotFoundError(self._path)
        return self._decode(raw, _meta_from_dict)

    def close(self) -> None:
        self._connection.close()

    def __enter__(self):
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ── storage helpers shared by the record mixins ─────────────────────────

    def _initialise(self, name: str, existed: bool) -> None:
        with self._transaction() as tables:
            for table in _RECORD_TABLES:
                tables.create(table, "BLOB")
            tables.create(META_TABLE, "TEXT")
            # An existing file without a meta row gets a fresh one.
            if not existed or tables.get(META_TABLE, META_KEY) is None:
                meta = CatalogMeta(
                    name=name,
                    created_at=datetime.now(timezone.utc),
                    app_version=APP_VERSION,
                    schema_version=SCHEMA_VERSION,
                )
                tables.put(META_TABLE, META_KEY, self._encode(_meta_to_dict(meta)))

    @contextmanager
    def _transaction(self) -> Iterator[_Tables]:
        """Run the body in one transaction, committed on success."""
        try:
            with self._connection:
                yield _Tables(self._connection)
        except sqlite3.Error as exc:
            raise CatalogError(f"storage error: {exc}") from exc

    @staticmethod
    def _encode(record: Mapping[str, Any]) -> bytes:
        return json.dumps(record, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @staticmethod
    def _decode(raw: bytes, factory: Callable[[Any], T]) -> T:
        try:
            return factory(json.loads(raw.decode("utf-8")))
        except (ValueError, TypeError, KeyError) as exc:
            raise SerializationError(str(exc)) from exc

    def _store(self, table: str, key: bytes, record: Mapping[str, Any]) -> None:
        encoded = self._encode(record)
        with self._transaction() as tables:
            tables.put(table, key, encoded)

    def _load(self, table: str, key: bytes, factory: Callable[[Any], T]) -> T | None:
        with self._transaction() as tables:
            raw = tables.get(table, key)
        return None if raw is None else self._decode(raw, factory)

    def _load_all(self, table: str, factory: Callable[[Any], T]) -> list[T]:
        with self._transaction() as tables:
            rows = tables.items(table)
        return [self._decode(raw, factory) for _, raw in rows]

    def _remove(self, table: str, key: bytes) -> None:
        with self._transaction() as tables:
            tables.delete(table, key)