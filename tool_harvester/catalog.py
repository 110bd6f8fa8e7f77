"""Catalog boundary used by the reconciler, plus two reference implementations."""

from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Protocol

from .engine.links import normalize_website_url
from .infra import SQLiteManager
from .records import CatalogEntry

_LIST_FIELDS = ("features", "tags")


class Catalog(Protocol):
    """The four operations the pipeline needs from persistent storage."""

    def lookup_by_unique_key(self, key: str) -> CatalogEntry | None:
        """Return the entry whose slug equals ``key``."""

    def lookup_by_external_url(self, normalized_url: str) -> CatalogEntry | None:
        """Return the entry whose normalised website URL equals ``normalized_url``."""

    def insert(self, fields: dict[str, Any]) -> CatalogEntry:
        """Store a new entry and return it with its generated id."""

    def update(self, entry_id: str, fields: dict[str, Any]) -> CatalogEntry | None:
        """Apply ``fields`` to an entry; ``None`` when the id is unknown."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCatalog:
    """Process-lifetime catalog, mainly for dry runs and tests."""

    def __init__(self, entries: list[CatalogEntry] | None = None) -> None:
        self._lock = Lock()
        self._entries: dict[str, CatalogEntry] = {entry.id: entry for entry in entries or []}

    def __len__(self) -> int:
        return len(self._entries)

    def all(self) -> list[CatalogEntry]:
        with self._lock:
            return [entry.model_copy(deep=True) for entry in self._entries.values()]

    def lookup_by_unique_key(self, key: str) -> CatalogEntry | None:
        with self._lock:
            for entry in self._entries.values():
                if entry.slug == key:
                    return entry.model_copy(deep=True)
        return None

    def lookup_by_external_url(self, normalized_url: str) -> CatalogEntry | None:
        with self._lock:
            for entry in self._entries.values():
                if normalize_website_url(entry.website_url) == normalized_url:
                    return entry.model_copy(deep=True)
        return None

    def insert(self, fields: dict[str, Any]) -> CatalogEntry:
        with self._lock:
            slug = fields.get("slug")
            if any(entry.slug == slug for entry in self._entries.values()):
                raise ValueError(f"Slug already exists: {slug}")
            entry = CatalogEntry(id=uuid.uuid4().hex, **{**fields, "last_updated": _now()})
            self._entries[entry.id] = entry
            return entry.model_copy(deep=True)

    def update(self, entry_id: str, fields: dict[str, Any]) -> CatalogEntry | None:
        with self._lock:
            current = self._entries.get(entry_id)
            if current is None:
                return None
            payload = {**current.model_dump(), **fields, "id": entry_id, "last_updated": _now()}
            updated = CatalogEntry.model_validate(payload)
            self._entries[entry_id] = updated
            return updated.model_copy(deep=True)


class SQLiteCatalog:
    """Local SQLite-backed catalog used by the command line host."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        self._conn = self.manager.connect(db_path)

    def __len__(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM tools").fetchone()[0]

    def all(self) -> list[CatalogEntry]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM tools ORDER BY slug").fetchall()
        return [self._to_entry(row) for row in rows]

    def lookup_by_unique_key(self, key: str) -> CatalogEntry | None:
        return self._fetch_one("SELECT * FROM tools WHERE slug = ?", (key,))

    def lookup_by_external_url(self, normalized_url: str) -> CatalogEntry | None:
        return self._fetch_one("SELECT * FROM tools WHERE normalized_url = ?", (normalized_url,))

    def get(self, entry_id: str) -> CatalogEntry | None:
        return self._fetch_one("SELECT * FROM tools WHERE id = ?", (entry_id,))

    def insert(self, fields: dict[str, Any]) -> CatalogEntry:
        entry = CatalogEntry(id=uuid.uuid4().hex, **{**fields, "last_updated": _now()})
        row = self._to_row(entry)
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        with self._lock:
            try:
                self._conn.execute(
                    f"INSERT INTO tools ({columns}) VALUES ({placeholders})", tuple(row.values())
                )
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise
        return entry

    def update(self, entry_id: str, fields: dict[str, Any]) -> CatalogEntry | None:
        current = self.get(entry_id)
        if current is None:
            return None
        payload = {**current.model_dump(), **fields, "id": entry_id, "last_updated": _now()}
        updated = CatalogEntry.model_validate(payload)
        row = self._to_row(updated)
        row.pop("id")
        assignments = ", ".join(f"{column} = ?" for column in row)
        with self._lock:
            try:
                self._conn.execute(
                    f"UPDATE tools SET {assignments} WHERE id = ?", (*row.values(), entry_id)
                )
                self._conn.commit()
            except sqlite3.Error:
                self._conn.rollback()
                raise
        return updated

    # ------------------------------------------------------------------
    def _fetch_one(self, query: str, params: tuple) -> CatalogEntry | None:
        with self._lock:
            row = self._conn.execute(query, params).fetchone()
        return self._to_entry(row) if row is not None else None

    @staticmethod
    def _to_row(entry: CatalogEntry) -> dict[str, Any]:
        row = entry.model_dump()
        for name in _LIST_FIELDS:
            row[name] = json.dumps(row[name], ensure_ascii=False)
        row["last_updated"] = entry.last_updated.isoformat()
        row["normalized_url"] = normalize_website_url(entry.website_url)
        return row

    @staticmethod
    def _to_entry(row: sqlite3.Row) -> CatalogEntry:
        data = dict(row)
        data.pop("normalized_url", None)
        for name in _LIST_FIELDS:
            data[name] = json.loads(data[name] or "[]")
        return CatalogEntry.model_validate(data)


__all__ = ["Catalog", "InMemoryCatalog", "SQLiteCatalog"]
