# gradewatch/storage/sqlite.py
from __future__ import annotations

import json
import pathlib
import sqlite3
from typing import Any, Optional

from .base import DocumentStore
from . import register_store, StoreError

SCHEMA = """
    CREATE TABLE IF NOT EXISTS documents (
        key   TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
"""


@register_store("sqlite")
class SqliteStore(DocumentStore):
    """Local single-file store; handy offline and in tests."""

    def __init__(self, db_path: pathlib.Path) -> None:
        self.db_path = pathlib.Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(SCHEMA)

    @classmethod
    def from_settings(cls, settings, request=None) -> "SqliteStore":
        return cls(settings.db_path)

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Database error: {e}") from e

    async def _read(self, key: str) -> Optional[Any]:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM documents WHERE key = ?", (key,)).fetchone()
        return json.loads(row[0]) if row else None

    async def _write(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO documents (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value, ensure_ascii=False)),
            )
            conn.commit()

    async def _remove(self, key: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM documents WHERE key = ?", (key,))
            conn.commit()
