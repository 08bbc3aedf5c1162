"""SQLite-backed key-value storage for the session blob and the library cache."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class SQLiteStore:
    """Key-value store scoped to a namespace inside a shared table.

    Every ``put`` is one upsert in its own transaction, so a reader sees either
    the previous value or the new one, never a partial record.
    """

    def __init__(self, db_path: str, namespace: str = "default") -> None:
        self._db_path = Path(db_path)
        self._namespace = namespace
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    @property
    def namespace(self) -> str:
        return self._namespace

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_records (
                    namespace TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value BLOB NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (namespace, key)
                )
                """
            )

    def put(self, key: str, value: bytes) -> None:
        if not key:
            raise ValueError("Key must be a non-empty string")

        updated_at = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_records (namespace, key, value, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(namespace, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (self._namespace, key, sqlite3.Binary(value), updated_at),
            )

    def get(self, key: str) -> Optional[bytes]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_records WHERE namespace = ? AND key = ?",
                (self._namespace, key),
            ).fetchone()
        if not row:
            return None
        return bytes(row["value"])

    def clear(self) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM kv_records WHERE namespace = ?",
                (self._namespace,),
            )


__all__ = ["SQLiteStore"]
