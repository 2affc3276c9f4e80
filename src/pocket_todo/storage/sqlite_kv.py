# src/pocket_todo/storage/sqlite_kv.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from ..core.errors import PersistenceReadError, PersistenceWriteError

logger = logging.getLogger(__name__)


class SqliteKVPersistence:
    """
    SQLite key-value store.

    Each key holds one JSON-encoded snapshot. A save is a single
    INSERT .. ON CONFLICT statement inside a transaction, so readers never
    see a half-written snapshot.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteKVPersistence ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- Persistence port ----

    def load(self, key: str) -> Any | None:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceReadError(f"Cannot read key={key} from {self._db_path}: {e}") from e

        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except (ValueError, RecursionError) as e:
            raise PersistenceReadError(f"Corrupt value for key={key}: {e}") from e

    def save(self, key: str, snapshot: list[dict[str, Any]]) -> None:
        try:
            value = json.dumps(snapshot, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceWriteError(f"Snapshot for key={key} is not JSON-encodable: {e}") from e

        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO kv(key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceWriteError(f"Cannot write key={key} to {self._db_path}: {e}") from e
