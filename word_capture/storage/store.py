from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from word_capture.config import DB_PATH

UTC = timezone.utc


@dataclass
class StorageChange:
    key: str
    old_value: Any
    new_value: Any
    revision: int
    origin: str | None = None


Listener = Callable[[StorageChange], None]


class KeyValueStore:
    """String-keyed map of JSON values; every write notifies subscribers."""

    def __init__(self, db_path: Path = DB_PATH) -> None:
        self.db_path = db_path
        self._listeners: list[Listener] = []
        self._listeners_lock = threading.Lock()

    @contextmanager
    def connect(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def initialize(self) -> None:
        schema_path = Path(__file__).with_name("schema.sql")
        with self.connect() as conn:
            conn.executescript(schema_path.read_text(encoding="utf-8"))

    def get(self, key: str, default: Any = None) -> Any:
        with self.connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            return default
        return json.loads(row["value"])

    def revision(self, key: str) -> int:
        with self.connect() as conn:
            row = conn.execute("SELECT revision FROM kv WHERE key = ?", (key,)).fetchone()
        return int(row["revision"]) if row else 0

    def set(self, key: str, value: Any, *, origin: str | None = None) -> int:
        encoded = json.dumps(value, ensure_ascii=False)
        with self.connect() as conn:
            old_row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            conn.execute("UPDATE kv_revision SET revision = revision + 1 WHERE id = 1")
            revision = int(conn.execute("SELECT revision FROM kv_revision WHERE id = 1").fetchone()["revision"])
            conn.execute(
                """
                INSERT INTO kv (key, value, revision, origin, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                  value = excluded.value,
                  revision = excluded.revision,
                  origin = excluded.origin,
                  updated_at = excluded.updated_at
                """,
                (key, encoded, revision, origin, datetime.now(UTC).isoformat()),
            )
        old_value = json.loads(old_row["value"]) if old_row else None
        self._notify(StorageChange(key=key, old_value=old_value, new_value=value, revision=revision, origin=origin))
        return revision

    def delete(self, key: str, *, origin: str | None = None) -> None:
        with self.connect() as conn:
            old_row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            if old_row is None:
                return
            conn.execute("UPDATE kv_revision SET revision = revision + 1 WHERE id = 1")
            revision = int(conn.execute("SELECT revision FROM kv_revision WHERE id = 1").fetchone()["revision"])
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self._notify(
            StorageChange(
                key=key,
                old_value=json.loads(old_row["value"]),
                new_value=None,
                revision=revision,
                origin=origin,
            )
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._listeners_lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: StorageChange) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception as exc:
                logger.warning("Storage listener failed", key=change.key, error=str(exc))
