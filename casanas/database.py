"""SQLite storage shared by the record services."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from enum import Enum
from os import PathLike
from typing import Any, Iterable, Sequence

_SCHEMA = """
CREATE TABLE IF NOT EXISTS o_connections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    updated INTEGER NOT NULL DEFAULT 0,
    created INTEGER NOT NULL DEFAULT 0,
    username TEXT NOT NULL DEFAULT '',
    password TEXT NOT NULL DEFAULT '',
    host TEXT NOT NULL DEFAULT '',
    port TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT '',
    directories TEXT NOT NULL DEFAULT '',
    mount_point TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS peer_drive_db_models (
    id TEXT PRIMARY KEY,
    updated INTEGER NOT NULL DEFAULT 0,
    created INTEGER NOT NULL DEFAULT 0,
    user_agent TEXT NOT NULL DEFAULT '',
    display_name TEXT NOT NULL DEFAULT '',
    device_name TEXT NOT NULL DEFAULT '',
    model TEXT NOT NULL DEFAULT '',
    ip TEXT NOT NULL DEFAULT '',
    os TEXT NOT NULL DEFAULT '',
    browser TEXT NOT NULL DEFAULT ''
);
CREATE TABLE IF NOT EXISTS o_notify (
    custom_id TEXT PRIMARY KEY,
    state INTEGER NOT NULL DEFAULT 0,
    message TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT '',
    id TEXT NOT NULL DEFAULT '',
    type INTEGER NOT NULL DEFAULT 0,
    icon TEXT NOT NULL DEFAULT '',
    name TEXT NOT NULL DEFAULT '',
    notify_class INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE IF NOT EXISTS o_rely (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    custom_id TEXT NOT NULL DEFAULT '',
    container_custom_id TEXT NOT NULL DEFAULT '',
    container_id TEXT NOT NULL DEFAULT '',
    type INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS o_shares (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    anonymous INTEGER NOT NULL DEFAULT 0,
    path TEXT NOT NULL DEFAULT '',
    name TEXT NOT NULL DEFAULT '',
    updated INTEGER NOT NULL DEFAULT 0,
    created INTEGER NOT NULL DEFAULT 0
);
"""


def _adapt(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Enum):
        return value.value
    return value


def _adapt_params(params: Sequence[Any] | dict[str, Any]) -> Sequence[Any] | dict[str, Any]:
    if isinstance(params, dict):
        return {key: _adapt(value) for key, value in params.items()}
    return tuple(_adapt(value) for value in params)


class Database:
    """A thread-safe SQLite connection with the service schema in place."""

    def __init__(self, path: str | PathLike[str] = ":memory:") -> None:
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._lock:
            self._conn.executescript(_SCHEMA)
            self._conn.commit()

    def execute(
        self, sql: str, params: Sequence[Any] | dict[str, Any] = ()
    ) -> sqlite3.Cursor:
        """Run a statement, commit it and return its cursor."""
        with self._lock:
            cursor = self._conn.execute(sql, _adapt_params(params))
            self._conn.commit()
            return cursor

    def query(
        self, sql: str, params: Sequence[Any] | dict[str, Any] = ()
    ) -> list[dict[str, Any]]:
        """Run a query and return its rows as dictionaries."""
        with self._lock:
            rows: Iterable[sqlite3.Row] = self._conn.execute(
                sql, _adapt_params(params)
            ).fetchall()
            return [dict(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()