from __future__ import annotations

import json
import os
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any, Protocol

from skillpath.core.config import settings

ASSESSMENT_KEY = "ability_assessment"
HISTORY_KEY = "assessment_history"


class ProfileStore(Protocol):
    """Key-value store scoped to a single profile."""

    def read(self, key: str) -> Any | None: ...

    def write(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryProfileStore:
    def __init__(self, initial: dict[str, Any] | None = None):
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()
        for key, value in (initial or {}).items():
            self.write(key, value)

    def read(self, key: str) -> Any | None:
        with self._lock:
            raw = self._values.get(key)
        return json.loads(raw) if raw is not None else None

    def write(self, key: str, value: Any) -> None:
        # Stored as JSON text so callers never share mutable state with the store.
        encoded = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._values[key] = encoded

    def delete(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


_connections: dict[str, sqlite3.Connection] = {}
_conn_lock = threading.Lock()


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _get_connection(db_path: str) -> sqlite3.Connection:
    key = os.path.abspath(db_path)
    with _conn_lock:
        conn = _connections.get(key)
        if conn is not None:
            return conn

        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS profile_values (
                profile_id TEXT NOT NULL,
                key TEXT NOT NULL,
                value_json TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (profile_id, key)
            );
            """
        )
        _connections[key] = conn
        return conn


class SqliteProfileStore:
    """Profile values persisted as JSON rows in a shared SQLite database."""

    def __init__(self, profile_id: str, db_path: str | None = None):
        if not profile_id or not profile_id.strip():
            raise ValueError("profile_id is required")
        self.profile_id = profile_id.strip()
        self._db_path = db_path or settings.profile_db_path

    def read(self, key: str) -> Any | None:
        conn = _get_connection(self._db_path)
        with _conn_lock:
            row = conn.execute(
                "SELECT value_json FROM profile_values WHERE profile_id = ? AND key = ?",
                (self.profile_id, key),
            ).fetchone()
        if not row:
            return None
        return json.loads(row[0])

    def write(self, key: str, value: Any) -> None:
        conn = _get_connection(self._db_path)
        payload = json.dumps(value, ensure_ascii=False)
        with _conn_lock:
            conn.execute(
                """
                INSERT INTO profile_values (profile_id, key, value_json, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT (profile_id, key)
                DO UPDATE SET value_json = excluded.value_json, updated_at = excluded.updated_at
                """,
                (self.profile_id, key, payload, _utc_now()),
            )

    def delete(self, key: str) -> None:
        conn = _get_connection(self._db_path)
        with _conn_lock:
            conn.execute(
                "DELETE FROM profile_values WHERE profile_id = ? AND key = ?",
                (self.profile_id, key),
            )


def close_profile_store() -> None:
    with _conn_lock:
        for conn in _connections.values():
            conn.close()
        _connections.clear()
