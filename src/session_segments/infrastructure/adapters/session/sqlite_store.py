from __future__ import annotations

import json
import logging
import secrets
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential, wait_random

from session_segments.application.ports.session_store_port import SessionStatus, SessionStorePort
from session_segments.domain.session_state import SessionState
from session_segments.infrastructure.adapters.session.memory_store import DEFAULT_SESSION_NAME

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS session_payload (
  id TEXT PRIMARY KEY,
  payload TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
"""

# "database is locked" is transient under concurrent writers
_locked_retry = retry(
    reraise=True,
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.05, max=0.5) + wait_random(0, 0.05),
    retry=retry_if_exception_type(sqlite3.OperationalError),
)


class SQLiteSessionStore(SessionStorePort):
    """SQLite-backed session store. One row per session id, payload as JSON.

    Meant to be created per request. The save path is the database file;
    the schema is created on first use. Connections are opened per
    operation so the store can be used from any worker thread.
    """

    def __init__(self, db_path: str = ".sessions.sqlite", *, name: str = DEFAULT_SESSION_NAME) -> None:
        self._name = name
        self._path = Path(db_path)
        self._schema_ready = False
        self._session_id: str | None = None
        self._active = False

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self._path)) as conn:
            if not self._schema_ready:
                conn.execute("PRAGMA journal_mode=WAL;")
                conn.executescript(SCHEMA)
                conn.commit()
                self._schema_ready = True
            yield conn

    def status(self) -> SessionStatus:
        return SessionStatus.ACTIVE if self._active else SessionStatus.NONE

    def start(self, state: SessionState, session_id: str | None = None) -> bool:
        if self._active:
            return True
        try:
            payload = self.read(session_id) if session_id else None
        except sqlite3.Error as e:
            logger.warning("Session start failed: %s", e)
            return False
        if payload is None:
            session_id = secrets.token_urlsafe(24)
            payload = {}
        state.replace(payload)
        self._session_id = session_id
        self._active = True
        return True

    def destroy(self) -> bool:
        if not self._active or self._session_id is None:
            return False
        try:
            self.delete(self._session_id)
        except sqlite3.Error as e:
            logger.warning("Session destroy failed: %s", e)
            return False
        self._active = False
        return True

    def close_write(self, state: SessionState) -> None:
        if not self._active or self._session_id is None:
            return
        self._write(self._session_id, state.to_dict())
        self._active = False

    def unset_all(self, state: SessionState) -> None:
        state.clear()

    def get_name(self) -> str:
        return self._name

    def set_name(self, name: str) -> str:
        previous, self._name = self._name, name
        return previous

    def get_save_path(self) -> str:
        return str(self._path)

    def set_save_path(self, path: str) -> str:
        previous = str(self._path)
        self._path = Path(path)
        self._schema_ready = False
        return previous

    # Maintenance helpers (CLI)
    def ids(self) -> list[str]:
        with self._connect() as conn:
            cur = conn.execute("SELECT id FROM session_payload ORDER BY updated_at DESC")
            return [row[0] for row in cur.fetchall()]

    def read(self, session_id: str) -> dict[str, Any] | None:
        with self._connect() as conn:
            row = conn.execute("SELECT payload FROM session_payload WHERE id=?", (session_id,)).fetchone()
        if not row:
            return None
        try:
            payload = json.loads(row[0] or "{}")
        except ValueError:
            logger.warning("Discarding unreadable payload for session %s...", session_id[:8])
            return {}
        return payload if isinstance(payload, dict) else {}

    @_locked_retry
    def delete(self, session_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM session_payload WHERE id=?", (session_id,))
            conn.commit()
            return cur.rowcount > 0

    @_locked_retry
    def _write(self, session_id: str, payload: dict[str, Any]) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO session_payload (id, payload, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(id) DO UPDATE SET payload=excluded.payload, updated_at=excluded.updated_at",
                (session_id, json.dumps(payload), datetime.now(UTC).isoformat()),
            )
            conn.commit()
