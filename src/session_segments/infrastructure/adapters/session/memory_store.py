from __future__ import annotations

import json
import secrets

from session_segments.application.ports.session_store_port import SessionStatus, SessionStorePort
from session_segments.domain.session_state import SessionState

DEFAULT_SESSION_NAME = "SEGSESSID"


class InMemorySessionStore(SessionStorePort):
    """Simple in-memory store for development and tests. Not persistent.

    Payloads are kept as JSON text in ``backend`` so every request goes
    through a real serialization round trip. Share one ``backend`` dict
    between store instances to simulate consecutive requests.
    """

    def __init__(
        self,
        backend: dict[str, str] | None = None,
        *,
        name: str = DEFAULT_SESSION_NAME,
        enabled: bool = True,
    ) -> None:
        self.backend: dict[str, str] = backend if backend is not None else {}
        self._name = name
        self._save_path = ""
        self._enabled = enabled
        self._session_id: str | None = None
        self._active = False
        self.start_calls = 0

    @property
    def session_id(self) -> str | None:
        return self._session_id

    def status(self) -> SessionStatus:
        if not self._enabled:
            return SessionStatus.DISABLED
        return SessionStatus.ACTIVE if self._active else SessionStatus.NONE

    def start(self, state: SessionState, session_id: str | None = None) -> bool:
        self.start_calls += 1
        if not self._enabled:
            return False
        if self._active:
            return True
        if session_id and session_id in self.backend:
            state.replace(json.loads(self.backend[session_id]))
        else:
            session_id = secrets.token_urlsafe(24)
            state.replace({})
        self._session_id = session_id
        self._active = True
        return True

    def destroy(self) -> bool:
        if not self._active or self._session_id is None:
            return False
        self.backend.pop(self._session_id, None)
        self._active = False
        return True

    def close_write(self, state: SessionState) -> None:
        if not self._active or self._session_id is None:
            return
        self.backend[self._session_id] = json.dumps(state.to_dict())
        self._active = False

    def unset_all(self, state: SessionState) -> None:
        state.clear()

    def get_name(self) -> str:
        return self._name

    def set_name(self, name: str) -> str:
        previous, self._name = self._name, name
        return previous

    def get_save_path(self) -> str:
        return self._save_path

    def set_save_path(self, path: str) -> str:
        previous, self._save_path = self._save_path, path
        return previous
