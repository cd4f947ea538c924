from __future__ import annotations

from enum import IntEnum
from typing import Protocol

from session_segments.domain.session_state import SessionState


class SessionStatus(IntEnum):
    DISABLED = 0
    NONE = 1
    ACTIVE = 2


class SessionStorePort(Protocol):
    """Host session mechanism: persistence and lifecycle of one client session."""

    @property
    def session_id(self) -> str | None: ...

    def status(self) -> SessionStatus:
        """DISABLED when the backend is unavailable, ACTIVE once started."""
        ...

    def start(self, state: SessionState, session_id: str | None = None) -> bool:
        """
        Load the payload for ``session_id`` into ``state`` and become ACTIVE.

        An absent or unknown id starts a brand-new session with a fresh id.
        Returns False when the session could not be started.
        """
        ...

    def destroy(self) -> bool:
        """Drop the persisted payload of the active session."""
        ...

    def close_write(self, state: SessionState) -> None:
        """Persist ``state`` and end the session for this request."""
        ...

    def unset_all(self, state: SessionState) -> None: ...

    def get_name(self) -> str: ...

    def set_name(self, name: str) -> str:
        """Set the session name, returning the previous one."""
        ...

    def get_save_path(self) -> str: ...

    def set_save_path(self, path: str) -> str: ...
