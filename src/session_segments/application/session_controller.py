from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from session_segments.application.ports.cookie_deleter_port import CookieDeleter
from session_segments.application.ports.session_store_port import SessionStatus, SessionStorePort
from session_segments.domain.cookie_params import CookieParams
from session_segments.domain.errors import InvalidArgumentError
from session_segments.domain.flash import FLASH_CURRENT, FLASH_NEXT, FLASH_PREV, FlashGeneration, FlashTag, salvage
from session_segments.domain.session_state import SessionState
from session_segments.domain.value_objects.session_name import SessionName

if TYPE_CHECKING:
    from session_segments.application.segment import Segment
    from session_segments.application.factories import SegmentFactory

logger = logging.getLogger(__name__)


class SessionController:
    """Owns the session lifecycle for one request and rotates flash data once.

    One controller is meant to live exactly as long as one request/response
    cycle. Flash generations are shifted Next -> Current -> Prev the first
    time the store is seen active (start, resume, or an external start
    picked up by ``is_active``).
    """

    def __init__(
        self,
        store: SessionStorePort,
        state: SessionState | None = None,
        *,
        cookies: Mapping[str, str] | None = None,
        delete_cookie: CookieDeleter | None = None,
        cookie_params: CookieParams | None = None,
        segment_factory: "SegmentFactory | None" = None,
    ) -> None:
        self.store = store
        self.state = state if state is not None else SessionState()
        self.cookies = dict(cookies or {})
        self.cookie_params = cookie_params or CookieParams()
        self.expired_cookies: list[tuple[str, dict[str, Any]]] = []
        self.flash_moved = False
        self.rotation_count = 0
        self._delete_cookie: CookieDeleter = self._record_expired_cookie
        self.set_delete_cookie(delete_cookie)
        if segment_factory is None:
            from session_segments.application.factories import SegmentFactory

            segment_factory = SegmentFactory()
        self.segment_factory = segment_factory

    # ------------------------------------------------------------------
    # Status and lifecycle
    # ------------------------------------------------------------------
    def status(self) -> SessionStatus:
        return self.store.status()

    def is_active(self) -> bool:
        active = self.status() == SessionStatus.ACTIVE
        # the session may have been started outside this controller
        if active and not self.flash_moved:
            self.rotate_flash()
        return active

    def start(self) -> bool:
        started = self.store.start(self.state, self.cookies.get(self.get_name()))
        if started:
            logger.debug("Session %s started", _short(self.store.session_id))
            if not self.flash_moved:
                self.rotate_flash()
        else:
            logger.warning("Unable to start session %r", self.get_name())
        return started

    def resume(self) -> bool:
        if self.is_active():
            return True
        if self.is_resumable():
            return self.start()
        return False

    def is_resumable(self) -> bool:
        return self.get_name() in self.cookies

    def clear(self) -> None:
        """Unset every variable of every segment."""
        self.store.unset_all(self.state)

    def close(self) -> None:
        """Write the session data and end the session."""
        self.store.close_write(self.state)

    def destroy(self) -> bool:
        if not self.is_active():
            self.start()

        name = self.get_name()
        params = self.cookie_params.as_dict()
        session_id = self.store.session_id
        self.clear()

        destroyed = self.store.destroy()
        if destroyed:
            logger.debug("Session %s destroyed", _short(session_id))
            self._delete_cookie(name, params)
        else:
            logger.warning("Unable to destroy session %s", _short(session_id))
        return destroyed

    # ------------------------------------------------------------------
    # Flash rotation
    # ------------------------------------------------------------------
    def rotate_flash(self) -> bool:
        """Shift the flash generations, at most once per request.

        Returns True when a rotation actually happened.
        """
        if self.flash_moved or self.state.flash_rotated:
            self.flash_moved = True
            return False

        next_data = self._generation_data(FLASH_NEXT, FlashTag.NEXT)
        current_data = self._generation_data(FLASH_CURRENT, FlashTag.CURRENT)

        self.state[FLASH_PREV] = FlashGeneration(FlashTag.PREV, current_data).payload
        self.state[FLASH_CURRENT] = FlashGeneration(FlashTag.CURRENT, next_data).payload
        self.state[FLASH_NEXT] = FlashGeneration(FlashTag.NEXT).payload

        self.flash_moved = True
        self.state.flash_rotated = True
        self.rotation_count += 1
        logger.debug("Flash rotated for session %s", _short(self.store.session_id))
        return True

    def _generation_data(self, key: str, tag: FlashTag) -> dict[str, Any]:
        value = self.state.get(key)
        gen = FlashGeneration.wrap(value, tag)
        if gen is not None:
            return gen.snapshot()
        if value is not None:
            logger.debug("Salvaging mis-tagged flash generation under %s", key)
        return salvage(value)

    # ------------------------------------------------------------------
    # Name, save path, cookies
    # ------------------------------------------------------------------
    def get_name(self) -> str:
        return self.store.get_name()

    def set_name(self, name: Any) -> str:
        return self.store.set_name(SessionName(name))

    def get_save_path(self) -> str:
        return self.store.get_save_path()

    def set_save_path(self, path: Any) -> str:
        if not isinstance(path, str):
            raise InvalidArgumentError(
                f"Session save path must be as a string {type(path).__name__} given."
            )
        return self.store.set_save_path(path)

    def get_cookie_params(self) -> dict[str, Any]:
        return self.cookie_params.as_dict()

    def set_cookie_params(self, **params: Any) -> None:
        self.cookie_params = self.cookie_params.merge(params)

    def set_delete_cookie(self, delete_cookie: CookieDeleter | None) -> None:
        """Set the callable invoked when deleting the session cookie.

        Without one, deletions are recorded in ``expired_cookies`` for the
        host integration to emit as expired cookies.
        """
        if delete_cookie is not None and not callable(delete_cookie):
            raise InvalidArgumentError("Delete Cookie instance must be callable")
        self._delete_cookie = delete_cookie or self._record_expired_cookie

    def _record_expired_cookie(self, name: str, params: dict[str, Any]) -> None:
        merged = {**self.cookie_params.as_dict(), **params}
        self.expired_cookies.append((name, merged))

    # ------------------------------------------------------------------
    # Segments
    # ------------------------------------------------------------------
    def get_segment(self, name: str) -> "Segment":
        """Return a new view over the named segment.

        Segments with the same name are different objects sharing the same
        underlying state.
        """
        return self.segment_factory.instance(self, name)


def _short(session_id: str | None) -> str:
    return f"{session_id[:8]}..." if session_id else "<none>"
