from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from session_segments.domain.errors import InvalidArgumentError
from session_segments.domain.flash import RESERVED_KEYS, FlashGeneration, FlashTag, ensure_generation
from session_segments.domain.value_objects.segment_name import SegmentName

if TYPE_CHECKING:
    from session_segments.application.session_controller import SessionController


class Segment:
    """Named namespace inside the session data, with its own flash buckets.

    Reads (``get``, ``in``, ``remove``, ``clear``) only resume an existing
    session; writes and every flash operation resume or start one.
    """

    def __init__(self, session: "SessionController", name: Any) -> None:
        name = SegmentName(name)
        if name in RESERVED_KEYS:
            raise InvalidArgumentError(f"Segment name {name!r} is reserved.")
        self.session = session
        self.name = name

    @property
    def _state(self):
        return self.session.state

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _resume_session(self) -> bool:
        if self.session.is_active() or self.session.resume():
            self._load()
            return True
        return False

    def _resume_or_start_session(self) -> None:
        if not self._resume_session():
            self.session.start()
            self._load()

    def _load(self) -> None:
        if not isinstance(self._state.get(self.name), dict):
            self._state[self.name] = {}
        for tag in FlashTag:
            ensure_generation(self._state, tag).ensure(self.name)

    def _bucket(self) -> Mapping[str, Any]:
        bucket = self._state.get(self.name)
        return bucket if isinstance(bucket, Mapping) else {}

    def _flash(self, tag: FlashTag) -> FlashGeneration:
        self._resume_or_start_session()
        return ensure_generation(self._state, tag)

    # ------------------------------------------------------------------
    # Plain values
    # ------------------------------------------------------------------
    def get(self, key: str, default: Any = None) -> Any:
        self._resume_session()
        return self._bucket().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._resume_or_start_session()
        self._state[self.name][key] = value

    def remove(self, key: str) -> None:
        if self._resume_session():
            self._state[self.name].pop(key, None)

    def clear(self) -> None:
        if self._resume_session():
            self._state[self.name] = {}

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        if not self._resume_session():
            return False
        bucket = self._bucket()
        return bool(bucket) and key in bucket

    # ------------------------------------------------------------------
    # Flash values
    # ------------------------------------------------------------------
    def flash(self, key: str, value: Any) -> None:
        """Set a value visible only on the next request."""
        self._flash(FlashTag.NEXT).replace(self.name, key, value)

    def flash_both(self, key: str, value: Any) -> None:
        """Set a value visible now and on the next request."""
        self._flash(FlashTag.NEXT).replace(self.name, key, value)
        ensure_generation(self._state, FlashTag.CURRENT).replace(self.name, key, value)

    def flash_get(self, key: str, default: Any = None) -> Any:
        return self._flash(FlashTag.CURRENT).get(self.name, key, default)

    def flash_next_get(self, key: str, default: Any = None) -> Any:
        return self._flash(FlashTag.NEXT).get(self.name, key, default)

    def flash_previous_get(self, key: str, default: Any = None) -> Any:
        return self._flash(FlashTag.PREV).get(self.name, key, default)

    def flash_clear(self) -> None:
        self._flash(FlashTag.NEXT).replace_all(self.name, {})

    def flash_clear_current(self) -> None:
        self._flash(FlashTag.CURRENT).replace_all(self.name, {})

    def flash_clear_previous(self) -> None:
        self._flash(FlashTag.PREV).replace_all(self.name, {})

    def flash_clear_both(self) -> None:
        self.flash_clear()
        self.flash_clear_current()

    def flash_keep(self) -> None:
        """Carry the current flash values over to the next request.

        Values already flashed for the next request are left untouched.
        """
        next_gen = self._flash(FlashTag.NEXT)
        current = ensure_generation(self._state, FlashTag.CURRENT).all(self.name)
        next_gen.replace_all(self.name, {**current, **next_gen.all(self.name)})

    def __repr__(self) -> str:
        return f"Segment(name={self.name!r})"
