from __future__ import annotations

from typing import Any

from session_segments.domain.errors import InvalidArgumentError


class SessionName(str):
    """Value Object for the session (cookie) name."""

    def __new__(cls, value: Any) -> "SessionName":
        if not isinstance(value, str):
            raise InvalidArgumentError(
                f"Session name must be as a string {type(value).__name__} given."
            )
        if not value or not value.replace("_", "").replace("-", "").isalnum():
            raise InvalidArgumentError(f"Session name {value!r} is not a valid identifier.")
        return str.__new__(cls, value)
