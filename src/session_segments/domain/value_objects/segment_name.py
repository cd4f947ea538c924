from __future__ import annotations

from typing import Any

from session_segments.domain.errors import InvalidArgumentError


class SegmentName(str):
    """Value Object for a segment name (non-empty string)."""

    def __new__(cls, value: Any) -> "SegmentName":
        if not isinstance(value, str):
            raise InvalidArgumentError(
                f"Segment name must be as a string {type(value).__name__} given."
            )
        if not value:
            raise InvalidArgumentError("Segment name must not be empty.")
        return str.__new__(cls, value)
