from __future__ import annotations

from typing import Any, Protocol


class CookieDeleter(Protocol):
    """Called with the session name and cookie params after a successful destroy."""

    def __call__(self, name: str, params: dict[str, Any]) -> None: ...
