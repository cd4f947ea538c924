from __future__ import annotations

from typing import Protocol


class RandomSourcePort(Protocol):
    """Source of random bytes used to seed CSRF tokens."""

    def generate(self) -> bytes: ...
