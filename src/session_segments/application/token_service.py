from __future__ import annotations

import hashlib
import secrets
from typing import Any

from session_segments.application.ports.random_source_port import RandomSourcePort
from session_segments.application.segment import Segment

TOKEN_VALUE_KEY = "value"


class TokenService:
    """CSRF token kept in a dedicated segment."""

    def __init__(self, segment: Segment, random_source: RandomSourcePort) -> None:
        self.segment = segment
        self.random = random_source

    @property
    def value(self) -> str | None:
        return self.segment.get(TOKEN_VALUE_KEY)

    def regenerate(self) -> str:
        """Store a fresh SHA-256 hex digest of random bytes and return it."""
        token = hashlib.sha256(self.random.generate()).hexdigest()
        self.segment[TOKEN_VALUE_KEY] = token
        return token

    def verify(self, token: Any) -> bool:
        stored = self.value
        if not isinstance(token, str) or not isinstance(stored, str):
            return False
        return secrets.compare_digest(stored.encode(), token.encode())
