from __future__ import annotations

import secrets
from typing import Any

from session_segments.application.ports.random_source_port import RandomSourcePort
from session_segments.domain.errors import InvalidArgumentError


class SecretsRandomSource(RandomSourcePort):
    """CSPRNG-backed random bytes (``secrets.token_bytes``)."""

    def __init__(self, num_bytes: Any = 32) -> None:
        if isinstance(num_bytes, bool) or not isinstance(num_bytes, int) or num_bytes <= 0:
            raise InvalidArgumentError("Bytes must be a positive integer.")
        self.num_bytes = num_bytes

    def generate(self) -> bytes:
        return secrets.token_bytes(self.num_bytes)
