from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from session_segments.domain.errors import InvalidArgumentError


@dataclass(frozen=True)
class CookieParams:
    lifetime: int = 0
    path: str = "/"
    domain: str = ""
    secure: bool = False
    httponly: bool = False

    def merge(self, overrides: dict[str, Any]) -> "CookieParams":
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidArgumentError(f"Unknown cookie params: {', '.join(sorted(unknown))}")
        return replace(self, **overrides)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)
