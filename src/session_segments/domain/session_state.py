from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any


class SessionState(MutableMapping[str, Any]):
    """Request-scoped session-keyed data, borrowed by the controller and segments.

    ``flash_rotated`` is transient: it is never persisted and is reset
    whenever the payload is replaced by a store load.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self.flash_rotated = False

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        self._data.clear()

    def replace(self, data: Mapping[str, Any]) -> None:
        self._data = dict(data)
        self.flash_rotated = False

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"SessionState(keys={sorted(self._data)!r})"
