from __future__ import annotations

import copy
from collections.abc import Mapping, MutableMapping
from enum import Enum
from typing import Any


class FlashTag(str, Enum):
    PREV = "prev"
    CURRENT = "current"
    NEXT = "next"


# Reserved top-level keys of the session-keyed store
FLASH_PREV = "_flash.prev"
FLASH_CURRENT = "_flash.current"
FLASH_NEXT = "_flash.next"

FLASH_KEYS: dict[FlashTag, str] = {
    FlashTag.PREV: FLASH_PREV,
    FlashTag.CURRENT: FLASH_CURRENT,
    FlashTag.NEXT: FLASH_NEXT,
}
RESERVED_KEYS = frozenset(FLASH_KEYS.values())


class FlashGeneration:
    """One generation of flash data: segment name -> {key: value}.

    The generation is a view over a plain tagged payload
    ``{"tag": "<tag>", "data": {...}}``. The payload is what lives in the
    session store, so it survives any JSON-capable serialization with its
    tag intact. Mutations through the view write into the payload in place.
    """

    __slots__ = ("_payload",)

    def __init__(self, tag: FlashTag, data: Mapping[str, Any] | None = None) -> None:
        self._payload: dict[str, Any] = {"tag": FlashTag(tag).value, "data": dict(data or {})}

    @classmethod
    def wrap(cls, payload: Any, tag: FlashTag) -> "FlashGeneration | None":
        """Return a view over ``payload`` if it is a well-formed ``tag`` payload."""
        if not is_tagged(payload, tag):
            return None
        gen = cls.__new__(cls)
        gen._payload = payload
        return gen

    @property
    def tag(self) -> FlashTag:
        return FlashTag(self._payload["tag"])

    @property
    def payload(self) -> dict[str, Any]:
        return self._payload

    @property
    def data(self) -> dict[str, Any]:
        return self._payload["data"]

    def ensure(self, segment: str) -> dict[str, Any]:
        """Make sure ``segment`` has a mapping bucket; repair anything else."""
        bucket = self.data.get(segment)
        if not isinstance(bucket, dict):
            bucket = dict(bucket) if isinstance(bucket, Mapping) else {}
            self.data[segment] = bucket
        return bucket

    def get(self, segment: str, key: str, default: Any = None) -> Any:
        bucket = self.data.get(segment)
        if not isinstance(bucket, Mapping):
            return default
        return bucket.get(key, default)

    def replace(self, segment: str, key: str, value: Any) -> None:
        self.ensure(segment)[key] = value

    def replace_all(self, segment: str, values: Mapping[str, Any]) -> None:
        self.data[segment] = dict(values)

    def all(self, segment: str) -> dict[str, Any]:
        bucket = self.data.get(segment)
        return dict(bucket) if isinstance(bucket, Mapping) else {}

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    def __repr__(self) -> str:
        return f"FlashGeneration(tag={self.tag.value!r}, segments={sorted(self.data)!r})"


def is_tagged(payload: Any, tag: FlashTag) -> bool:
    return (
        isinstance(payload, dict)
        and payload.get("tag") == FlashTag(tag).value
        and isinstance(payload.get("data"), dict)
    )


def salvage(payload: Any) -> dict[str, Any]:
    """Best-effort recovery of generation contents from a mis-tagged value.

    Tagged payloads of any generation give back their ``data``; any other
    mapping is taken as-is; everything else is empty.
    """
    if isinstance(payload, FlashGeneration):
        return payload.snapshot()
    if not isinstance(payload, Mapping):
        return {}
    if "tag" in payload and isinstance(payload.get("data"), Mapping):
        return copy.deepcopy(dict(payload["data"]))
    return copy.deepcopy(dict(payload))


def ensure_generation(store: MutableMapping[str, Any], tag: FlashTag) -> FlashGeneration:
    """Return the ``tag`` generation held in ``store``, replacing a corrupt one."""
    key = FLASH_KEYS[tag]
    gen = FlashGeneration.wrap(store.get(key), tag)
    if gen is None:
        gen = FlashGeneration(tag)
        store[key] = gen.payload
    return gen
