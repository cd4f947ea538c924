from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from session_segments.application.segment import Segment
from session_segments.presentation.api.dependencies import get_segment

router = APIRouter(prefix="/v1/segments", tags=["segments"])


@router.get("/{segment}/values/{key}")
def read_value(key: str, seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    return {"segment": seg.name, "key": key, "value": seg.get(key), "exists": key in seg}


@router.put("/{segment}/values/{key}")
def write_value(key: str, body: dict[str, Any], seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    seg[key] = body.get("value")
    return {"segment": seg.name, "key": key, "value": seg.get(key)}


@router.delete("/{segment}/values/{key}")
def remove_value(key: str, seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    seg.remove(key)
    return {"segment": seg.name, "removed": key}


@router.delete("/{segment}")
def clear_segment(seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    seg.clear()
    return {"segment": seg.name, "cleared": True}


@router.post("/{segment}/flash:keep")
def keep_flash(seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    seg.flash_keep()
    return {"segment": seg.name, "kept": True}


@router.post("/{segment}/flash/{key}")
def flash_value(
    key: str,
    body: dict[str, Any],
    now: bool = False,
    seg: Segment = Depends(get_segment),
) -> dict[str, Any]:
    if now:
        seg.flash_both(key, body.get("value"))
    else:
        seg.flash(key, body.get("value"))
    return {"segment": seg.name, "key": key, "now": now}


@router.get("/{segment}/flash/{key}")
def read_flash(key: str, seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    return {
        "segment": seg.name,
        "key": key,
        "current": seg.flash_get(key),
        "next": seg.flash_next_get(key),
        "previous": seg.flash_previous_get(key),
    }


@router.delete("/{segment}/flash")
def clear_flash(seg: Segment = Depends(get_segment)) -> dict[str, Any]:
    seg.flash_clear_both()
    return {"segment": seg.name, "cleared": True}
