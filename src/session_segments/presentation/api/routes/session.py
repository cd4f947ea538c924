from __future__ import annotations

from fastapi import APIRouter, Depends

from session_segments.application.session_controller import SessionController
from session_segments.infrastructure import metrics
from session_segments.presentation.api.dependencies import get_controller

router = APIRouter(prefix="/v1/session", tags=["session"])


@router.delete("")
def destroy_session(session: SessionController = Depends(get_controller)) -> dict[str, bool]:
    destroyed = session.destroy()
    if destroyed:
        metrics.sessions_destroyed.inc()
    return {"destroyed": destroyed}
