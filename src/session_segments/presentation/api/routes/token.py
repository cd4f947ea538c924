from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from session_segments.application.token_service import TokenService
from session_segments.presentation.api.dependencies import get_token_service

router = APIRouter(prefix="/v1/token", tags=["token"])


@router.post("")
def regenerate_token(tokens: TokenService = Depends(get_token_service)) -> dict[str, str]:
    return {"token": tokens.regenerate()}


@router.post("/verify")
def verify_token(body: dict[str, Any], tokens: TokenService = Depends(get_token_service)) -> dict[str, bool]:
    return {"valid": tokens.verify(body.get("token"))}
