from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])

@router.get("/health")
def health(request: Request) -> dict[str, str]:  # type: ignore[misc]
    cfg = request.app.state.settings
    return {"status": "ok", "backend": cfg.session_backend, "session_name": cfg.session_name}
