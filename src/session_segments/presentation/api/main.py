from __future__ import annotations

from collections.abc import Callable
from functools import partial

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from session_segments.application.ports.session_store_port import SessionStorePort
from session_segments.config import Settings, settings
from session_segments.domain.errors import InvalidArgumentError
from session_segments.infrastructure.metrics import registry
from session_segments.logging_config import setup_logging
from session_segments.presentation.api.dependencies import build_store
from session_segments.presentation.api.middleware import SessionMiddleware
from session_segments.presentation.api.routes.health import router as health_router
from session_segments.presentation.api.routes.segments import router as segments_router
from session_segments.presentation.api.routes.session import router as session_router
from session_segments.presentation.api.routes.token import router as token_router


def create_app(
    cfg: Settings = settings,
    store_factory: Callable[[], SessionStorePort] | None = None,
) -> FastAPI:
    setup_logging(cfg.log_level)
    app = FastAPI(title="Session Segments", version="0.1.0")
    app.state.settings = cfg
    app.add_middleware(
        SessionMiddleware,
        settings=cfg,
        store_factory=store_factory or partial(build_store, cfg),
    )
    app.include_router(health_router)
    app.include_router(segments_router)
    app.include_router(token_router)
    app.include_router(session_router)

    @app.exception_handler(InvalidArgumentError)
    def invalid_argument(request: Request, exc: InvalidArgumentError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.get("/metrics")
    def metrics() -> Response:  # type: ignore[misc]
        data = generate_latest(registry)
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
