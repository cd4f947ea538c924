from __future__ import annotations

from fastapi import Depends, Request

from session_segments.application.factories import TOKEN_SEGMENT, TokenFactory
from session_segments.application.ports.session_store_port import SessionStorePort
from session_segments.application.segment import Segment
from session_segments.application.session_controller import SessionController
from session_segments.application.token_service import TokenService
from session_segments.config import Settings
from session_segments.domain.errors import InvalidArgumentError
from session_segments.infrastructure.adapters.random.secrets_source import SecretsRandomSource
from session_segments.infrastructure.adapters.session.memory_store import InMemorySessionStore
from session_segments.infrastructure.adapters.session.sqlite_store import SQLiteSessionStore

# Process-wide backend for SESSION_BACKEND=memory (dev only)
_memory_backend: dict[str, str] = {}


def build_store(cfg: Settings) -> SessionStorePort:
    if cfg.session_backend == "memory":
        return InMemorySessionStore(_memory_backend, name=cfg.session_name)
    return SQLiteSessionStore(cfg.session_db_path, name=cfg.session_name)


def get_controller(request: Request) -> SessionController:
    return request.state.session  # type: ignore[no-any-return]


def get_segment(segment: str, controller: SessionController = Depends(get_controller)) -> Segment:
    """Segment named by the path; the token segment is only reachable through TokenService."""
    if segment == TOKEN_SEGMENT:
        raise InvalidArgumentError(f"Segment name {segment!r} is reserved.")
    return controller.get_segment(segment)


def get_token_service(
    request: Request, controller: SessionController = Depends(get_controller)
) -> TokenService:
    cfg: Settings = request.app.state.settings
    return TokenFactory(SecretsRandomSource(cfg.token_bytes)).instance(controller)
