from __future__ import annotations

import logging
from collections.abc import Callable

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from session_segments.application.ports.session_store_port import SessionStatus, SessionStorePort
from session_segments.application.session_controller import SessionController
from session_segments.config import Settings
from session_segments.domain.cookie_params import CookieParams
from session_segments.domain.session_state import SessionState
from session_segments.infrastructure import metrics

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """Binds one SessionController to each request and writes the session back."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        settings: Settings,
        store_factory: Callable[[], SessionStorePort],
    ) -> None:
        super().__init__(app)
        self.settings = settings
        self.store_factory = store_factory

    def _cookie_params(self) -> CookieParams:
        s = self.settings
        return CookieParams(
            lifetime=s.cookie_lifetime,
            path=s.cookie_path,
            domain=s.cookie_domain,
            secure=s.cookie_secure,
            httponly=s.cookie_httponly,
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        controller = SessionController(
            self.store_factory(),
            SessionState(),
            cookies=request.cookies,
            cookie_params=self._cookie_params(),
        )
        request.state.session = controller
        response = await call_next(request)
        # store writes block (sqlite, retry sleeps)
        await run_in_threadpool(self._finish, controller, response)
        return response

    def _finish(self, controller: SessionController, response: Response) -> None:
        if controller.rotation_count:
            metrics.flash_rotations.inc(controller.rotation_count)

        if controller.status() == SessionStatus.ACTIVE:
            session_id = controller.store.session_id
            controller.close()
            if session_id and controller.cookies.get(controller.get_name()) != session_id:
                metrics.sessions_started.inc()
            params = controller.cookie_params
            response.set_cookie(
                controller.get_name(),
                session_id or "",
                max_age=params.lifetime or None,
                path=params.path,
                domain=params.domain or None,
                secure=params.secure,
                httponly=params.httponly,
            )

        for name, params in controller.expired_cookies:
            logger.debug("Expiring cookie %s", name)
            response.delete_cookie(
                name,
                path=params.get("path", "/"),
                domain=params.get("domain") or None,
                secure=bool(params.get("secure")),
                httponly=bool(params.get("httponly")),
            )
