from __future__ import annotations

from typing import TYPE_CHECKING

from session_segments.application.ports.random_source_port import RandomSourcePort
from session_segments.application.segment import Segment
from session_segments.application.token_service import TokenService

if TYPE_CHECKING:
    from session_segments.application.session_controller import SessionController

TOKEN_SEGMENT = "session_segments.csrf_token"


class SegmentFactory:
    def instance(self, session: "SessionController", name: str) -> Segment:
        return Segment(session, name)


class TokenFactory:
    """Builds ``TokenService`` objects bound to the reserved token segment."""

    segment_name = TOKEN_SEGMENT

    def __init__(self, random_source: RandomSourcePort | None = None) -> None:
        if random_source is None:
            from session_segments.infrastructure.adapters.random.secrets_source import SecretsRandomSource

            random_source = SecretsRandomSource()
        self.random = random_source

    def instance(self, session: "SessionController") -> TokenService:
        return TokenService(session.get_segment(self.segment_name), self.random)
