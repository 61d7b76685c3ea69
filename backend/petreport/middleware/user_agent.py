"""
PetReport Backend — User-Agent Blocklist Middleware
=====================================================

What:  Rejects requests whose User-Agent header exactly matches a blocklisted
       string with 403 {"status": false, "message": "Access Denied"}.
How:   Set membership on the raw header value. Requests without a
       User-Agent header are never blocked. A rejection is terminal: nothing
       after this stage runs.
"""

import logging
from typing import FrozenSet, Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from petreport.exceptions import AccessDeniedError

logger = logging.getLogger(__name__)


class UserAgentBlockMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, blocked_user_agents: Iterable[str] = ()):
        super().__init__(app)
        self.blocked_user_agents: FrozenSet[str] = frozenset(blocked_user_agents)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        user_agent = request.headers.get("user-agent")
        if user_agent is not None and user_agent in self.blocked_user_agents:
            exc = AccessDeniedError(user_agent=user_agent)
            logger.warning(
                "Blocked user agent %r from %s on %s %s",
                user_agent,
                getattr(request.state, "client_ip", "unknown"),
                request.method,
                request.url.path,
            )
            return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

        return await call_next(request)
