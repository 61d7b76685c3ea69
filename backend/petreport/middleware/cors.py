"""
PetReport Backend — Origin / CORS Middleware
==============================================

What:  First stage of the filter chain. Controls the CORS response headers and
       answers pre-flight requests.
How:   The request's Origin header is looked up in the allowed-origin set. A
       match is echoed back in Access-Control-Allow-Origin; a miss simply
       omits the header and the request still proceeds (the browser enforces
       the policy, not this server). Methods/headers/credentials headers are
       always set. OPTIONS is answered with 204 and never reaches later stages.
"""

import logging
from typing import FrozenSet, Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

ALLOW_METHODS = "GET, POST, PUT, DELETE, PATCH, OPTIONS"
ALLOW_HEADERS = (
    "Origin, X-Requested-With, Content-Type, Accept, Authorization, Cache-Control, Pragma"
)
PREFLIGHT_METHOD = "OPTIONS"


class OriginMiddleware(BaseHTTPMiddleware):
    """
    Echoes registered origins and short-circuits pre-flight requests.

    Response headers:
        Access-Control-Allow-Origin:      request origin, only if registered
        Access-Control-Allow-Methods:     always
        Access-Control-Allow-Headers:     always
        Access-Control-Allow-Credentials: always "true"
    """

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ()):
        super().__init__(app)
        self.allowed_origins: FrozenSet[str] = frozenset(allowed_origins)

    def _cors_headers(self, origin: Optional[str]) -> dict:
        headers = {
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
            "Access-Control-Allow-Credentials": "true",
        }
        if origin is not None and origin in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
        return headers

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        origin = request.headers.get("origin")
        headers = self._cors_headers(origin)

        if request.method == PREFLIGHT_METHOD:
            return Response(status_code=204, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
