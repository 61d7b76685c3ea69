"""
PetReport Backend — Security Headers Middleware
=================================================

What:  Second stage of the filter chain. Applies a fixed set of hardening
       response headers to every response. Never rejects.
How:   Mirrors the usual helmet defaults with three policies switched off
       (Content-Security-Policy, Cross-Origin-Opener-Policy and
       Cross-Origin-Embedder-Policy) and the resource policy relaxed to
       `cross-origin`, so the registered frontend can load uploads and API
       responses from another origin.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS = {
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Sets SECURITY_HEADERS on every response and strips X-Powered-By."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if "x-powered-by" in response.headers:
            del response.headers["x-powered-by"]
        return response
