"""
PetReport Backend — Middleware Package (Ingress Filter Chain)
===============================================================

What:  The ordered stages every inbound request passes before business routes.

Middleware Chain (order matters!):
    Request → [Origin/CORS] → [Security Headers] → [Access Log]
            → [Sanitize] → [Public Static] → [Client IP]
            → [User-Agent Block] → [Rate Limit] → Route Handler

    1. Origin/CORS: answers OPTIONS with 204 and stops; never rejects on origin
    2. Security Headers: hardening headers on every response that passes through
    3. Access Log: one combined-format line per request
    4. Sanitize: parses body/cookies, strips operator keys, 400 on malformed body,
       413 on an oversized body
    5. Public Static: serves files from the public directory and stops
    6. Client IP: resolves the caller's address for the next two stages
    7. User-Agent Block: 403 on an exact blocklist match
    8. Rate Limit: 429 beyond the per-IP fixed window

    Any stage may answer the request itself; the stages after it never run.
    The outer stages still decorate that answer on the way back out.
"""

from petreport.middleware.client_ip import ClientIPMiddleware
from petreport.middleware.cors import OriginMiddleware
from petreport.middleware.logging import RequestLoggingMiddleware
from petreport.middleware.rate_limit import FixedWindowRateLimiter, RateLimitMiddleware
from petreport.middleware.sanitize import SanitizeMiddleware
from petreport.middleware.security_headers import SecurityHeadersMiddleware
from petreport.middleware.static import PublicStaticMiddleware, ReadOnlyStaticFiles
from petreport.middleware.user_agent import UserAgentBlockMiddleware

__all__ = [
    "ClientIPMiddleware",
    "FixedWindowRateLimiter",
    "OriginMiddleware",
    "PublicStaticMiddleware",
    "RateLimitMiddleware",
    "ReadOnlyStaticFiles",
    "RequestLoggingMiddleware",
    "SanitizeMiddleware",
    "SecurityHeadersMiddleware",
    "UserAgentBlockMiddleware",
]
