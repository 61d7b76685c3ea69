"""
PetReport Backend — Client IP Identification Middleware
=========================================================

What:  Resolves the true client IP and stores it at `request.state.client_ip`.
How:   Proxy-forwarding headers are consulted in a fixed order and the first
       syntactically valid IPv4/IPv6 address wins; the socket peer is the
       fallback. Later stages (user-agent block, rate limiter) key on it.

Header order:
    X-Client-IP, X-Forwarded-For (first valid entry), CF-Connecting-IP,
    Fastly-Client-IP, True-Client-IP, X-Real-IP, X-Cluster-Client-IP,
    X-Forwarded, Forwarded-For, Forwarded
"""

import ipaddress
from typing import Optional

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

UNKNOWN_IP = "unknown"

FORWARDING_HEADERS = (
    "x-client-ip",
    "x-forwarded-for",
    "cf-connecting-ip",
    "fastly-client-ip",
    "true-client-ip",
    "x-real-ip",
    "x-cluster-client-ip",
    "x-forwarded",
    "forwarded-for",
    "forwarded",
)


def _valid_ip(candidate: str) -> Optional[str]:
    candidate = candidate.strip().strip('"')
    if candidate.startswith("[") and "]" in candidate:
        # [2001:db8::1]:443
        candidate = candidate[1:candidate.index("]")]
    elif candidate.count(":") == 1:
        # 203.0.113.7:51234
        candidate = candidate.split(":", 1)[0]
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def _candidates(name: str, value: str):
    for part in value.split(","):
        if name in ("forwarded", "x-forwarded"):
            # RFC 7239: for=192.0.2.60;proto=http
            for directive in part.split(";"):
                key, _, item = directive.partition("=")
                if key.strip().lower() == "for":
                    yield item
        else:
            yield part


def resolve_client_ip(headers: Headers, peer: Optional[str]) -> str:
    """Return the first valid forwarded address, then the peer, then 'unknown'."""
    for name in FORWARDING_HEADERS:
        value = headers.get(name)
        if not value:
            continue
        for candidate in _candidates(name, value):
            ip = _valid_ip(candidate)
            if ip:
                return ip
    if peer:
        return _valid_ip(peer) or peer
    return UNKNOWN_IP


class ClientIPMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        peer = request.client.host if request.client else None
        request.state.client_ip = resolve_client_ip(request.headers, peer)
        return await call_next(request)
