"""
PetReport Backend — Rate Limiting Middleware
==============================================

What:  Per-IP fixed window rate limiter (default: 45 requests per 1000 ms).
How:   Each client IP owns one window {count, window_start}. The window is
       created lazily on the first request, reset once it has elapsed, and
       purged from memory after expiry.
Who:   Last stage of the filter chain, keyed by `request.state.client_ip`
       (set by ClientIPMiddleware).

Algorithm: Fixed Window Counter
    1. Look up the caller's window; start a new one if absent or elapsed
    2. Increment the counter (rejected requests are counted too)
    3. If the counter exceeds the limit, reject with 429 until the window resets

Concurrency:
    The read-modify-write of a window happens under a single threading.Lock,
    so concurrent requests from the same IP can never undercount. No await
    happens while the lock is held.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from petreport.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitWindow:
    """Counter for one client IP within the current window."""

    key: str
    count: int
    window_start: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float  # seconds until the caller's window resets


class FixedWindowRateLimiter:
    """
    Thread-safe fixed window counter keyed by an arbitrary string.

    Args:
        max_requests: Requests allowed per window
        window_seconds: Window length
        clock: Monotonic time source in seconds (injectable for tests)
    """

    # Expired windows are purged every N hits
    CLEANUP_EVERY = 1000

    def __init__(
        self,
        max_requests: int = 45,
        window_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, RateLimitWindow] = {}
        self._lock = threading.Lock()
        self._hits = 0

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for `key` and decide whether it may proceed."""
        with self._lock:
            now = self.clock()
            window = self._windows.get(key)
            if window is None or now - window.window_start >= self.window_seconds:
                window = RateLimitWindow(key=key, count=0, window_start=now)
                self._windows[key] = window
            window.count += 1
            count = window.count
            reset_after = max(0.0, window.window_start + self.window_seconds - now)

            self._hits += 1
            if self._hits % self.CLEANUP_EVERY == 0:
                self._cleanup_expired(now)

        return RateLimitDecision(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - count),
            reset_after=reset_after,
        )

    def get_window(self, key: str) -> Optional[RateLimitWindow]:
        with self._lock:
            return self._windows.get(key)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._hits = 0

    def _cleanup_expired(self, now: float) -> None:
        # Caller holds self._lock
        expired = [
            key for key, window in self._windows.items()
            if now - window.window_start >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]

        if expired:
            logger.debug("Purged %d expired rate limit windows", len(expired))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies a FixedWindowRateLimiter to every request that reaches it.

    Response headers (all responses):
        X-RateLimit-Limit, X-RateLimit-Remaining, X-RateLimit-Reset
    On rejection:
        HTTP 429, Retry-After header, {"status": false, "message": "..."}
    """

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        client_ip = getattr(request.state, "client_ip", None) or (
            request.client.host if request.client else "unknown"
        )

        decision = self.limiter.hit(client_ip)
        reset_seconds = max(1, math.ceil(decision.reset_after))
        headers = {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
            "X-RateLimit-Reset": str(reset_seconds),
        }

        if not decision.allowed:
            exc = RateLimitExceededError(retry_after=reset_seconds)
            logger.warning(
                "Rate limit exceeded for IP %s: more than %d requests in %.0fms window",
                client_ip,
                decision.limit,
                self.limiter.window_seconds * 1000,
            )
            headers.update(exc.headers)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_payload(),
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
