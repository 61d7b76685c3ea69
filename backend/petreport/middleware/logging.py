"""
PetReport Backend — Access Logging Middleware
===============================================

What:  One access-log line per request in the Apache "combined" shape, plus
       the request duration.
How:   Wraps the rest of the chain; the line is written once the response is
       known, so it includes rejections from later stages.
When:  After the CORS and security-header stages, so pre-flight requests are
       not logged.

Log line:
    203.0.113.7 - - [15/Jan/2024:12:00:00 +0000] "POST /v1/users/login HTTP/1.1"
    200 57 "-" "Mozilla/5.0 ..." 3.2ms

Not logged: request bodies, cookies, Authorization header.
"""

import logging
import time
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("petreport.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request/response pair.

    Log level follows the status code:
        5xx → ERROR, 4xx → WARNING, everything else → INFO
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()
        received_at = datetime.now(timezone.utc)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        # Resolved by ClientIPMiddleware unless an earlier stage answered
        client_ip = getattr(request.state, "client_ip", None) or (
            request.client.host if request.client else "-"
        )
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        http_version = request.scope.get("http_version", "1.1")
        status = response.status_code

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            '%s - - [%s] "%s %s HTTP/%s" %d %s "%s" "%s" %.1fms',
            client_ip,
            received_at.strftime("%d/%b/%Y:%H:%M:%S %z"),
            request.method,
            target,
            http_version,
            status,
            response.headers.get("content-length", "-"),
            request.headers.get("referer", "-"),
            request.headers.get("user-agent", "-"),
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
