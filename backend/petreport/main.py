"""
PetReport Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance with
       the ingress filter chain, exception handlers and routes registered.
Who:   Called by uvicorn (uvicorn petreport.main:app) or `petreport-server`.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                         FastAPI App                          │
    │                                                              │
    │  Ingress Filter Chain (outermost first):                     │
    │  Origin → SecurityHeaders → AccessLog → Sanitize →           │
    │  PublicStatic → ClientIP → UserAgentBlock → RateLimit        │
    │                                                              │
    │  Routes:                                                     │
    │  ┌────────┐ ┌──────────────────┐ ┌─────────────────────────┐ │
    │  │ GET /  │ │ GET /uploads/*   │ │ ANY /v1/users/*         │ │
    │  └────────┘ └──────────────────┘ └─────────────────────────┘ │
    │                                                              │
    │  Exception Handlers:                                         │
    │  PetReportError → own status │ Exception → 500               │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the static directories, log address
    Shutdown: log shutdown
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse

from petreport import __version__
from petreport.config import Settings, settings as default_settings
from petreport.exceptions import PetReportError
from petreport.middleware import (
    ClientIPMiddleware,
    FixedWindowRateLimiter,
    OriginMiddleware,
    PublicStaticMiddleware,
    RateLimitMiddleware,
    ReadOnlyStaticFiles,
    RequestLoggingMiddleware,
    SanitizeMiddleware,
    SecurityHeadersMiddleware,
    UserAgentBlockMiddleware,
)
from petreport.routes import root, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # petreport.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("PetReport Backend %s starting up...", __version__)

    for directory in (config.public_dir, config.uploads_dir):
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Static directory: %s", path.resolve())

    logger.info(
        "Allowed origins: %s | blocked user agents: %d | rate limit: %d/%dms",
        ", ".join(sorted(config.allowed_origins_set)) or "(none)",
        len(config.blocked_user_agents_set),
        config.rate_limit_requests,
        config.rate_limit_window_ms,
    )
    logger.info("HTTP server running on http://%s:%d", config.host, config.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("PetReport Backend shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions raised by route handlers to {"status": false, ...} responses.

    PetReportError → exc.status_code with exc.to_payload()
    Exception      → 500, stack trace logged server-side only
    """

    @app.exception_handler(PetReportError)
    async def handle_petreport_error(request: Request, exc: PetReportError):
        if exc.status_code >= 500:
            logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("%s: %s", type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_payload(),
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "Unexpected error on %s %s: %s",
            request.method,
            request.url.path,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"status": False, "message": "An unexpected error occurred."},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    users_router: Optional[APIRouter] = None,
    rate_limiter: Optional[FixedWindowRateLimiter] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to use (defaults to the process-wide singleton).
        users_router: Business router mounted at /v1/users.
        rate_limiter: Limiter instance shared by the rate-limit stage
            (defaults to one built from settings).

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    config = settings or default_settings

    app = FastAPI(
        title="PetReport API",
        description="Backend for reporting and tracking missing pets.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config

    limiter = rate_limiter or FixedWindowRateLimiter(
        max_requests=config.rate_limit_requests,
        window_seconds=config.rate_limit_window_ms / 1000,
    )
    app.state.rate_limiter = limiter

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = first
    # to execute), so the chain is registered innermost first.
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(
        UserAgentBlockMiddleware,
        blocked_user_agents=config.blocked_user_agents_set,
    )
    app.add_middleware(ClientIPMiddleware)
    app.add_middleware(PublicStaticMiddleware, directory=config.public_dir)
    app.add_middleware(SanitizeMiddleware, max_body_bytes=config.max_body_bytes)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(OriginMiddleware, allowed_origins=config.allowed_origins_set)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(root.router)
    app.mount(
        "/uploads",
        ReadOnlyStaticFiles(directory=config.uploads_dir, check_dir=False),
        name="uploads",
    )
    app.include_router(users_router or users.router, prefix=users.USERS_PREFIX)

    return app


app = create_app()


def run() -> None:
    """Start the HTTP server on settings.host:settings.port."""
    uvicorn.run(
        "petreport.main:app",
        host=default_settings.host,
        port=default_settings.port,
    )


if __name__ == "__main__":
    run()
