"""
PetReport Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The app is built per test with create_app() and driven in-process
       through HTTPX's ASGITransport; no server is started.

Fixtures:
    app_settings:   Settings pointing at temporary static directories
    frozen_clock:   Manually advanced clock for the rate limiter
    rate_limiter:   FixedWindowRateLimiter on the frozen clock
    business_calls: Records every request that reached a business route
    test_app:       Fully wired FastAPI app with a stub /v1/users router
    test_client:    HTTPX AsyncClient bound to test_app
"""

import os

import pytest
import pytest_asyncio
from fastapi import APIRouter, Request
from httpx import ASGITransport, AsyncClient

# Set before any petreport import builds the settings singleton
os.environ["LOG_LEVEL"] = "WARNING"

from petreport.config import Settings  # noqa: E402
from petreport.main import create_app  # noqa: E402
from petreport.middleware import FixedWindowRateLimiter  # noqa: E402

ALLOWED_ORIGIN = "http://localhost:4000"
BLOCKED_AGENT = "BadBot/1.0 (+http://badbot.example)"


class FrozenClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def app_settings(tmp_path):
    public_dir = tmp_path / "public"
    uploads_dir = tmp_path / "uploads"
    public_dir.mkdir()
    uploads_dir.mkdir()
    return Settings(
        allowed_origins=f"{ALLOWED_ORIGIN},http://13.203.226.60:4000",
        blocked_user_agents=f"{BLOCKED_AGENT}|EvilScraper",
        rate_limit_requests=45,
        rate_limit_window_ms=1000,
        public_dir=str(public_dir),
        uploads_dir=str(uploads_dir),
        log_level="WARNING",
    )


@pytest.fixture
def frozen_clock():
    return FrozenClock()


@pytest.fixture
def rate_limiter(app_settings, frozen_clock):
    return FixedWindowRateLimiter(
        max_requests=app_settings.rate_limit_requests,
        window_seconds=app_settings.rate_limit_window_ms / 1000,
        clock=frozen_clock,
    )


@pytest.fixture
def business_calls():
    return []


@pytest.fixture
def test_app(app_settings, rate_limiter, business_calls):
    """
    App with a stub business router standing in for the user routes.

    POST /v1/users/echo reports exactly what the handler received, so tests can
    assert on the request as seen after the whole filter chain.
    """
    router = APIRouter()

    @router.post("/echo")
    async def echo(request: Request):
        business_calls.append(request.url.path)
        return {
            "status": True,
            "raw": (await request.body()).decode("utf-8"),
            "body": request.state.body,
            "query": dict(request.query_params),
            "cookies": request.state.cookies,
            "client_ip": request.state.client_ip,
        }

    @router.get("/ping")
    async def ping(request: Request):
        business_calls.append(request.url.path)
        return {"status": True, "client_ip": request.state.client_ip}

    return create_app(settings=app_settings, users_router=router, rate_limiter=rate_limiter)


@pytest_asyncio.fixture
async def test_client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
