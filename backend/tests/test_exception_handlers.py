"""
PetReport Backend — Exception Handler Tests
=============================================

What:  Errors raised by business routes become {"status": false, ...} bodies.
"""

import pytest
from fastapi import APIRouter
from httpx import ASGITransport, AsyncClient

from petreport.exceptions import AccessDeniedError, RateLimitExceededError
from petreport.main import create_app


@pytest.fixture
def failing_app(app_settings, rate_limiter):
    router = APIRouter()

    @router.get("/denied")
    async def denied():
        raise AccessDeniedError(context={"reason": "not owner"})

    @router.get("/slow-down")
    async def slow_down():
        raise RateLimitExceededError(retry_after=7)

    @router.get("/crash")
    async def crash():
        raise RuntimeError("database exploded")

    return create_app(settings=app_settings, users_router=router, rate_limiter=rate_limiter)


class TestExceptionHandlers:
    """Global handlers for errors raised inside business routes."""

    @pytest.mark.asyncio
    async def test_domain_error_uses_own_status(self, failing_app):
        """Application errors map to their own status and envelope."""
        transport = ASGITransport(app=failing_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/v1/users/denied")
        assert response.status_code == 403
        assert response.json() == {"status": False, "message": "Access Denied"}

    @pytest.mark.asyncio
    async def test_domain_error_headers_forwarded(self, failing_app):
        """Headers carried by an error are sent with the response."""
        transport = ASGITransport(app=failing_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/v1/users/slow-down")
        assert response.status_code == 429
        assert response.headers["retry-after"] == "7"

    @pytest.mark.asyncio
    async def test_unexpected_error_hides_detail(self, failing_app):
        """Unexpected errors become a generic 500."""
        # The server-error middleware re-raises after responding
        transport = ASGITransport(app=failing_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/v1/users/crash")
        assert response.status_code == 500
        assert response.json() == {"status": False, "message": "An unexpected error occurred."}
        assert "database exploded" not in response.text
