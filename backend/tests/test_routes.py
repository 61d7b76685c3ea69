"""
PetReport Backend — Route & Static Read Path Tests
====================================================

What:  The dispatch step at the end of the chain: the welcome route, the
       /uploads mount, the public read path and the /v1/users mount.
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from petreport.config import Settings
from petreport.main import create_app
from petreport.routes.root import WELCOME_MESSAGE


class TestRootRoute:
    """The welcome route."""

    @pytest.mark.asyncio
    async def test_welcome_message(self, test_client):
        """GET / answers with the fixed welcome envelope."""
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.json() == {
            "status": True,
            "message": "Welcome to pet missing report management backend application.",
        }
        assert response.json()["message"] == WELCOME_MESSAGE


class TestUploadsReadPath:
    """The /uploads static mount."""

    @pytest.mark.asyncio
    async def test_uploaded_file_served(self, test_client, app_settings, business_calls):
        """Files under uploads_dir are served without reaching business routes."""
        (Path(app_settings.uploads_dir) / "rex.jpg").write_bytes(b"\xff\xd8\xff\xd9")
        response = await test_client.get("/uploads/rex.jpg")
        assert response.status_code == 200
        assert response.content == b"\xff\xd8\xff\xd9"
        assert business_calls == []

    @pytest.mark.asyncio
    async def test_missing_upload_404(self, test_client):
        """A missing upload is a plain 404."""
        response = await test_client.get("/uploads/nope.jpg")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_null_byte_upload_404(self, test_client):
        """A NUL byte in an upload name is treated as a missing file."""
        response = await test_client.get("/uploads/rex%00.jpg")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_uploads_are_rate_counted(self, test_client, app_settings, rate_limiter):
        """Uploads sit behind the rate-limit stage."""
        (Path(app_settings.uploads_dir) / "rex.jpg").write_bytes(b"img")
        await test_client.get("/uploads/rex.jpg")
        assert rate_limiter.get_window("127.0.0.1").count == 1


class TestPublicReadPath:
    """Files served from public_dir ahead of the business routes."""

    @pytest.mark.asyncio
    async def test_public_file_served_at_root(self, test_client, app_settings):
        """Public files are served at the site root with hardening headers."""
        (Path(app_settings.public_dir) / "robots.txt").write_text("User-agent: *\n")
        response = await test_client.get("/robots.txt")
        assert response.status_code == 200
        assert response.text == "User-agent: *\n"
        assert response.headers["x-content-type-options"] == "nosniff"

    @pytest.mark.asyncio
    async def test_public_file_bypasses_later_stages(
        self, test_client, app_settings, rate_limiter
    ):
        """Public files skip the user-agent and rate-limit stages."""
        (Path(app_settings.public_dir) / "logo.svg").write_text("<svg/>")
        response = await test_client.get("/logo.svg", headers={"User-Agent": "EvilScraper"})
        assert response.status_code == 200
        assert rate_limiter.get_window("127.0.0.1") is None

    @pytest.mark.asyncio
    async def test_public_dir_does_not_shadow_routes(self, test_client, app_settings):
        """A directory in public_dir never hides a business route."""
        (Path(app_settings.public_dir) / "v1").mkdir()
        response = await test_client.get("/v1/users/ping")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_post_to_public_path_falls_through(self, test_client, app_settings):
        """Only GET and HEAD are served from public_dir."""
        (Path(app_settings.public_dir) / "robots.txt").write_text("x")
        response = await test_client.post("/robots.txt")
        assert response.status_code in (404, 405)

    @pytest.mark.asyncio
    async def test_path_traversal_not_served(self, test_client, app_settings, tmp_path):
        """Encoded ../ cannot escape public_dir."""
        (tmp_path / "secret.txt").write_text("secret")
        response = await test_client.get("/..%2Fsecret.txt")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_overlong_name_falls_through(self, test_client):
        """A segment over the filesystem name limit reaches routing and 404s."""
        response = await test_client.get("/" + "a" * 300)
        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    @pytest.mark.asyncio
    async def test_null_byte_falls_through(self, test_client):
        """A NUL byte in the path is not a public file; routing answers."""
        response = await test_client.get("/v1/users/%00")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_null_byte_before_business_route(self, test_client, business_calls):
        """A NUL byte at the root does not stop the chain."""
        response = await test_client.get("/%00")
        assert response.status_code == 404
        assert business_calls == []


class TestUsersMount:
    """The /v1/users business router mount."""

    @pytest.mark.asyncio
    async def test_unknown_business_route_404(self, test_client):
        """Unregistered paths under /v1/users are 404."""
        response = await test_client.get("/v1/users/does-not-exist")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_default_app_serves_root_and_uploads(self, tmp_path):
        """An app built without a business router still answers / and /uploads."""
        (tmp_path / "uploads").mkdir()
        settings = Settings(
            public_dir=str(tmp_path / "public"),
            uploads_dir=str(tmp_path / "uploads"),
        )
        transport = ASGITransport(app=create_app(settings=settings))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            root = await client.get("/")
            upload = await client.get("/uploads/missing.jpg")

        assert root.status_code == 200
        assert root.json()["message"] == WELCOME_MESSAGE
        assert upload.status_code == 404
