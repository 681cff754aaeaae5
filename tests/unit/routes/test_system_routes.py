"""Tests for health, smoke-test and repository validation endpoints."""

import pytest
from quart import Quart

from application.routes.common.error_handlers import AVAILABLE_ROUTES, register_error_handlers
from application.routes.system import system_bp


@pytest.fixture
def app():
    app = Quart(__name__)
    app.register_blueprint(system_bp)
    register_error_handlers(app)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


class TestSystemRoutes:
    """Test the system blueprint."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        data = await response.get_json()
        assert data["status"] == "healthy"
        assert data["uptime"] >= 0
        assert data["git_config"] == {"terminal_prompt": "0", "askpass": "echo"}

    @pytest.mark.asyncio
    async def test_smoke_test(self, client):
        response = await client.get("/api/test")

        assert response.status_code == 200
        data = await response.get_json()
        assert data["message"] == "Backend is working!"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_unknown_route_lists_available_routes(self, client):
        response = await client.get("/api/does-not-exist")

        assert response.status_code == 404
        data = await response.get_json()
        assert data["error"] == "Not Found"
        assert data["message"] == "Route /api/does-not-exist not found"
        assert data["availableRoutes"] == AVAILABLE_ROUTES


class TestValidateRepo:
    """Test POST /api/validate-repo."""

    @pytest.mark.asyncio
    async def test_valid_ssh_url(self, client):
        response = await client.post(
            "/api/validate-repo", json={"repoUrl": "git@gitlab.com:group/repo.git"}
        )

        assert response.status_code == 200
        data = await response.get_json()
        assert data == {"valid": True, "message": "Valid repository URL", "provider": "gitlab"}

    @pytest.mark.asyncio
    async def test_invalid_url(self, client):
        response = await client.post("/api/validate-repo", json={"repoUrl": "ftp://example.com/a/b"})

        assert response.status_code == 200
        data = await response.get_json()
        assert data["valid"] is False
        assert data["provider"] == "generic"

    @pytest.mark.asyncio
    async def test_blank_url(self, client):
        response = await client.post("/api/validate-repo", json={"repoUrl": "  "})

        assert response.status_code == 400
        data = await response.get_json()
        assert data["valid"] is False

    @pytest.mark.asyncio
    async def test_missing_field(self, client):
        response = await client.post("/api/validate-repo", json={})

        assert response.status_code == 400
        data = await response.get_json()
        assert data["error"] == "Validation failed"
