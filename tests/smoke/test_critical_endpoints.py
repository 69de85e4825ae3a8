"""
Smoke tests for critical endpoints.

Fast tests to detect critical breaks in CI/CD pipeline.
"""

import pytest
from httpx import AsyncClient

from tests.factories.user import DEFAULT_PASSWORD


@pytest.mark.smoke
@pytest.mark.asyncio
class TestCriticalEndpoints:
    """Smoke tests for critical application endpoints."""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200

    async def test_register_endpoint(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/register",
            json={"email": "smoke@test.com", "password": "SmokeTest123!", "first_name": "Smoke", "last_name": "Test"},
        )

        assert response.status_code == 201
        assert "access_token" in response.json()

    async def test_login_endpoint(self, client: AsyncClient, user):
        response = await client.post(
            "/api/auth/login",
            json={"email": "owner@test.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200

    async def test_protected_endpoints_require_auth(self, client: AsyncClient):
        for path in ("/api/auth/me", "/api/teams/", "/api/notifications/"):
            response = await client.get(path)
            assert response.status_code == 401, path

    async def test_request_id_header(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/teams/", headers=auth_headers)

        assert response.headers.get("X-Request-ID")

    async def test_error_envelope(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/teams/missing", headers=auth_headers)

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["kind"] == "not_found"
        assert error["message"] == "Team not found"
        assert error["request_id"] == response.headers["X-Request-ID"]

    async def test_team_listing(self, client: AsyncClient, team, auth_headers):
        response = await client.get("/api/teams/", headers=auth_headers)

        assert response.status_code == 200
        assert len(response.json()) == 1
