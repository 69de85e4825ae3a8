"""
Integration tests for token invalidation.

A token stops working when it is logged out (Redis blacklist) or when the
user's token_version moves past the one it carries.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.core.security import create_access_token
from stackteam.models.user import User
from tests.factories.user import DEFAULT_PASSWORD


@pytest.mark.asyncio
class TestLogout:
    """Test POST /api/auth/logout."""

    async def test_logout_revokes_token(self, client: AsyncClient, user, auth_headers, redis_client):
        response = await client.post("/api/auth/logout", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Logout successful"

        token = auth_headers["Authorization"].split(" ", 1)[1]
        assert await redis_client.exists(f"blacklist:{token}")
        assert 0 < await redis_client.ttl(f"blacklist:{token}") <= 7 * 24 * 3600

        again = await client.get("/api/auth/me", headers=auth_headers)
        assert again.status_code == 401
        assert again.json()["error"]["message"] == "Token has been revoked"

    async def test_other_tokens_survive_logout(self, client: AsyncClient, user, auth_headers):
        login = await client.post(
            "/api/auth/login",
            json={"email": "owner@test.com", "password": DEFAULT_PASSWORD},
        )
        other = {"Authorization": f"Bearer {login.json()['access_token']}"}

        await client.post("/api/auth/logout", headers=auth_headers)
        client.cookies.clear()

        response = await client.get("/api/auth/me", headers=other)
        assert response.status_code == 200

    async def test_logout_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/auth/logout")

        assert response.status_code == 401


@pytest.mark.asyncio
class TestTokenVersion:
    async def test_bumped_version_invalidates_token(
        self, client: AsyncClient, db_session: AsyncSession, user, auth_headers
    ):
        await db_session.execute(update(User).where(User.id == user.id).values(token_version=2))
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=auth_headers)
        assert response.status_code == 401

    async def test_token_for_deleted_user(self, client: AsyncClient):
        token = create_access_token({"sub": "9999"}, token_version=1)

        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_password_change_returns_working_token(self, client: AsyncClient, user, auth_headers):
        response = await client.put(
            "/api/users/password",
            headers=auth_headers,
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brand-new-pass"},
        )

        assert response.status_code == 200
        fresh = {"Authorization": f"Bearer {response.json()['access_token']}"}
        client.cookies.clear()

        assert (await client.get("/api/auth/me", headers=auth_headers)).status_code == 401
        assert (await client.get("/api/auth/me", headers=fresh)).status_code == 200

        login = await client.post(
            "/api/auth/login",
            json={"email": "owner@test.com", "password": "brand-new-pass"},
        )
        assert login.status_code == 200

    async def test_password_change_wrong_current(self, client: AsyncClient, user, auth_headers):
        response = await client.put(
            "/api/users/password",
            headers=auth_headers,
            json={"current_password": "wrong-one", "new_password": "brand-new-pass"},
        )

        assert response.status_code == 401
