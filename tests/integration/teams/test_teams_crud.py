"""
Integration tests for teams as seen by their members.

Endpoints:
- GET /api/teams/
- POST /api/teams/
- GET /api/teams/{slug}
- GET /api/teams/{slug}/members
- POST /api/teams/{slug}/members
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.models.team_member import TeamMember
from tests.factories import AnswerFactory


@pytest.mark.asyncio
class TestCreateTeam:
    """Test POST /api/teams/."""

    async def test_creator_becomes_admin(
        self, client: AsyncClient, db_session: AsyncSession, outsider, outsider_headers
    ):
        response = await client.post(
            "/api/teams/",
            headers=outsider_headers,
            json={"name": "Platform", "slug": "platform", "company_size": "1-10"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "platform"

        role = await db_session.scalar(
            select(TeamMember.role).where(TeamMember.team_id == data["id"], TeamMember.user_id == outsider.id)
        )
        assert role == "admin"

    async def test_duplicate_slug(self, client: AsyncClient, team, outsider_headers):
        response = await client.post(
            "/api/teams/",
            headers=outsider_headers,
            json={"name": "Other Acme", "slug": "acme"},
        )

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "conflict"

    async def test_invalid_slug(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/teams/",
            headers=auth_headers,
            json={"name": "Bad", "slug": "Bad Slug"},
        )

        assert response.status_code == 400

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/teams/", json={"name": "X", "slug": "x"})

        assert response.status_code == 401


@pytest.mark.asyncio
class TestListAndGetTeam:
    async def test_list_my_teams(self, client: AsyncClient, team, member_headers):
        response = await client.get("/api/teams/", headers=member_headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["slug"] == "acme"
        assert data[0]["role"] == "member"

    async def test_outsider_sees_no_teams(self, client: AsyncClient, team, outsider_headers):
        response = await client.get("/api/teams/", headers=outsider_headers)

        assert response.status_code == 200
        assert response.json() == []

    async def test_get_team_with_stats(self, client: AsyncClient, question, auth_headers):
        response = await client.get("/api/teams/acme", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "admin"
        assert data["stats"] == {"question_count": 1, "member_count": 2, "tag_count": 1}

    async def test_get_team_as_outsider(self, client: AsyncClient, team, outsider_headers):
        response = await client.get("/api/teams/acme", headers=outsider_headers)

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "You are not a member of this team"

    async def test_get_unknown_team(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/teams/nope", headers=auth_headers)

        assert response.status_code == 404


@pytest.mark.asyncio
class TestTeamMembers:
    async def test_list_members_with_activity(
        self, client: AsyncClient, db_session: AsyncSession, question, member_user, member_headers
    ):
        await AnswerFactory.create_async(db_session, question_id=question.id, user_id=member_user.id)
        await db_session.commit()

        response = await client.get("/api/teams/acme/members", headers=member_headers)

        assert response.status_code == 200
        by_email = {m["email"]: m for m in response.json()}
        assert by_email["owner@test.com"]["role"] == "admin"
        assert by_email["owner@test.com"]["question_count"] == 1
        assert by_email["member@test.com"]["answer_count"] == 1
        assert "password" not in by_email["member@test.com"]

    async def test_admin_adds_existing_user(self, client: AsyncClient, team, outsider, auth_headers):
        response = await client.post(
            "/api/teams/acme/members",
            headers=auth_headers,
            json={"email": "OUTSIDER@test.com"},
        )

        assert response.status_code == 201
        assert response.json()["user_id"] == outsider.id
        assert response.json()["role"] == "member"

    async def test_add_unknown_user(self, client: AsyncClient, team, auth_headers):
        response = await client.post(
            "/api/teams/acme/members",
            headers=auth_headers,
            json={"email": "ghost@test.com"},
        )

        assert response.status_code == 404

    async def test_add_existing_member(self, client: AsyncClient, team, auth_headers):
        response = await client.post(
            "/api/teams/acme/members",
            headers=auth_headers,
            json={"email": "member@test.com"},
        )

        assert response.status_code == 409

    async def test_member_cannot_add(self, client: AsyncClient, team, outsider, member_headers):
        response = await client.post(
            "/api/teams/acme/members",
            headers=member_headers,
            json={"email": "outsider@test.com"},
        )

        assert response.status_code == 403
