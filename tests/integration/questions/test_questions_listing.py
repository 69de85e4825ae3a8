"""
Integration tests for question listing.

Endpoint:
- GET /api/questions/?team_id=...&sort=...&filter=...&tag=...&search=...&page=...&limit=...
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import AnswerFactory, QuestionFactory, TeamFactory, TeamMemberFactory


@pytest.fixture
async def seeded(db_session: AsyncSession, team, user, member_user):
    """
    Three questions in acme plus one in another team:
    - "Deploy with docker": 2 answers (one accepted), score 5, 10 views
    - "Python typing": 1 answer, none accepted, score 1, 50 views
    - "Kubernetes secrets": no answers, score 3, 0 views
    """
    deploy = await QuestionFactory.create_async(
        db_session, team_id=team.id, user_id=user.id, title="Deploy with docker",
        score=5, view_count=10, tags=["docker", "devops"],
    )
    typing = await QuestionFactory.create_async(
        db_session, team_id=team.id, user_id=member_user.id, title="Python typing",
        body="Generics with docker-free setup", score=1, view_count=50, tags=["python"],
    )
    k8s = await QuestionFactory.create_async(
        db_session, team_id=team.id, user_id=user.id, title="Kubernetes secrets",
        body="Where to keep them", score=3, tags=["devops"],
    )
    await AnswerFactory.create_async(db_session, question_id=deploy.id, user_id=member_user.id, is_accepted=True)
    await AnswerFactory.create_async(db_session, question_id=deploy.id, user_id=user.id)
    await AnswerFactory.create_async(db_session, question_id=typing.id, user_id=user.id)

    other = await TeamFactory.create_async(db_session, slug="other")
    await TeamMemberFactory.create_async(db_session, team_id=other.id, user_id=user.id, role="admin")
    await QuestionFactory.create_async(db_session, team_id=other.id, user_id=user.id, title="Elsewhere", tags=["docker"])
    await db_session.commit()
    return {"deploy": deploy.id, "typing": typing.id, "k8s": k8s.id}


def titles(response):
    return [q["title"] for q in response.json()["questions"]]


@pytest.mark.asyncio
class TestListQuestions:
    async def test_scoped_to_team(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get("/api/questions/", params={"team_id": team.id}, headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert "Elsewhere" not in titles(response)

    async def test_sort_by_score(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/", params={"team_id": team.id, "sort": "score"}, headers=auth_headers
        )

        assert titles(response) == ["Deploy with docker", "Kubernetes secrets", "Python typing"]

    async def test_sort_by_views(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/", params={"team_id": team.id, "sort": "frequent"}, headers=auth_headers
        )

        assert titles(response)[0] == "Python typing"

    async def test_no_answers_filter(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/", params={"team_id": team.id, "filter": "no-answers"}, headers=auth_headers
        )

        assert titles(response) == ["Kubernetes secrets"]

    async def test_unanswered_means_no_accepted_answer(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/",
            params={"team_id": team.id, "filter": "unanswered", "sort": "score"},
            headers=auth_headers,
        )

        assert titles(response) == ["Kubernetes secrets", "Python typing"]

    async def test_tag_filter(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/",
            params={"team_id": team.id, "tag": "DevOps", "sort": "score"},
            headers=auth_headers,
        )

        assert titles(response) == ["Deploy with docker", "Kubernetes secrets"]

    async def test_search_title_and_body(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/",
            params={"team_id": team.id, "search": "docker", "sort": "score"},
            headers=auth_headers,
        )

        assert titles(response) == ["Deploy with docker", "Python typing"]

    async def test_search_percent_is_not_a_wildcard(self, client: AsyncClient, seeded, team, auth_headers):
        response = await client.get(
            "/api/questions/",
            params={"team_id": team.id, "search": "%"},
            headers=auth_headers,
        )

        assert titles(response) == []

    async def test_pagination(self, client: AsyncClient, seeded, team, auth_headers):
        page_one = await client.get(
            "/api/questions/",
            params={"team_id": team.id, "sort": "score", "limit": 2, "page": 1},
            headers=auth_headers,
        )
        page_two = await client.get(
            "/api/questions/",
            params={"team_id": team.id, "sort": "score", "limit": 2, "page": 2},
            headers=auth_headers,
        )

        assert page_one.json()["total_pages"] == 2
        assert titles(page_one) == ["Deploy with docker", "Kubernetes secrets"]
        assert titles(page_two) == ["Python typing"]

    async def test_limit_is_capped(self, client: AsyncClient, team, auth_headers):
        response = await client.get(
            "/api/questions/", params={"team_id": team.id, "limit": 500}, headers=auth_headers
        )

        assert response.status_code == 400

    async def test_outsider_cannot_list(self, client: AsyncClient, seeded, team, outsider_headers):
        response = await client.get("/api/questions/", params={"team_id": team.id}, headers=outsider_headers)

        assert response.status_code == 403

    async def test_unknown_sort(self, client: AsyncClient, team, auth_headers):
        response = await client.get(
            "/api/questions/", params={"team_id": team.id, "sort": "random"}, headers=auth_headers
        )

        assert response.status_code == 400
