"""
End-to-end test for a question's life: asked, answered, voted, accepted,
retagged and deleted.
"""

import pytest
from httpx import AsyncClient


def no_answer_titles(response) -> list:
    return [q["title"] for q in response.json()["questions"]]


@pytest.mark.e2e
@pytest.mark.asyncio
class TestQuestionLifecycleFlow:
    async def test_no_answers_filter_follows_answers(self, client: AsyncClient, team, auth_headers, member_headers):
        """
        A question with no answers is listed under no-answers, drops out once
        answered and comes back when that answer is deleted.
        """
        params = {"team_id": team.id, "filter": "no-answers"}
        asked = await client.post(
            "/api/questions/",
            headers=auth_headers,
            json={"team_id": team.id, "title": "Lonely question", "body": "Anyone?", "tags": ["misc"]},
        )
        question_id = asked.json()["id"]

        listed = await client.get("/api/questions/", params=params, headers=auth_headers)
        assert no_answer_titles(listed) == ["Lonely question"]

        answer = await client.post(
            "/api/answers/", headers=member_headers, json={"question_id": question_id, "body": "Me!"}
        )
        listed = await client.get("/api/questions/", params=params, headers=auth_headers)
        assert no_answer_titles(listed) == []

        await client.delete(f"/api/answers/{answer.json()['id']}", headers=member_headers)
        listed = await client.get("/api/questions/", params=params, headers=auth_headers)
        assert no_answer_titles(listed) == ["Lonely question"]

    async def test_full_lifecycle(self, client: AsyncClient, team, auth_headers, member_headers):
        asked = await client.post(
            "/api/questions/",
            headers=auth_headers,
            json={"team_id": team.id, "title": "Cache invalidation?", "body": "How?", "tags": ["cache", "redis"]},
        )
        question_id = asked.json()["id"]

        answer = await client.post(
            "/api/answers/", headers=member_headers, json={"question_id": question_id, "body": "TTL everything"}
        )
        answer_id = answer.json()["id"]

        voted = await client.post(
            "/api/votes/",
            headers=auth_headers,
            json={"votable_type": "answer", "votable_id": answer_id, "vote_type": "up"},
        )
        assert voted.json()["score"] == 1

        accepted = await client.post(f"/api/answers/{answer_id}/accept", headers=auth_headers)
        assert accepted.json()["is_accepted"] is True

        # Member sees answer, upvote and accept notifications
        inbox = await client.get("/api/notifications/", headers=member_headers)
        assert sorted(n["type"] for n in inbox.json()["notifications"]) == ["accepted", "upvote"]
        owner_inbox = await client.get("/api/notifications/", headers=auth_headers)
        assert [n["type"] for n in owner_inbox.json()["notifications"]] == ["answer"]

        for tags in (["cache"], ["redis", "memcached"], ["cache", "redis"]):
            edited = await client.put(f"/api/questions/{question_id}", headers=auth_headers, json={"tags": tags})
            assert edited.status_code == 200

        counts = await client.get("/api/tags/", params={"team_id": team.id}, headers=auth_headers)
        assert {t["name"]: t["question_count"] for t in counts.json()} == {"cache": 1, "redis": 1, "memcached": 0}

        unanswered = await client.get(
            "/api/questions/", params={"team_id": team.id, "filter": "unanswered"}, headers=auth_headers
        )
        assert unanswered.json()["total"] == 0

        deleted = await client.delete(f"/api/questions/{question_id}", headers=auth_headers)
        assert deleted.status_code == 200

        inbox = await client.get("/api/notifications/", headers=member_headers)
        assert inbox.json()["total"] == 0
        counts = await client.get("/api/tags/", params={"team_id": team.id}, headers=auth_headers)
        assert all(t["question_count"] == 0 for t in counts.json())
