"""
Team-scoped access checks shared by every service.

All content is team-scoped: an actor must hold a membership row in the team
that owns the data. Role checks go through the permission matrix in
``stackteam.core.permissions``.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.core.exceptions import Forbidden, NotFound
from stackteam.core.permissions import Action, Resource, TeamRole, has_permission
from stackteam.models.answer import Answer
from stackteam.models.content_ref import ContentRef
from stackteam.models.question import Question
from stackteam.models.team import Team
from stackteam.models.team_member import TeamMember
from stackteam.models.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """A LIKE pattern matching ``text`` anywhere, with wildcards taken literally."""
    escaped = (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


async def get_membership(session: AsyncSession, team_id: int, user_id: int) -> Optional[TeamMember]:
    result = await session.execute(
        select(TeamMember).where(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def get_team_or_404(session: AsyncSession, team_id: int) -> Team:
    team = await session.get(Team, team_id)
    if team is None:
        raise NotFound("Team not found")
    return team


async def get_team_by_slug(session: AsyncSession, slug: str) -> Team:
    result = await session.execute(select(Team).where(Team.slug == slug))
    team = result.scalar_one_or_none()
    if team is None:
        raise NotFound("Team not found")
    return team


async def require_member(session: AsyncSession, actor: User, team_id: int) -> TeamMember:
    """
    Return the actor's membership in the team.

    Raises:
        Forbidden: If the actor is not a member of the team
    """
    membership = await get_membership(session, team_id, actor.id)
    if membership is None:
        raise Forbidden("You are not a member of this team")
    return membership


async def require_permission(
    session: AsyncSession,
    actor: User,
    team_id: int,
    resource: Resource,
    action: Action,
) -> TeamMember:
    membership = await require_member(session, actor, team_id)
    if not has_permission(TeamRole(membership.role), resource, action):
        raise Forbidden("Admin access required")
    return membership


async def get_question_or_404(session: AsyncSession, question_id: int) -> Question:
    question = await session.get(Question, question_id)
    if question is None:
        raise NotFound("Question not found")
    return question


async def get_answer_or_404(session: AsyncSession, answer_id: int) -> Answer:
    answer = await session.get(Answer, answer_id)
    if answer is None:
        raise NotFound("Answer not found")
    return answer


async def touch_question(session: AsyncSession, question_id: int) -> None:
    """Bump the question's last activity to now."""
    await session.execute(
        update(Question)
        .where(Question.id == question_id)
        .values(last_activity_at=utcnow())
        .execution_options(synchronize_session=False)
    )


@dataclass
class ContentOwner:
    """Where a piece of content lives and who wrote it."""
    team_id: int
    question_id: int
    answer_id: Optional[int]
    author_id: int


async def resolve_content(session: AsyncSession, ref: ContentRef) -> ContentOwner:
    """
    Resolve a question/answer reference to its team, question and author.

    Raises:
        NotFound: If the referenced question or answer does not exist
    """
    if ref.is_question:
        question = await get_question_or_404(session, ref.id)
        return ContentOwner(question.team_id, question.id, None, question.user_id)
    answer = await get_answer_or_404(session, ref.id)
    question = await get_question_or_404(session, answer.question_id)
    return ContentOwner(question.team_id, question.id, answer.id, answer.user_id)
