"""
Tag linkage and per-tag question counts.

The attach/detach/replace helpers run inside the caller's transaction and
never commit on their own. Counts move by SQL expressions and are floored at
zero on the way down.
"""

from typing import Iterable, List

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.core.exceptions import ValidationError
from stackteam.models.question import Question
from stackteam.models.tag import QuestionTag, Tag
from stackteam.models.user import User
from stackteam.services.access import LIKE_ESCAPE, contains_pattern, require_member

MAX_TAGS_PER_QUESTION = 5
MAX_TAG_LENGTH = 50
SEARCH_LIMIT = 10


def normalize_tag_names(names: Iterable[str]) -> List[str]:
    """
    Strip, lowercase and deduplicate tag names, keeping first-seen order.

    Raises:
        ValidationError: If a name is empty or too long, or there are more
            than five distinct names
    """
    normalized: List[str] = []
    for raw in names:
        name = (raw or "").strip().lower()
        if not name:
            raise ValidationError("Tag names must not be empty")
        if len(name) > MAX_TAG_LENGTH:
            raise ValidationError(f"Tag names must be at most {MAX_TAG_LENGTH} characters")
        if name not in normalized:
            normalized.append(name)
    if len(normalized) > MAX_TAGS_PER_QUESTION:
        raise ValidationError(f"A question can have at most {MAX_TAGS_PER_QUESTION} tags")
    return normalized


async def attach_tags(session: AsyncSession, question: Question, names: Iterable[str]) -> List[Tag]:
    """Get-or-create each tag in the question's team and link it."""
    tags = []
    for name in normalize_tag_names(names):
        result = await session.execute(
            select(Tag).where(Tag.team_id == question.team_id, Tag.name == name)
        )
        tag = result.scalar_one_or_none()
        if tag is None:
            tag = Tag(team_id=question.team_id, name=name, question_count=0)
            session.add(tag)
            await session.flush()

        await session.execute(
            update(Tag)
            .where(Tag.id == tag.id)
            .values(question_count=Tag.question_count + 1)
            .execution_options(synchronize_session=False)
        )
        session.add(QuestionTag(question_id=question.id, tag_id=tag.id))
        tags.append(tag)

    await session.flush()
    return tags


async def detach_tags(session: AsyncSession, question_id: int) -> None:
    """Unlink every tag from the question, decrementing counts."""
    tag_ids = select(QuestionTag.tag_id).where(QuestionTag.question_id == question_id)
    await session.execute(
        update(Tag)
        .where(Tag.id.in_(tag_ids))
        .values(question_count=case((Tag.question_count > 0, Tag.question_count - 1), else_=0))
        .execution_options(synchronize_session=False)
    )
    await session.execute(
        delete(QuestionTag)
        .where(QuestionTag.question_id == question_id)
    )


async def replace_tags(session: AsyncSession, question: Question, names: Iterable[str]) -> List[Tag]:
    """Drop all current links and attach the new set."""
    names = normalize_tag_names(names)
    await detach_tags(session, question.id)
    return await attach_tags(session, question, names)


class TagService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def list_tags(self, actor: User, team_id: int) -> List[Tag]:
        """Team tags, most used first."""
        await require_member(self._session, actor, team_id)
        result = await self._session.execute(
            select(Tag)
            .where(Tag.team_id == team_id)
            .order_by(Tag.question_count.desc(), Tag.name)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def search_tags(self, actor: User, team_id: int, q: str) -> List[Tag]:
        await require_member(self._session, actor, team_id)
        result = await self._session.execute(
            select(Tag)
            .where(
                Tag.team_id == team_id,
                Tag.name.like(contains_pattern(q.strip().lower()), escape=LIKE_ESCAPE),
            )
            .order_by(Tag.question_count.desc(), Tag.name)
            .limit(SEARCH_LIMIT)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())
