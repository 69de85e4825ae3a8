from dataclasses import dataclass
from datetime import datetime
from typing import List

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.db.session import transaction
from stackteam.models.answer import Answer
from stackteam.models.bookmark import Bookmark
from stackteam.models.question import Question
from stackteam.models.user import User
from stackteam.services.access import get_question_or_404, require_member


@dataclass
class BookmarkedQuestion:
    question: Question
    bookmarked_at: datetime
    has_accepted_answer: bool


class BookmarkService:
    """Per-user saved questions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _find(self, actor: User, question_id: int):
        result = await self._session.execute(
            select(Bookmark).where(Bookmark.user_id == actor.id, Bookmark.question_id == question_id)
        )
        return result.scalar_one_or_none()

    async def toggle(self, actor: User, question_id: int) -> bool:
        """Bookmark the question, or remove the bookmark if present. Returns the new state."""
        async with transaction(self._session):
            question = await get_question_or_404(self._session, question_id)
            await require_member(self._session, actor, question.team_id)

            bookmark = await self._find(actor, question_id)
            if bookmark is not None:
                await self._session.delete(bookmark)
                return False
            self._session.add(Bookmark(user_id=actor.id, question_id=question_id))
        return True

    async def check(self, actor: User, question_id: int) -> bool:
        question = await get_question_or_404(self._session, question_id)
        await require_member(self._session, actor, question.team_id)
        return await self._find(actor, question_id) is not None

    async def list(self, actor: User, team_id: int) -> List[BookmarkedQuestion]:
        """The actor's bookmarks in one team, most recently bookmarked first."""
        await require_member(self._session, actor, team_id)
        accepted = (
            exists()
            .where(Answer.question_id == Question.id, Answer.is_accepted.is_(True))
            .label("has_accepted_answer")
        )
        result = await self._session.execute(
            select(Question, Bookmark.created_at, accepted)
            .join(Bookmark, Bookmark.question_id == Question.id)
            .options(selectinload(Question.author), selectinload(Question.tags))
            .where(Bookmark.user_id == actor.id, Question.team_id == team_id)
            .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
            .execution_options(populate_existing=True)
        )
        return [
            BookmarkedQuestion(question=q, bookmarked_at=at, has_accepted_answer=bool(flag))
            for q, at, flag in result.all()
        ]
