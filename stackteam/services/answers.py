"""
Answer store, including accepted-answer bookkeeping.

A question's ``answer_count`` moves with every create and delete and never
drops below zero; at most one answer per question is accepted.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import case, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.core.exceptions import Forbidden
from stackteam.core.permissions import (
    Action,
    Resource,
    TeamRole,
    can_delete_content,
    can_edit_content,
    has_permission,
)
from stackteam.db.session import transaction
from stackteam.logging import get_logger
from stackteam.models.answer import Answer
from stackteam.models.comment import Comment
from stackteam.models.content_ref import ContentKind
from stackteam.models.notification import Notification, NotificationType
from stackteam.models.question import Question
from stackteam.models.user import User
from stackteam.models.vote import Vote
from stackteam.services.access import (
    get_answer_or_404,
    get_question_or_404,
    require_member,
    require_permission,
    touch_question,
    utcnow,
)
from stackteam.services.notifications import NotificationSink

logger = get_logger(__name__)

SORTS = {
    "score": (Answer.score.desc(), Answer.created_at.asc()),
    "oldest": (Answer.created_at.asc(),),
    "newest": (Answer.created_at.desc(),),
}


@dataclass
class AnswerView:
    answer: Answer
    user_vote: Optional[str]


class AnswerService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._notifier = NotificationSink(session)

    async def _load(self, answer_id: int) -> Answer:
        result = await self._session.execute(
            select(Answer)
            .options(selectinload(Answer.author))
            .where(Answer.id == answer_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_answers(self, actor: User, question_id: int, sort: str = "score") -> List[AnswerView]:
        """Answers to a question, accepted answer first."""
        question = await get_question_or_404(self._session, question_id)
        await require_member(self._session, actor, question.team_id)

        result = await self._session.execute(
            select(Answer)
            .options(selectinload(Answer.author))
            .where(Answer.question_id == question_id)
            .order_by(Answer.is_accepted.desc(), *SORTS.get(sort, SORTS["score"]), Answer.id)
            .execution_options(populate_existing=True)
        )
        answers = list(result.scalars().all())

        votes: Dict[int, str] = {}
        if answers:
            rows = await self._session.execute(
                select(Vote.votable_id, Vote.vote_type).where(
                    Vote.votable_type == ContentKind.ANSWER,
                    Vote.votable_id.in_([a.id for a in answers]),
                    Vote.user_id == actor.id,
                )
            )
            votes = dict(rows.all())
        return [AnswerView(answer=a, user_vote=votes.get(a.id)) for a in answers]

    async def create_answer(self, actor: User, question_id: int, body: str) -> Answer:
        """
        Answer a question.

        Raises:
            Forbidden: If the question is closed and the actor is neither its
                author nor a team admin
        """
        async with transaction(self._session):
            question = await get_question_or_404(self._session, question_id)
            membership = await require_permission(
                self._session, actor, question.team_id, Resource.ANSWER, Action.CREATE
            )
            if question.is_closed and not (
                question.user_id == actor.id
                or has_permission(TeamRole(membership.role), Resource.QUESTION, Action.MODERATE)
            ):
                raise Forbidden("This question is closed")

            now = utcnow()
            answer = Answer(question_id=question_id, user_id=actor.id, body=body, created_at=now, updated_at=now)
            self._session.add(answer)
            await self._session.flush()
            await self._session.execute(
                update(Question)
                .where(Question.id == question_id)
                .values(answer_count=Question.answer_count + 1, last_activity_at=now)
                .execution_options(synchronize_session=False)
            )
            recipient_id = question.user_id

        await self._notifier.notify(
            recipient_id, actor.id, NotificationType.ANSWER, question_id=question_id, answer_id=answer.id
        )
        return await self._load(answer.id)

    async def update_answer(self, actor: User, answer_id: int, body: str) -> Answer:
        async with transaction(self._session):
            answer = await get_answer_or_404(self._session, answer_id)
            question = await get_question_or_404(self._session, answer.question_id)
            await require_member(self._session, actor, question.team_id)
            if not can_edit_content(answer.user_id == actor.id):
                raise Forbidden("You can only edit your own answers")

            answer.body = body
            answer.updated_at = utcnow()
            await touch_question(self._session, question.id)

        return await self._load(answer_id)

    async def delete_answer(self, actor: User, answer_id: int) -> None:
        async with transaction(self._session):
            answer = await get_answer_or_404(self._session, answer_id)
            question = await get_question_or_404(self._session, answer.question_id)
            membership = await require_member(self._session, actor, question.team_id)
            if not can_delete_content(TeamRole(membership.role), Resource.ANSWER, answer.user_id == actor.id):
                raise Forbidden("You can only delete your own answers")

            comment_ids = list((await self._session.execute(
                select(Comment.id).where(
                    Comment.parent_type == ContentKind.ANSWER,
                    Comment.parent_id == answer_id,
                )
            )).scalars().all())
            await self._session.execute(
                delete(Notification)
                .where(or_(Notification.answer_id == answer_id, Notification.comment_id.in_(comment_ids)))
            )
            await self._session.execute(
                delete(Comment)
                .where(Comment.id.in_(comment_ids))
            )
            await self._session.execute(
                delete(Vote)
                .where(Vote.votable_type == ContentKind.ANSWER, Vote.votable_id == answer_id)
            )
            await self._session.delete(answer)
            await self._session.execute(
                update(Question)
                .where(Question.id == question.id)
                .values(
                    answer_count=case((Question.answer_count > 0, Question.answer_count - 1), else_=0),
                    last_activity_at=utcnow(),
                )
                .execution_options(synchronize_session=False)
            )

        logger.info("Answer deleted", answer_id=answer_id, question_id=question.id, by=actor.id)

    async def accept_answer(self, actor: User, answer_id: int) -> Answer:
        """Mark an answer as the accepted one, clearing any previous choice."""
        async with transaction(self._session):
            answer = await get_answer_or_404(self._session, answer_id)
            question = await get_question_or_404(self._session, answer.question_id)
            await require_permission(self._session, actor, question.team_id, Resource.ANSWER, Action.ACCEPT)

            await self._session.execute(
                update(Answer)
                .where(Answer.question_id == question.id, Answer.is_accepted.is_(True))
                .values(is_accepted=False)
                .execution_options(synchronize_session=False)
            )
            await self._session.execute(
                update(Answer)
                .where(Answer.id == answer_id)
                .values(is_accepted=True)
                .execution_options(synchronize_session=False)
            )
            await touch_question(self._session, question.id)
            recipient_id = answer.user_id

        await self._notifier.notify(
            recipient_id, actor.id, NotificationType.ACCEPTED, question_id=question.id, answer_id=answer_id
        )
        return await self._load(answer_id)
