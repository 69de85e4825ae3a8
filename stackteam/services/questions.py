"""
Question store: listing, reading, asking, editing, closing and deleting.

Deleting a question removes everything hanging off it (answers, comments,
votes, tag links, bookmarks and notifications) in the same transaction.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.core.exceptions import Forbidden, ValidationError
from stackteam.core.permissions import (
    Action,
    Resource,
    TeamRole,
    can_close_question,
    can_delete_content,
    can_edit_content,
)
from stackteam.db.session import transaction
from stackteam.logging import get_logger
from stackteam.models.answer import Answer
from stackteam.models.bookmark import Bookmark
from stackteam.models.comment import Comment
from stackteam.models.content_ref import ContentKind
from stackteam.models.notification import Notification, NotificationType
from stackteam.models.question import Question
from stackteam.models.tag import QuestionTag, Tag
from stackteam.models.team_member import TeamMember
from stackteam.models.user import User
from stackteam.models.vote import Vote
from stackteam.services.access import (
    LIKE_ESCAPE,
    contains_pattern,
    get_question_or_404,
    require_member,
    require_permission,
    utcnow,
)
from stackteam.services.notifications import NotificationSink
from stackteam.services.tagging import attach_tags, detach_tags, normalize_tag_names, replace_tags

logger = get_logger(__name__)

SORTS = {
    "newest": (Question.created_at.desc(),),
    "active": (Question.last_activity_at.desc(),),
    "score": (Question.score.desc(), Question.created_at.desc()),
    "frequent": (Question.view_count.desc(),),
}


@dataclass
class QuestionPage:
    questions: List[Question]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass
class QuestionView:
    question: Question
    user_vote: Optional[str]


class QuestionService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._notifier = NotificationSink(session)

    async def _load(self, question_id: int) -> Question:
        result = await self._session.execute(
            select(Question)
            .options(selectinload(Question.author), selectinload(Question.tags))
            .where(Question.id == question_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def list_questions(
        self,
        actor: User,
        team_id: int,
        sort: str = "active",
        filter: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> QuestionPage:
        """
        One page of a team's questions.

        Filters:
            no-answers: questions nobody has answered
            unanswered: questions without an accepted answer
        """
        await require_member(self._session, actor, team_id)

        conditions = [Question.team_id == team_id]
        if tag:
            conditions.append(Question.id.in_(
                select(QuestionTag.question_id)
                .join(Tag, QuestionTag.tag_id == Tag.id)
                .where(Tag.team_id == team_id, Tag.name == tag.strip().lower())
            ))
        if search:
            pattern = contains_pattern(search.strip())
            conditions.append(or_(
                Question.title.ilike(pattern, escape=LIKE_ESCAPE),
                Question.body.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if filter == "no-answers":
            conditions.append(Question.answer_count == 0)
        elif filter == "unanswered":
            conditions.append(~exists().where(
                Answer.question_id == Question.id,
                Answer.is_accepted.is_(True),
            ))

        total = await self._session.scalar(select(func.count(Question.id)).where(*conditions))
        result = await self._session.execute(
            select(Question)
            .options(selectinload(Question.author), selectinload(Question.tags))
            .where(*conditions)
            .order_by(*SORTS.get(sort, SORTS["active"]), Question.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return QuestionPage(
            questions=list(result.scalars().all()),
            total=total or 0,
            page=page,
            limit=limit,
        )

    async def get_question(self, actor: User, question_id: int) -> QuestionView:
        """Read a question; every read counts as a view."""
        async with transaction(self._session):
            question = await get_question_or_404(self._session, question_id)
            await require_member(self._session, actor, question.team_id)
            await self._session.execute(
                update(Question)
                .where(Question.id == question_id)
                .values(view_count=Question.view_count + 1)
                .execution_options(synchronize_session=False)
            )

        question = await self._load(question_id)
        user_vote = await self._session.scalar(
            select(Vote.vote_type).where(
                Vote.votable_type == ContentKind.QUESTION,
                Vote.votable_id == question_id,
                Vote.user_id == actor.id,
            )
        )
        return QuestionView(question=question, user_vote=user_vote)

    async def create_question(
        self,
        actor: User,
        team_id: int,
        title: str,
        body: str,
        tags: List[str],
        mention_user_ids: Optional[List[int]] = None,
    ) -> Question:
        names = normalize_tag_names(tags)
        if not names:
            raise ValidationError("At least one tag is required")

        async with transaction(self._session):
            await require_permission(self._session, actor, team_id, Resource.QUESTION, Action.CREATE)
            now = utcnow()
            question = Question(
                team_id=team_id,
                user_id=actor.id,
                title=title,
                body=body,
                created_at=now,
                updated_at=now,
                last_activity_at=now,
            )
            self._session.add(question)
            await self._session.flush()
            await attach_tags(self._session, question, names)

            mentioned = []
            if mention_user_ids:
                result = await self._session.execute(
                    select(TeamMember.user_id).where(
                        TeamMember.team_id == team_id,
                        TeamMember.user_id.in_(list(set(mention_user_ids))),
                        TeamMember.user_id != actor.id,
                    )
                )
                mentioned = sorted(result.scalars().all())

        logger.info("Question created", question_id=question.id, team_id=team_id, user_id=actor.id)
        for user_id in mentioned:
            await self._notifier.notify(
                user_id, actor.id, NotificationType.MENTION, question_id=question.id
            )
        return await self._load(question.id)

    async def update_question(
        self,
        actor: User,
        question_id: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Question:
        if title is None and body is None and tags is None:
            raise ValidationError("Nothing to update")

        async with transaction(self._session):
            question = await get_question_or_404(self._session, question_id)
            await require_member(self._session, actor, question.team_id)
            if not can_edit_content(question.user_id == actor.id):
                raise Forbidden("You can only edit your own questions")

            if title is not None:
                question.title = title
            if body is not None:
                question.body = body
            now = utcnow()
            question.updated_at = now
            question.last_activity_at = now
            if tags is not None:
                await replace_tags(self._session, question, tags)

        return await self._load(question_id)

    async def delete_question(self, actor: User, question_id: int) -> None:
        async with transaction(self._session):
            question = await get_question_or_404(self._session, question_id)
            membership = await require_member(self._session, actor, question.team_id)
            if not can_delete_content(
                TeamRole(membership.role), Resource.QUESTION, question.user_id == actor.id
            ):
                raise Forbidden("You can only delete your own questions")

            answer_ids = list((await self._session.execute(
                select(Answer.id).where(Answer.question_id == question_id)
            )).scalars().all())
            on_question = (Comment.parent_type == ContentKind.QUESTION) & (Comment.parent_id == question_id)
            on_answers = (Comment.parent_type == ContentKind.ANSWER) & (Comment.parent_id.in_(answer_ids))
            comment_ids = list((await self._session.execute(
                select(Comment.id).where(or_(on_question, on_answers))
            )).scalars().all())

            await self._session.execute(
                delete(Notification)
                .where(or_(
                    Notification.question_id == question_id,
                    Notification.answer_id.in_(answer_ids),
                    Notification.comment_id.in_(comment_ids),
                ))
            )
            await self._session.execute(
                delete(Comment)
                .where(Comment.id.in_(comment_ids))
            )
            await self._session.execute(
                delete(Vote)
                .where(or_(
                    (Vote.votable_type == ContentKind.QUESTION) & (Vote.votable_id == question_id),
                    (Vote.votable_type == ContentKind.ANSWER) & (Vote.votable_id.in_(answer_ids)),
                ))
            )
            await detach_tags(self._session, question_id)
            await self._session.execute(
                delete(Bookmark)
                .where(Bookmark.question_id == question_id)
            )
            await self._session.execute(
                delete(Answer)
                .where(Answer.question_id == question_id)
            )
            await self._session.delete(question)

        logger.info("Question deleted", question_id=question_id, by=actor.id)

    async def _set_closed(self, actor: User, question_id: int, closed: bool) -> Question:
        async with transaction(self._session):
            question = await get_question_or_404(self._session, question_id)
            membership = await require_member(self._session, actor, question.team_id)
            if not can_close_question(TeamRole(membership.role), question.user_id == actor.id):
                raise Forbidden("Only the author or a team admin can close or reopen this question")
            question.is_closed = closed
            question.last_activity_at = utcnow()
        return await self._load(question_id)

    async def close_question(self, actor: User, question_id: int) -> Question:
        return await self._set_closed(actor, question_id, True)

    async def reopen_question(self, actor: User, question_id: int) -> Question:
        return await self._set_closed(actor, question_id, False)
