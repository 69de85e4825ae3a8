"""
Comments on questions and answers.
"""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.core.exceptions import Forbidden, NotFound
from stackteam.core.permissions import Action, Resource, TeamRole, can_delete_content
from stackteam.db.session import transaction
from stackteam.models.comment import Comment
from stackteam.models.content_ref import ContentRef
from stackteam.models.notification import Notification, NotificationType
from stackteam.models.user import User
from stackteam.services.access import (
    require_member,
    require_permission,
    resolve_content,
    touch_question,
    utcnow,
)
from stackteam.services.notifications import NotificationSink


class CommentService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._notifier = NotificationSink(session)

    async def list_comments(self, actor: User, parent: ContentRef) -> List[Comment]:
        owner = await resolve_content(self._session, parent)
        await require_member(self._session, actor, owner.team_id)
        result = await self._session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.parent_type == parent.kind, Comment.parent_id == parent.id)
            .order_by(Comment.created_at, Comment.id)
        )
        return list(result.scalars().all())

    async def create_comment(self, actor: User, parent: ContentRef, body: str) -> Comment:
        async with transaction(self._session):
            owner = await resolve_content(self._session, parent)
            await require_permission(self._session, actor, owner.team_id, Resource.COMMENT, Action.CREATE)

            now = utcnow()
            comment = Comment(
                parent_type=parent.kind,
                parent_id=parent.id,
                user_id=actor.id,
                body=body,
                created_at=now,
                updated_at=now,
            )
            self._session.add(comment)
            await self._session.flush()
            await touch_question(self._session, owner.question_id)

        await self._notifier.notify(
            owner.author_id,
            actor.id,
            NotificationType.COMMENT,
            question_id=owner.question_id,
            answer_id=owner.answer_id,
            comment_id=comment.id,
        )
        result = await self._session.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.id == comment.id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def delete_comment(self, actor: User, comment_id: int) -> None:
        async with transaction(self._session):
            comment = await self._session.get(Comment, comment_id)
            if comment is None:
                raise NotFound("Comment not found")
            owner = await resolve_content(self._session, comment.parent)
            membership = await require_member(self._session, actor, owner.team_id)
            if not can_delete_content(TeamRole(membership.role), Resource.COMMENT, comment.user_id == actor.id):
                raise Forbidden("You can only delete your own comments")

            await self._session.execute(
                delete(Notification)
                .where(Notification.comment_id == comment_id)
            )
            await self._session.delete(comment)
