"""
Notification sink and the per-user inbox.

``NotificationSink.notify`` is called after the triggering operation has
committed. A failure to record a notification is logged and dropped; it
never fails the request that caused it.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.core.exceptions import Forbidden, NotFound
from stackteam.core.logging import capture_error
from stackteam.db.session import transaction
from stackteam.logging import get_logger
from stackteam.models.notification import Notification, NotificationType
from stackteam.models.question import Question
from stackteam.models.user import User

logger = get_logger(__name__)


class NotificationSink:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def notify(
        self,
        recipient_id: int,
        actor_id: int,
        type: NotificationType,
        question_id: Optional[int] = None,
        answer_id: Optional[int] = None,
        comment_id: Optional[int] = None,
    ) -> Optional[Notification]:
        """
        Record one notification; a no-op when the actor is the recipient.

        Returns:
            The stored notification, or None if skipped or the write failed
        """
        if recipient_id is None or recipient_id == actor_id:
            return None

        notification = Notification(
            user_id=recipient_id,
            actor_id=actor_id,
            type=NotificationType(type).value,
            question_id=question_id,
            answer_id=answer_id,
            comment_id=comment_id,
        )
        try:
            self._session.add(notification)
            await self._session.commit()
        except Exception as exc:
            await self._session.rollback()
            logger.error(
                "Failed to record notification",
                recipient_id=recipient_id,
                type=NotificationType(type).value,
            )
            capture_error(exc, context={"notification": {"recipient_id": recipient_id, "type": NotificationType(type).value}})
            return None
        return notification


@dataclass
class NotificationView:
    notification: Notification
    actor_name: Optional[str]
    question_title: Optional[str]
    team_slug: Optional[str]


class NotificationInbox:
    """Read side of notifications; every call is scoped to the recipient."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def list(
        self,
        actor: User,
        limit: int = 20,
        offset: int = 0,
        unread_only: bool = False,
    ) -> Tuple[List[NotificationView], int]:
        conditions = [Notification.user_id == actor.id]
        if unread_only:
            conditions.append(Notification.is_read.is_(False))

        total = await self._session.scalar(select(func.count(Notification.id)).where(*conditions))
        result = await self._session.execute(
            select(Notification)
            .options(
                selectinload(Notification.actor),
                selectinload(Notification.question).selectinload(Question.team),
            )
            .where(*conditions)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        views = []
        for n in result.scalars().all():
            question = n.question
            views.append(NotificationView(
                notification=n,
                actor_name=n.actor.full_name if n.actor else None,
                question_title=question.title if question else None,
                team_slug=question.team.slug if question and question.team else None,
            ))
        return views, total or 0

    async def unread_count(self, actor: User) -> int:
        count = await self._session.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == actor.id,
                Notification.is_read.is_(False),
            )
        )
        return count or 0

    async def _own(self, actor: User, notification_id: int) -> Notification:
        notification = await self._session.get(Notification, notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        if notification.user_id != actor.id:
            raise Forbidden("Not your notification")
        return notification

    async def mark_read(self, actor: User, notification_id: int) -> None:
        async with transaction(self._session):
            notification = await self._own(actor, notification_id)
            notification.is_read = True

    async def mark_all_read(self, actor: User) -> None:
        async with transaction(self._session):
            await self._session.execute(
                update(Notification)
                .where(Notification.user_id == actor.id, Notification.is_read.is_(False))
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )

    async def delete(self, actor: User, notification_id: int) -> None:
        async with transaction(self._session):
            await self._own(actor, notification_id)
            await self._session.execute(
                delete(Notification).where(Notification.id == notification_id)
            )
