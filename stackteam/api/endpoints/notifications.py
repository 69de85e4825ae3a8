from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.common import Message
from stackteam.schemas.notification import NotificationList, NotificationOut, UnreadCount
from stackteam.services.notifications import NotificationInbox

router = APIRouter()


@router.get("/", response_model=NotificationList)
async def list_notifications(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    views, total = await NotificationInbox(db).list(current_user, limit=limit, offset=offset, unread_only=unread_only)
    return NotificationList(
        notifications=[
            NotificationOut(
                id=v.notification.id,
                type=v.notification.type,
                is_read=v.notification.is_read,
                created_at=v.notification.created_at,
                actor_id=v.notification.actor_id,
                actor_name=v.actor_name,
                question_id=v.notification.question_id,
                question_title=v.question_title,
                team_slug=v.team_slug,
                answer_id=v.notification.answer_id,
                comment_id=v.notification.comment_id,
            )
            for v in views
        ],
        total=total,
    )


@router.get("/unread/count", response_model=UnreadCount)
async def unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return UnreadCount(count=await NotificationInbox(db).unread_count(current_user))


@router.put("/read-all", response_model=Message)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await NotificationInbox(db).mark_all_read(current_user)
    return Message(message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=Message)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await NotificationInbox(db).mark_read(current_user, notification_id)
    return Message(message="Notification marked as read")


@router.delete("/{notification_id}", response_model=Message)
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await NotificationInbox(db).delete(current_user, notification_id)
    return Message(message="Notification deleted")
