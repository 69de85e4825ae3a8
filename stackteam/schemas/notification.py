"""
Pydantic schemas for the notification inbox.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel


class NotificationOut(BaseModel):
    id: int
    type: str
    is_read: bool
    created_at: datetime
    actor_id: Optional[int] = None
    actor_name: Optional[str] = None
    question_id: Optional[int] = None
    question_title: Optional[str] = None
    team_slug: Optional[str] = None
    answer_id: Optional[int] = None
    comment_id: Optional[int] = None


class NotificationList(BaseModel):
    notifications: List[NotificationOut]
    total: int


class UnreadCount(BaseModel):
    count: int
