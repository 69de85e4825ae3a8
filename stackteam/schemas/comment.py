from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from stackteam.models.content_ref import ContentKind, ContentRef
from stackteam.schemas.user import UserSummary


class CommentCreate(BaseModel):
    parent_type: ContentKind
    parent_id: int
    body: str = Field(..., min_length=1, max_length=600)

    @field_validator("body", mode="before")
    @classmethod
    def strip_body(cls, value):
        return value.strip() if isinstance(value, str) else value

    @property
    def parent(self) -> ContentRef:
        return ContentRef(self.parent_type, self.parent_id)


class CommentOut(BaseModel):
    id: int
    parent_type: ContentKind
    parent_id: int
    user_id: int
    body: str
    created_at: datetime
    author: Optional[UserSummary] = None

    class Config:
        from_attributes = True
