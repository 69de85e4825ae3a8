"""
Pydantic schemas for questions.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from stackteam.schemas.user import UserSummary

MAX_TAGS = 5


class QuestionSort(str, Enum):
    NEWEST = "newest"
    ACTIVE = "active"
    SCORE = "score"
    FREQUENT = "frequent"


class QuestionFilter(str, Enum):
    NO_ANSWERS = "no-answers"
    UNANSWERED = "unanswered"


def _clean_tags(tags):
    if tags is None:
        return tags
    cleaned = []
    for tag in tags:
        if not isinstance(tag, str):
            raise ValueError("Tags must be strings")
        tag = tag.strip()
        if not tag:
            raise ValueError("Tags must not be empty")
        if len(tag) > 50:
            raise ValueError("Tags must be at most 50 characters")
        cleaned.append(tag)
    return cleaned


class QuestionCreate(BaseModel):
    """Schema for asking a question"""
    team_id: int
    title: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., min_length=1)
    tags: List[str] = Field(..., min_length=1, max_length=MAX_TAGS)
    # Team members to notify
    mention_user_ids: List[int] = []

    @field_validator("title", "body", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value):
        return _clean_tags(value)


class QuestionUpdate(BaseModel):
    """Schema for editing a question; omitted fields are left unchanged"""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    body: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = Field(None, min_length=1, max_length=MAX_TAGS)

    @field_validator("title", "body", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value):
        return _clean_tags(value)


class QuestionOut(BaseModel):
    """Schema for question output"""
    id: int
    team_id: int
    user_id: int
    title: str
    body: str
    view_count: int
    score: int
    answer_count: int
    is_closed: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    tags: List[str] = []

    class Config:
        from_attributes = True

    @field_validator("tags", mode="before")
    @classmethod
    def tag_names(cls, value):
        return [getattr(tag, "name", tag) for tag in value or []]


class QuestionDetail(QuestionOut):
    """Question with the caller's current vote"""
    user_vote: Optional[str] = None


class QuestionList(BaseModel):
    questions: List[QuestionOut]
    total: int
    page: int
    limit: int
    total_pages: int
