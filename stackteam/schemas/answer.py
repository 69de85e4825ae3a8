"""
Pydantic schemas for answers.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from stackteam.schemas.user import UserSummary


class AnswerSort(str, Enum):
    SCORE = "score"
    OLDEST = "oldest"
    NEWEST = "newest"


class AnswerCreate(BaseModel):
    question_id: int
    body: str = Field(..., min_length=1)

    @field_validator("body", mode="before")
    @classmethod
    def strip_body(cls, value):
        return value.strip() if isinstance(value, str) else value


class AnswerUpdate(BaseModel):
    body: str = Field(..., min_length=1)

    @field_validator("body", mode="before")
    @classmethod
    def strip_body(cls, value):
        return value.strip() if isinstance(value, str) else value


class AnswerOut(BaseModel):
    """Schema for answer output"""
    id: int
    question_id: int
    user_id: int
    body: str
    score: int
    is_accepted: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    user_vote: Optional[str] = None

    class Config:
        from_attributes = True
