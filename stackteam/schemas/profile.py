"""
Public user profile, optionally scoped to one team's activity.
"""

from datetime import datetime
from typing import List
from pydantic import BaseModel

from stackteam.schemas.user import UserOut
from stackteam.schemas.team import TeamWithRole
from stackteam.schemas.question import QuestionOut


class UserAnswerOut(BaseModel):
    id: int
    question_id: int
    question_title: str
    score: int
    is_accepted: bool
    created_at: datetime


class UserProfileOut(UserOut):
    teams: List[TeamWithRole] = []
    questions: List[QuestionOut] = []
    answers: List[UserAnswerOut] = []
