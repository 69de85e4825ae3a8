from datetime import datetime
from pydantic import BaseModel

from stackteam.schemas.question import QuestionOut


class BookmarkToggle(BaseModel):
    question_id: int


class BookmarkState(BaseModel):
    bookmarked: bool


class BookmarkedQuestion(QuestionOut):
    bookmarked_at: datetime
    has_accepted_answer: bool
