from typing import Literal, Optional
from pydantic import BaseModel

from stackteam.models.content_ref import ContentKind, ContentRef


class VoteCreate(BaseModel):
    votable_type: ContentKind
    votable_id: int
    vote_type: Literal["up", "down"]

    @property
    def target(self) -> ContentRef:
        return ContentRef(self.votable_type, self.votable_id)


class VoteResult(BaseModel):
    """Outcome of a vote call: what happened and the target's new score"""
    action: Literal["added", "removed", "updated"]
    vote_type: Optional[str] = None
    score: int


class VoteState(BaseModel):
    vote_type: Optional[str] = None
