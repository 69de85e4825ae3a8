from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class TagOut(BaseModel):
    id: int
    team_id: int
    name: str
    description: Optional[str] = None
    question_count: int
    created_at: datetime

    class Config:
        from_attributes = True
