"""
Pydantic schemas for Team entities.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class TeamBase(BaseModel):
    """Base schema for team with common fields"""
    name: str = Field(..., min_length=1, max_length=255)
    company_name: Optional[str] = Field(None, max_length=255)
    company_size: Optional[str] = Field(None, max_length=50)
    primary_goal: Optional[str] = Field(None, max_length=255)


class TeamCreate(TeamBase):
    """Schema for creating a new team"""
    slug: str = Field(..., min_length=1, max_length=255, pattern="^[a-z0-9-]+$")


class TeamOut(TeamBase):
    """Schema for team output"""
    id: int
    slug: str
    created_at: datetime

    class Config:
        from_attributes = True


class TeamWithRole(TeamOut):
    """Team as seen by one of its members"""
    role: str
    joined_at: Optional[datetime] = None


class TeamStats(BaseModel):
    question_count: int
    member_count: int
    tag_count: int


class TeamDetail(TeamOut):
    """Team with statistics and the caller's role"""
    role: str
    stats: TeamStats


def team_with_role(team, member) -> TeamWithRole:
    data = TeamOut.model_validate(team).model_dump()
    return TeamWithRole(**data, role=member.role, joined_at=member.joined_at)
