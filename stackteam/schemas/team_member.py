"""
Pydantic schemas for Team Members.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class MemberAdd(BaseModel):
    """Schema for adding an existing user to a team by email"""
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class RoleUpdate(BaseModel):
    """Schema for changing a member's role"""
    role: str = Field(..., pattern="^(admin|member)$")


class TeamMemberOut(BaseModel):
    """Schema for team member output"""
    id: int
    team_id: int
    user_id: int
    role: str
    joined_at: datetime

    class Config:
        from_attributes = True


class MemberWithStats(BaseModel):
    """Team member with user details and per-team activity"""
    id: int
    email: str
    first_name: str
    last_name: str
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    role: str
    joined_at: datetime
    question_count: int = 0
    answer_count: int = 0


class AdminStats(BaseModel):
    total_members: int
    admin_count: int
    pending_invites: int


class AdminMembersOut(BaseModel):
    members: List[MemberWithStats]
    stats: AdminStats


def member_with_stats(entry) -> MemberWithStats:
    """Flatten a service ``MemberStats`` entry."""
    user, member = entry.user, entry.member
    return MemberWithStats(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        avatar_url=user.avatar_url,
        bio=user.bio,
        role=member.role,
        joined_at=member.joined_at,
        question_count=entry.question_count,
        answer_count=entry.answer_count,
    )
