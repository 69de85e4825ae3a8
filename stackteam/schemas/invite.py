"""
Pydantic schemas for team invites.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator


class InviteCreate(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()


class InviteOut(BaseModel):
    id: int
    team_id: int
    email: str
    token: str
    status: str
    invited_by: int
    inviter_name: Optional[str] = None
    created_at: datetime
    expires_at: datetime


class InviteCreated(InviteOut):
    invite_link: str


class InviteAccept(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)


class InviteAcceptOut(BaseModel):
    message: str
    team_slug: str
    already_member: bool = False


class InvitePreview(BaseModel):
    """What the invite landing page shows before the user accepts"""
    email: str
    team_name: str
    team_slug: str
    invited_by: str
    expires_at: datetime


def invite_out(invite, inviter=None) -> InviteOut:
    return InviteOut(
        id=invite.id,
        team_id=invite.team_id,
        email=invite.email,
        token=invite.token,
        status=invite.effective_status,
        invited_by=invite.invited_by,
        inviter_name=inviter.full_name if inviter is not None else None,
        created_at=invite.created_at,
        expires_at=invite.expires_at,
    )
