"""
Team admin endpoints: members, roles and invites.

Every route requires the caller to be an admin of ``team_id``; the checks and
the last-admin protection live in ``MembershipEngine``.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.common import Message
from stackteam.schemas.invite import InviteCreate, InviteCreated, InviteOut, invite_out
from stackteam.schemas.team_member import (
    AdminMembersOut,
    AdminStats,
    RoleUpdate,
    TeamMemberOut,
    member_with_stats,
)
from stackteam.services.membership import MembershipEngine

router = APIRouter()


@router.get("/{team_id}/members", response_model=AdminMembersOut)
async def list_members(
    team_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    overview = await MembershipEngine(db).admin_overview(current_user, team_id)
    return AdminMembersOut(
        members=[member_with_stats(entry) for entry in overview.members],
        stats=AdminStats(
            total_members=overview.total_members,
            admin_count=overview.admin_count,
            pending_invites=overview.pending_invites,
        ),
    )


@router.put("/{team_id}/members/{user_id}/role", response_model=TeamMemberOut)
async def change_role(
    team_id: int,
    user_id: int,
    payload: RoleUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Promote or demote a member.

    Admins cannot change their own role, and the last admin cannot be demoted.
    """
    return await MembershipEngine(db).change_role(current_user, team_id, user_id, payload.role)


@router.delete("/{team_id}/members/{user_id}", response_model=Message)
async def remove_member(
    team_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await MembershipEngine(db).remove_member(current_user, team_id, user_id)
    return Message(message="Member removed")


@router.get("/{team_id}/invites", response_model=List[InviteOut])
async def list_invites(
    team_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    invites = await MembershipEngine(db).list_invites(current_user, team_id)
    return [invite_out(invite, inviter=invite.inviter) for invite in invites]


@router.post("/{team_id}/invites", response_model=InviteCreated, status_code=status.HTTP_201_CREATED)
async def create_invite(
    team_id: int,
    payload: InviteCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    invite = await MembershipEngine(db).create_invite(current_user, team_id, payload.email)
    data = invite_out(invite, inviter=current_user).model_dump()
    return InviteCreated(**data, invite_link=f"/invite/{invite.token}")


@router.delete("/{team_id}/invites/{invite_id}", response_model=Message)
async def cancel_invite(
    team_id: int,
    invite_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await MembershipEngine(db).cancel_invite(current_user, team_id, invite_id)
    return Message(message="Invite cancelled")
