"""
Teams API Endpoints

Team creation, membership as seen by members, leaving, and the invite
landing/accept flow. Admin-only member management lives in ``admin``.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stackteam.api.dependencies import get_current_user, get_db
from stackteam.models.user import User
from stackteam.schemas.common import Message
from stackteam.schemas.invite import InviteAccept, InviteAcceptOut, InvitePreview
from stackteam.schemas.team import TeamCreate, TeamDetail, TeamOut, TeamStats, TeamWithRole, team_with_role
from stackteam.schemas.team_member import MemberAdd, MemberWithStats, TeamMemberOut, member_with_stats
from stackteam.services.membership import MembershipEngine

router = APIRouter()


# ==================== Teams ====================

@router.get("/", response_model=List[TeamWithRole])
async def list_my_teams(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Teams the current user belongs to, most recently joined first."""
    teams = await MembershipEngine(db).list_my_teams(current_user)
    return [team_with_role(team, member) for team, member in teams]


@router.post("/", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new team.

    The creator becomes the team's first admin.
    """
    return await MembershipEngine(db).create_team(
        current_user,
        name=team_data.name,
        slug=team_data.slug,
        company_name=team_data.company_name,
        company_size=team_data.company_size,
        primary_goal=team_data.primary_goal,
    )


# ==================== Invites ====================

@router.get("/invites/{token}", response_model=InvitePreview)
async def preview_invite(token: str, db: AsyncSession = Depends(get_db)):
    """Public: what the invite landing page shows before signing in."""
    preview = await MembershipEngine(db).get_invite_preview(token)
    return InvitePreview(
        email=preview.invite.email,
        team_name=preview.team.name,
        team_slug=preview.team.slug,
        invited_by=preview.inviter.full_name if preview.inviter else "",
        expires_at=preview.invite.expires_at,
    )


@router.post("/invites/accept", response_model=InviteAcceptOut)
async def accept_invite(
    payload: InviteAccept,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    accepted = await MembershipEngine(db).accept_invite(current_user, payload.token)
    message = "You are already a member of this team" if accepted.already_member else "Successfully joined team"
    return InviteAcceptOut(
        message=message,
        team_slug=accepted.team.slug,
        already_member=accepted.already_member,
    )


# ==================== Single team ====================

@router.get("/{slug}", response_model=TeamDetail)
async def get_team(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Team details with statistics; members only."""
    view = await MembershipEngine(db).get_team(current_user, slug)
    data = TeamOut.model_validate(view.team).model_dump()
    return TeamDetail(
        **data,
        role=view.role,
        stats=TeamStats(
            question_count=view.stats.question_count,
            member_count=view.stats.member_count,
            tag_count=view.stats.tag_count,
        ),
    )


@router.get("/{slug}/members", response_model=List[MemberWithStats])
async def list_members(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    members = await MembershipEngine(db).list_members(current_user, slug)
    return [member_with_stats(entry) for entry in members]


@router.post("/{slug}/members", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
async def add_member(
    slug: str,
    payload: MemberAdd,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add an existing user by email. Admin only."""
    return await MembershipEngine(db).add_member(current_user, slug, payload.email)


@router.delete("/{slug}/leave", response_model=Message)
async def leave_team(
    slug: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await MembershipEngine(db).leave_team(current_user, slug)
    return Message(message="You have left the team")
