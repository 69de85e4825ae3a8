"""
Membership engine: teams, members, roles and invites.

Guarantees:
1. A team with at least one member always keeps at least one admin
2. Admins cannot demote or remove themselves
3. Invite tokens are single-use and expire
4. Every mutation runs in one transaction; a rejected call changes nothing

Admin counts are always taken from the team's membership rows locked with
``SELECT ... FOR UPDATE``, so two concurrent demotions cannot both pass the
last-admin check.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.core.config import settings
from stackteam.core.exceptions import (
    Conflict,
    Expired,
    Forbidden,
    InvalidOperation,
    InvalidState,
    InvariantViolation,
    NotFound,
)
from stackteam.core.permissions import Action, Resource, TeamRole, can_manage_members
from stackteam.core.security import generate_invite_token
from stackteam.db.session import transaction
from stackteam.logging import get_logger
from stackteam.models.answer import Answer
from stackteam.models.question import Question
from stackteam.models.tag import Tag
from stackteam.models.team import Team
from stackteam.models.team_invite import TeamInvite
from stackteam.models.team_member import TeamMember
from stackteam.models.user import User
from stackteam.services.access import (
    get_membership,
    get_team_by_slug,
    get_team_or_404,
    require_member,
    require_permission,
    utcnow,
)

logger = get_logger(__name__)


# =============================================================================
# DATA TRANSFER OBJECTS
# =============================================================================


@dataclass
class TeamCounts:
    question_count: int
    member_count: int
    tag_count: int


@dataclass
class TeamView:
    """Team as seen by one of its members."""
    team: Team
    role: str
    stats: TeamCounts


@dataclass
class MemberStats:
    member: TeamMember
    user: User
    question_count: int
    answer_count: int


@dataclass
class AdminOverview:
    members: List[MemberStats]
    total_members: int
    admin_count: int
    pending_invites: int


@dataclass
class AcceptedInvite:
    invite: TeamInvite
    team: Team
    already_member: bool


@dataclass
class InvitePreview:
    invite: TeamInvite
    team: Team
    inviter: User


# =============================================================================
# MEMBERSHIP ENGINE
# =============================================================================


class MembershipEngine:
    """
    Team lifecycle, membership and invite operations.

    Every public method takes the acting user explicitly and authorizes
    against that user's membership before touching any row.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def _lock_members(self, team_id: int) -> List[TeamMember]:
        """Lock and reload every membership row of the team."""
        result = await self._session.execute(
            select(TeamMember)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    @staticmethod
    def _admins_other_than(members: Sequence[TeamMember], user_id: int) -> int:
        return sum(1 for m in members if m.is_admin and m.user_id != user_id)

    @staticmethod
    def _require_manager(membership: Optional[TeamMember]) -> None:
        if membership is None:
            raise Forbidden("You are not a member of this team")
        if not can_manage_members(TeamRole(membership.role)):
            raise Forbidden("Admin access required")

    # =========================================================================
    # TEAMS
    # =========================================================================

    async def create_team(
        self,
        creator: User,
        name: str,
        slug: str,
        company_name: Optional[str] = None,
        company_size: Optional[str] = None,
        primary_goal: Optional[str] = None,
    ) -> Team:
        """
        Create a team and make the creator its first admin.

        Raises:
            Conflict: If the slug is already taken
        """
        async with transaction(self._session):
            existing = await self._session.execute(select(Team.id).where(Team.slug == slug))
            if existing.scalar_one_or_none() is not None:
                raise Conflict("Team slug already taken")

            team = Team(
                name=name,
                slug=slug,
                company_name=company_name,
                company_size=company_size,
                primary_goal=primary_goal,
            )
            self._session.add(team)
            try:
                await self._session.flush()
            except IntegrityError:
                raise Conflict("Team slug already taken")

            self._session.add(TeamMember(
                team_id=team.id,
                user_id=creator.id,
                role=TeamRole.ADMIN.value,
            ))

        logger.great("Team created", team_id=team.id, slug=slug, user_id=creator.id)
        return team

    async def _team_counts(self, team_id: int) -> TeamCounts:
        questions = await self._session.scalar(
            select(func.count(Question.id)).where(Question.team_id == team_id)
        )
        members = await self._session.scalar(
            select(func.count(TeamMember.id)).where(TeamMember.team_id == team_id)
        )
        tags = await self._session.scalar(
            select(func.count(Tag.id)).where(Tag.team_id == team_id)
        )
        return TeamCounts(question_count=questions or 0, member_count=members or 0, tag_count=tags or 0)

    async def get_team(self, actor: User, slug: str) -> TeamView:
        team = await get_team_by_slug(self._session, slug)
        membership = await require_member(self._session, actor, team.id)
        return TeamView(team=team, role=membership.role, stats=await self._team_counts(team.id))

    async def list_my_teams(self, actor: User) -> List[Tuple[Team, TeamMember]]:
        """Teams the actor belongs to, most recently joined first."""
        result = await self._session.execute(
            select(Team, TeamMember)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.user_id == actor.id)
            .order_by(TeamMember.joined_at.desc(), TeamMember.id.desc())
        )
        return [(team, member) for team, member in result.all()]

    # =========================================================================
    # MEMBERS
    # =========================================================================

    async def _member_stats(self, team_id: int) -> List[MemberStats]:
        question_counts: Dict[int, int] = dict((await self._session.execute(
            select(Question.user_id, func.count(Question.id))
            .where(Question.team_id == team_id)
            .group_by(Question.user_id)
        )).all())
        answer_counts: Dict[int, int] = dict((await self._session.execute(
            select(Answer.user_id, func.count(Answer.id))
            .join(Question, Answer.question_id == Question.id)
            .where(Question.team_id == team_id)
            .group_by(Answer.user_id)
        )).all())

        result = await self._session.execute(
            select(TeamMember, User)
            .join(User, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team_id)
            .order_by(TeamMember.role, TeamMember.joined_at, TeamMember.id)
        )
        return [
            MemberStats(
                member=member,
                user=user,
                question_count=question_counts.get(user.id, 0),
                answer_count=answer_counts.get(user.id, 0),
            )
            for member, user in result.all()
        ]

    async def list_members(self, actor: User, slug: str) -> List[MemberStats]:
        team = await get_team_by_slug(self._session, slug)
        await require_member(self._session, actor, team.id)
        return await self._member_stats(team.id)

    async def admin_overview(self, requestor: User, team_id: int) -> AdminOverview:
        await get_team_or_404(self._session, team_id)
        await require_permission(self._session, requestor, team_id, Resource.TEAM_MEMBER, Action.MANAGE)

        members = await self._member_stats(team_id)
        pending = await self._session.scalar(
            select(func.count(TeamInvite.id)).where(
                TeamInvite.team_id == team_id,
                TeamInvite.status == "pending",
                TeamInvite.expires_at > utcnow(),
            )
        )
        return AdminOverview(
            members=members,
            total_members=len(members),
            admin_count=sum(1 for m in members if m.member.is_admin),
            pending_invites=pending or 0,
        )

    async def add_member(self, requestor: User, slug: str, email: str) -> TeamMember:
        """
        Add an existing user to the team as a member.

        Raises:
            NotFound: If the team or the user does not exist
            Forbidden: If the requestor is not a team admin
            Conflict: If the user is already a member
        """
        async with transaction(self._session):
            team = await get_team_by_slug(self._session, slug)
            await require_permission(self._session, requestor, team.id, Resource.TEAM_MEMBER, Action.INVITE)

            result = await self._session.execute(
                select(User).where(func.lower(User.email) == email.lower())
            )
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFound("User not found")

            if await get_membership(self._session, team.id, user.id) is not None:
                raise Conflict("User is already a member of this team")

            member = TeamMember(team_id=team.id, user_id=user.id, role=TeamRole.MEMBER.value)
            self._session.add(member)
            try:
                await self._session.flush()
            except IntegrityError:
                raise Conflict("User is already a member of this team")

        logger.info("Member added", team_id=team.id, user_id=user.id, by=requestor.id)
        return member

    async def change_role(
        self,
        requestor: User,
        team_id: int,
        target_user_id: int,
        new_role: str,
    ) -> TeamMember:
        """
        Change a member's role.

        Raises:
            NotFound: If the team is missing or the target is not a member
            Forbidden: If the requestor is not a team admin
            InvalidOperation: If the requestor targets themselves
            InvariantViolation: If the change would leave the team without an admin
        """
        new_role = TeamRole(new_role)
        async with transaction(self._session):
            await get_team_or_404(self._session, team_id)
            members = await self._lock_members(team_id)
            by_user = {m.user_id: m for m in members}

            self._require_manager(by_user.get(requestor.id))
            if target_user_id == requestor.id:
                raise InvalidOperation("You cannot change your own role")

            target = by_user.get(target_user_id)
            if target is None:
                raise NotFound("User is not a member of this team")

            if new_role is TeamRole.MEMBER and self._admins_other_than(members, target_user_id) == 0:
                raise InvariantViolation()

            target.role = new_role.value

        logger.info("Member role changed", team_id=team_id, user_id=target_user_id, role=new_role.value, by=requestor.id)
        return target

    async def remove_member(self, requestor: User, team_id: int, target_user_id: int) -> None:
        """
        Remove a member from the team.

        Raises:
            NotFound: If the team is missing or the target is not a member
            Forbidden: If the requestor is not a team admin
            InvalidOperation: If the requestor targets themselves
            InvariantViolation: If the target is the team's only admin
        """
        async with transaction(self._session):
            await get_team_or_404(self._session, team_id)
            members = await self._lock_members(team_id)
            by_user = {m.user_id: m for m in members}

            self._require_manager(by_user.get(requestor.id))
            if target_user_id == requestor.id:
                raise InvalidOperation("You cannot remove yourself; leave the team instead")

            target = by_user.get(target_user_id)
            if target is None:
                raise NotFound("User is not a member of this team")

            if target.is_admin and self._admins_other_than(members, target_user_id) == 0:
                raise InvariantViolation()

            await self._session.delete(target)

        logger.info("Member removed", team_id=team_id, user_id=target_user_id, by=requestor.id)

    async def leave_team(self, user: User, slug: str) -> None:
        """
        Leave a team.

        The only admin may leave only when nobody else is left in the team.
        """
        async with transaction(self._session):
            team = await get_team_by_slug(self._session, slug)
            members = await self._lock_members(team.id)
            own = next((m for m in members if m.user_id == user.id), None)
            if own is None:
                raise InvalidOperation("You are not a member of this team")

            if own.is_admin and self._admins_other_than(members, user.id) == 0 and len(members) > 1:
                raise InvariantViolation(
                    "You are the only admin. Promote another member to admin before leaving."
                )

            await self._session.delete(own)

        logger.info("Member left team", team_id=team.id, user_id=user.id)

    # =========================================================================
    # INVITES
    # =========================================================================

    async def create_invite(self, requestor: User, team_id: int, email: str) -> TeamInvite:
        """
        Invite an email address to the team.

        Raises:
            Conflict: If the email belongs to a member or already has a live invite
        """
        email = email.lower()
        async with transaction(self._session):
            await get_team_or_404(self._session, team_id)
            await require_permission(self._session, requestor, team_id, Resource.INVITE, Action.CREATE)

            member = await self._session.execute(
                select(TeamMember.id)
                .join(User, TeamMember.user_id == User.id)
                .where(TeamMember.team_id == team_id, func.lower(User.email) == email)
            )
            if member.scalar_one_or_none() is not None:
                raise Conflict("User is already a member of this team")

            now = utcnow()
            pending = await self._session.execute(
                select(TeamInvite.id).where(
                    TeamInvite.team_id == team_id,
                    TeamInvite.email == email,
                    TeamInvite.status == "pending",
                    TeamInvite.expires_at > now,
                )
            )
            if pending.first() is not None:
                raise Conflict("An invite is already pending for this email")

            # Lapsed pending invites for the address are closed out
            await self._session.execute(
                update(TeamInvite)
                .where(
                    TeamInvite.team_id == team_id,
                    TeamInvite.email == email,
                    TeamInvite.status == "pending",
                )
                .values(status="expired")
                .execution_options(synchronize_session=False)
            )

            invite = TeamInvite(
                team_id=team_id,
                email=email,
                invited_by=requestor.id,
                token=generate_invite_token(),
                status="pending",
                created_at=now,
                expires_at=now + timedelta(days=settings.INVITE_EXPIRE_DAYS),
            )
            self._session.add(invite)
            await self._session.flush()

        logger.info("Invite created", team_id=team_id, invite_id=invite.id, by=requestor.id)
        return invite

    async def list_invites(self, requestor: User, team_id: int) -> List[TeamInvite]:
        """Pending, unexpired invites, newest first."""
        await get_team_or_404(self._session, team_id)
        await require_permission(self._session, requestor, team_id, Resource.INVITE, Action.READ)

        result = await self._session.execute(
            select(TeamInvite)
            .options(selectinload(TeamInvite.inviter))
            .where(
                TeamInvite.team_id == team_id,
                TeamInvite.status == "pending",
                TeamInvite.expires_at > utcnow(),
            )
            .order_by(TeamInvite.created_at.desc(), TeamInvite.id.desc())
        )
        return list(result.scalars().all())

    async def cancel_invite(self, requestor: User, team_id: int, invite_id: int) -> TeamInvite:
        async with transaction(self._session):
            await get_team_or_404(self._session, team_id)
            await require_permission(self._session, requestor, team_id, Resource.INVITE, Action.DELETE)

            result = await self._session.execute(
                select(TeamInvite).where(TeamInvite.id == invite_id, TeamInvite.team_id == team_id)
            )
            invite = result.scalar_one_or_none()
            if invite is None:
                raise NotFound("Invite not found")
            invite.status = "cancelled"

        logger.info("Invite cancelled", team_id=team_id, invite_id=invite_id, by=requestor.id)
        return invite

    async def _live_invite(self, token: str, lock: bool = False) -> TeamInvite:
        """
        Resolve a token to a pending, unexpired invite.

        Checks run in order: unknown token, expiry, status.
        """
        query = select(TeamInvite).where(TeamInvite.token == token)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        invite = (await self._session.execute(query)).scalar_one_or_none()
        if invite is None:
            raise NotFound("Invite not found")
        if invite.is_expired():
            raise Expired("This invite has expired")
        if invite.status != "pending":
            raise InvalidState(f"This invite has already been {invite.status}")
        return invite

    async def get_invite_preview(self, token: str) -> InvitePreview:
        invite = await self._live_invite(token)
        team = await self._session.get(Team, invite.team_id)
        inviter = await self._session.get(User, invite.invited_by)
        return InvitePreview(invite=invite, team=team, inviter=inviter)

    async def accept_invite(self, user: User, token: str) -> AcceptedInvite:
        """
        Accept an invite on behalf of the user it was sent to.

        Accepting as an existing member marks the invite accepted and succeeds.

        Raises:
            NotFound: Unknown token
            Expired: The invite's expiry has passed
            InvalidState: The invite is no longer pending
            Forbidden: The user's email differs from the invited address
        """
        async with transaction(self._session):
            invite = await self._live_invite(token, lock=True)
            if invite.email.lower() != user.email.lower():
                raise Forbidden("This invite was sent to a different email address")

            already_member = await get_membership(self._session, invite.team_id, user.id) is not None
            if not already_member:
                self._session.add(TeamMember(
                    team_id=invite.team_id,
                    user_id=user.id,
                    role=TeamRole.MEMBER.value,
                ))
            invite.status = "accepted"
            try:
                await self._session.flush()
            except IntegrityError:
                raise Conflict("User is already a member of this team")

            team = await self._session.get(Team, invite.team_id)

        logger.great("Invite accepted", team_id=invite.team_id, invite_id=invite.id, user_id=user.id)
        return AcceptedInvite(invite=invite, team=team, already_member=already_member)
