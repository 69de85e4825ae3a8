"""
Identity and credentials: registration, login, profiles and user lookup.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from stackteam.core.exceptions import Conflict, NotFound, Unauthenticated, ValidationError
from stackteam.core.security import create_access_token, get_password_hash, verify_password
from stackteam.db.session import transaction
from stackteam.logging import get_logger
from stackteam.models.answer import Answer
from stackteam.models.question import Question
from stackteam.models.team import Team
from stackteam.models.team_member import TeamMember
from stackteam.models.user import User
from stackteam.services.access import LIKE_ESCAPE, contains_pattern, require_member, utcnow

logger = get_logger(__name__)

SEARCH_LIMIT = 10
PROFILE_FIELDS = ("first_name", "last_name", "work_type", "job_role", "avatar_url", "bio", "location")
REQUIRED_FIELDS = ("first_name", "last_name")


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)}, token_version=user.token_version)


@dataclass
class UserProfile:
    user: User
    teams: List[Tuple[Team, TeamMember]] = field(default_factory=list)
    questions: List[Question] = field(default_factory=list)
    answers: List[Tuple[Answer, str]] = field(default_factory=list)


class UserService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def _by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        work_type: Optional[str] = None,
        job_role: Optional[str] = None,
    ) -> Tuple[User, str]:
        """
        Create an account and sign it in.

        Raises:
            Conflict: If the email is already registered
        """
        async with transaction(self._session):
            if await self._by_email(email) is not None:
                raise Conflict("Email already registered")

            user = User(
                email=email.lower(),
                password=get_password_hash(password),
                first_name=first_name,
                last_name=last_name,
                work_type=work_type,
                job_role=job_role,
                token_version=1,
            )
            self._session.add(user)
            try:
                await self._session.flush()
            except IntegrityError:
                raise Conflict("Email already registered")

        logger.great("User registered", user_id=user.id)
        return user, issue_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Raises:
            Unauthenticated: Unknown email or wrong password, with one message for both
        """
        user = await self._by_email(email)
        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login attempt")
            raise Unauthenticated("Invalid email or password")
        return user, issue_token(user)

    async def update_profile(self, actor: User, changes: Dict[str, Any]) -> User:
        changes = {
            k: v for k, v in changes.items()
            if k in PROFILE_FIELDS and not (v is None and k in REQUIRED_FIELDS)
        }
        if not changes:
            raise ValidationError("No updates provided")

        async with transaction(self._session):
            for key, value in changes.items():
                setattr(actor, key, value)
            actor.updated_at = utcnow()
        return actor

    async def change_password(self, actor: User, current_password: str, new_password: str) -> str:
        """
        Replace the password and invalidate every previously issued token.

        Returns:
            A fresh access token carrying the new token version
        """
        if not verify_password(current_password, actor.password):
            raise Unauthenticated("Current password is incorrect")

        async with transaction(self._session):
            actor.password = get_password_hash(new_password)
            actor.token_version = (actor.token_version or 1) + 1
            actor.updated_at = utcnow()

        logger.info("Password changed", user_id=actor.id)
        return issue_token(actor)

    async def get_user(self, actor: User, user_id: int, team_id: Optional[int] = None) -> UserProfile:
        """
        A user's public profile; with ``team_id`` also their questions and
        answers in that team (the actor must belong to it).
        """
        user = await self._session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        teams = await self._session.execute(
            select(Team, TeamMember)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .where(TeamMember.user_id == user_id)
            .order_by(TeamMember.joined_at.desc())
        )
        profile = UserProfile(user=user, teams=[(t, m) for t, m in teams.all()])

        if team_id is not None:
            await require_member(self._session, actor, team_id)
            questions = await self._session.execute(
                select(Question)
                .options(selectinload(Question.author), selectinload(Question.tags))
                .where(Question.user_id == user_id, Question.team_id == team_id)
                .order_by(Question.created_at.desc())
                .execution_options(populate_existing=True)
            )
            profile.questions = list(questions.scalars().all())
            answers = await self._session.execute(
                select(Answer, Question.title)
                .join(Question, Answer.question_id == Question.id)
                .where(Answer.user_id == user_id, Question.team_id == team_id)
                .order_by(Answer.created_at.desc())
            )
            profile.answers = [(a, title) for a, title in answers.all()]
        return profile

    async def search_users(self, actor: User, team_id: int, q: Optional[str] = None) -> List[User]:
        """Team members matching ``q`` on name or email, for mentions."""
        await require_member(self._session, actor, team_id)
        query = (
            select(User)
            .join(TeamMember, TeamMember.user_id == User.id)
            .where(TeamMember.team_id == team_id)
        )
        if q:
            pattern = contains_pattern(q.strip())
            query = query.where(or_(
                User.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        result = await self._session.execute(
            query.order_by(User.first_name, User.last_name).limit(SEARCH_LIMIT)
        )
        return list(result.scalars().all())
