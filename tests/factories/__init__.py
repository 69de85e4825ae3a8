"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import UserFactory, TeamFactory

    # Create user
    user = await UserFactory.create_async(db_session, email="custom@test.com")

    # Create team and membership
    team = await TeamFactory.create_async(db_session, slug="acme")
    await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=user.id, role="admin")
"""

from tests.factories.user import UserFactory
from tests.factories.team import TeamFactory
from tests.factories.team_member import TeamMemberFactory
from tests.factories.team_invite import TeamInviteFactory
from tests.factories.question import QuestionFactory, AnswerFactory

__all__ = [
    "UserFactory",
    "TeamFactory",
    "TeamMemberFactory",
    "TeamInviteFactory",
    "QuestionFactory",
    "AnswerFactory",
]
