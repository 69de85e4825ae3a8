"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- A fresh SQLite database per test (or TEST_DATABASE_URL when set)
- Redis client (in-memory fake)
- HTTP client with dependency overrides; every request gets its own session
- Base data fixtures (user, team, auth_headers)
"""

import os
import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from fakeredis import FakeAsyncRedis

# Set test environment variables BEFORE importing app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("SENTRY_DSN", None)

from stackteam.main import app
from stackteam.api.dependencies import get_db, get_redis
from stackteam.core.security import create_access_token
from stackteam.db.base import Base


def bearer(user) -> dict:
    token = create_access_token(data={"sub": str(user.id)}, token_version=user.token_version)
    return {"Authorization": f"Bearer {token}"}


# ==================== Database ====================

@pytest.fixture(scope="function")
async def test_engine(tmp_path):
    """
    Create a test database engine with all tables.

    Defaults to a throwaway SQLite file; set TEST_DATABASE_URL to run
    against PostgreSQL.
    """
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_engine):
    """
    Session factory bound to the test database.

    Service-level tests open one session per operation, as each request would:

        async with session_factory() as s:
            await MembershipEngine(s).change_role(...)
    """
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to arrange data and inspect results."""
    async with session_factory() as session:
        yield session


# ==================== Redis ====================

@pytest.fixture(scope="function")
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    """
    Fake Redis client (in-memory) for each test.
    """
    redis = FakeAsyncRedis()
    yield redis
    await redis.flushall()
    await redis.aclose()


# ==================== FastAPI Client ====================

@pytest.fixture(scope="function")
async def client(
    session_factory,
    redis_client: FakeAsyncRedis
) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for testing FastAPI endpoints.

    Overrides get_db and get_redis dependencies to use test fixtures.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        yield redis_client

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ==================== Base Data Fixtures ====================

@pytest.fixture
def headers_for():
    """Build bearer headers for any user: ``headers_for(user)``."""
    return bearer


@pytest.fixture
async def user(db_session: AsyncSession):
    """Default test user (password: Password123!)."""
    from tests.factories import UserFactory
    user = await UserFactory.create_async(db_session, email="owner@test.com", first_name="Olivia", last_name="Owner")
    await db_session.commit()
    return user


@pytest.fixture
async def auth_headers(user):
    return bearer(user)


@pytest.fixture
async def member_user(db_session: AsyncSession):
    from tests.factories import UserFactory
    user = await UserFactory.create_async(db_session, email="member@test.com", first_name="Max", last_name="Member")
    await db_session.commit()
    return user


@pytest.fixture
async def member_headers(member_user):
    return bearer(member_user)


@pytest.fixture
async def outsider(db_session: AsyncSession):
    """A user who belongs to no team."""
    from tests.factories import UserFactory
    user = await UserFactory.create_async(db_session, email="outsider@test.com")
    await db_session.commit()
    return user


@pytest.fixture
async def outsider_headers(outsider):
    return bearer(outsider)


@pytest.fixture
async def team(db_session: AsyncSession, user, member_user):
    """
    Team with ``user`` as its only admin and ``member_user`` as a member.
    """
    from tests.factories import TeamFactory, TeamMemberFactory
    team = await TeamFactory.create_async(db_session, slug="acme", name="Acme")
    await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=user.id, role="admin")
    await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=member_user.id, role="member")
    await db_session.commit()
    return team


@pytest.fixture
async def question(db_session: AsyncSession, team, user):
    """Question by ``user`` in ``team`` tagged python."""
    from tests.factories import QuestionFactory
    question = await QuestionFactory.create_async(
        db_session, team_id=team.id, user_id=user.id, tags=["python"]
    )
    await db_session.commit()
    return question
