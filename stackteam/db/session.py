"""
Async engine, session factory and the transaction helper.

Transaction guarantees:
- Each request gets its own session
- Every business operation runs inside ``transaction(session)``, which commits
  on success and rolls back on any exception
- On SQLite, where ``SELECT ... FOR UPDATE`` is a no-op, ``transaction`` opens
  with ``BEGIN IMMEDIATE`` so writers are serialized before they read
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from stackteam.core.config import settings


def build_engine(url: str, **kwargs):
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DATABASE_ECHO, **kwargs)
    return create_async_engine(url, echo=settings.DATABASE_ECHO, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.DATABASE_URL)
SessionAsync = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def _acquire_write_lock(session: AsyncSession) -> None:
    """Take SQLite's database write lock unless a write is already in progress."""
    conn = await session.connection()
    if conn.dialect.name != "sqlite":
        return
    raw = await conn.get_raw_connection()
    if not raw.driver_connection.in_transaction:
        await conn.exec_driver_sql("BEGIN IMMEDIATE")


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a block as one atomic unit.

    Usage:
        async with transaction(db):
            ...  # flush/execute freely; committed at the end
    """
    try:
        await _acquire_write_lock(session)
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
