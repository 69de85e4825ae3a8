from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
import redis.asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from stackteam.db.session import SessionAsync
from stackteam.models.user import User
from stackteam.core.config import settings
from stackteam.core.exceptions import Unauthenticated
from stackteam.core.security import decode_access_token
from stackteam.services.tokens import TokenBlacklist

ACCESS_TOKEN_COOKIE = "access_token"

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/token",
    description="Email and password authentication",
    auto_error=False,
)


async def get_db():
    async with SessionAsync() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_redis():
    redis = aioredis.from_url(settings.REDIS_URL)
    try:
        yield redis
    finally:
        await redis.aclose()


async def get_token(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
) -> str:
    """Bearer header first, then the access_token cookie."""
    token = bearer or request.cookies.get(ACCESS_TOKEN_COOKIE)
    if not token:
        raise Unauthenticated("Not authenticated")
    return token


async def get_current_user(
    request: Request,
    token: str = Depends(get_token),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
) -> User:
    credentials_exception = Unauthenticated("Invalid or expired token")
    try:
        payload = decode_access_token(token)
        user_id = payload.get("sub")
        tv = payload.get("tv")
        if user_id is None or tv is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    if await TokenBlacklist(redis).is_revoked(token):
        raise Unauthenticated("Token has been revoked")

    result = await db.execute(select(User).where(User.id == int(user_id)))
    user = result.scalar_one_or_none()
    if not user or int(tv) != int(user.token_version or 1):
        raise credentials_exception

    request.state.user_id = user.id
    return user
