"""
Access token revocation backed by Redis.

A revoked token is stored as ``blacklist:<token>`` for exactly as long as it
would otherwise stay valid.
"""

from redis.asyncio import Redis

from stackteam.core.security import token_ttl_seconds
from stackteam.logging import get_logger

logger = get_logger(__name__)

PREFIX = "blacklist:"


class TokenBlacklist:
    def __init__(self, redis: Redis):
        self._redis = redis

    async def revoke(self, token: str) -> None:
        ttl = token_ttl_seconds(token)
        if ttl <= 0:
            return
        await self._redis.setex(f"{PREFIX}{token}", ttl, "revoked")
        logger.info("Token revoked", ttl=ttl)

    async def is_revoked(self, token: str) -> bool:
        return bool(await self._redis.exists(f"{PREFIX}{token}"))
