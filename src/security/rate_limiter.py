"""Redis-backed fixed-window rate limiter for the assistant endpoint.

Each broker gets a counter per window (INCR, EXPIRE on the first hit).
Checked before any database or LLM work.

Usage:
    from src.security.rate_limiter import rate_limiter

    allowed, retry_after = await rate_limiter.check_chat(broker_id)
"""

from __future__ import annotations

import logging

from redis.exceptions import RedisError

from src.config import settings
from src.db.engine import redis_client

logger = logging.getLogger(__name__)


def chat_key(broker_id: str) -> str:
    """Redis key for a broker's assistant message counter."""
    return f"rate:chat:{broker_id}"


class RateLimiter:
    """Fixed-window counters in Redis."""

    def __init__(self, redis: object) -> None:
        self._redis = redis

    async def check(self, key: str, limit: int, window: int) -> tuple[bool, int]:
        """Count one request against `key`.

        Returns (allowed, retry_after). retry_after is the number of seconds
        until the window resets when blocked, 0 when allowed. Redis errors
        let the request through.
        """
        try:
            count = await self._redis.incr(key)
            if count == 1:
                await self._redis.expire(key, window)
            if count <= limit:
                return True, 0
            ttl = await self._redis.ttl(key)
            # -1 means the key lost its expiry; re-arm it
            if ttl < 0:
                await self._redis.expire(key, window)
                ttl = window
        except (RedisError, ConnectionError, OSError):
            logger.exception("Rate limiter unavailable for key %s, allowing request", key)
            return True, 0

        return False, max(ttl, 1)

    async def check_chat(self, broker_id: str) -> tuple[bool, int]:
        """Apply the configured assistant message limit to one broker."""
        return await self.check(
            chat_key(broker_id),
            limit=settings.rate_limit.chat_limit,
            window=settings.rate_limit.chat_window,
        )


rate_limiter = RateLimiter(redis_client)
