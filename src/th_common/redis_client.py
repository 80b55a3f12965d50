"""Redis client factory and fixed-window counter.

Redis only backs rate limiting of the promo-code endpoints; no pricing or
order state lives there.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Get or create the Redis connection pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


async def hit_window(redis: aioredis.Redis, key: str, window_seconds: int) -> int:
    """Count one hit in the current window and return the running total.

    The key expires `window_seconds` after its first hit, which starts a new window.
    """
    count = int(await redis.incr(key))
    if count == 1:
        await redis.expire(key, window_seconds)
    return count
