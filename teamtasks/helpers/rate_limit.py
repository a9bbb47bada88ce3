"""
Fixed-window attempt counters kept in Redis.
"""

from redis.asyncio import Redis

from teamtasks.core.config import settings


def _key(scope: str, *parts: str) -> str:
    return "rl:" + scope + ":" + ":".join(str(part).lower() for part in parts)


async def allow(redis: Redis, scope: str, *parts: str, max_attempts: int, window_sec: int) -> bool:
    """
    Count one attempt and tell whether the caller is still under the limit.

    Args:
        redis: Redis client
        scope: Namespace of the counter (e.g. "login")
        *parts: Values identifying the caller (email, IP...)
        max_attempts: Attempts allowed per window
        window_sec: Window length in seconds

    Returns:
        True while the attempt count is within max_attempts
    """
    if not settings.RATE_LIMIT_ENABLED:
        return True

    key = _key(scope, *parts)
    attempts = await redis.incr(key)
    if attempts == 1:
        await redis.expire(key, window_sec)
    return attempts <= max_attempts


async def reset(redis: Redis, scope: str, *parts: str) -> None:
    await redis.delete(_key(scope, *parts))
