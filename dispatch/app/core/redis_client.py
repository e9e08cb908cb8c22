"""
Redis client for the shared geocode cache.

Redis is optional here: the dispatch flow never depends on it, so every
operation is short-timeout and the cache treats errors as misses.
"""

import logging
import redis.asyncio as redis
from redis.exceptions import RedisError
from dispatch.app.core.config import settings

logger = logging.getLogger("dispatch.redis")

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
    socket_timeout=settings.redis_socket_timeout_seconds,
    socket_connect_timeout=settings.redis_socket_timeout_seconds,
)


async def get_redis():
    """FastAPI dependency, overridden in tests with an in-memory stand-in."""
    return redis_client


async def ping_redis() -> bool:
    """True when the geocode cache backend answers, False otherwise."""
    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as e:
        logger.warning("Redis ping failed", extra={"error": str(e)})
        return False
