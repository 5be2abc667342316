"""Redis async connection pool, used only for the sweep lock.

The pool is created at import time but connects lazily; ``close_redis``
drops its connections on shutdown.
"""

import logging

import redis.asyncio as aioredis

from src.config import settings

logger = logging.getLogger(__name__)

_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url, decode_responses=True
)


async def get_redis() -> aioredis.Redis:
    """Redis client sharing the module pool."""
    return aioredis.Redis(connection_pool=_pool)


async def close_redis() -> None:
    await _pool.disconnect()
    logger.info("Redis connection pool closed")
