"""Shared Redis client backing rate limiting and idempotent quote creation.

The service runs without Redis: ``get_redis()`` returns None until
``init_redis`` succeeds, and every caller treats None as "feature disabled".
"""
import logging
from typing import Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from designquote.core.config import settings

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None


async def init_redis(url: Optional[str] = None) -> Redis:
    global redis
    client = Redis.from_url(url or settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except RedisError as e:
        logger.error(f"Failed to connect to Redis: {e}")
        await client.aclose()
        redis = None
        raise
    redis = client
    logger.info("Connected to Redis")
    return redis


async def close_redis() -> None:
    global redis
    if redis is not None:
        await redis.aclose()
        redis = None


def get_redis() -> Optional[Redis]:
    return redis


async def redis_healthy() -> bool:
    if redis is None:
        return False
    try:
        return bool(await redis.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False
