"""Replay cache for quote creation keyed by the Idempotency-Key header"""
import json
import logging
from typing import Optional

from designquote.core.redis import get_redis
from designquote.core.config import settings

logger = logging.getLogger(__name__)


def _cache_key(user_id: int, key: str) -> str:
    # scoped per user so two users cannot replay each other's quotes
    return f"idemp:quote:{user_id}:{key}"


async def get_idempotent(user_id: int, key: Optional[str]) -> Optional[dict]:
    redis = get_redis()
    if not key or redis is None:
        return None
    v = await redis.get(_cache_key(user_id, key))
    return json.loads(v) if v else None


async def set_idempotent(user_id: int, key: Optional[str], value: dict) -> None:
    redis = get_redis()
    if not key or redis is None:
        return
    await redis.set(_cache_key(user_id, key), json.dumps(value, default=str), ex=settings.IDEMPOTENCY_TTL)
    logger.debug(f"Stored idempotent response for user {user_id}")
