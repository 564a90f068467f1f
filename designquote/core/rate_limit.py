import logging
from fastapi import HTTPException
from designquote.core.redis import get_redis
from designquote.core.config import settings
from designquote.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)


async def check_rate_limit(user_id: int, scope: str = "quotes") -> None:
    """Fixed window of RATE_LIMIT writes per user every RATE_LIMIT_WINDOW seconds."""
    redis = get_redis()
    if redis is None:
        return
    
    key = f"rl:{scope}:{user_id}"
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, settings.RATE_LIMIT_WINDOW)
    
    if count > settings.RATE_LIMIT:
        retry_after = await redis.ttl(key)
        rate_limit_exceeded.labels(scope=scope).inc()
        logger.warning(f"Rate limit hit by user {user_id} on {scope}")
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(max(int(retry_after), 1))}
        )
