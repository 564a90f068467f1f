"""
Per-user rate limiting on quote mutations
"""
import pytest
from fastapi import HTTPException

from designquote.core import rate_limit
from designquote.core.config import settings


class CountingRedis:
    def __init__(self):
        self.counts = {}
        self.expiry = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.expiry[key] = seconds

    async def ttl(self, key):
        return self.expiry.get(key, -1)


@pytest.fixture
def counting_redis(monkeypatch):
    redis = CountingRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: redis)
    return redis


class TestRateLimiting:

    def test_rate_limit_config(self):
        assert settings.RATE_LIMIT == 100
        assert settings.RATE_LIMIT_WINDOW == 600  # 10 minutes

    @pytest.mark.asyncio
    async def test_skipped_without_redis(self, monkeypatch):
        monkeypatch.setattr(rate_limit, "get_redis", lambda: None)
        for _ in range(settings.RATE_LIMIT + 5):
            await rate_limit.check_rate_limit(1)

    @pytest.mark.asyncio
    async def test_window_starts_on_first_hit(self, counting_redis):
        await rate_limit.check_rate_limit(7)
        assert counting_redis.expiry == {"rl:quotes:7": settings.RATE_LIMIT_WINDOW}

    @pytest.mark.asyncio
    async def test_limit_is_enforced(self, counting_redis):
        for _ in range(settings.RATE_LIMIT):
            await rate_limit.check_rate_limit(7)
        
        with pytest.raises(HTTPException) as exc:
            await rate_limit.check_rate_limit(7)
        assert exc.value.status_code == 429
        assert exc.value.headers["Retry-After"] == str(settings.RATE_LIMIT_WINDOW)

    @pytest.mark.asyncio
    async def test_limit_is_per_user(self, counting_redis):
        for _ in range(settings.RATE_LIMIT):
            await rate_limit.check_rate_limit(7)
        
        await rate_limit.check_rate_limit(8)
