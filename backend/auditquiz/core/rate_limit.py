"""
Audit Quiz Platform - Rate Limiting
Fixed-window request counters kept in Redis.
"""
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from redis.asyncio import Redis

from auditquiz.core.config import settings
from auditquiz.core.redis import get_redis

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "anonymous"


class RateLimiter:
    """
    Counts hits per identifier in a fixed window.

    The counter and its expiry are written in one transaction. The expiry is
    only set when the key has none, so the window restarts once the key
    disappears and a counter can never outlive its window.
    """

    def __init__(self, redis: Redis, prefix: str = "ratelimit"):
        self.redis = redis
        self.prefix = prefix

    def _key(self, identifier: str) -> str:
        return f"{self.prefix}:{identifier}"

    async def hit(self, identifier: str, limit: int, window_seconds: int) -> bool:
        """Record one hit; return False when the limit is exceeded."""
        key = self._key(identifier)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, window_seconds, nx=True)
            count, _ = await pipe.execute()
        return count <= limit


async def rate_limit(
    request: Request,
    redis: Annotated[Redis, Depends(get_redis)],
) -> None:
    """Dependency rejecting clients over the configured request rate."""
    ip = client_ip(request)
    limiter = RateLimiter(redis)
    allowed = await limiter.hit(
        f"{request.url.path}:{ip}",
        limit=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    if not allowed:
        logger.warning("Rate limit exceeded for %s on %s", ip, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
        )
