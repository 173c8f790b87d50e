"""
Audit Quiz Platform - Redis Connection
Lazily created asyncio client shared by sessions and rate limiting.
"""
import redis.asyncio as aioredis

from auditquiz.core.config import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Dependency returning the process-wide Redis client."""
    global _client
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
