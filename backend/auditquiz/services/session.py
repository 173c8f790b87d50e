"""
Audit Quiz Platform - Session Store
Server-side sessions kept in Redis as `session:{id}` -> SessionUser JSON.
"""
import logging

from redis.asyncio import Redis

from auditquiz.core.config import settings
from auditquiz.core.security import new_session_id
from auditquiz.schemas.user import SessionUser

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Explicit session operations keyed by a request-scoped session id.

    Every successful read slides the expiry forward by the full TTL.
    """

    KEY_PREFIX = "session"

    def __init__(self, redis: Redis, ttl_seconds: int | None = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.SESSION_TTL_SECONDS

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}:{session_id}"

    async def create(self, user: SessionUser) -> str:
        """Store a new session for `user` and return its id."""
        session_id = new_session_id()
        await self.redis.set(
            self._key(session_id),
            user.model_dump_json(by_alias=True),
            ex=self.ttl_seconds,
        )
        logger.info("Session created for user %s", user.id)
        return session_id

    async def get(self, session_id: str) -> SessionUser | None:
        key = self._key(session_id)
        raw = await self.redis.get(key)
        if raw is None:
            return None
        await self.redis.expire(key, self.ttl_seconds)
        return SessionUser.model_validate_json(raw)

    async def update(self, session_id: str, user: SessionUser) -> None:
        """Replace the stored user snapshot, keeping the session alive."""
        await self.redis.set(
            self._key(session_id),
            user.model_dump_json(by_alias=True),
            ex=self.ttl_seconds,
        )

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))
        logger.info("Session deleted")
