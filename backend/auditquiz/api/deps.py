"""
Audit Quiz Platform - API Dependencies
FastAPI dependencies for sessions, authorization and ownership checks
"""
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from auditquiz.core.config import settings
from auditquiz.core.database import get_db
from auditquiz.core.mailer import Mailer, get_mailer
from auditquiz.core.redis import get_redis
from auditquiz.core.security import verify_token
from auditquiz.models.presentation import Presentation
from auditquiz.models.user import UserRole
from auditquiz.schemas.user import SessionUser
from auditquiz.services.session import SessionStore


async def get_session_store(
    redis: Annotated[Redis, Depends(get_redis)],
) -> SessionStore:
    return SessionStore(redis)


def get_session_id(request: Request) -> str | None:
    """Session id from the signed session cookie, if present and valid."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return verify_token(token, token_type="session")


async def get_current_session(
    session_id: Annotated[str | None, Depends(get_session_id)],
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionUser:
    """
    Get the user stored in the current session.

    Raises:
        HTTPException: If the cookie is missing, invalid or the session expired
    """
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    user = await store.get(session_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


def require_role(*roles: UserRole):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/admin")
        async def admin_only(user: SessionUser = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    async def role_checker(
        current_user: Annotated[SessionUser, Depends(get_current_session)],
    ) -> SessionUser:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {[r.value for r in roles]}",
            )
        return current_user

    return role_checker


def ensure_owner(presentation: Presentation | None, user: SessionUser) -> Presentation:
    """
    Raises:
        HTTPException: 404 when the presentation is missing, 403 when the
            session user does not own it
    """
    if presentation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Presentation not found",
        )
    if presentation.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this presentation",
        )
    return presentation


# Type aliases for common dependencies
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[SessionUser, Depends(get_current_session)]
AdminUser = Annotated[SessionUser, Depends(require_role(UserRole.ADMIN))]
SessionId = Annotated[str | None, Depends(get_session_id)]
Sessions = Annotated[SessionStore, Depends(get_session_store)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]
