"""
Audit Quiz Platform - Authentication API Routes
Endpoints for registration, login, logout and the current session
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status

from auditquiz.api.deps import CurrentUser, DbSession, SessionId, Sessions
from auditquiz.core.config import settings
from auditquiz.core.rate_limit import rate_limit
from auditquiz.core.security import create_session_token
from auditquiz.schemas.common import ApiResponse
from auditquiz.schemas.user import LoginRequest, LoginResult, SessionUser, SignupRequest
from auditquiz.services.auth import (
    AuthService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(session_id),
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


@router.post(
    "/register",
    response_model=ApiResponse[SessionUser],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit)],
    summary="Register a new user",
    description="Create an account, optionally accepting an invitation token, and start a session.",
)
async def register(
    data: SignupRequest,
    response: Response,
    db: DbSession,
    sessions: Sessions,
) -> ApiResponse[SessionUser]:
    """Register a new user account."""
    auth_service = AuthService(db)

    try:
        user = await auth_service.register_user(data)
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    session_user = auth_service.to_session_user(user)
    session_id = await sessions.create(session_user)
    set_session_cookie(response, session_id)
    return ApiResponse(message="User registered successfully", data=session_user)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResult],
    dependencies=[Depends(rate_limit)],
    summary="Authenticate user",
    description="Login with email and passcode; the session is carried in an HTTP-only cookie.",
)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: DbSession,
    sessions: Sessions,
) -> ApiResponse[LoginResult]:
    """Authenticate user and start a session."""
    auth_service = AuthService(db)

    try:
        user = await auth_service.authenticate(
            email=credentials.email,
            pass_code=credentials.pass_code,
        )
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )

    session_id = await sessions.create(auth_service.to_session_user(user))
    set_session_cookie(response, session_id)
    return ApiResponse(
        message="Login successful",
        data=LoginResult(user_id=user.id, role=user.role),
    )


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Logout user",
)
async def logout(
    response: Response,
    session_id: SessionId,
    sessions: Sessions,
) -> ApiResponse[None]:
    """End the session and clear the cookie."""
    if session_id:
        await sessions.delete(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return ApiResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=ApiResponse[SessionUser],
    summary="Get current user",
)
async def get_current_user_info(
    current_user: CurrentUser,
) -> ApiResponse[SessionUser]:
    """Get the user stored in the current session."""
    return ApiResponse(data=current_user)
