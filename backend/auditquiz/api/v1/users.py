"""
Audit Quiz Platform - Profile and Admin API Routes
"""
from fastapi import APIRouter, HTTPException, status

from auditquiz.api.deps import AdminUser, CurrentUser, DbSession, SessionId, Sessions
from auditquiz.schemas.common import ApiResponse
from auditquiz.schemas.user import ProfileUpdate, UserResponse
from auditquiz.services.auth import AuthService

router = APIRouter(tags=["Users"])


@router.get(
    "/profile",
    response_model=ApiResponse[UserResponse],
    summary="Get own profile",
)
async def get_profile(
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[UserResponse]:
    user = await AuthService(db).get_user_by_id(current_user.id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return ApiResponse(data=UserResponse.model_validate(user))


@router.patch(
    "/profile",
    response_model=ApiResponse[UserResponse],
    summary="Update own profile",
)
async def update_profile(
    data: ProfileUpdate,
    current_user: CurrentUser,
    session_id: SessionId,
    db: DbSession,
    sessions: Sessions,
) -> ApiResponse[UserResponse]:
    """Update profile fields and refresh the session snapshot."""
    auth_service = AuthService(db)
    user = await auth_service.get_user_by_id(current_user.id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    user = await auth_service.update_profile(user, data)
    if session_id:
        await sessions.update(session_id, auth_service.to_session_user(user))

    return ApiResponse(
        message="Profile updated successfully",
        data=UserResponse.model_validate(user),
    )


@router.get(
    "/admin/users",
    response_model=ApiResponse[list[UserResponse]],
    summary="List all users (admin)",
)
async def list_users(
    admin: AdminUser,
    db: DbSession,
) -> ApiResponse[list[UserResponse]]:
    users = await AuthService(db).list_users()
    return ApiResponse(data=[UserResponse.model_validate(u) for u in users])
