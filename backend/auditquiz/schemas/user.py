"""
Audit Quiz Platform - User Schemas
Pydantic schemas for signup, login, sessions and profiles
"""
from datetime import datetime
from typing import Annotated

from pydantic import EmailStr, Field, field_validator

from auditquiz.models.user import UserRole
from auditquiz.schemas.common import CamelModel

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


# ============================================================================
# Registration & Authentication
# ============================================================================

class SignupRequest(CamelModel):
    """Schema for user registration."""
    name: Annotated[str, Field(min_length=1, max_length=200)]
    email: EmailStr
    pass_code: Annotated[str, Field(min_length=4, max_length=128)]
    company_name: str | None = None
    company_role: str | None = None
    company_id: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    profile_image_url: str | None = None
    company_logo_url: str | None = None
    role: UserRole = UserRole.USER
    invite_token: str | None = None


class LoginRequest(CamelModel):
    """Schema for user login."""
    email: EmailStr
    pass_code: Annotated[str, Field(min_length=4)]


class CompanyBrief(CamelModel):
    id: str
    name: str
    logo_url: str | None = None


class SessionUser(CamelModel):
    """The user snapshot stored in a server-side session."""
    id: str
    name: str
    email: str
    role: UserRole
    company_id: str | None = None
    company_role: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    profile_image_url: str | None = None
    company: CompanyBrief | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoginResult(CamelModel):
    user_id: str
    role: UserRole


# ============================================================================
# User Response Schemas
# ============================================================================

class UserResponse(CamelModel):
    """Schema for user response (public data)."""
    id: str
    name: str
    email: str
    role: UserRole
    company_id: str | None = None
    company_name: str | None = None
    company_role: str | None = None
    company_logo_url: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    profile_image_url: str | None = None
    created_at: datetime | None = None


class ProfileUpdate(CamelModel):
    """Schema for updating the current user's profile."""
    name: Annotated[str, Field(min_length=2, max_length=200)] | None = None
    company_name: Annotated[str, Field(min_length=1)] | None = None
    pass_code: Annotated[str, Field(min_length=6, max_length=128)] | None = None
    primary_color: Annotated[str, Field(pattern=HEX_COLOR_PATTERN)] | None = None
    secondary_color: Annotated[str, Field(pattern=HEX_COLOR_PATTERN)] | None = None
    company_role: str | None = None
    profile_image_url: str | None = None
    company_logo_url: str | None = None

    @field_validator("profile_image_url", "company_logo_url")
    @classmethod
    def validate_url_or_empty(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("Invalid URL")
        return v
