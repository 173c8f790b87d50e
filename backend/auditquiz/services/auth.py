"""
Audit Quiz Platform - Authentication Service
Business logic for registration, login and profile updates
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from auditquiz.core.security import get_password_hash, verify_password
from auditquiz.models.invitation import Invitation, InvitationStatus
from auditquiz.models.user import Company, User, UserRole
from auditquiz.schemas.user import ProfileUpdate, SessionUser, SignupRequest

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base authentication error."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong passcode."""
    pass


class EmailAlreadyRegisteredError(AuthenticationError):
    """An account with this email already exists."""
    pass


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> User | None:
        """Get user by ID, with the company loaded."""
        result = await self.db.execute(
            select(User)
            .where(User.id == user_id)
            .options(selectinload(User.company))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _usable_invitation(self, token: str, email: str) -> Invitation | None:
        result = await self.db.execute(
            select(Invitation).where(Invitation.token == token)
        )
        invitation = result.scalar_one_or_none()
        if invitation is None or not invitation.is_usable:
            return None
        if invitation.email.lower() != email.lower():
            return None
        return invitation

    async def register_user(self, data: SignupRequest) -> User:
        """
        Register a new user.

        A usable invitation token for the same email places the user in the
        invitation's company with the invitation's role and marks it
        accepted. Otherwise a company name creates a new company.

        Raises:
            EmailAlreadyRegisteredError: If the email already exists
        """
        if await self.get_user_by_email(data.email):
            raise EmailAlreadyRegisteredError("Email already registered")

        role = data.role
        company_id = data.company_id

        invitation = None
        if data.invite_token:
            invitation = await self._usable_invitation(data.invite_token, data.email)
            if invitation is None:
                logger.info("Ignoring unusable invite token for %s", data.email)

        if invitation is not None:
            role = UserRole(invitation.role)
            company_id = invitation.company_id
            invitation.status = InvitationStatus.ACCEPTED
        elif data.company_name and not company_id:
            company = Company(name=data.company_name, logo_url=data.company_logo_url)
            self.db.add(company)
            await self.db.flush()
            company_id = company.id

        user = User(
            name=data.name,
            email=data.email,
            pass_code=get_password_hash(data.pass_code),
            role=role,
            company_id=company_id,
            company_name=data.company_name,
            company_role=data.company_role,
            company_logo_url=data.company_logo_url,
            primary_color=data.primary_color,
            secondary_color=data.secondary_color,
            profile_image_url=data.profile_image_url,
        )
        self.db.add(user)
        await self.db.flush()

        logger.info("Registered user %s (role=%s)", user.id, role.value)
        return await self.get_user_by_id(user.id)

    async def authenticate(self, email: str, pass_code: str) -> User:
        """
        Authenticate a user with email and passcode.

        Raises:
            InvalidCredentialsError: If the email is unknown or the passcode is wrong
        """
        user = await self.get_user_by_email(email)
        if not user or not verify_password(pass_code, user.pass_code):
            logger.info("Failed login for %s", email)
            raise InvalidCredentialsError("Invalid email or passcode")
        return await self.get_user_by_id(user.id)

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        """Apply the fields present in `data`; empty URLs clear the stored value."""
        update_data = data.model_dump(exclude_unset=True)

        pass_code = update_data.pop("pass_code", None)
        if pass_code:
            user.pass_code = get_password_hash(pass_code)

        for field in ("profile_image_url", "company_logo_url"):
            if update_data.get(field) == "":
                update_data[field] = None

        for field, value in update_data.items():
            if value is None and field not in ("profile_image_url", "company_logo_url"):
                continue
            setattr(user, field, value)

        await self.db.flush()
        return await self.get_user_by_id(user.id)

    async def list_users(self) -> list[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    def to_session_user(user: User) -> SessionUser:
        """Snapshot of a user (with company loaded) for the session store."""
        return SessionUser.model_validate(user)
