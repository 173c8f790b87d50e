"""
Audit Quiz Platform - Invitation Service
Company invitations, audit invitations and direct audit shares.

Unregistered emails receive a tokenised signup link; registered users get a
SharedAudit row and a login link.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from auditquiz.core.config import settings
from auditquiz.core.mailer import MailMessage, Mailer
from auditquiz.models.invitation import Invitation, InvitationStatus, SharedAudit
from auditquiz.models.presentation import Presentation
from auditquiz.models.user import User, UserRole
from auditquiz.schemas.user import SessionUser

logger = logging.getLogger(__name__)


class InvitationError(Exception):
    """Base invitation error."""
    pass


class UserAlreadyExistsError(InvitationError):
    pass


class AlreadySharedError(InvitationError):
    pass


class InvitationAlreadySentError(InvitationError):
    pass


class InvitationNotFoundError(InvitationError):
    pass


class InvitationUnusableError(InvitationError):
    """The invitation was used already or has expired."""
    pass


@dataclass
class AuditInviteOutcome:
    """Result of inviting an email to an audit."""
    shared: SharedAudit | None = None
    invitation: Invitation | None = None


def signup_link(token: str) -> str:
    return f"{settings.APP_URL}/signup?token={token}"


def login_link() -> str:
    return f"{settings.APP_URL}/signin"


def _button(href: str, label: str) -> str:
    return (
        f'<a href="{href}" style="display: inline-block; padding: 10px 20px; '
        f'background-color: #2B4055; color: white; text-decoration: none; '
        f'border-radius: 5px;">{label}</a>'
    )


class InvitationService:
    """Service for invitations and sharing."""

    def __init__(self, db: AsyncSession, mailer: Mailer):
        self.db = db
        self.mailer = mailer

    async def _user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    def _new_invitation(self, **fields) -> Invitation:
        invitation = Invitation(
            token=uuid.uuid4().hex,
            status=InvitationStatus.PENDING,
            expires_at=datetime.now(timezone.utc) + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
            **fields,
        )
        self.db.add(invitation)
        return invitation

    async def create_company_invitation(
        self,
        inviter: SessionUser,
        email: str,
        role: UserRole,
        company_id: str | None = None,
    ) -> Invitation:
        """
        Invite an unregistered email to join a company.

        Raises:
            UserAlreadyExistsError: If the email already has an account
        """
        if await self._user_by_email(email):
            raise UserAlreadyExistsError("User already exists")

        invitation = self._new_invitation(
            email=email,
            role=role,
            company_id=company_id or inviter.company_id,
            invited_by_id=inviter.id,
        )
        await self.db.flush()

        link = signup_link(invitation.token)
        await self.mailer.send(MailMessage(
            to=email,
            subject="You have been invited to join the audit platform",
            text=f"{inviter.name} invited you to join. Sign up using this link: {link}",
            html=(
                "<div><h2>You have been invited</h2>"
                f"<p>{inviter.name} invited you to join.</p>"
                f"{_button(link, 'Sign Up')}</div>"
            ),
        ))
        logger.info("Company invitation %s sent by %s", invitation.id, inviter.id)
        return invitation

    async def lookup(self, token: str) -> Invitation:
        """
        Find a usable invitation by token.

        Raises:
            InvitationNotFoundError: If no invitation has this token
            InvitationUnusableError: If it is not pending or has expired
        """
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.token == token)
            .options(selectinload(Invitation.company))
        )
        invitation = result.scalar_one_or_none()
        if invitation is None:
            raise InvitationNotFoundError("Invitation not found")
        if not invitation.is_usable:
            raise InvitationUnusableError("Invitation is expired or already used")
        return invitation

    async def invite_to_audit(
        self,
        inviter: SessionUser,
        presentation: Presentation,
        email: str,
    ) -> AuditInviteOutcome:
        """
        Share a presentation with an email address.

        Raises:
            AlreadySharedError: The registered user already has access
            InvitationAlreadySentError: A pending invitation for this
                presentation is still open
        """
        existing_user = await self._user_by_email(email)
        if existing_user is not None:
            return AuditInviteOutcome(
                shared=await self._share(inviter, presentation, existing_user)
            )

        result = await self.db.execute(
            select(Invitation).where(
                Invitation.email == email,
                Invitation.presentation_id == presentation.id,
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at > datetime.now(timezone.utc),
            )
        )
        if result.first() is not None:
            raise InvitationAlreadySentError("Invitation already sent for this audit")

        invitation = self._new_invitation(
            email=email,
            role=UserRole.USER,
            company_id=inviter.company_id,
            invited_by_id=inviter.id,
            presentation_id=presentation.id,
        )
        await self.db.flush()

        link = signup_link(invitation.token)
        await self.mailer.send(MailMessage(
            to=email,
            subject=f"Invitation to take audit: {presentation.title}",
            text=(
                f'You have been invited to take the audit "{presentation.title}". '
                f"Please sign up using this link: {link}"
            ),
            html=(
                "<div><h2>You have been invited to take an audit</h2>"
                f"<p><strong>Audit:</strong> {presentation.title}</p>"
                f"{_button(link, 'Sign Up &amp; Start Audit')}</div>"
            ),
        ))
        logger.info("Audit invitation %s for presentation %s", invitation.id, presentation.id)
        return AuditInviteOutcome(invitation=invitation)

    async def _share(self, inviter: SessionUser, presentation: Presentation, user: User) -> SharedAudit:
        result = await self.db.execute(
            select(SharedAudit).where(
                SharedAudit.user_id == user.id,
                SharedAudit.presentation_id == presentation.id,
            )
        )
        if result.scalar_one_or_none() is not None:
            raise AlreadySharedError("Audit is already shared with this user")

        shared = SharedAudit(
            user_id=user.id,
            presentation_id=presentation.id,
            shared_by_id=inviter.id,
        )
        self.db.add(shared)
        await self.db.flush()

        link = login_link()
        await self.mailer.send(MailMessage(
            to=user.email,
            subject=f"New audit shared with you: {presentation.title}",
            text=(
                f'A new audit "{presentation.title}" has been shared with you. '
                f"Please log in to access it: {link}"
            ),
            html=(
                "<div><h2>New audit shared with you</h2>"
                f"<p><strong>Audit:</strong> {presentation.title}</p>"
                f"{_button(link, 'Log In &amp; View Audit')}</div>"
            ),
        ))
        logger.info("Presentation %s shared with user %s", presentation.id, user.id)
        return shared

    async def sent_by(self, user_id: str) -> list[Invitation]:
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.invited_by_id == user_id)
            .order_by(Invitation.created_at.desc())
            .options(selectinload(Invitation.presentation))
        )
        return list(result.scalars().all())
