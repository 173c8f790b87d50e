"""
Audit Quiz Platform - Invitation Models
Token invitations for unregistered emails and direct shares for existing users
"""
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auditquiz.core.database import Base, generate_id
from auditquiz.models.presentation import Presentation
from auditquiz.models.user import Company, UserRole


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"


class Invitation(Base):
    """Signup invitation, optionally tied to one presentation."""

    __tablename__ = "invitations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    email: Mapped[str] = mapped_column(String(255), index=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    role: Mapped[UserRole] = mapped_column(String(20), default=UserRole.USER)
    status: Mapped[InvitationStatus] = mapped_column(String(20), default=InvitationStatus.PENDING)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    company_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True
    )
    invited_by_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )
    presentation_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("presentations.id", ondelete="SET NULL"),
        nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    company: Mapped[Company | None] = relationship("Company")
    presentation: Mapped[Presentation | None] = relationship("Presentation")

    @property
    def is_expired(self) -> bool:
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expires_at

    @property
    def is_usable(self) -> bool:
        return self.status == InvitationStatus.PENDING and not self.is_expired


class SharedAudit(Base):
    """Grants an existing user access to someone else's presentation."""

    __tablename__ = "shared_audits"
    __table_args__ = (UniqueConstraint("user_id", "presentation_id"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )
    presentation_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("presentations.id", ondelete="CASCADE"),
        index=True
    )
    shared_by_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("users.id", ondelete="CASCADE")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
