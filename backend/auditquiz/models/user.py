"""
Audit Quiz Platform - User Models
SQLAlchemy models for users and the companies they belong to
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from auditquiz.core.database import Base, generate_id


class UserRole(str, Enum):
    """User roles for RBAC."""
    ADMIN = "ADMIN"
    USER = "USER"


class Company(Base):
    """Tenant grouping users; audits are authored on its behalf."""

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(200))
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )

    users: Mapped[list["User"]] = relationship("User", back_populates="company")


class User(Base):
    """Account that authors audits or takes them."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=generate_id)
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    pass_code: Mapped[str] = mapped_column(String(255))
    role: Mapped[UserRole] = mapped_column(String(20), default=UserRole.USER)

    company_id: Mapped[str | None] = mapped_column(
        String(32),
        ForeignKey("companies.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    company_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    company_role: Mapped[str | None] = mapped_column(String(100), nullable=True)
    company_logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Branding
    primary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    secondary_color: Mapped[str | None] = mapped_column(String(7), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    company: Mapped[Company | None] = relationship("Company", back_populates="users")
