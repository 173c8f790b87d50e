"""
Audit Quiz Platform - Invitation Schemas
"""
from datetime import datetime

from pydantic import EmailStr

from auditquiz.models.invitation import InvitationStatus
from auditquiz.models.user import UserRole
from auditquiz.schemas.audit import PresentationTitle
from auditquiz.schemas.common import CamelModel
from auditquiz.schemas.user import CompanyBrief


class CompanyInviteRequest(CamelModel):
    email: EmailStr
    company_id: str | None = None
    role: UserRole = UserRole.USER


class AuditInviteRequest(CamelModel):
    email: EmailStr
    presentation_id: str


class InvitationResponse(CamelModel):
    id: str
    email: str
    role: UserRole
    status: InvitationStatus
    token: str
    expires_at: datetime
    company_id: str | None = None
    invited_by_id: str
    presentation_id: str | None = None


class InvitationLookup(CamelModel):
    """What a signup page needs to know about a token."""
    email: str
    role: UserRole
    company: CompanyBrief | None = None
    presentation_id: str | None = None


class SharedAuditResult(CamelModel):
    user_id: str
    presentation_id: str


class SentInvitation(CamelModel):
    id: str
    email: str
    status: InvitationStatus
    role: UserRole
    created_at: datetime | None = None
    expires_at: datetime
    presentation: PresentationTitle | None = None
