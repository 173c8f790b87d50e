"""Audit Quiz Platform - Services initialization."""
from auditquiz.services.auth import (
    AuthService,
    AuthenticationError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)
from auditquiz.services.session import SessionStore
from auditquiz.services.summary import SummaryExistsError, SummaryService
from auditquiz.services.audit import AuditService
from auditquiz.services.scoring import ScoringService
from auditquiz.services.progress import ProgressService
from auditquiz.services.invitation import InvitationService

__all__ = [
    "AuthService",
    "AuthenticationError",
    "EmailAlreadyRegisteredError",
    "InvalidCredentialsError",
    "SessionStore",
    "SummaryService",
    "SummaryExistsError",
    "AuditService",
    "ScoringService",
    "ProgressService",
    "InvitationService",
]
