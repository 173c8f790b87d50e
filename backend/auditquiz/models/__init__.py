"""Audit Quiz Platform - Models initialization."""
from auditquiz.models.user import Company, User, UserRole
from auditquiz.models.presentation import (
    MAX_POINTS,
    MIN_POINTS,
    OPTIONS_PER_QUESTION,
    Category,
    Option,
    Presentation,
    Question,
    Summary,
)
from auditquiz.models.test import Answer, AuditProgress, CategoryScore, Test
from auditquiz.models.invitation import Invitation, InvitationStatus, SharedAudit


__all__ = [
    # User models
    "User",
    "Company",
    "UserRole",
    # Authoring models
    "Presentation",
    "Category",
    "Question",
    "Option",
    "Summary",
    "OPTIONS_PER_QUESTION",
    "MIN_POINTS",
    "MAX_POINTS",
    # Test-taking models
    "Test",
    "Answer",
    "CategoryScore",
    "AuditProgress",
    # Sharing
    "Invitation",
    "InvitationStatus",
    "SharedAudit",
]
