"""Audit Quiz Platform - API v1 Router."""
from fastapi import APIRouter

from auditquiz.api.v1.auth import router as auth_router
from auditquiz.api.v1.users import router as users_router
from auditquiz.api.v1.audits import router as audits_router
from auditquiz.api.v1.presentations import router as presentations_router
from auditquiz.api.v1.tests import router as tests_router
from auditquiz.api.v1.invitations import router as invitations_router
from auditquiz.api.v1.summaries import router as summaries_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(audits_router)
api_router.include_router(presentations_router)
api_router.include_router(tests_router)
api_router.include_router(invitations_router)
api_router.include_router(summaries_router)
