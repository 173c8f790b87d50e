"""
Audit Quiz Platform - Audit Progress Service
Draft answers saved before a test is submitted.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auditquiz.models.test import AuditProgress, utcnow
from auditquiz.schemas.user import SessionUser


def progress_author(user: SessionUser) -> str:
    return user.email or user.name or "unknown"


class ProgressService:
    """
    One draft per presentation.

    The row is not keyed by user, so concurrent respondents overwrite each
    other's drafts.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, presentation_id: str) -> AuditProgress | None:
        result = await self.db.execute(
            select(AuditProgress).where(AuditProgress.presentation_id == presentation_id)
        )
        return result.scalar_one_or_none()

    async def save(
        self,
        presentation_id: str,
        answers: dict[str, str] | None,
        updated_by: str,
    ) -> AuditProgress:
        progress = await self.get(presentation_id)
        if progress is None:
            progress = AuditProgress(presentation_id=presentation_id, answers={})
            self.db.add(progress)

        if answers is not None:
            # Reassign so the JSON column is marked dirty
            progress.answers = dict(answers)
        progress.updated_by = updated_by
        progress.updated_at = utcnow()

        await self.db.flush()
        return progress
