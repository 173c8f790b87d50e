"""
Audit Quiz Platform - Summary Service
"""
import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auditquiz.models.presentation import Summary
from auditquiz.schemas.audit import SummaryInput

logger = logging.getLogger(__name__)


class SummaryExistsError(Exception):
    """A summary already exists for the presentation."""
    pass


class SummaryService:
    """Reads and writes the one summary attached to a presentation."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, presentation_id: str) -> Summary | None:
        result = await self.db.execute(
            select(Summary).where(Summary.presentation_id == presentation_id)
        )
        return result.scalar_one_or_none()

    async def create(self, presentation_id: str, data: SummaryInput) -> Summary:
        """
        Raises:
            SummaryExistsError: If the presentation already has a summary
        """
        if await self.get(presentation_id) is not None:
            raise SummaryExistsError("Summary already exists for this presentation")
        return await self.upsert(presentation_id, data)

    async def upsert(
        self,
        presentation_id: str,
        data: SummaryInput,
        category_ids: Sequence[str] | None = None,
    ) -> Summary:
        """
        Create the summary or update the fields present in `data`.

        Args:
            presentation_id: Owning presentation
            data: Summary fields; fields left as None are not touched
            category_ids: When given, the i-th recommendation is re-pointed
                at the i-th id (recommendations past the end keep theirs)
        """
        summary = await self.get(presentation_id)
        if summary is None:
            summary = Summary(presentation_id=presentation_id)
            self.db.add(summary)

        if data.category_recommendations is not None:
            recommendations = [
                item.model_dump(by_alias=True) for item in data.category_recommendations
            ]
            if category_ids is not None:
                for index, item in enumerate(recommendations):
                    if index < len(category_ids):
                        item["categoryId"] = category_ids[index]
            summary.category_recommendations = recommendations
        if data.next_steps is not None:
            summary.next_steps = [
                step.model_dump(by_alias=True, exclude_none=True) for step in data.next_steps
            ]
        if data.overall_details is not None:
            summary.overall_details = data.overall_details

        await self.db.flush()
        logger.debug("Summary saved for presentation %s", presentation_id)
        return summary
