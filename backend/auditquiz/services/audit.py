"""
Audit Quiz Platform - Audit Authoring Service
Creates audits and reconciles edited audits against stored rows.

Reconciliation is a three-way diff applied independently at each level
(category, question, option), driven only by the presence of `id`:
an incoming item whose id matches a child of the same parent updates it,
an item without a matching id is created, and stored children missing from
the payload are deleted together with their descendants.
"""
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from auditquiz.models.invitation import Invitation, InvitationStatus, SharedAudit
from auditquiz.models.presentation import (
    OPTIONS_PER_QUESTION,
    Category,
    Option,
    Presentation,
    Question,
)
from auditquiz.schemas.audit import (
    AuditPayload,
    CategoryInput,
    QuestionInput,
)
from auditquiz.services.summary import SummaryService

logger = logging.getLogger(__name__)


class Identified(Protocol):
    id: str | None


Child = TypeVar("Child")
Item = TypeVar("Item", bound=Identified)


@dataclass
class OptionSpec:
    """Normalized option data ready to be written."""
    id: str | None
    text: str
    points: int


def pad_options(options: Sequence[Identified]) -> list[OptionSpec]:
    """
    Fill a question's options up to five.

    Missing trailing entries become ("Option n", n points) where n is the
    1-based position.
    """
    specs = [OptionSpec(id=o.id, text=o.text, points=o.points) for o in options]
    for index in range(len(specs), OPTIONS_PER_QUESTION):
        specs.append(OptionSpec(id=None, text=f"Option {index + 1}", points=index + 1))
    return specs


def diff_children(
    existing: Sequence[Child],
    incoming: Sequence[Item],
) -> tuple[list[tuple[Child | None, Item]], list[Child]]:
    """
    Pair incoming items with stored children by id.

    Returns:
        (pairs, removed) where each pair is (stored child or None, item)
        in payload order, and `removed` are stored children not claimed by
        any item. An id repeated in the payload only matches once.
    """
    by_id = {child.id: child for child in existing}
    claimed: set[str] = set()
    pairs: list[tuple[Child | None, Item]] = []
    for item in incoming:
        current = by_id.get(item.id) if item.id else None
        if current is not None and current.id in claimed:
            current = None
        if current is not None:
            claimed.add(current.id)
        pairs.append((current, item))
    removed = [child for child in existing if child.id not in claimed]
    return pairs, removed


def clean_icon(icon: str | None) -> str | None:
    if icon and icon.strip():
        return icon.strip()
    return None


def presentation_tree():
    """Loader options for the full category -> question -> option tree."""
    return (
        selectinload(Presentation.categories)
        .selectinload(Category.questions)
        .selectinload(Question.options)
    )


class AuditService:
    """Service for authoring audits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def get_presentation(
        self,
        presentation_id: str,
        lock: bool = False,
    ) -> Presentation | None:
        """
        Load a presentation with its full tree and summary.

        Args:
            presentation_id: Presentation to load
            lock: Take a row lock for the rest of the transaction
        """
        query = (
            select(Presentation)
            .where(Presentation.id == presentation_id)
            .options(presentation_tree(), selectinload(Presentation.summary))
            .execution_options(populate_existing=True)
        )
        if lock:
            query = query.with_for_update(of=Presentation)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_own(self, user_id: str) -> list[Presentation]:
        result = await self.db.execute(
            select(Presentation)
            .where(Presentation.user_id == user_id)
            .order_by(Presentation.created_at.desc())
            .options(presentation_tree(), selectinload(Presentation.tests))
        )
        return list(result.scalars().all())

    async def list_visible(self, user_id: str, email: str) -> tuple[list[Presentation], bool]:
        """
        Audits a user may see.

        A user who signed up through an audit invitation sees that audit plus
        any shared with them; everyone else sees their own plus shared ones.

        Returns:
            (presentations newest first, whether the user is an invited user)
        """
        accepted = await self.db.execute(
            select(Invitation)
            .where(
                Invitation.email == email,
                Invitation.status == InvitationStatus.ACCEPTED,
                Invitation.presentation_id.is_not(None),
            )
            .order_by(Invitation.created_at.desc())
            .limit(1)
        )
        invitation = accepted.scalar_one_or_none()

        shared = await self.db.execute(
            select(SharedAudit.presentation_id).where(SharedAudit.user_id == user_id)
        )
        shared_ids = list(shared.scalars().all())

        if invitation is not None:
            condition = Presentation.id.in_([invitation.presentation_id, *shared_ids])
        elif shared_ids:
            condition = or_(Presentation.user_id == user_id, Presentation.id.in_(shared_ids))
        else:
            condition = Presentation.user_id == user_id

        result = await self.db.execute(
            select(Presentation)
            .where(condition)
            .order_by(Presentation.created_at.desc())
            .options(presentation_tree(), selectinload(Presentation.tests))
        )
        return list(result.scalars().all()), invitation is not None

    # ------------------------------------------------------------------
    # Building new rows
    # ------------------------------------------------------------------

    def _build_options(self, options: Sequence[Identified]) -> list[Option]:
        return [
            Option(text=spec.text, points=spec.points, position=position)
            for position, spec in enumerate(pad_options(options))
        ]

    def _build_question(self, item: QuestionInput, position: int) -> Question:
        return Question(
            text=item.text,
            position=position,
            options=self._build_options(item.options),
        )

    def _build_category(self, item: CategoryInput, position: int) -> Category:
        return Category(
            name=item.name,
            icon=clean_icon(item.icon),
            position=position,
            questions=[
                self._build_question(question, index)
                for index, question in enumerate(item.questions)
            ],
        )

    async def create_audit(self, user_id: str, payload: AuditPayload) -> Presentation:
        """Create a presentation with its nested tree and optional summary."""
        presentation = Presentation(
            user_id=user_id,
            title=payload.title,
            categories=[
                self._build_category(item, position)
                for position, item in enumerate(payload.categories)
            ],
        )
        self.db.add(presentation)
        await self.db.flush()

        if payload.summary is not None:
            await SummaryService(self.db).upsert(presentation.id, payload.summary)

        logger.info(
            "Audit %s created by %s with %d categories",
            presentation.id, user_id, len(payload.categories),
        )
        return await self.get_presentation(presentation.id)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile_options(self, question: Question, options: Sequence[Identified]) -> None:
        pairs, removed = diff_children(question.options, pad_options(options))
        for option in removed:
            question.options.remove(option)
        for position, (option, spec) in enumerate(pairs):
            if option is None:
                question.options.append(
                    Option(text=spec.text, points=spec.points, position=position)
                )
            else:
                option.text = spec.text
                option.points = spec.points
                option.position = position

    def reconcile_questions(self, category: Category, items: Sequence[QuestionInput]) -> None:
        pairs, removed = diff_children(category.questions, items)
        for question in removed:
            category.questions.remove(question)
        for position, (question, item) in enumerate(pairs):
            if question is None:
                category.questions.append(self._build_question(item, position))
            else:
                question.text = item.text
                question.position = position
                self.reconcile_options(question, item.options)

    def reconcile_categories(
        self,
        presentation: Presentation,
        items: Sequence[CategoryInput],
    ) -> list[Category]:
        """Apply the category-level diff; returns categories in payload order."""
        pairs, removed = diff_children(presentation.categories, items)
        for category in removed:
            presentation.categories.remove(category)

        ordered = []
        for position, (category, item) in enumerate(pairs):
            if category is None:
                category = self._build_category(item, position)
                presentation.categories.append(category)
            else:
                category.name = item.name
                category.icon = clean_icon(item.icon)
                category.position = position
                self.reconcile_questions(category, item.questions)
            ordered.append(category)
        return ordered

    async def update_audit(self, presentation: Presentation, payload: AuditPayload) -> Presentation:
        """
        Reconcile a locked, fully loaded presentation with the payload.

        Category recommendations in the summary are re-pointed at the
        reconciled categories by position.
        """
        presentation.title = payload.title
        ordered = self.reconcile_categories(presentation, payload.categories)
        await self.db.flush()

        if payload.summary is not None:
            await SummaryService(self.db).upsert(
                presentation.id,
                payload.summary,
                category_ids=[category.id for category in ordered],
            )

        logger.info("Audit %s reconciled (%d categories)", presentation.id, len(ordered))
        return await self.get_presentation(presentation.id)

    # ------------------------------------------------------------------
    # Presentation / category / question CRUD
    # ------------------------------------------------------------------

    async def create_presentation(self, user_id: str, title: str) -> Presentation:
        presentation = Presentation(user_id=user_id, title=title)
        self.db.add(presentation)
        await self.db.flush()
        await self.db.refresh(presentation)
        return presentation

    async def delete_presentation(self, presentation: Presentation) -> None:
        await self.db.delete(presentation)
        await self.db.flush()
        logger.info("Presentation %s deleted", presentation.id)

    async def get_category(self, category_id: str) -> Category | None:
        result = await self.db.execute(
            select(Category)
            .where(Category.id == category_id)
            .options(
                selectinload(Category.presentation),
                selectinload(Category.questions).selectinload(Question.options),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_categories(self, presentation_id: str) -> list[Category]:
        result = await self.db.execute(
            select(Category)
            .where(Category.presentation_id == presentation_id)
            .order_by(Category.position)
            .options(selectinload(Category.questions).selectinload(Question.options))
        )
        return list(result.scalars().all())

    async def create_category(
        self,
        presentation_id: str,
        name: str,
        icon: str | None = None,
    ) -> Category:
        """Append a category after the existing ones."""
        result = await self.db.execute(
            select(func.max(Category.position)).where(Category.presentation_id == presentation_id)
        )
        last = result.scalar()
        category = Category(
            presentation_id=presentation_id,
            name=name,
            icon=clean_icon(icon),
            position=0 if last is None else last + 1,
        )
        self.db.add(category)
        await self.db.flush()
        return await self.get_category(category.id)

    async def delete_category(self, category: Category) -> None:
        await self.db.delete(category)
        await self.db.flush()

    async def get_question(self, question_id: str) -> Question | None:
        result = await self.db.execute(
            select(Question)
            .where(Question.id == question_id)
            .options(
                selectinload(Question.options),
                selectinload(Question.category).selectinload(Category.presentation),
            )
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_question(
        self,
        category: Category,
        text: str,
        options: Sequence[Identified],
    ) -> Question:
        """Append a question to a loaded category, padding its options to five."""
        position = max((q.position for q in category.questions), default=-1) + 1
        question = Question(
            category_id=category.id,
            text=text,
            position=position,
            options=self._build_options(options),
        )
        self.db.add(question)
        await self.db.flush()
        return await self.get_question(question.id)

    async def update_question(
        self,
        question: Question,
        text: str | None = None,
        options: Sequence[Identified] | None = None,
    ) -> Question:
        if text is not None:
            question.text = text
        if options is not None:
            self.reconcile_options(question, options)
        await self.db.flush()
        return await self.get_question(question.id)

    async def delete_question(self, question: Question) -> None:
        await self.db.delete(question)
        await self.db.flush()
