"""
Audit Quiz Platform - Scoring Service
Turns submitted (question, option) pairs into a Test with Answer and
CategoryScore rows, and handles the caller-supplied score override.
"""
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from auditquiz.models.presentation import MAX_POINTS, Category, Option, Question
from auditquiz.models.test import Answer, CategoryScore, Test
from auditquiz.schemas.test import AnswerItem, CategoryScoreInput

logger = logging.getLogger(__name__)


@dataclass
class ResolvedAnswer:
    """A submitted pair whose option exists in the audit."""
    question_id: str
    option_id: str
    category_id: str
    points: int


@dataclass
class ScoreBreakdown:
    """Running totals; categories keep first-contribution order."""
    total_score: int = 0
    category_scores: dict[str, int] = field(default_factory=dict)

    def add(self, category_id: str, points: int) -> None:
        self.total_score += points
        self.category_scores[category_id] = self.category_scores.get(category_id, 0) + points


@dataclass
class ScoreEstimate:
    category_id: str
    score: int
    max_score: int
    percentage: float
    answered: int


@dataclass
class ScoredTest:
    """A persisted test together with the category rows written for it."""
    test: Test
    category_scores: list[CategoryScore]

    @property
    def test_id(self) -> str:
        return self.test.id

    @property
    def total_score(self) -> int:
        return self.test.total_score


def aggregate_scores(answers: Iterable[ResolvedAnswer]) -> ScoreBreakdown:
    """Sum points overall and per category."""
    breakdown = ScoreBreakdown()
    for answer in answers:
        breakdown.add(answer.category_id, answer.points)
    return breakdown


def category_max_score(question_count: int) -> int:
    return question_count * MAX_POINTS


def category_percentage(score: int, question_count: int) -> float:
    max_score = category_max_score(question_count)
    if max_score == 0:
        return 0.0
    return round(score / max_score * 100, 2)


def estimate_category_scores(
    categories: Sequence[Category],
    answers: Mapping[str, str],
) -> list[ScoreEstimate]:
    """
    Score a draft answer map against loaded categories.

    Unanswered questions and option ids that are not among the question's
    options contribute nothing. With every question answered this equals
    the aggregation done on submission.

    Args:
        categories: Categories with questions and options loaded
        answers: Map of question id to chosen option id

    Returns:
        One estimate per category, in category order
    """
    estimates = []
    for category in categories:
        score = 0
        answered = 0
        for question in category.questions:
            chosen = answers.get(question.id)
            if chosen is None:
                continue
            option = next((o for o in question.options if o.id == chosen), None)
            if option is None:
                continue
            score += option.points
            answered += 1
        question_count = len(category.questions)
        estimates.append(ScoreEstimate(
            category_id=category.id,
            score=score,
            max_score=category_max_score(question_count),
            percentage=category_percentage(score, question_count),
            answered=answered,
        ))
    return estimates


class ScoringService:
    """Service for persisting scored attempts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_answers(
        self,
        presentation_id: str,
        answers: Sequence[AnswerItem],
    ) -> list[ResolvedAnswer]:
        """
        Look up each chosen option's points and category.

        A pair is dropped without error only when its option cannot be found
        in this presentation. Every other pair is scored, including repeated
        answers to one question. The submitted question id is stored as given
        when it names a question; otherwise the option's own question is used.
        """
        option_ids = list({item.option_id for item in answers})
        rows = await self.db.execute(
            select(Option.id, Option.question_id, Option.points, Question.category_id)
            .join(Question, Option.question_id == Question.id)
            .join(Category, Question.category_id == Category.id)
            .where(
                Option.id.in_(option_ids),
                Category.presentation_id == presentation_id,
            )
        )
        by_option = {row.id: row for row in rows}

        question_ids = list({item.question_id for item in answers})
        known_questions = set(
            (await self.db.execute(select(Question.id).where(Question.id.in_(question_ids))))
            .scalars()
            .all()
        )

        resolved: list[ResolvedAnswer] = []
        for item in answers:
            row = by_option.get(item.option_id)
            if row is None:
                logger.debug(
                    "Skipping answer question=%s option=%s for presentation %s",
                    item.question_id, item.option_id, presentation_id,
                )
                continue
            question_id = item.question_id if item.question_id in known_questions else row.question_id
            resolved.append(ResolvedAnswer(
                question_id=question_id,
                option_id=row.id,
                category_id=row.category_id,
                points=row.points,
            ))
        return resolved

    async def submit_test(
        self,
        user_id: str,
        presentation_id: str,
        answers: Sequence[AnswerItem],
    ) -> ScoredTest:
        """
        Score a submission and store it as a new Test.

        Every call creates a new Test; repeated submissions are separate
        attempts.

        Returns:
            The test and its category score rows
        """
        test = Test(user_id=user_id, presentation_id=presentation_id, total_score=0)
        self.db.add(test)
        await self.db.flush()

        resolved = await self.resolve_answers(presentation_id, answers)
        breakdown = aggregate_scores(resolved)

        # Points are copied so later option edits leave history alone
        self.db.add_all([
            Answer(
                test_id=test.id,
                question_id=answer.question_id,
                option_id=answer.option_id,
                points=answer.points,
            )
            for answer in resolved
        ])
        category_scores = [
            CategoryScore(test_id=test.id, category_id=category_id, score=score)
            for category_id, score in breakdown.category_scores.items()
        ]
        self.db.add_all(category_scores)

        test.total_score = breakdown.total_score
        await self.db.flush()

        logger.info(
            "Test %s submitted by %s: %d/%d answers scored, total=%d",
            test.id, user_id, len(resolved), len(answers), test.total_score,
        )
        return ScoredTest(test=test, category_scores=category_scores)

    async def latest_test(self, user_id: str, presentation_id: str) -> Test | None:
        result = await self.db.execute(
            select(Test)
            .where(Test.user_id == user_id, Test.presentation_id == presentation_id)
            .order_by(Test.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update_score(
        self,
        user_id: str,
        presentation_id: str,
        total_score: int,
        category_scores: Sequence[CategoryScoreInput],
    ) -> ScoredTest:
        """
        Overwrite the latest attempt's scores with caller-supplied values.

        Totals are trusted as given and are not recomputed from Answers.
        Without a prior attempt a new Test is created (with no Answers).
        """
        test = await self.latest_test(user_id, presentation_id)
        if test is not None:
            test.total_score = total_score
            await self.db.execute(
                delete(CategoryScore).where(CategoryScore.test_id == test.id)
            )
        else:
            test = Test(user_id=user_id, presentation_id=presentation_id, total_score=total_score)
            self.db.add(test)
            await self.db.flush()

        records = [
            CategoryScore(test_id=test.id, category_id=item.category_id, score=item.score)
            for item in category_scores
        ]
        self.db.add_all(records)
        await self.db.flush()

        logger.info("Test %s score overridden: total=%d", test.id, total_score)
        return ScoredTest(test=test, category_scores=records)

    async def get_results(self, user_id: str) -> list[Test]:
        """All attempts by a user, newest first, with answers and scores."""
        result = await self.db.execute(
            select(Test)
            .where(Test.user_id == user_id)
            .order_by(Test.created_at.desc())
            .options(
                selectinload(Test.answers).selectinload(Answer.question),
                selectinload(Test.answers).selectinload(Answer.option),
                selectinload(Test.category_scores),
                selectinload(Test.presentation),
            )
        )
        return list(result.scalars().all())
