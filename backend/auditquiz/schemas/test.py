"""
Audit Quiz Platform - Test Schemas
Pydantic schemas for submission, score override, results and progress
"""
from datetime import datetime
from typing import Annotated

from pydantic import Field

from auditquiz.schemas.audit import PresentationTitle
from auditquiz.schemas.common import CamelModel

NonEmptyId = Annotated[str, Field(min_length=1)]


class AnswerItem(CamelModel):
    """A single (question, chosen option) pair."""
    question_id: NonEmptyId
    option_id: NonEmptyId


class SubmitTestRequest(CamelModel):
    """Request to submit a completed audit."""
    presentation_id: NonEmptyId
    user_id: NonEmptyId
    answers: Annotated[list[AnswerItem], Field(min_length=1)]


class CategoryScoreInput(CamelModel):
    category_id: NonEmptyId
    score: int


class UpdateScoreRequest(CamelModel):
    """Caller-computed totals for the latest attempt."""
    presentation_id: NonEmptyId
    total_score: int
    category_scores: list[CategoryScoreInput] = []


class CategoryScoreResponse(CamelModel):
    id: str
    test_id: str
    category_id: str | None
    score: int


class ScoreResult(CamelModel):
    """Response after submitting or overriding a score."""
    test_id: str
    total_score: int
    category_scores: list[CategoryScoreResponse] = []


# ============================================================================
# Results
# ============================================================================

class AnsweredQuestion(CamelModel):
    id: str
    text: str
    category_id: str


class ChosenOption(CamelModel):
    id: str
    text: str
    points: int


class AnswerResponse(CamelModel):
    id: str
    test_id: str
    question_id: str | None
    option_id: str | None
    points: int
    question: AnsweredQuestion | None = None
    option: ChosenOption | None = None


class TestResultResponse(CamelModel):
    """One past attempt with its answers and category breakdown."""
    id: str
    user_id: str
    presentation_id: str
    total_score: int
    created_at: datetime
    answers: list[AnswerResponse] = []
    category_scores: list[CategoryScoreResponse] = []
    presentation: PresentationTitle | None = None


# ============================================================================
# Test-taking view
# ============================================================================

class QuestionCategory(CamelModel):
    id: str
    name: str
    presentation_id: str


class TakeOption(CamelModel):
    id: str
    question_id: str
    text: str
    points: int
    position: int


class TakeQuestion(CamelModel):
    id: str
    category_id: str
    text: str
    position: int
    options: list[TakeOption] = []
    category: QuestionCategory


class TestQuestionsResponse(CamelModel):
    questions: list[TakeQuestion] = []


# ============================================================================
# Progress (draft answers)
# ============================================================================

class ProgressSaveRequest(CamelModel):
    # Format: { questionId: optionId }
    answers: dict[str, str] | None = None


class CategoryEstimate(CamelModel):
    """Score estimate for one category from a (possibly partial) answer set."""
    category_id: str
    score: int
    max_score: int
    percentage: float
    answered: int


class ProgressResponse(CamelModel):
    answers: dict[str, str] = {}
    updated_at: datetime | None = None
    updated_by: str | None = None
    estimated_scores: list[CategoryEstimate] = []
