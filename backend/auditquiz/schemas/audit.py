"""
Audit Quiz Platform - Authoring Schemas
Nested audit payloads and the presentation read shapes
"""
from datetime import datetime
from typing import Annotated, Literal

from pydantic import Field

from auditquiz.models.presentation import MAX_POINTS, MIN_POINTS, OPTIONS_PER_QUESTION
from auditquiz.schemas.common import ApiResponse, CamelModel


# ============================================================================
# Summary
# ============================================================================

class CategoryRecommendation(CamelModel):
    category_id: str
    recommendation: str


class NextStep(CamelModel):
    type: Literal["text", "file"]
    content: str
    file_url: str | None = None


class SummaryInput(CamelModel):
    """Summary fields; omitted fields are left unchanged on update."""
    category_recommendations: list[CategoryRecommendation] | None = None
    next_steps: list[NextStep] | None = None
    overall_details: str | None = None


class SummaryResponse(CamelModel):
    id: str
    presentation_id: str
    category_recommendations: list[dict] | None = None
    next_steps: list[dict] | None = None
    overall_details: str | None = None


# ============================================================================
# Audit payload (desired state)
# ============================================================================

class OptionInput(CamelModel):
    """Option in an authoring payload. No id means "create"."""
    id: str | None = None
    text: Annotated[str, Field(min_length=1)]
    points: Annotated[int, Field(ge=MIN_POINTS, le=MAX_POINTS)] = MIN_POINTS


class QuestionInput(CamelModel):
    id: str | None = None
    text: Annotated[str, Field(min_length=1)]
    options: Annotated[
        list[OptionInput],
        Field(min_length=1, max_length=OPTIONS_PER_QUESTION),
    ]


class CategoryInput(CamelModel):
    id: str | None = None
    name: Annotated[str, Field(min_length=1)]
    icon: str | None = None
    questions: Annotated[list[QuestionInput], Field(min_length=1)]


class AuditPayload(CamelModel):
    """Full desired state of one presentation."""
    title: Annotated[str, Field(min_length=1)]
    categories: Annotated[list[CategoryInput], Field(min_length=1)]
    summary: SummaryInput | None = None


# ============================================================================
# Read shapes
# ============================================================================

class OptionResponse(CamelModel):
    id: str
    question_id: str
    text: str
    points: int
    position: int


class QuestionResponse(CamelModel):
    id: str
    category_id: str
    text: str
    position: int
    options: list[OptionResponse] = []


class CategoryResponse(CamelModel):
    id: str
    presentation_id: str
    name: str
    icon: str | None = None
    position: int
    questions: list[QuestionResponse] = []


class CategoryBrief(CamelModel):
    id: str
    presentation_id: str
    name: str
    icon: str | None = None
    position: int


class TestBrief(CamelModel):
    """A test row without its answers."""
    id: str
    user_id: str
    presentation_id: str
    total_score: int
    created_at: datetime


class PresentationResponse(CamelModel):
    """Presentation with its full category tree and summary."""
    id: str
    user_id: str
    title: str
    created_at: datetime | None = None
    categories: list[CategoryResponse] = []
    summary: SummaryResponse | None = None


class PresentationWithTests(CamelModel):
    id: str
    user_id: str
    title: str
    created_at: datetime | None = None
    categories: list[CategoryResponse] = []
    tests: list[TestBrief] = []


class PresentationTitle(CamelModel):
    id: str
    title: str


class PresentationBrief(CamelModel):
    id: str
    user_id: str
    title: str
    created_at: datetime | None = None


class AuditListResponse(ApiResponse[list[PresentationWithTests]]):
    """Audits visible to the user; invited users cannot author new ones."""
    is_invited_user: bool = False


# ============================================================================
# Presentation / category / question CRUD
# ============================================================================

class PresentationCreate(CamelModel):
    title: Annotated[str, Field(min_length=1)]


class PresentationUpdate(CamelModel):
    title: Annotated[str, Field(min_length=1)] | None = None


class CategoryCreate(CamelModel):
    presentation_id: Annotated[str, Field(min_length=1)]
    name: Annotated[str, Field(min_length=1)]
    icon: str | None = None


class CategoryUpdate(CamelModel):
    name: Annotated[str, Field(min_length=1)] | None = None
    icon: str | None = None


class QuestionOptionInput(CamelModel):
    id: str | None = None
    text: Annotated[str, Field(min_length=1)]
    points: Annotated[int, Field(ge=0)]


class QuestionCreate(CamelModel):
    category_id: Annotated[str, Field(min_length=1)]
    text: Annotated[str, Field(min_length=1)]
    options: Annotated[
        list[QuestionOptionInput],
        Field(min_length=1, max_length=OPTIONS_PER_QUESTION),
    ]


class QuestionUpdate(CamelModel):
    text: Annotated[str, Field(min_length=1)] | None = None
    options: Annotated[
        list[QuestionOptionInput],
        Field(min_length=1, max_length=OPTIONS_PER_QUESTION),
    ] | None = None


class SummaryView(CamelModel):
    summary: SummaryResponse | None = None
    categories: list[CategoryBrief] = []
