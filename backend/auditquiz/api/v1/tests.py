"""
Audit Quiz Platform - Test-Taking API Routes
Submission, score override, results, questions and draft progress
"""
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auditquiz.api.deps import CurrentUser, DbSession
from auditquiz.models.presentation import Category, Presentation
from auditquiz.models.user import User, UserRole
from auditquiz.schemas.common import ApiResponse
from auditquiz.schemas.test import (
    CategoryEstimate,
    ProgressResponse,
    ProgressSaveRequest,
    QuestionCategory,
    ScoreResult,
    SubmitTestRequest,
    TakeOption,
    TakeQuestion,
    TestQuestionsResponse,
    TestResultResponse,
    UpdateScoreRequest,
)
from auditquiz.services.audit import AuditService
from auditquiz.services.progress import ProgressService, progress_author
from auditquiz.services.scoring import ScoringService, estimate_category_scores

router = APIRouter(prefix="/tests", tags=["Tests"])


async def _require_presentation(db: AsyncSession, presentation_id: str) -> Presentation:
    presentation = await db.get(Presentation, presentation_id)
    if not presentation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Presentation not found",
        )
    return presentation


async def _require_categories(db: AsyncSession, category_ids: list[str]) -> None:
    if not category_ids:
        return
    found = set(
        (await db.execute(select(Category.id).where(Category.id.in_(category_ids))))
        .scalars()
        .all()
    )
    if set(category_ids) - found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )


@router.post(
    "/submit",
    response_model=ApiResponse[ScoreResult],
    summary="Submit a completed audit",
    description=(
        "Scores the answers from the stored option points. Answers whose option "
        "cannot be found in the audit are skipped. Every call creates a new test."
    ),
)
async def submit_test(
    data: SubmitTestRequest,
    db: DbSession,
) -> ApiResponse[ScoreResult]:
    await _require_presentation(db, data.presentation_id)
    if not await db.get(User, data.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    scored = await ScoringService(db).submit_test(
        user_id=data.user_id,
        presentation_id=data.presentation_id,
        answers=data.answers,
    )
    return ApiResponse(
        message="Test submitted successfully",
        data=ScoreResult.model_validate(scored),
    )


@router.post(
    "/update-score",
    response_model=ApiResponse[ScoreResult],
    summary="Override the latest attempt's scores",
)
async def update_score(
    data: UpdateScoreRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[ScoreResult]:
    await _require_presentation(db, data.presentation_id)
    await _require_categories(db, [item.category_id for item in data.category_scores])
    scored = await ScoringService(db).update_score(
        user_id=current_user.id,
        presentation_id=data.presentation_id,
        total_score=data.total_score,
        category_scores=data.category_scores,
    )
    return ApiResponse(
        message="Score updated successfully",
        data=ScoreResult.model_validate(scored),
    )


@router.get(
    "/results",
    response_model=ApiResponse[list[TestResultResponse]],
    summary="Past attempts of a user",
)
async def get_results(
    current_user: CurrentUser,
    db: DbSession,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> ApiResponse[list[TestResultResponse]]:
    """Defaults to the session user; other users' results are admin-only."""
    target = user_id or current_user.id
    if target != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view these results",
        )

    tests = await ScoringService(db).get_results(target)
    return ApiResponse(data=[TestResultResponse.model_validate(t) for t in tests])


@router.get(
    "/questions/{presentation_id}",
    response_model=ApiResponse[TestQuestionsResponse],
    summary="Questions to answer, flattened across categories",
)
async def get_questions(
    presentation_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[TestQuestionsResponse]:
    await _require_presentation(db, presentation_id)
    categories = await AuditService(db).list_categories(presentation_id)

    questions = []
    for category in categories:
        brief = QuestionCategory(
            id=category.id,
            name=category.name,
            presentation_id=category.presentation_id,
        )
        for question in category.questions:
            questions.append(TakeQuestion(
                id=question.id,
                category_id=question.category_id,
                text=question.text,
                position=question.position,
                options=[TakeOption.model_validate(o) for o in question.options],
                category=brief,
            ))

    return ApiResponse(data=TestQuestionsResponse(questions=questions))


# ============================================================================
# Draft progress
# ============================================================================

async def _progress_response(db: AsyncSession, presentation_id: str, progress) -> ProgressResponse:
    answers = dict(progress.answers or {}) if progress else {}
    categories = await AuditService(db).list_categories(presentation_id)
    estimates = estimate_category_scores(categories, answers)
    return ProgressResponse(
        answers=answers,
        updated_at=progress.updated_at if progress else None,
        updated_by=progress.updated_by if progress else None,
        estimated_scores=[CategoryEstimate.model_validate(e) for e in estimates],
    )


@router.get(
    "/progress/{presentation_id}",
    response_model=ApiResponse[ProgressResponse],
    summary="Get saved draft answers",
)
async def get_progress(
    presentation_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[ProgressResponse]:
    await _require_presentation(db, presentation_id)
    progress = await ProgressService(db).get(presentation_id)
    return ApiResponse(data=await _progress_response(db, presentation_id, progress))


@router.post(
    "/progress/{presentation_id}",
    response_model=ApiResponse[ProgressResponse],
    summary="Save draft answers",
)
async def save_progress(
    presentation_id: str,
    data: ProgressSaveRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[ProgressResponse]:
    await _require_presentation(db, presentation_id)
    progress = await ProgressService(db).save(
        presentation_id,
        data.answers,
        updated_by=progress_author(current_user),
    )
    return ApiResponse(
        message="Progress saved",
        data=await _progress_response(db, presentation_id, progress),
    )
