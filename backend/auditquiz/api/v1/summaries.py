"""
Audit Quiz Platform - Summary API Routes
"""
from fastapi import APIRouter, HTTPException, status

from auditquiz.api.deps import CurrentUser, DbSession, ensure_owner
from auditquiz.schemas.audit import CategoryBrief, SummaryInput, SummaryResponse, SummaryView
from auditquiz.schemas.common import ApiResponse
from auditquiz.services.audit import AuditService
from auditquiz.services.summary import SummaryExistsError, SummaryService

router = APIRouter(prefix="/summaries", tags=["Summaries"])


@router.get(
    "/{presentation_id}",
    response_model=ApiResponse[SummaryView],
    summary="Get a presentation's summary and categories",
)
async def get_summary(
    presentation_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[SummaryView]:
    presentation = ensure_owner(
        await AuditService(db).get_presentation(presentation_id),
        current_user,
    )
    summary = presentation.summary
    return ApiResponse(data=SummaryView(
        summary=SummaryResponse.model_validate(summary) if summary else None,
        categories=[CategoryBrief.model_validate(c) for c in presentation.categories],
    ))


@router.post(
    "/{presentation_id}",
    response_model=ApiResponse[SummaryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a summary",
)
async def create_summary(
    presentation_id: str,
    data: SummaryInput,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[SummaryResponse]:
    ensure_owner(await AuditService(db).get_presentation(presentation_id), current_user)
    try:
        summary = await SummaryService(db).create(presentation_id, data)
    except SummaryExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return ApiResponse(
        message="Summary created successfully",
        data=SummaryResponse.model_validate(summary),
    )


@router.patch(
    "/{presentation_id}",
    response_model=ApiResponse[SummaryResponse],
    summary="Update or create a summary",
)
async def update_summary(
    presentation_id: str,
    data: SummaryInput,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[SummaryResponse]:
    ensure_owner(await AuditService(db).get_presentation(presentation_id), current_user)
    summary = await SummaryService(db).upsert(presentation_id, data)
    return ApiResponse(
        message="Summary updated successfully",
        data=SummaryResponse.model_validate(summary),
    )
