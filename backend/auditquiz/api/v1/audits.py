"""
Audit Quiz Platform - Audit Authoring API Routes
Create, reconcile and list audits as whole nested documents
"""
from fastapi import APIRouter, status

from auditquiz.api.deps import CurrentUser, DbSession, ensure_owner
from auditquiz.schemas.audit import (
    AuditListResponse,
    AuditPayload,
    PresentationResponse,
    PresentationWithTests,
    TestBrief,
)
from auditquiz.schemas.common import ApiResponse
from auditquiz.services.audit import AuditService

router = APIRouter(prefix="/audits", tags=["Audits"])


@router.get(
    "",
    response_model=AuditListResponse,
    summary="List visible audits",
    description="Own and shared audits, or only the invited audit for invited users.",
)
async def list_audits(
    current_user: CurrentUser,
    db: DbSession,
) -> AuditListResponse:
    presentations, is_invited = await AuditService(db).list_visible(
        current_user.id, current_user.email
    )

    items = []
    for presentation in presentations:
        item = PresentationWithTests.model_validate(presentation)
        # Tests are ordered newest first
        latest = next(
            (t for t in presentation.tests if t.user_id == current_user.id),
            None,
        )
        item.tests = [TestBrief.model_validate(latest)] if latest else []
        items.append(item)

    return AuditListResponse(data=items, is_invited_user=is_invited)


@router.post(
    "",
    response_model=ApiResponse[PresentationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create an audit",
)
async def create_audit(
    payload: AuditPayload,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[PresentationResponse]:
    """Create a presentation with its categories, questions and options."""
    presentation = await AuditService(db).create_audit(current_user.id, payload)
    return ApiResponse(
        message="Audit created successfully",
        data=PresentationResponse.model_validate(presentation),
    )


@router.patch(
    "/{presentation_id}",
    response_model=ApiResponse[PresentationResponse],
    summary="Update an audit",
    description="Reconcile stored categories, questions and options with the payload by id.",
)
async def update_audit(
    presentation_id: str,
    payload: AuditPayload,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[PresentationResponse]:
    audit_service = AuditService(db)
    presentation = ensure_owner(
        await audit_service.get_presentation(presentation_id, lock=True),
        current_user,
    )
    presentation = await audit_service.update_audit(presentation, payload)
    return ApiResponse(
        message="Audit updated successfully",
        data=PresentationResponse.model_validate(presentation),
    )
