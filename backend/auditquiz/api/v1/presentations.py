"""
Audit Quiz Platform - Presentation, Category and Question API Routes
Fine-grained editing of a single node of an audit
"""
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from auditquiz.api.deps import CurrentUser, DbSession, ensure_owner
from auditquiz.models.presentation import Presentation
from auditquiz.schemas.audit import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    PresentationBrief,
    PresentationCreate,
    PresentationResponse,
    PresentationUpdate,
    PresentationWithTests,
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
)
from auditquiz.schemas.common import ApiResponse
from auditquiz.services.audit import AuditService, clean_icon

router = APIRouter(tags=["Presentations"])


# ============================================================================
# Presentations
# ============================================================================

@router.get(
    "/presentations",
    response_model=ApiResponse[list[PresentationWithTests]],
    summary="List own presentations",
)
async def list_presentations(
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[list[PresentationWithTests]]:
    presentations = await AuditService(db).list_own(current_user.id)
    return ApiResponse(data=[PresentationWithTests.model_validate(p) for p in presentations])


@router.post(
    "/presentations",
    response_model=ApiResponse[PresentationBrief],
    status_code=status.HTTP_201_CREATED,
    summary="Create an empty presentation",
)
async def create_presentation(
    data: PresentationCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[PresentationBrief]:
    presentation = await AuditService(db).create_presentation(current_user.id, data.title)
    return ApiResponse(
        message="Presentation created successfully",
        data=PresentationBrief.model_validate(presentation),
    )


@router.get(
    "/presentations/{presentation_id}",
    response_model=ApiResponse[PresentationResponse],
    summary="Get a presentation with its categories and summary",
)
async def get_presentation(
    presentation_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[PresentationResponse]:
    presentation = await AuditService(db).get_presentation(presentation_id)
    if not presentation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Presentation not found",
        )
    return ApiResponse(data=PresentationResponse.model_validate(presentation))


@router.patch(
    "/presentations/{presentation_id}",
    response_model=ApiResponse[PresentationResponse],
    summary="Rename a presentation",
)
async def update_presentation(
    presentation_id: str,
    data: PresentationUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[PresentationResponse]:
    audit_service = AuditService(db)
    presentation = ensure_owner(
        await audit_service.get_presentation(presentation_id),
        current_user,
    )
    if data.title is not None:
        presentation.title = data.title
        await db.flush()
    presentation = await audit_service.get_presentation(presentation_id)
    return ApiResponse(
        message="Presentation updated successfully",
        data=PresentationResponse.model_validate(presentation),
    )


@router.delete(
    "/presentations/{presentation_id}",
    response_model=ApiResponse[None],
    summary="Delete a presentation and everything under it",
)
async def delete_presentation(
    presentation_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[None]:
    audit_service = AuditService(db)
    presentation = ensure_owner(
        await audit_service.get_presentation(presentation_id),
        current_user,
    )
    await audit_service.delete_presentation(presentation)
    return ApiResponse(message="Presentation deleted successfully")


# ============================================================================
# Categories
# ============================================================================

async def _owned_category(audit_service: AuditService, category_id: str, user):
    category = await audit_service.get_category(category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )
    ensure_owner(category.presentation, user)
    return category


@router.get(
    "/categories",
    response_model=ApiResponse[list[CategoryResponse]],
    summary="List categories of a presentation",
)
async def list_categories(
    presentation_id: Annotated[str, Query(alias="presentationId", min_length=1)],
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[list[CategoryResponse]]:
    categories = await AuditService(db).list_categories(presentation_id)
    return ApiResponse(data=[CategoryResponse.model_validate(c) for c in categories])


@router.post(
    "/categories",
    response_model=ApiResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Append a category",
)
async def create_category(
    data: CategoryCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[CategoryResponse]:
    audit_service = AuditService(db)
    ensure_owner(await db.get(Presentation, data.presentation_id), current_user)
    category = await audit_service.create_category(data.presentation_id, data.name, data.icon)
    return ApiResponse(
        message="Category created successfully",
        data=CategoryResponse.model_validate(category),
    )


@router.patch(
    "/categories/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    summary="Update a category",
)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[CategoryResponse]:
    audit_service = AuditService(db)
    category = await _owned_category(audit_service, category_id, current_user)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name") is not None:
        category.name = update_data["name"]
    if "icon" in update_data:
        category.icon = clean_icon(update_data["icon"])
    await db.flush()

    category = await audit_service.get_category(category_id)
    return ApiResponse(
        message="Category updated successfully",
        data=CategoryResponse.model_validate(category),
    )


@router.delete(
    "/categories/{category_id}",
    response_model=ApiResponse[None],
    summary="Delete a category and its questions",
)
async def delete_category(
    category_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[None]:
    audit_service = AuditService(db)
    category = await _owned_category(audit_service, category_id, current_user)
    await audit_service.delete_category(category)
    return ApiResponse(message="Category deleted successfully")


# ============================================================================
# Questions
# ============================================================================

async def _owned_question(audit_service: AuditService, question_id: str, user):
    question = await audit_service.get_question(question_id)
    if not question:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found",
        )
    ensure_owner(question.category.presentation, user)
    return question


@router.post(
    "/questions",
    response_model=ApiResponse[QuestionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Append a question",
    description="Options are padded to five with default labels and points.",
)
async def create_question(
    data: QuestionCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[QuestionResponse]:
    audit_service = AuditService(db)
    category = await _owned_category(audit_service, data.category_id, current_user)
    question = await audit_service.create_question(category, data.text, data.options)
    return ApiResponse(
        message="Question created successfully",
        data=QuestionResponse.model_validate(question),
    )


@router.get(
    "/questions/{question_id}",
    response_model=ApiResponse[QuestionResponse],
    summary="Get a question with its options",
)
async def get_question(
    question_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[QuestionResponse]:
    question = await AuditService(db).get_question(question_id)
    if not question:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Question not found",
        )
    return ApiResponse(data=QuestionResponse.model_validate(question))


@router.patch(
    "/questions/{question_id}",
    response_model=ApiResponse[QuestionResponse],
    summary="Update a question and reconcile its options",
)
async def update_question(
    question_id: str,
    data: QuestionUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[QuestionResponse]:
    audit_service = AuditService(db)
    question = await _owned_question(audit_service, question_id, current_user)
    question = await audit_service.update_question(question, data.text, data.options)
    return ApiResponse(
        message="Question updated successfully",
        data=QuestionResponse.model_validate(question),
    )


@router.delete(
    "/questions/{question_id}",
    response_model=ApiResponse[None],
    summary="Delete a question",
)
async def delete_question(
    question_id: str,
    current_user: CurrentUser,
    db: DbSession,
) -> ApiResponse[None]:
    audit_service = AuditService(db)
    question = await _owned_question(audit_service, question_id, current_user)
    await audit_service.delete_question(question)
    return ApiResponse(message="Question deleted successfully")
