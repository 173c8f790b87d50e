"""
Audit Quiz Platform - Invitation API Routes
"""
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Response, status

from auditquiz.api.deps import CurrentUser, DbSession, MailerDep, ensure_owner
from auditquiz.models.presentation import Presentation
from auditquiz.schemas.common import ApiResponse
from auditquiz.schemas.invitation import (
    AuditInviteRequest,
    CompanyInviteRequest,
    InvitationLookup,
    InvitationResponse,
    SentInvitation,
    SharedAuditResult,
)
from auditquiz.services.invitation import (
    AlreadySharedError,
    InvitationAlreadySentError,
    InvitationNotFoundError,
    InvitationService,
    InvitationUnusableError,
    UserAlreadyExistsError,
)

router = APIRouter(prefix="/invitations", tags=["Invitations"])


@router.post(
    "",
    response_model=ApiResponse[InvitationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Invite a new member to a company",
)
async def create_invitation(
    data: CompanyInviteRequest,
    current_user: CurrentUser,
    db: DbSession,
    mailer: MailerDep,
) -> ApiResponse[InvitationResponse]:
    service = InvitationService(db, mailer)
    try:
        invitation = await service.create_company_invitation(
            inviter=current_user,
            email=data.email,
            role=data.role,
            company_id=data.company_id,
        )
    except UserAlreadyExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    return ApiResponse(
        message="Invitation created successfully",
        data=InvitationResponse.model_validate(invitation),
    )


@router.get(
    "",
    response_model=ApiResponse[InvitationLookup],
    summary="Look up an invitation by token",
)
async def get_invitation(
    db: DbSession,
    mailer: MailerDep,
    token: Annotated[str | None, Query()] = None,
) -> ApiResponse[InvitationLookup]:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Token is required",
        )

    service = InvitationService(db, mailer)
    try:
        invitation = await service.lookup(token)
    except InvitationNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except InvitationUnusableError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return ApiResponse(data=InvitationLookup.model_validate(invitation))


@router.post(
    "/audit",
    response_model=ApiResponse[InvitationResponse | SharedAuditResult],
    summary="Share an audit by email",
    description=(
        "Registered users get direct access and a login email (200); "
        "unknown emails get a signup invitation tied to the audit (201)."
    ),
)
async def invite_to_audit(
    data: AuditInviteRequest,
    response: Response,
    current_user: CurrentUser,
    db: DbSession,
    mailer: MailerDep,
) -> ApiResponse[InvitationResponse | SharedAuditResult]:
    presentation = ensure_owner(await db.get(Presentation, data.presentation_id), current_user)

    service = InvitationService(db, mailer)
    try:
        outcome = await service.invite_to_audit(current_user, presentation, data.email)
    except (AlreadySharedError, InvitationAlreadySentError) as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    if outcome.shared is not None:
        return ApiResponse(
            message="Audit shared successfully with existing user",
            data=SharedAuditResult.model_validate(outcome.shared),
        )

    response.status_code = status.HTTP_201_CREATED
    return ApiResponse(
        message="Invitation sent successfully",
        data=InvitationResponse.model_validate(outcome.invitation),
    )


@router.get(
    "/sent",
    response_model=ApiResponse[list[SentInvitation]],
    summary="Invitations sent by the current user",
)
async def list_sent_invitations(
    current_user: CurrentUser,
    db: DbSession,
    mailer: MailerDep,
) -> ApiResponse[list[SentInvitation]]:
    invitations = await InvitationService(db, mailer).sent_by(current_user.id)
    return ApiResponse(data=[SentInvitation.model_validate(i) for i in invitations])
