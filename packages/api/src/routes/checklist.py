# This project was developed with assistance from AI tools.
"""Per-case checklist, document upload records and co-applicant roster."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.checklist import (
    CaseDocumentResponse,
    ChecklistItemResponse,
    ChecklistItemUpdate,
    ChecklistOutcomeResponse,
    ChecklistResponse,
    CoApplicantChangeResponse,
    CoApplicantCreate,
    CoApplicantResponse,
    CoApplicantUpdate,
    DocumentUploadRecord,
)
from ..services import checklist as checklist_service
from ..services import co_applicants

router = APIRouter()

_STAFF = (UserRole.ADMIN, UserRole.STAFF)
_ANY = (UserRole.ADMIN, UserRole.STAFF, UserRole.BANK, UserRole.STUDENT)


@router.get(
    "/cases/{case_id}/checklist",
    response_model=ChecklistResponse,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def get_checklist(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ChecklistResponse:
    """Checklist grouped by owner (student, collateral, each co-applicant) with a summary."""
    return await checklist_service.get_checklist(session, user, case_id)


@router.patch(
    "/cases/{case_id}/checklist/{item_id}",
    response_model=ChecklistItemResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def update_checklist_item(
    case_id: int,
    item_id: int,
    body: ChecklistItemUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ChecklistItemResponse:
    item = await checklist_service.update_checklist_item(
        session, user, case_id, item_id, **body.model_dump(exclude_unset=True)
    )
    return ChecklistItemResponse.model_validate(item)


@router.post(
    "/cases/{case_id}/checklist/{item_id}/upload",
    response_model=CaseDocumentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def record_upload(
    case_id: int,
    item_id: int,
    body: DocumentUploadRecord,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseDocumentResponse:
    """Record a file already stored by the storage service against an item."""
    document = await checklist_service.record_document_upload(
        session, user, case_id, item_id, **body.model_dump()
    )
    return CaseDocumentResponse.model_validate(document)


# ---------------------------------------------------------------------------
# Co-applicants
# ---------------------------------------------------------------------------


@router.get(
    "/cases/{case_id}/co-applicants",
    response_model=list[CoApplicantResponse],
    dependencies=[Depends(require_roles(*_ANY))],
)
async def list_co_applicants(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[CoApplicantResponse]:
    rows = await co_applicants.list_co_applicants(session, user, case_id)
    return [CoApplicantResponse.model_validate(r) for r in rows]


@router.post(
    "/cases/{case_id}/co-applicants",
    response_model=CoApplicantChangeResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def add_co_applicant(
    case_id: int,
    body: CoApplicantCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CoApplicantChangeResponse:
    co_applicant, outcomes = await co_applicants.add_co_applicant(
        session, user, case_id, **body.model_dump()
    )
    return CoApplicantChangeResponse(
        co_applicant=CoApplicantResponse.model_validate(co_applicant),
        checklist=[ChecklistOutcomeResponse.model_validate(o, from_attributes=True) for o in outcomes],
    )


@router.patch(
    "/cases/{case_id}/co-applicants/{co_applicant_id}",
    response_model=CoApplicantChangeResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def update_co_applicant(
    case_id: int,
    co_applicant_id: int,
    body: CoApplicantUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CoApplicantChangeResponse:
    co_applicant, outcomes = await co_applicants.update_co_applicant(
        session, user, case_id, co_applicant_id, **body.model_dump(exclude_unset=True)
    )
    return CoApplicantChangeResponse(
        co_applicant=CoApplicantResponse.model_validate(co_applicant),
        checklist=[ChecklistOutcomeResponse.model_validate(o, from_attributes=True) for o in outcomes],
    )


@router.delete(
    "/cases/{case_id}/co-applicants/{co_applicant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def remove_co_applicant(
    case_id: int,
    co_applicant_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    """Remove a co-applicant. Their checklist items stay on the case."""
    await co_applicants.remove_co_applicant(session, user, case_id, co_applicant_id)
