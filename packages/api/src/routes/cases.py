# This project was developed with assistance from AI tools.
"""Case routes: creation, listing with on-demand SLA, profile edits,
workflow transitions, history and bank applications."""

from db import Case, get_db
from db.enums import AwaitingParty, CaseStatus, Priority, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.case import (
    BankApplicationCreate,
    BankApplicationResponse,
    CaseCreate,
    CaseCreateResponse,
    CaseDetailResponse,
    CaseListResponse,
    CaseResponse,
    CaseUpdate,
    HistoryEntryResponse,
    StageExpectationResponse,
    TransitionRequest,
)
from ..schemas.checklist import ChecklistOutcomeResponse
from ..schemas.sla import SlaLevel
from ..services import case_workflow
from ..services.checklist import ChecklistOutcome
from ..services.expectations import get_stage_expectation
from ..services.history import get_history
from ..services.sla import evaluate_case_sla

router = APIRouter()

_STAFF = (UserRole.ADMIN, UserRole.STAFF)
_ANY = (UserRole.ADMIN, UserRole.STAFF, UserRole.BANK, UserRole.STUDENT)


def build_case_response(case: Case) -> CaseResponse:
    response = CaseResponse.model_validate(case)
    response.sla = evaluate_case_sla(case)
    return response


def build_outcomes(outcomes: list[ChecklistOutcome]) -> list[ChecklistOutcomeResponse]:
    return [ChecklistOutcomeResponse.model_validate(o, from_attributes=True) for o in outcomes]


@router.get("/", response_model=CaseListResponse, dependencies=[Depends(require_roles(*_ANY))])
async def list_cases(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
    filter_status: CaseStatus | None = None,
    filter_awaiting: AwaitingParty | None = None,
    filter_priority: Priority | None = None,
    sla: SlaLevel | None = Query(default=None, description="Only cases at this SLA level."),
) -> CaseListResponse:
    """List cases visible to the caller, each with its current SLA evaluation."""
    rows, total = await case_workflow.list_cases(
        session,
        user,
        offset=offset,
        limit=limit,
        status=filter_status,
        awaiting_party=filter_awaiting,
        priority=filter_priority,
        sla_level=sla,
    )
    items = []
    for case, evaluation in rows:
        item = CaseResponse.model_validate(case)
        item.sla = evaluation
        items.append(item)
    return CaseListResponse(
        data=items,
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.post(
    "/",
    response_model=CaseCreateResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_case(
    body: CaseCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseCreateResponse:
    case, outcomes = await case_workflow.create_case(session, user, **body.model_dump())
    return CaseCreateResponse(case=build_case_response(case), checklist=build_outcomes(outcomes))


@router.get(
    "/{case_id}",
    response_model=CaseDetailResponse,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def get_case(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseDetailResponse:
    """Case detail with SLA and the expected-time guidance for its status."""
    case = await case_workflow.get_case(session, user, case_id)
    response = CaseDetailResponse.model_validate(case)
    response.sla = evaluate_case_sla(case)
    expectation = await get_stage_expectation(session, case.status)
    if expectation is not None:
        response.stage_expectation = StageExpectationResponse.model_validate(expectation)
    return response


@router.patch(
    "/{case_id}",
    response_model=CaseResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def update_case(
    case_id: int,
    body: CaseUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseResponse:
    case = await case_workflow.update_case_profile(
        session, user, case_id, **body.model_dump(exclude_unset=True)
    )
    return build_case_response(case)


@router.post(
    "/{case_id}/transition",
    response_model=CaseResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def transition_case(
    case_id: int,
    body: TransitionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseResponse:
    """Change status, awaiting party, priority or close reason, or add a note."""
    case = await case_workflow.transition(session, user, case_id, **body.model_dump())
    return build_case_response(case)


@router.get(
    "/{case_id}/history",
    response_model=list[HistoryEntryResponse],
    dependencies=[Depends(require_roles(*_ANY))],
)
async def case_history(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[HistoryEntryResponse]:
    entries = await get_history(session, user, case_id)
    return [HistoryEntryResponse.model_validate(e) for e in entries]


@router.get(
    "/{case_id}/bank-applications",
    response_model=list[BankApplicationResponse],
    dependencies=[Depends(require_roles(*_ANY))],
)
async def list_bank_applications(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[BankApplicationResponse]:
    apps = await case_workflow.list_bank_applications(session, user, case_id)
    return [BankApplicationResponse.model_validate(a) for a in apps]


@router.post(
    "/{case_id}/bank-applications",
    response_model=BankApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_bank_application(
    case_id: int,
    body: BankApplicationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BankApplicationResponse:
    app = await case_workflow.create_bank_application(
        session, user, case_id, bank_id=body.bank_id, bank_reference=body.bank_reference,
    )
    return BankApplicationResponse.model_validate(app)
