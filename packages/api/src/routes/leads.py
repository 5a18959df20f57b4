# This project was developed with assistance from AI tools.
"""Lead routes and lead-to-case conversion."""

from db import get_db
from db.enums import LeadStage, UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.case import CaseCreateResponse, LeadConvertRequest, LeadCreate, LeadResponse
from ..services import leads
from .cases import build_case_response, build_outcomes

router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.STAFF))])


@router.get("/", response_model=list[LeadResponse])
async def list_leads(
    session: AsyncSession = Depends(get_db),
    stage: LeadStage | None = None,
) -> list[LeadResponse]:
    rows = await leads.list_leads(session, stage=stage)
    return [LeadResponse.model_validate(r) for r in rows]


@router.post("/", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    body: LeadCreate,
    session: AsyncSession = Depends(get_db),
) -> LeadResponse:
    lead = await leads.create_lead(session, **body.model_dump())
    return LeadResponse.model_validate(lead)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: int,
    session: AsyncSession = Depends(get_db),
) -> LeadResponse:
    lead = await leads.get_lead(session, lead_id)
    return LeadResponse.model_validate(lead)


@router.post(
    "/{lead_id}/convert",
    response_model=CaseCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def convert_lead(
    lead_id: int,
    body: LeadConvertRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseCreateResponse:
    """Convert a qualified lead into a case, atomically."""
    case, outcomes = await leads.convert_lead(session, user, lead_id, **body.model_dump())
    return CaseCreateResponse(case=build_case_response(case), checklist=build_outcomes(outcomes))
