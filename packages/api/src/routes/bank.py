# This project was developed with assistance from AI tools.
"""Bank-application routes: portal status sync and requirement overrides."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.case import BankApplicationResponse, BankStatusSync
from ..schemas.checklist import (
    ChecklistItemResponse,
    OverrideCreate,
    OverrideResponse,
    OverrideResultResponse,
)
from ..services import case_workflow, overrides

router = APIRouter()

_BANK_SIDE = (UserRole.ADMIN, UserRole.STAFF, UserRole.BANK)


@router.get(
    "/{app_id}",
    response_model=BankApplicationResponse,
    dependencies=[Depends(require_roles(*_BANK_SIDE))],
)
async def get_bank_application(
    app_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BankApplicationResponse:
    app = await case_workflow.get_bank_application(session, user, app_id)
    return BankApplicationResponse.model_validate(app)


@router.post(
    "/{app_id}/sync",
    response_model=BankApplicationResponse,
    dependencies=[Depends(require_roles(*_BANK_SIDE))],
)
async def sync_bank_status(
    app_id: int,
    body: BankStatusSync,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> BankApplicationResponse:
    """Record a bank-reported status and move the linked case through the
    fixed bank-to-case status translation."""
    actor = user.name if user.role == UserRole.BANK else None
    app = await case_workflow.sync_bank_status(
        session,
        user,
        app_id,
        bank_status=body.bank_status,
        close_reason=body.close_reason,
        actor=actor,
    )
    return BankApplicationResponse.model_validate(app)


@router.post(
    "/{app_id}/overrides",
    response_model=OverrideResultResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_BANK_SIDE))],
)
async def apply_override(
    app_id: int,
    body: OverrideCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> OverrideResultResponse:
    override, affected = await overrides.apply_override(session, user, app_id, **body.model_dump())
    return OverrideResultResponse(
        override=OverrideResponse.model_validate(override),
        affected_items=[ChecklistItemResponse.model_validate(i) for i in affected],
    )


@router.get(
    "/{app_id}/overrides",
    response_model=list[OverrideResponse],
    dependencies=[Depends(require_roles(*_BANK_SIDE))],
)
async def list_overrides(
    app_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[OverrideResponse]:
    rows = await overrides.list_overrides(session, user, app_id)
    return [OverrideResponse.model_validate(r) for r in rows]
