# This project was developed with assistance from AI tools.
"""Reminder rules (admin) and reminder jobs (scheduling and sender callbacks)."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.reminder import (
    ReminderJobCreate,
    ReminderJobResponse,
    ReminderJobStatusUpdate,
    ReminderRuleCreate,
    ReminderRuleResponse,
    ReminderRuleUpdate,
)
from ..services import reminders

router = APIRouter()

_ADMIN = (UserRole.ADMIN,)
_STAFF = (UserRole.ADMIN, UserRole.STAFF)


@router.get(
    "/reminder-rules",
    response_model=list[ReminderRuleResponse],
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def list_rules(
    session: AsyncSession = Depends(get_db),
    active_only: bool = False,
) -> list[ReminderRuleResponse]:
    rules = await reminders.list_rules(session, active_only=active_only)
    return [ReminderRuleResponse.model_validate(r) for r in rules]


@router.post(
    "/reminder-rules",
    response_model=ReminderRuleResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ADMIN))],
)
async def create_rule(
    body: ReminderRuleCreate,
    session: AsyncSession = Depends(get_db),
) -> ReminderRuleResponse:
    rule = await reminders.create_rule(session, **body.model_dump())
    return ReminderRuleResponse.model_validate(rule)


@router.patch(
    "/reminder-rules/{rule_id}",
    response_model=ReminderRuleResponse,
    dependencies=[Depends(require_roles(*_ADMIN))],
)
async def update_rule(
    rule_id: int,
    body: ReminderRuleUpdate,
    session: AsyncSession = Depends(get_db),
) -> ReminderRuleResponse:
    rule = await reminders.update_rule(session, rule_id, **body.model_dump(exclude_unset=True))
    return ReminderRuleResponse.model_validate(rule)


@router.delete(
    "/reminder-rules/{rule_id}",
    response_model=ReminderRuleResponse,
    dependencies=[Depends(require_roles(*_ADMIN))],
)
async def deactivate_rule(
    rule_id: int,
    session: AsyncSession = Depends(get_db),
) -> ReminderRuleResponse:
    """Deactivate a rule. Rules are never hard-deleted."""
    rule = await reminders.deactivate_rule(session, rule_id)
    return ReminderRuleResponse.model_validate(rule)


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


@router.get(
    "/cases/{case_id}/reminders",
    response_model=list[ReminderJobResponse],
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def list_case_jobs(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[ReminderJobResponse]:
    jobs = await reminders.list_jobs(session, user, case_id)
    return [ReminderJobResponse.model_validate(j) for j in jobs]


@router.post(
    "/cases/{case_id}/reminders",
    response_model=ReminderJobResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def schedule_reminder(
    case_id: int,
    body: ReminderJobCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReminderJobResponse:
    job = await reminders.schedule_reminder(session, user, case_id, **body.model_dump())
    return ReminderJobResponse.model_validate(job)


@router.get(
    "/reminder-jobs/due",
    response_model=list[ReminderJobResponse],
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def due_jobs(
    session: AsyncSession = Depends(get_db),
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[ReminderJobResponse]:
    """Queued jobs due now. Polled by the delivery worker."""
    jobs = await reminders.list_due_jobs(session, limit=limit)
    return [ReminderJobResponse.model_validate(j) for j in jobs]


@router.patch(
    "/reminder-jobs/{job_id}",
    response_model=ReminderJobResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def update_job_status(
    job_id: int,
    body: ReminderJobStatusUpdate,
    session: AsyncSession = Depends(get_db),
) -> ReminderJobResponse:
    """Report a delivery outcome (sent, failed, cancelled)."""
    job = await reminders.update_job_status(
        session, job_id, body.status, last_error=body.last_error,
    )
    return ReminderJobResponse.model_validate(job)
