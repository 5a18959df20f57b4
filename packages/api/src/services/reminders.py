# This project was developed with assistance from AI tools.
"""Reminder rules and jobs.

Rules say when a class of reminder should fire and with which template;
jobs are concrete scheduled sends. Nothing here delivers anything: an
external sender polls ``list_due_jobs`` and reports back through
``update_job_status``.

Job lifecycle: Queued -> Sent | Failed | Cancelled. Sent and Cancelled are
final; a Failed job may be retried. Attempts count Sent and Failed only.
"""

import logging
from datetime import UTC, datetime

import pydantic
from db import ReminderJob, ReminderRule
from db.enums import ReminderChannel, ReminderJobStatus, ReminderScope, ReminderTrigger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConflictError, NotFoundError, StateError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.reminder import ReminderCondition
from .case_lock import case_lock
from .scope import load_case
from .seed.fixtures import DEFAULT_REMINDER_RULES

logger = logging.getLogger(__name__)

_FINAL_JOB_STATUSES = frozenset({ReminderJobStatus.SENT, ReminderJobStatus.CANCELLED})
_ATTEMPT_STATUSES = frozenset({ReminderJobStatus.SENT, ReminderJobStatus.FAILED})
_RULE_FIELDS = frozenset(
    {
        "scope",
        "trigger_type",
        "condition",
        "send_after_minutes",
        "repeat_every_minutes",
        "max_retries",
        "is_active",
    }
)


def validate_condition(condition: dict | None) -> dict:
    """Validate a rule condition and return its JSON form (unset keys dropped)."""
    try:
        parsed = ReminderCondition.model_validate(condition or {})
    except pydantic.ValidationError as exc:
        details = {".".join(str(p) for p in err["loc"]) or "condition": err["msg"] for err in exc.errors()}
        raise ValidationError("Invalid reminder condition", details=details) from None
    return parsed.model_dump(mode="json", exclude_none=True)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


async def list_rules(session: AsyncSession, *, active_only: bool = False) -> list[ReminderRule]:
    stmt = select(ReminderRule).order_by(ReminderRule.id)
    if active_only:
        stmt = stmt.where(ReminderRule.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _get_rule(session: AsyncSession, rule_id: int) -> ReminderRule:
    rule = await session.get(ReminderRule, rule_id)
    if rule is None:
        raise NotFoundError("ReminderRule", rule_id)
    return rule


async def create_rule(
    session: AsyncSession,
    *,
    template_name: str | None,
    scope: ReminderScope = ReminderScope.STUDENT,
    trigger_type: ReminderTrigger = ReminderTrigger.AWAITING,
    condition: dict | None = None,
    send_after_minutes: int = 1440,
    repeat_every_minutes: int | None = None,
    max_retries: int = 3,
    is_active: bool = True,
) -> ReminderRule:
    if not template_name or not template_name.strip():
        raise ValidationError("template_name is required", details={"template_name": "missing"})
    template_name = template_name.strip()
    condition_json = validate_condition(condition)

    existing = await session.execute(
        select(ReminderRule.id).where(ReminderRule.template_name == template_name)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("ReminderRule", "template_name", template_name)

    rule = ReminderRule(
        scope=scope,
        trigger_type=trigger_type,
        condition=condition_json,
        template_name=template_name,
        send_after_minutes=send_after_minutes,
        repeat_every_minutes=repeat_every_minutes,
        max_retries=max_retries,
        is_active=is_active,
    )
    session.add(rule)
    await session.commit()
    await session.refresh(rule)
    logger.info("Reminder rule %s (%s) created", rule.id, template_name)
    return rule


async def update_rule(session: AsyncSession, rule_id: int, **updates) -> ReminderRule:
    rule = await _get_rule(session, rule_id)
    if updates.get("condition") is not None:
        updates["condition"] = validate_condition(updates["condition"])
    for field, value in updates.items():
        if field in _RULE_FIELDS and value is not None:
            setattr(rule, field, value)
    await session.commit()
    await session.refresh(rule)
    return rule


async def deactivate_rule(session: AsyncSession, rule_id: int) -> ReminderRule:
    rule = await _get_rule(session, rule_id)
    rule.is_active = False
    await session.commit()
    await session.refresh(rule)
    logger.info("Reminder rule %s deactivated", rule_id)
    return rule


async def seed_default_rules(session: AsyncSession) -> int:
    """Insert default rules whose template name is not yet present. Caller commits."""
    result = await session.execute(select(ReminderRule.template_name))
    present = set(result.scalars().all())
    inserted = 0
    for definition in DEFAULT_REMINDER_RULES:
        if definition["template_name"] in present:
            continue
        session.add(ReminderRule(is_active=True, **definition))
        inserted += 1
    await session.flush()
    return inserted


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


async def schedule_reminder(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    to_address: str | None,
    to_type: ReminderScope = ReminderScope.STUDENT,
    channel: ReminderChannel = ReminderChannel.IN_APP,
    template_name: str = "manual_reminder",
    scheduled_at: datetime | None = None,
    payload: dict | None = None,
    rule_id: int | None = None,
    bank_application_id: int | None = None,
    now: datetime | None = None,
) -> ReminderJob:
    """Queue one reminder. ``scheduled_at`` defaults to now."""
    if not to_address or not to_address.strip():
        raise ValidationError("to_address is required", details={"to_address": "missing"})
    if now is None:
        now = datetime.now(UTC)

    async with case_lock(case_id):
        await load_case(session, user, case_id)
        if rule_id is not None:
            await _get_rule(session, rule_id)
        job = ReminderJob(
            case_id=case_id,
            bank_application_id=bank_application_id,
            rule_id=rule_id,
            to_type=to_type,
            to_address=to_address.strip(),
            channel=channel,
            template_name=template_name or "manual_reminder",
            payload=payload or {},
            scheduled_at=scheduled_at or now,
            status=ReminderJobStatus.QUEUED,
            attempts=0,
        )
        session.add(job)
        await session.commit()
        await session.refresh(job)

    logger.info("Reminder job %s (%s) queued for case %s", job.id, job.template_name, case_id)
    return job


async def update_job_status(
    session: AsyncSession,
    job_id: int,
    status: ReminderJobStatus,
    *,
    last_error: str | None = None,
) -> ReminderJob:
    """Record a delivery outcome reported by the sender.

    Raises:
        NotFoundError: unknown job.
        StateError: target is Queued, or the job is already final.
    """
    job = await session.get(ReminderJob, job_id)
    if job is None:
        raise NotFoundError("ReminderJob", job_id)
    if status == ReminderJobStatus.QUEUED:
        raise StateError("A reminder job cannot be moved back to queued")
    if job.status in _FINAL_JOB_STATUSES:
        raise StateError(f"Reminder job {job_id} is already {job.status.value}")

    job.status = status
    if status in _ATTEMPT_STATUSES:
        job.attempts = (job.attempts or 0) + 1
    if last_error is not None:
        job.last_error = last_error
    await session.commit()
    await session.refresh(job)

    log = logger.warning if status == ReminderJobStatus.FAILED else logger.info
    log("Reminder job %s -> %s (attempt %d)", job_id, status.value, job.attempts)
    return job


async def list_due_jobs(
    session: AsyncSession,
    *,
    now: datetime | None = None,
    limit: int = 100,
) -> list[ReminderJob]:
    """Queued jobs whose scheduled time has come, oldest first."""
    if now is None:
        now = datetime.now(UTC)
    result = await session.execute(
        select(ReminderJob)
        .where(
            ReminderJob.status == ReminderJobStatus.QUEUED,
            ReminderJob.scheduled_at <= now,
        )
        .order_by(ReminderJob.scheduled_at, ReminderJob.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_jobs(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
) -> list[ReminderJob]:
    await load_case(session, user, case_id)
    result = await session.execute(
        select(ReminderJob).where(ReminderJob.case_id == case_id).order_by(ReminderJob.scheduled_at.desc())
    )
    return list(result.scalars().all())
