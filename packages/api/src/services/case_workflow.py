# This project was developed with assistance from AI tools.
"""Case state machine.

Owns case status, awaiting party, priority and close reason. Every
mutation appends exactly one history entry; a change to status or
awaiting party also resets the SLA clock and re-derives the automatic
next action, all in one transaction. Any status may follow any other.

Bank-portal sync translates the bank's status vocabulary and then goes
through the same transition path.
"""

import logging
from datetime import UTC, datetime

from db import BankApplication, Case
from db.enums import AwaitingParty, BankStatus, CaseStatus, Priority, UserRole
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import ConflictError, ForbiddenError, NotFoundError, StateError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.sla import SlaEvaluation, SlaLevel
from .case_lock import case_lock
from .checklist import ChecklistOutcome, generate_checklist
from .history import append_history
from .next_action import derive_next_action
from .scope import apply_case_scope, load_case
from .sla import evaluate_case_sla

logger = logging.getLogger(__name__)

_CLOSE_REASON_STATUSES = CaseStatus.close_reason_statuses()
_TERMINAL_STATUSES = CaseStatus.terminal_statuses()

BANK_STATUS_TRANSLATION: dict[BankStatus, CaseStatus] = {
    BankStatus.INITIATED: CaseStatus.NOT_CONNECTED,
    BankStatus.DOCS_PENDING: CaseStatus.DOCS_PENDING,
    BankStatus.LOGIN_DONE: CaseStatus.LOGIN_SUBMITTED,
    BankStatus.UNDER_REVIEW: CaseStatus.UNDER_REVIEW,
    BankStatus.SANCTIONED: CaseStatus.SANCTIONED,
    BankStatus.REJECTED: CaseStatus.REJECTED,
    BankStatus.DISBURSED: CaseStatus.DISBURSED,
    BankStatus.CLOSED: CaseStatus.CLOSED,
}

_PROFILE_FIELDS = frozenset(
    {
        "student_name",
        "student_email",
        "student_phone",
        "university",
        "course",
        "country",
        "intake",
        "loan_amount_requested",
        "collateral",
        "preferred_bank",
        "assigned_to",
        "notes",
    }
)


def _actor(user: UserContext) -> str:
    return user.name or user.user_id


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def build_case(
    session: AsyncSession,
    *,
    changed_by: str,
    note: str,
    now: datetime,
    **fields,
) -> tuple[Case, list[ChecklistOutcome]]:
    """Stage a new case with its first history entry, next action and checklist.

    Runs inside the caller's transaction; the caller commits.
    """
    case = Case(
        status=CaseStatus.NOT_CONNECTED,
        awaiting_party=AwaitingParty.INTERNAL_OPS,
        status_changed_at=now,
        **fields,
    )
    session.add(case)
    await session.flush()

    append_history(session, case, changed_by=changed_by, note=note, now=now)
    await derive_next_action(session, case, now=now)
    outcomes = await generate_checklist(session, case)
    return case, outcomes


async def create_case(
    session: AsyncSession,
    user: UserContext,
    *,
    student_name: str | None,
    student_email: str | None,
    priority: Priority = Priority.NORMAL,
    now: datetime | None = None,
    **profile,
) -> tuple[Case, list[ChecklistOutcome]]:
    """Open a new case at NotConnected, awaiting the internal team.

    Raises:
        ValidationError: student name or email missing.
    """
    missing = {
        name: "missing"
        for name, value in (("student_name", student_name), ("student_email", student_email))
        if not value or not value.strip()
    }
    if missing:
        raise ValidationError("student_name and student_email are required", details=missing)
    if now is None:
        now = datetime.now(UTC)

    fields = {k: v for k, v in profile.items() if k in _PROFILE_FIELDS or k == "student_user_id"}
    try:
        case, outcomes = await build_case(
            session,
            changed_by=_actor(user),
            note="Application created",
            now=now,
            student_name=student_name.strip(),
            student_email=student_email.strip(),
            priority=priority,
            **fields,
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(case)

    logger.info("Case %s created by %s", case.id, user.user_id)
    return case, outcomes


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_case(session: AsyncSession, user: UserContext, case_id: int) -> Case:
    return await load_case(session, user, case_id)


def _apply_filters(stmt, status, awaiting_party, priority):
    if status is not None:
        stmt = stmt.where(Case.status == status)
    if awaiting_party is not None:
        stmt = stmt.where(Case.awaiting_party == awaiting_party)
    if priority is not None:
        stmt = stmt.where(Case.priority == priority)
    return stmt


async def list_cases(
    session: AsyncSession,
    user: UserContext,
    *,
    offset: int = 0,
    limit: int = 20,
    status: CaseStatus | None = None,
    awaiting_party: AwaitingParty | None = None,
    priority: Priority | None = None,
    sla_level: SlaLevel | None = None,
    now: datetime | None = None,
) -> tuple[list[tuple[Case, SlaEvaluation]], int]:
    """Cases visible to the caller, each paired with its SLA evaluation.

    Args:
        sla_level: Only cases currently at this SLA level. SLA is never
            stored, so this filter is applied after loading.
    """
    if now is None:
        now = datetime.now(UTC)
    order = (Case.updated_at.desc(), Case.id.desc())

    if sla_level is not None:
        stmt = apply_case_scope(select(Case), user.data_scope)
        stmt = _apply_filters(stmt, status, awaiting_party, priority).order_by(*order)
        cases = (await session.execute(stmt)).scalars().all()
        matched = [(c, s) for c in cases if (s := evaluate_case_sla(c, now=now)).level == sla_level]
        return matched[offset : offset + limit], len(matched)

    count_stmt = apply_case_scope(select(func.count(Case.id)), user.data_scope)
    count_stmt = _apply_filters(count_stmt, status, awaiting_party, priority)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = apply_case_scope(select(Case), user.data_scope)
    stmt = _apply_filters(stmt, status, awaiting_party, priority).order_by(*order).offset(offset).limit(limit)
    cases = (await session.execute(stmt)).scalars().all()
    return [(c, evaluate_case_sla(c, now=now)) for c in cases], total


# ---------------------------------------------------------------------------
# Profile edits
# ---------------------------------------------------------------------------


async def update_case_profile(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    **updates,
) -> Case:
    """Edit non-workflow fields. A collateral change regenerates the checklist."""
    workflow_fields = {"status", "awaiting_party", "priority", "close_reason"} & {
        k for k, v in updates.items() if v is not None
    }
    if workflow_fields:
        raise ValidationError(
            "Workflow fields change only through a transition",
            details={f: "not editable" for f in sorted(workflow_fields)},
        )

    async with case_lock(case_id):
        case = await load_case(session, user, case_id, for_update=True)
        previous_collateral = case.collateral
        try:
            for field, value in updates.items():
                if field in _PROFILE_FIELDS and value is not None:
                    setattr(case, field, value)
            await session.flush()
            if case.collateral != previous_collateral:
                await generate_checklist(session, case)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(case)
    return case


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


def _default_note(
    case: Case,
    status: CaseStatus | None,
    awaiting_party: AwaitingParty | None,
    priority: Priority | None,
) -> str:
    if status is not None:
        return f"Status changed to {status.value}"
    if awaiting_party is not None:
        return f"Awaiting party changed to {awaiting_party.value}"
    if priority is not None:
        return f"Priority changed to {priority.value}"
    return "Close reason updated"


async def apply_transition(
    session: AsyncSession,
    case: Case,
    *,
    changed_by: str,
    status: CaseStatus | None = None,
    awaiting_party: AwaitingParty | None = None,
    priority: Priority | None = None,
    close_reason: str | None = None,
    note: str | None = None,
    now: datetime | None = None,
) -> bool:
    """Mutate a loaded case inside the caller's transaction.

    Returns True when status or awaiting party changed (clock reset and
    next action re-derived), False for a note-only or priority-only update.

    Raises:
        ValidationError: nothing to change.
        StateError: a close-reason status without any close reason.
    """
    if status is None and awaiting_party is None and priority is None and close_reason is None and not note:
        raise ValidationError("No changes supplied")
    close_reason = (close_reason or "").strip() or None
    if status in _CLOSE_REASON_STATUSES and not (close_reason or case.close_reason):
        raise StateError(f"A close reason is required to move a case to {status.value}")
    if now is None:
        now = datetime.now(UTC)

    previous_status = case.status
    previous_awaiting = case.awaiting_party

    if status is not None:
        case.status = status
    if awaiting_party is not None:
        case.awaiting_party = awaiting_party
    if priority is not None:
        case.priority = priority
    if close_reason:
        case.close_reason = close_reason

    moved = case.status != previous_status or case.awaiting_party != previous_awaiting
    if moved:
        case.status_changed_at = now

    if not note:
        note = _default_note(case, status, awaiting_party, priority)
    append_history(session, case, changed_by=changed_by, note=note, now=now)

    if moved:
        await derive_next_action(session, case, now=now)
    await session.flush()

    logger.info(
        "Case %s transitioned %s -> %s (awaiting %s) by %s",
        case.id,
        previous_status.value,
        case.status.value,
        case.awaiting_party.value,
        changed_by,
    )
    return moved


async def transition(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    status: CaseStatus | None = None,
    awaiting_party: AwaitingParty | None = None,
    priority: Priority | None = None,
    close_reason: str | None = None,
    note: str | None = None,
    now: datetime | None = None,
) -> Case:
    """Change a case's workflow state as one atomic unit."""
    async with case_lock(case_id):
        case = await load_case(session, user, case_id, for_update=True)
        try:
            await apply_transition(
                session,
                case,
                changed_by=_actor(user),
                status=status,
                awaiting_party=awaiting_party,
                priority=priority,
                close_reason=close_reason,
                note=note,
                now=now,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(case)
    return case


# ---------------------------------------------------------------------------
# Bank applications and bank-portal sync
# ---------------------------------------------------------------------------


def _check_bank_access(user: UserContext, app: BankApplication) -> None:
    if user.role == UserRole.BANK and app.bank_id != user.data_scope.bank_id:
        logger.warning(
            "Scope denied: user=%s role=%s attempted bank application %s",
            user.user_id,
            user.role.value,
            app.id,
        )
        raise ForbiddenError(f"Bank application {app.id} belongs to another bank")


async def create_bank_application(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    bank_id: str | None,
    bank_reference: str | None = None,
) -> BankApplication:
    if not bank_id or not bank_id.strip():
        raise ValidationError("bank_id is required", details={"bank_id": "missing"})
    bank_id = bank_id.strip()

    async with case_lock(case_id):
        await load_case(session, user, case_id, for_update=True)
        existing = await session.execute(
            select(BankApplication.id).where(
                BankApplication.case_id == case_id,
                BankApplication.bank_id == bank_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("BankApplication", "bank_id", bank_id)

        app = BankApplication(
            case_id=case_id,
            bank_id=bank_id,
            status=BankStatus.INITIATED,
            bank_reference=bank_reference,
        )
        session.add(app)
        await session.commit()
        await session.refresh(app)

    logger.info("Bank application %s (%s) created for case %s", app.id, bank_id, case_id)
    return app


async def get_bank_application(session: AsyncSession, user: UserContext, app_id: int) -> BankApplication:
    app = await session.get(BankApplication, app_id)
    if app is None:
        raise NotFoundError("BankApplication", app_id)
    _check_bank_access(user, app)
    if app.case_id is not None:
        await load_case(session, user, app.case_id)
    elif not user.data_scope.full_pipeline and user.role != UserRole.BANK:
        raise ForbiddenError(f"Bank application {app_id} is outside your scope")
    return app


async def list_bank_applications(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
) -> list[BankApplication]:
    await load_case(session, user, case_id)
    stmt = select(BankApplication).where(BankApplication.case_id == case_id)
    if user.role == UserRole.BANK:
        stmt = stmt.where(BankApplication.bank_id == user.data_scope.bank_id)
    result = await session.execute(stmt.order_by(BankApplication.id))
    return list(result.scalars().all())


async def sync_bank_status(
    session: AsyncSession,
    user: UserContext,
    app_id: int,
    *,
    bank_status: BankStatus,
    close_reason: str | None = None,
    actor: str | None = None,
    now: datetime | None = None,
) -> BankApplication:
    """Record a bank-reported status and move the linked case accordingly.

    Awaiting party is left alone unless the translated status is terminal,
    in which case it becomes Closed. A close-reason status reported without
    a reason gets one naming the bank status.
    """
    if now is None:
        now = datetime.now(UTC)
    actor_name = actor or settings.BANK_SYNC_ACTOR_NAME

    app = await session.get(BankApplication, app_id)
    if app is None:
        raise NotFoundError("BankApplication", app_id)
    _check_bank_access(user, app)

    if app.case_id is None:
        app.status = bank_status
        app.last_bank_update_at = now
        await session.commit()
        await session.refresh(app)
        logger.info("Bank application %s synced to %s (no linked case)", app.id, bank_status.value)
        return app

    translated = BANK_STATUS_TRANSLATION[bank_status]
    async with case_lock(app.case_id):
        case = await load_case(session, user, app.case_id, for_update=True)
        reason = (close_reason or "").strip() or None
        if translated in _CLOSE_REASON_STATUSES and not reason and not case.close_reason:
            reason = f"Reported by bank: {bank_status.value}"
        try:
            app.status = bank_status
            app.last_bank_update_at = now
            await apply_transition(
                session,
                case,
                changed_by=actor_name,
                status=translated,
                awaiting_party=AwaitingParty.CLOSED if translated in _TERMINAL_STATUSES else None,
                close_reason=reason,
                note=f"[BANK] {actor_name} updated status to {bank_status.value}",
                now=now,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(app)

    logger.info(
        "Bank application %s synced to %s; case %s now %s",
        app.id,
        bank_status.value,
        case.id,
        translated.value,
    )
    return app
