# This project was developed with assistance from AI tools.
"""Next-action deriver and task service.

After every status / awaiting-party change the case gets exactly one open
automatic action: stale automatic actions are cancelled and a successor
chosen from the awaiting party, then adjusted for a few statuses. Query,
escalation, and manual tasks carry their own origin and are never retired
by the deriver.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from db import Case, NextAction
from db.enums import ActionCode, ActionOrigin, ActionStatus, AwaitingParty, CaseStatus, Party, Priority
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import NotFoundError, StateError, ValidationError
from ..schemas.auth import UserContext
from .case_lock import case_lock
from .scope import apply_case_scope, load_case
from .sla import ensure_tz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionTemplate:
    owner: Party
    action_code: ActionCode
    title: str


_DEFAULT_BY_AWAITING: dict[AwaitingParty, ActionTemplate] = {
    AwaitingParty.STUDENT: ActionTemplate(
        Party.STUDENT, ActionCode.UPLOAD_DOCS, "Student to upload required documents",
    ),
    AwaitingParty.BANK: ActionTemplate(
        Party.BANK, ActionCode.PING_BANK, "Bank to review and provide an update",
    ),
    AwaitingParty.INTERNAL_OPS: ActionTemplate(
        Party.INTERNAL_OPS, ActionCode.VERIFY_PROOF, "Internal team to verify and take next step",
    ),
}

_STATUS_OVERRIDES: dict[CaseStatus, ActionTemplate] = {
    CaseStatus.QUERY_RAISED: ActionTemplate(
        Party.STUDENT, ActionCode.UPLOAD_DOCS, "Student to respond to the bank query",
    ),
    CaseStatus.SANCTIONED: ActionTemplate(
        Party.INTERNAL_OPS, ActionCode.VERIFY_PROOF, "Review sanction letter and confirm acceptance",
    ),
    CaseStatus.CONDITIONAL_SANCTION: ActionTemplate(
        Party.INTERNAL_OPS, ActionCode.VERIFY_PROOF, "Review sanction letter and confirm acceptance",
    ),
    CaseStatus.AGREEMENT_SIGNED: ActionTemplate(
        Party.INTERNAL_OPS, ActionCode.FOLLOW_UP, "Follow up on disbursement timeline",
    ),
}

_TERMINAL_STATUSES = CaseStatus.terminal_statuses()


def select_next_action(status: CaseStatus, awaiting_party: AwaitingParty) -> ActionTemplate | None:
    """Pick the automatic action for a case state; None for terminal statuses."""
    if status in _TERMINAL_STATUSES:
        return None
    override = _STATUS_OVERRIDES.get(status)
    if override is not None:
        return override
    # A Closed awaiting party on a live status falls back to the internal team.
    return _DEFAULT_BY_AWAITING.get(awaiting_party, _DEFAULT_BY_AWAITING[AwaitingParty.INTERNAL_OPS])


def sort_actions(actions: list[NextAction]) -> list[NextAction]:
    """Urgent first, then High, then Normal; earliest due first within a priority."""
    far_future = datetime.max.replace(tzinfo=UTC)
    return sorted(
        actions,
        key=lambda a: (a.priority.rank, ensure_tz(a.due_at) if a.due_at else far_future, a.id),
    )


async def derive_next_action(
    session: AsyncSession,
    case: Case,
    *,
    now: datetime | None = None,
) -> NextAction | None:
    """Retire open automatic actions and create the successor.

    Runs inside the caller's transaction and only flushes; the caller
    commits together with the case update and history entry.
    """
    if now is None:
        now = datetime.now(UTC)

    result = await session.execute(
        select(NextAction).where(
            NextAction.case_id == case.id,
            NextAction.origin == ActionOrigin.AUTOMATIC,
            NextAction.status == ActionStatus.OPEN,
        )
    )
    stale = result.scalars().all()
    for action in stale:
        action.status = ActionStatus.CANCELLED
    if stale:
        logger.info("Cancelled %d automatic action(s) for case %s", len(stale), case.id)

    template = select_next_action(case.status, case.awaiting_party)
    if template is None:
        await session.flush()
        return None

    action = NextAction(
        case_id=case.id,
        owner=template.owner,
        action_code=template.action_code,
        title=template.title,
        priority=case.priority,
        status=ActionStatus.OPEN,
        origin=ActionOrigin.AUTOMATIC,
        due_at=now + timedelta(days=settings.NEXT_ACTION_DUE_DAYS),
        created_by=settings.ACTOR_SYSTEM_NAME,
    )
    session.add(action)
    await session.flush()
    logger.info(
        "Next action for case %s: %s (%s)", case.id, template.action_code.value, template.owner.value,
    )
    return action


def build_spawned_action(
    *,
    case_id: int,
    origin: ActionOrigin,
    owner: Party,
    action_code: ActionCode,
    title: str,
    priority: Priority,
    now: datetime,
    description: str | None = None,
    query_thread_id: int | None = None,
    escalation_id: int | None = None,
    bank_application_id: int | None = None,
    created_by: str | None = None,
) -> NextAction:
    """Construct a non-automatic action (query, escalation, manual)."""
    return NextAction(
        case_id=case_id,
        origin=origin,
        owner=owner,
        action_code=action_code,
        title=title,
        description=description,
        priority=priority,
        status=ActionStatus.OPEN,
        due_at=now + timedelta(days=settings.NEXT_ACTION_DUE_DAYS),
        query_thread_id=query_thread_id,
        escalation_id=escalation_id,
        bank_application_id=bank_application_id,
        created_by=created_by,
    )


# ---------------------------------------------------------------------------
# Task queries and manual tasks
# ---------------------------------------------------------------------------


async def list_actions(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    open_only: bool = False,
) -> list[NextAction]:
    await load_case(session, user, case_id)
    stmt = select(NextAction).where(NextAction.case_id == case_id)
    if open_only:
        stmt = stmt.where(NextAction.status == ActionStatus.OPEN)
    result = await session.execute(stmt)
    return sort_actions(list(result.scalars().all()))


async def list_open_actions(
    session: AsyncSession,
    user: UserContext,
    *,
    owner: Party | None = None,
    limit: int = 200,
) -> list[NextAction]:
    """Open-task queue across every case the caller can see."""
    stmt = (
        select(NextAction)
        .join(Case, Case.id == NextAction.case_id)
        .where(NextAction.status == ActionStatus.OPEN)
    )
    stmt = apply_case_scope(stmt, user.data_scope)
    if owner is not None:
        stmt = stmt.where(NextAction.owner == owner)
    result = await session.execute(stmt)
    return sort_actions(list(result.scalars().all()))[:limit]


async def create_manual_action(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    title: str | None,
    owner: Party = Party.INTERNAL_OPS,
    action_code: ActionCode = ActionCode.REVIEW,
    priority: Priority = Priority.NORMAL,
    description: str | None = None,
    due_at: datetime | None = None,
    now: datetime | None = None,
) -> NextAction:
    if not title or not title.strip():
        raise ValidationError("title is required", details={"title": "missing"})
    if now is None:
        now = datetime.now(UTC)

    async with case_lock(case_id):
        await load_case(session, user, case_id, for_update=True)
        action = build_spawned_action(
            case_id=case_id,
            origin=ActionOrigin.MANUAL,
            owner=owner,
            action_code=action_code,
            title=title.strip(),
            priority=priority,
            description=description,
            now=now,
            created_by=user.name or user.user_id,
        )
        if due_at is not None:
            action.due_at = due_at
        session.add(action)
        await session.commit()
        await session.refresh(action)

    logger.info("Manual action %s created on case %s by %s", action.id, case_id, user.user_id)
    return action


_UPDATABLE_ACTION_FIELDS = frozenset({"status", "title", "description", "due_at", "priority", "owner"})


async def update_action(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    action_id: int,
    *,
    now: datetime | None = None,
    **updates,
) -> NextAction:
    """Update a task. Marking it Done stamps ``completed_at``.

    Raises:
        StateError: reopening a retired automatic action. The deriver owns
            the single open automatic action per case.
    """
    if now is None:
        now = datetime.now(UTC)

    async with case_lock(case_id):
        await load_case(session, user, case_id)
        action = await session.get(NextAction, action_id)
        if action is None or action.case_id != case_id:
            raise NotFoundError("NextAction", action_id)

        if (
            updates.get("status") == ActionStatus.OPEN
            and action.origin == ActionOrigin.AUTOMATIC
            and action.status != ActionStatus.OPEN
        ):
            raise StateError(
                f"Automatic action {action_id} is {action.status.value} and cannot be reopened"
            )

        for field, value in updates.items():
            if field not in _UPDATABLE_ACTION_FIELDS or value is None:
                continue
            setattr(action, field, value)

        if updates.get("status") == ActionStatus.DONE:
            action.completed_at = now
        elif updates.get("status") is not None:
            action.completed_at = None

        await session.commit()
        await session.refresh(action)
    return action
