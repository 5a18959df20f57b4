# This project was developed with assistance from AI tools.
"""Case escalations.

Raising an escalation spawns one urgent internal task. Resolving it
stamps who and when, and leaves that task as it is; closing the task is a
separate manual step.
"""

import logging
from datetime import UTC, datetime

from db import Escalation
from db.enums import ActionCode, ActionOrigin, Party, Priority
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError, StateError, ValidationError
from ..schemas.auth import UserContext
from .case_lock import case_lock
from .next_action import build_spawned_action
from .scope import load_case

logger = logging.getLogger(__name__)

DEFAULT_REASON = "SLA_BREACH"


async def create_escalation(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    level: int = 1,
    reason: str | None = None,
    bank_application_id: int | None = None,
    now: datetime | None = None,
) -> Escalation:
    if level < 1:
        raise ValidationError("level must be at least 1", details={"level": "invalid"})
    if now is None:
        now = datetime.now(UTC)
    reason = (reason or "").strip() or DEFAULT_REASON
    actor = user.name or user.user_id

    async with case_lock(case_id):
        await load_case(session, user, case_id, for_update=True)
        try:
            escalation = Escalation(
                case_id=case_id,
                bank_application_id=bank_application_id,
                level=level,
                reason=reason,
                created_by=actor,
            )
            session.add(escalation)
            await session.flush()
            session.add(
                build_spawned_action(
                    case_id=case_id,
                    origin=ActionOrigin.ESCALATION,
                    owner=Party.INTERNAL_OPS,
                    action_code=ActionCode.ESCALATE,
                    title="Escalation: Review this case immediately",
                    description=f"Level {level} escalation triggered - Reason: {reason}",
                    priority=Priority.URGENT,
                    now=now,
                    escalation_id=escalation.id,
                    bank_application_id=bank_application_id,
                    created_by=actor,
                )
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(escalation)

    logger.info("Escalation %s (level %d, %s) raised on case %s by %s", escalation.id, level, reason, case_id, actor)
    return escalation


async def resolve_escalation(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    escalation_id: int,
    *,
    now: datetime | None = None,
) -> Escalation:
    if now is None:
        now = datetime.now(UTC)

    async with case_lock(case_id):
        await load_case(session, user, case_id)
        escalation = await session.get(Escalation, escalation_id)
        if escalation is None or escalation.case_id != case_id:
            raise NotFoundError("Escalation", escalation_id)
        if escalation.resolved_at is not None:
            raise StateError(f"Escalation {escalation_id} is already resolved")
        escalation.resolved_at = now
        escalation.resolved_by = user.name or user.user_id
        await session.commit()
        await session.refresh(escalation)

    logger.info("Escalation %s on case %s resolved by %s", escalation_id, case_id, user.user_id)
    return escalation


async def list_escalations(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    open_only: bool = False,
) -> list[Escalation]:
    await load_case(session, user, case_id)
    stmt = select(Escalation).where(Escalation.case_id == case_id)
    if open_only:
        stmt = stmt.where(Escalation.resolved_at.is_(None))
    result = await session.execute(stmt.order_by(Escalation.id.desc()))
    return list(result.scalars().all())
