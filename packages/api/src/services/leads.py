# This project was developed with assistance from AI tools.
"""Leads and lead-to-case conversion.

Conversion creates the case, marks the lead CaseCreated and records the
mapping in one transaction. A lead converts at most once.
"""

import logging
from datetime import UTC, datetime

from db import Case, Lead, LeadCaseMapping
from db.enums import LeadStage, Priority
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConflictError, NotFoundError, StateError, ValidationError
from ..schemas.auth import UserContext
from .case_workflow import build_case
from .checklist import ChecklistOutcome

logger = logging.getLogger(__name__)

_CONVERTIBLE = LeadStage.convertible_stages()


async def create_lead(
    session: AsyncSession,
    *,
    full_name: str | None,
    stage: LeadStage = LeadStage.NEW,
    priority: Priority = Priority.NORMAL,
    **fields,
) -> Lead:
    if not full_name or not full_name.strip():
        raise ValidationError("full_name is required", details={"full_name": "missing"})
    lead = Lead(full_name=full_name.strip(), stage=stage, priority=priority, **fields)
    session.add(lead)
    await session.commit()
    await session.refresh(lead)
    logger.info("Lead %s created at stage %s", lead.id, stage.value)
    return lead


async def get_lead(session: AsyncSession, lead_id: int) -> Lead:
    lead = await session.get(Lead, lead_id)
    if lead is None:
        raise NotFoundError("Lead", lead_id)
    return lead


async def list_leads(session: AsyncSession, *, stage: LeadStage | None = None) -> list[Lead]:
    stmt = select(Lead).order_by(Lead.id.desc())
    if stage is not None:
        stmt = stmt.where(Lead.stage == stage)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def convert_lead(
    session: AsyncSession,
    user: UserContext,
    lead_id: int,
    *,
    student_email: str | None = None,
    student_phone: str | None = None,
    student_user_id: str | None = None,
    university: str | None = None,
    collateral: str | None = "NA",
    preferred_bank: str | None = None,
    assigned_to: str | None = None,
    now: datetime | None = None,
) -> tuple[Case, list[ChecklistOutcome]]:
    """Turn a qualified lead into a case.

    Raises:
        NotFoundError: unknown lead.
        ConflictError: the lead is already mapped to a case.
        StateError: the lead is not Qualified or DocsReceived.
    """
    if now is None:
        now = datetime.now(UTC)
    lead = await get_lead(session, lead_id)

    mapped = await session.execute(
        select(LeadCaseMapping.case_id).where(LeadCaseMapping.lead_id == lead_id)
    )
    if mapped.scalar_one_or_none() is not None:
        raise ConflictError("LeadCaseMapping", "lead_id", lead_id)
    if lead.stage not in _CONVERTIBLE:
        raise StateError(
            f"Lead must be qualified or docs_received to convert (current: {lead.stage.value})"
        )

    actor = user.name or user.user_id
    try:
        case, outcomes = await build_case(
            session,
            changed_by=actor,
            note=f"Created from Lead {lead.id}",
            now=now,
            student_name=lead.full_name,
            student_email=student_email or lead.email or "",
            student_phone=student_phone or lead.phone,
            student_user_id=student_user_id,
            university=university,
            course=lead.course,
            country=lead.country,
            intake=lead.intake,
            loan_amount_requested=lead.loan_amount,
            collateral=collateral,
            preferred_bank=preferred_bank,
            assigned_to=assigned_to,
            priority=lead.priority,
        )
        lead.stage = LeadStage.CASE_CREATED
        session.add(
            LeadCaseMapping(lead_id=lead.id, case_id=case.id, converted_by=actor, converted_at=now)
        )
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(case)

    logger.info("Lead %s converted to case %s by %s", lead_id, case.id, user.user_id)
    return case, outcomes
