# This project was developed with assistance from AI tools.
"""Co-applicant roster.

Adding or editing a co-applicant regenerates the checklist. Removing one
deletes only the co-applicant row; items already generated for them stay
on the checklist under their original owner key.
"""

import logging

from db import CoApplicant
from db.models import DEFAULT_CO_APPLICANT_TYPE
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError, ValidationError
from ..schemas.auth import UserContext
from .case_lock import case_lock
from .checklist import ChecklistOutcome, generate_checklist
from .scope import load_case

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"name", "co_applicant_type", "relation", "phone", "email", "income"})


async def list_co_applicants(session: AsyncSession, user: UserContext, case_id: int) -> list[CoApplicant]:
    await load_case(session, user, case_id)
    result = await session.execute(
        select(CoApplicant).where(CoApplicant.case_id == case_id).order_by(CoApplicant.id)
    )
    return list(result.scalars().all())


async def _get_co_applicant(session: AsyncSession, case_id: int, co_applicant_id: int) -> CoApplicant:
    co_applicant = await session.get(CoApplicant, co_applicant_id)
    if co_applicant is None or co_applicant.case_id != case_id:
        raise NotFoundError("CoApplicant", co_applicant_id)
    return co_applicant


async def add_co_applicant(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    name: str | None,
    co_applicant_type: str | None = None,
    relation: str | None = None,
    phone: str | None = None,
    email: str | None = None,
    income=None,
) -> tuple[CoApplicant, list[ChecklistOutcome]]:
    if not name or not name.strip():
        raise ValidationError("name is required", details={"name": "missing"})

    async with case_lock(case_id):
        case = await load_case(session, user, case_id, for_update=True)
        try:
            co_applicant = CoApplicant(
                case_id=case_id,
                name=name.strip(),
                co_applicant_type=(co_applicant_type or DEFAULT_CO_APPLICANT_TYPE).strip().upper(),
                relation=relation,
                phone=phone,
                email=email,
                income=income,
            )
            session.add(co_applicant)
            await session.flush()
            outcomes = await generate_checklist(session, case)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(co_applicant)

    logger.info(
        "Co-applicant %s (%s) added to case %s by %s",
        co_applicant.id,
        co_applicant.co_applicant_type,
        case_id,
        user.user_id,
    )
    return co_applicant, outcomes


async def update_co_applicant(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    co_applicant_id: int,
    **updates,
) -> tuple[CoApplicant, list[ChecklistOutcome]]:
    """Edit a co-applicant and regenerate. A type change only ever adds items."""
    async with case_lock(case_id):
        case = await load_case(session, user, case_id, for_update=True)
        co_applicant = await _get_co_applicant(session, case_id, co_applicant_id)
        try:
            for field, value in updates.items():
                if field not in _UPDATABLE_FIELDS or value is None:
                    continue
                if field == "co_applicant_type":
                    value = value.strip().upper()
                setattr(co_applicant, field, value)
            await session.flush()
            outcomes = await generate_checklist(session, case)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(co_applicant)
    return co_applicant, outcomes


async def remove_co_applicant(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    co_applicant_id: int,
) -> None:
    async with case_lock(case_id):
        await load_case(session, user, case_id, for_update=True)
        co_applicant = await _get_co_applicant(session, case_id, co_applicant_id)
        await session.delete(co_applicant)
        await session.commit()
    logger.info("Co-applicant %s removed from case %s by %s", co_applicant_id, case_id, user.user_id)
