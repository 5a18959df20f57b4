# This project was developed with assistance from AI tools.
"""Stage expectations: typical time per status plus guidance text.

Informational only. SLA thresholds live in ``sla.py`` and do not read
this table.
"""

from db import StageExpectation
from db.enums import CaseStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .seed.fixtures import STAGE_EXPECTATIONS


async def get_stage_expectation(session: AsyncSession, status: CaseStatus) -> StageExpectation | None:
    result = await session.execute(
        select(StageExpectation).where(
            StageExpectation.status == status,
            StageExpectation.is_active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def list_stage_expectations(session: AsyncSession) -> list[StageExpectation]:
    result = await session.execute(
        select(StageExpectation)
        .where(StageExpectation.is_active.is_(True))
        .order_by(StageExpectation.id)
    )
    return list(result.scalars().all())


async def seed_stage_expectations(session: AsyncSession) -> int:
    """Insert default expectations for statuses that have none. Caller commits."""
    result = await session.execute(select(StageExpectation.status))
    present = set(result.scalars().all())
    inserted = 0
    for definition in STAGE_EXPECTATIONS:
        if definition["status"] in present:
            continue
        session.add(StageExpectation(is_active=True, **definition))
        inserted += 1
    await session.flush()
    return inserted
