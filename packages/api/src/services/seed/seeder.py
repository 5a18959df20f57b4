# This project was developed with assistance from AI tools.
"""Reference data seeding.

Loads the baseline document catalog, the default reminder rules and the
stage expectations. Each loader inserts only what is missing, so the
seeder is safe to run on every deploy.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..catalog import seed_catalog
from ..expectations import seed_stage_expectations
from ..reminders import seed_default_rules

logger = logging.getLogger(__name__)


async def seed_reference_data(session: AsyncSession) -> dict:
    """Seed all reference tables in one transaction.

    Returns per-table insert counts. ``status`` is ``already_seeded`` when
    nothing was missing.
    """
    try:
        catalog_count = await seed_catalog(session)
        rule_count = await seed_default_rules(session)
        expectation_count = await seed_stage_expectations(session)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    total = catalog_count + rule_count + expectation_count
    logger.info(
        "Reference data seeded: %d catalog entries, %d reminder rules, %d stage expectations",
        catalog_count,
        rule_count,
        expectation_count,
    )
    return {
        "status": "seeded" if total else "already_seeded",
        "catalog_entries": catalog_count,
        "reminder_rules": rule_count,
        "stage_expectations": expectation_count,
    }
