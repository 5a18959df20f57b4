# This project was developed with assistance from AI tools.
"""Bank-specific requirement overrides.

Every override appends an immutable log row and performs one mutation on
the live checklist of the bank application's case:

- AddRequired / AddOptional insert a bank-required item if the key is new.
- Waive marks matching items NotNeeded + Waived.
- SetOptional downgrades matching items to Optional, status untouched.

Waive and SetOptional match items on the case with the same doc code that
belong to this bank application or to no bank application at all.
"""

import logging

from db import BankApplication, ChecklistItem, DocumentMasterEntry, RequirementOverride
from db.enums import (
    ChecklistItemStatus,
    DocumentOwner,
    OverrideType,
    RequiredBy,
    RequirementLevel,
)
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ValidationError
from ..schemas.auth import UserContext
from .case_lock import case_lock
from .case_workflow import get_bank_application
from .scope import load_case

logger = logging.getLogger(__name__)

_ADD_LEVELS = {
    OverrideType.ADD_REQUIRED: RequirementLevel.REQUIRED,
    OverrideType.ADD_OPTIONAL: RequirementLevel.OPTIONAL,
}


async def _display_name(session: AsyncSession, doc_code: str) -> str:
    result = await session.execute(
        select(DocumentMasterEntry.display_name).where(DocumentMasterEntry.doc_code == doc_code)
    )
    return result.scalar_one_or_none() or doc_code


async def _matching_items(
    session: AsyncSession, app: BankApplication, doc_code: str,
) -> list[ChecklistItem]:
    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.case_id == app.case_id,
            ChecklistItem.doc_code == doc_code,
            or_(
                ChecklistItem.bank_application_id == app.id,
                ChecklistItem.bank_application_id.is_(None),
            ),
        )
    )
    return list(result.scalars().all())


async def _add_item(
    session: AsyncSession,
    app: BankApplication,
    *,
    doc_code: str,
    level: RequirementLevel,
    owner_entity_type: DocumentOwner,
    owner_entity_id: str | None,
) -> list[ChecklistItem]:
    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.case_id == app.case_id,
            ChecklistItem.doc_code == doc_code,
            ChecklistItem.owner_entity_type == owner_entity_type,
            ChecklistItem.owner_entity_id.is_(None)
            if owner_entity_id is None
            else ChecklistItem.owner_entity_id == owner_entity_id,
        )
    )
    if result.scalar_one_or_none() is not None:
        return []
    item = ChecklistItem(
        case_id=app.case_id,
        doc_code=doc_code,
        display_name=await _display_name(session, doc_code),
        owner_entity_type=owner_entity_type,
        owner_entity_id=owner_entity_id,
        requirement_level=level,
        status=ChecklistItemStatus.PENDING,
        required_by=RequiredBy.BANK,
        bank_id=app.bank_id,
        bank_application_id=app.id,
    )
    session.add(item)
    return [item]


async def apply_override(
    session: AsyncSession,
    user: UserContext,
    app_id: int,
    *,
    override_type: OverrideType | None,
    doc_code: str | None,
    owner_entity_type: DocumentOwner = DocumentOwner.STUDENT,
    owner_entity_id: str | None = None,
    reason: str | None = None,
) -> tuple[RequirementOverride, list[ChecklistItem]]:
    """Log an override and apply it to the checklist.

    Returns the log row and the checklist items it inserted or changed.

    Raises:
        ValidationError: override type or doc code missing, or the bank
            application has no linked case.
        NotFoundError: unknown bank application.
    """
    missing = {}
    if override_type is None:
        missing["override_type"] = "missing"
    if not doc_code or not doc_code.strip():
        missing["doc_code"] = "missing"
    if missing:
        raise ValidationError("override_type and doc_code are required", details=missing)
    doc_code = doc_code.strip().upper()

    app = await get_bank_application(session, user, app_id)
    if app.case_id is None:
        raise ValidationError(f"Bank application {app_id} is not linked to a case")

    async with case_lock(app.case_id):
        await load_case(session, user, app.case_id, for_update=True)
        try:
            override = RequirementOverride(
                bank_application_id=app.id,
                bank_id=app.bank_id,
                override_type=override_type,
                doc_code=doc_code,
                owner_entity_type=owner_entity_type,
                owner_entity_id=owner_entity_id,
                reason=reason,
                created_by=user.name or user.user_id,
            )
            session.add(override)

            if override_type in _ADD_LEVELS:
                affected = await _add_item(
                    session,
                    app,
                    doc_code=doc_code,
                    level=_ADD_LEVELS[override_type],
                    owner_entity_type=owner_entity_type,
                    owner_entity_id=owner_entity_id,
                )
            else:
                affected = await _matching_items(session, app, doc_code)
                for item in affected:
                    item.requirement_level = (
                        RequirementLevel.NOT_NEEDED
                        if override_type == OverrideType.WAIVE
                        else RequirementLevel.OPTIONAL
                    )
                    if override_type == OverrideType.WAIVE:
                        item.status = ChecklistItemStatus.WAIVED

            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(override)
        for item in affected:
            await session.refresh(item)

    logger.info(
        "Override %s %s on case %s (bank %s): %d item(s) affected",
        override_type.value,
        doc_code,
        app.case_id,
        app.bank_id,
        len(affected),
    )
    return override, affected


async def list_overrides(
    session: AsyncSession,
    user: UserContext,
    app_id: int,
) -> list[RequirementOverride]:
    app = await get_bank_application(session, user, app_id)
    result = await session.execute(
        select(RequirementOverride)
        .where(RequirementOverride.bank_application_id == app.id)
        .order_by(RequirementOverride.id)
    )
    return list(result.scalars().all())

