# This project was developed with assistance from AI tools.
"""Document catalog administration.

Entries are soft-deactivated rather than deleted so that checklist items
already generated from them keep a valid doc code.
"""

import logging

from db import DocumentMasterEntry
from db.enums import DocumentOwner
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConflictError, NotFoundError, ValidationError
from .seed.fixtures import BASELINE_DOCUMENTS

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset(
    {
        "display_name",
        "description",
        "category",
        "co_applicant_types",
        "default_required",
        "sort_order",
        "is_active",
    }
)


def normalize_co_applicant_types(types: list[str] | None) -> list[str] | None:
    """Scope lists are matched against upper-cased co-applicant types."""
    if types is None:
        return None
    return list(dict.fromkeys(t.strip().upper() for t in types if t and t.strip()))


async def list_catalog(
    session: AsyncSession,
    *,
    owner_type: DocumentOwner | None = None,
    include_inactive: bool = False,
) -> list[DocumentMasterEntry]:
    stmt = select(DocumentMasterEntry).order_by(DocumentMasterEntry.sort_order, DocumentMasterEntry.id)
    if owner_type is not None:
        stmt = stmt.where(DocumentMasterEntry.owner_type == owner_type)
    if not include_inactive:
        stmt = stmt.where(DocumentMasterEntry.is_active.is_(True))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _get_entry(session: AsyncSession, entry_id: int) -> DocumentMasterEntry:
    entry = await session.get(DocumentMasterEntry, entry_id)
    if entry is None:
        raise NotFoundError("DocumentMasterEntry", entry_id)
    return entry


async def create_catalog_entry(
    session: AsyncSession,
    *,
    doc_code: str | None,
    display_name: str | None,
    owner_type: DocumentOwner = DocumentOwner.STUDENT,
    description: str | None = None,
    category: str | None = None,
    co_applicant_types: list[str] | None = None,
    default_required: bool = True,
    sort_order: int = 0,
) -> DocumentMasterEntry:
    """Add a catalog entry.

    Raises:
        ValidationError: doc_code or display_name missing.
        ConflictError: doc_code already in the catalog.
    """
    missing = {
        name: "missing"
        for name, value in (("doc_code", doc_code), ("display_name", display_name))
        if not value or not value.strip()
    }
    if missing:
        raise ValidationError("doc_code and display_name are required", details=missing)

    code = doc_code.strip().upper()
    existing = await session.execute(
        select(DocumentMasterEntry.id).where(DocumentMasterEntry.doc_code == code)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("DocumentMasterEntry", "doc_code", code)

    # Scope lists only mean something for co-applicant documents.
    if owner_type != DocumentOwner.CO_APPLICANT:
        co_applicant_types = None
    co_applicant_types = normalize_co_applicant_types(co_applicant_types)

    entry = DocumentMasterEntry(
        doc_code=code,
        display_name=display_name.strip(),
        description=description,
        category=category,
        owner_type=owner_type,
        co_applicant_types=co_applicant_types,
        default_required=default_required,
        sort_order=sort_order,
        is_active=True,
    )
    session.add(entry)
    await session.commit()
    await session.refresh(entry)
    logger.info("Catalog entry %s created (%s)", entry.doc_code, owner_type.value)
    return entry


async def update_catalog_entry(session: AsyncSession, entry_id: int, **updates) -> DocumentMasterEntry:
    """Apply the supplied fields. An explicit ``co_applicant_types=None`` clears the scope list."""
    entry = await _get_entry(session, entry_id)
    for field, value in updates.items():
        if field not in _UPDATABLE_FIELDS:
            continue
        if field == "co_applicant_types":
            if entry.owner_type == DocumentOwner.CO_APPLICANT:
                entry.co_applicant_types = normalize_co_applicant_types(value)
        elif value is not None:
            setattr(entry, field, value)
    await session.commit()
    await session.refresh(entry)
    return entry


async def deactivate_catalog_entry(session: AsyncSession, entry_id: int) -> DocumentMasterEntry:
    """Hide an entry from future checklist generation."""
    entry = await _get_entry(session, entry_id)
    entry.is_active = False
    await session.commit()
    await session.refresh(entry)
    logger.info("Catalog entry %s deactivated", entry.doc_code)
    return entry


async def seed_catalog(session: AsyncSession) -> int:
    """Insert baseline entries whose doc code is not yet present.

    Runs inside the caller's transaction. Returns the number inserted.
    """
    result = await session.execute(select(DocumentMasterEntry.doc_code))
    present = set(result.scalars().all())
    inserted = 0
    for definition in BASELINE_DOCUMENTS:
        if definition["doc_code"] in present:
            continue
        session.add(DocumentMasterEntry(is_active=True, **definition))
        inserted += 1
    await session.flush()
    return inserted
