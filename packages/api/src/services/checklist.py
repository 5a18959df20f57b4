# This project was developed with assistance from AI tools.
"""Per-case document checklist.

Generation walks the active, default-required catalog and ensures one item
per (case, doc code, owner type, owner id): student documents always,
collateral documents only when the case declares collateral, co-applicant
documents once per co-applicant whose type is in scope. It only ever adds
items. Each insert runs in its own SAVEPOINT so one failure does not stop
the rest; failures come back as outcomes instead of raising.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from db import Case, CaseDocument, ChecklistItem, CoApplicant, DocumentMasterEntry
from db.enums import ChecklistItemStatus, DocumentOwner, RequiredBy, RequirementLevel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import NotFoundError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.checklist import (
    ChecklistGroup,
    ChecklistItemResponse,
    ChecklistResponse,
    ChecklistSummary,
)
from .case_lock import case_lock
from .history import append_history
from .scope import load_case
from .sla import ensure_tz

logger = logging.getLogger(__name__)

_NO_COLLATERAL = frozenset({"", "NA", "N/A", "NONE"})

_COMPLETED_STATUSES = frozenset({ChecklistItemStatus.UPLOADED, ChecklistItemStatus.VERIFIED})

ItemKey = tuple[str, DocumentOwner, str | None]


@dataclass
class ChecklistOutcome:
    """What happened to one checklist key during a generation run."""

    doc_code: str
    owner_entity_type: DocumentOwner
    owner_entity_id: str | None
    created: bool
    ok: bool = True
    error: str | None = None


def has_collateral(collateral: str | None) -> bool:
    """True when the case declares collateral (not blank or a none sentinel)."""
    if collateral is None:
        return False
    return collateral.strip().upper() not in _NO_COLLATERAL


def co_applicant_in_scope(entry: DocumentMasterEntry, co_applicant_type: str) -> bool:
    """A catalog entry with no scope list applies to every co-applicant type."""
    if entry.co_applicant_types is None:
        return True
    return co_applicant_type in entry.co_applicant_types


def _targets(
    case: Case,
    entries: list[DocumentMasterEntry],
    co_applicants: list[CoApplicant],
) -> list[tuple[DocumentMasterEntry, DocumentOwner, str | None]]:
    targets = []
    collateral_present = has_collateral(case.collateral)
    for entry in entries:
        if entry.owner_type == DocumentOwner.STUDENT:
            targets.append((entry, DocumentOwner.STUDENT, None))
        elif entry.owner_type == DocumentOwner.COLLATERAL:
            if collateral_present:
                targets.append((entry, DocumentOwner.COLLATERAL, None))
        elif entry.owner_type == DocumentOwner.CO_APPLICANT:
            for co_applicant in co_applicants:
                if co_applicant_in_scope(entry, co_applicant.co_applicant_type):
                    targets.append((entry, DocumentOwner.CO_APPLICANT, str(co_applicant.id)))
    return targets


async def _existing_keys(session: AsyncSession, case_id: int) -> set[ItemKey]:
    result = await session.execute(
        select(
            ChecklistItem.doc_code,
            ChecklistItem.owner_entity_type,
            ChecklistItem.owner_entity_id,
        ).where(ChecklistItem.case_id == case_id)
    )
    return {(row[0], row[1], row[2]) for row in result.all()}


async def _insert_item(
    session: AsyncSession,
    case: Case,
    entry: DocumentMasterEntry,
    owner_type: DocumentOwner,
    owner_id: str | None,
) -> ChecklistItem:
    item = ChecklistItem(
        case_id=case.id,
        doc_code=entry.doc_code,
        display_name=entry.display_name,
        owner_entity_type=owner_type,
        owner_entity_id=owner_id,
        requirement_level=RequirementLevel.REQUIRED,
        status=ChecklistItemStatus.PENDING,
        required_by=RequiredBy.SYSTEM,
    )
    session.add(item)
    await session.flush()
    return item


async def generate_checklist(session: AsyncSession, case: Case) -> list[ChecklistOutcome]:
    """Ensure every applicable catalog document has a checklist item.

    Runs inside the caller's transaction. Safe to call repeatedly: a second
    run with an unchanged roster creates nothing.
    """
    entries = list(
        (
            await session.execute(
                select(DocumentMasterEntry)
                .where(
                    DocumentMasterEntry.default_required.is_(True),
                    DocumentMasterEntry.is_active.is_(True),
                )
                .order_by(DocumentMasterEntry.sort_order, DocumentMasterEntry.id)
            )
        ).scalars().all()
    )
    co_applicants = list(
        (
            await session.execute(
                select(CoApplicant).where(CoApplicant.case_id == case.id).order_by(CoApplicant.id)
            )
        ).scalars().all()
    )
    existing = await _existing_keys(session, case.id)

    outcomes: list[ChecklistOutcome] = []
    for entry, owner_type, owner_id in _targets(case, entries, co_applicants):
        key = (entry.doc_code, owner_type, owner_id)
        if key in existing:
            outcomes.append(ChecklistOutcome(entry.doc_code, owner_type, owner_id, created=False))
            continue
        try:
            async with session.begin_nested():
                await _insert_item(session, case, entry, owner_type, owner_id)
        except SQLAlchemyError as exc:
            logger.warning(
                "Checklist item %s (%s:%s) failed for case %s: %s",
                entry.doc_code,
                owner_type.value,
                owner_id,
                case.id,
                exc,
            )
            outcomes.append(
                ChecklistOutcome(
                    entry.doc_code, owner_type, owner_id, created=False, ok=False, error=str(exc),
                )
            )
            continue
        existing.add(key)
        outcomes.append(ChecklistOutcome(entry.doc_code, owner_type, owner_id, created=True))

    created = sum(1 for o in outcomes if o.created)
    failed = sum(1 for o in outcomes if not o.ok)
    if created or failed:
        logger.info(
            "Checklist generated for case %s: %d created, %d failed", case.id, created, failed,
        )
    return outcomes


# ---------------------------------------------------------------------------
# Reads and item updates
# ---------------------------------------------------------------------------


def _owner_key(item: ChecklistItem) -> str:
    if item.owner_entity_type == DocumentOwner.CO_APPLICANT:
        return f"co_applicant:{item.owner_entity_id}"
    return item.owner_entity_type.value


def summarize(items: list[ChecklistItem], *, now: datetime) -> ChecklistSummary:
    required = [i for i in items if i.requirement_level == RequirementLevel.REQUIRED]
    return ChecklistSummary(
        required_total=len(required),
        required_completed=sum(1 for i in required if i.status in _COMPLETED_STATUSES),
        optional_total=sum(1 for i in items if i.requirement_level == RequirementLevel.OPTIONAL),
        overdue_required=sum(
            1
            for i in required
            if i.status == ChecklistItemStatus.PENDING
            and i.due_at is not None
            and ensure_tz(i.due_at) < now
        ),
    )


async def list_items(session: AsyncSession, case_id: int) -> list[ChecklistItem]:
    result = await session.execute(
        select(ChecklistItem).where(ChecklistItem.case_id == case_id).order_by(ChecklistItem.id)
    )
    return list(result.scalars().all())


async def get_checklist(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    now: datetime | None = None,
) -> ChecklistResponse:
    """Checklist grouped by owner, with completion summary.

    Items whose co-applicant has been removed are still listed under
    their original owner key.
    """
    if now is None:
        now = datetime.now(UTC)
    await load_case(session, user, case_id)
    items = await list_items(session, case_id)

    groups: dict[str, ChecklistGroup] = {}
    for item in items:
        key = _owner_key(item)
        if key not in groups:
            groups[key] = ChecklistGroup(
                owner_key=key,
                owner_entity_type=item.owner_entity_type,
                owner_entity_id=item.owner_entity_id,
                items=[],
            )
        groups[key].items.append(ChecklistItemResponse.model_validate(item))

    return ChecklistResponse(
        case_id=case_id,
        summary=summarize(items, now=now),
        groups=list(groups.values()),
    )


async def _get_item(session: AsyncSession, case_id: int, item_id: int) -> ChecklistItem:
    item = await session.get(ChecklistItem, item_id)
    if item is None or item.case_id != case_id:
        raise NotFoundError("ChecklistItem", item_id)
    return item


_UPDATABLE_ITEM_FIELDS = frozenset(
    {
        "requirement_level",
        "status",
        "notes",
        "due_at",
        "rejection_reason",
        "document_id",
        "last_requested_at",
    }
)


async def update_checklist_item(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    item_id: int,
    **updates,
) -> ChecklistItem:
    """Apply a partial update to one checklist item."""
    async with case_lock(case_id):
        await load_case(session, user, case_id, for_update=True)
        item = await _get_item(session, case_id, item_id)
        for field, value in updates.items():
            if field in _UPDATABLE_ITEM_FIELDS and value is not None:
                setattr(item, field, value)
        await session.commit()
        await session.refresh(item)
    return item


async def record_document_upload(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    item_id: int,
    *,
    file_name: str | None,
    mime_type: str | None = None,
    size_bytes: int | None = None,
    storage_key: str | None = None,
    now: datetime | None = None,
) -> CaseDocument:
    """Record a stored file against a checklist item and mark it Uploaded.

    Appends a ``[DOC]`` history note; this does not reset the SLA clock.
    """
    if not file_name or not file_name.strip():
        raise ValidationError("file_name is required", details={"file_name": "missing"})
    if now is None:
        now = datetime.now(UTC)
    actor = user.name or user.user_id

    async with case_lock(case_id):
        case = await load_case(session, user, case_id, for_update=True)
        item = await _get_item(session, case_id, item_id)
        try:
            document = CaseDocument(
                case_id=case_id,
                checklist_item_id=item.id,
                file_name=file_name.strip(),
                mime_type=mime_type,
                size_bytes=size_bytes,
                storage_key=storage_key,
                uploaded_by=actor,
            )
            session.add(document)
            await session.flush()

            item.status = ChecklistItemStatus.UPLOADED
            item.document_id = document.id
            append_history(
                session, case, changed_by=actor, note=f"[DOC] Uploaded: {document.file_name}", now=now,
            )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        await session.refresh(document)

    logger.info("Document %s uploaded for case %s item %s", document.id, case_id, item_id)
    return document
