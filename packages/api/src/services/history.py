# This project was developed with assistance from AI tools.
"""Append-only case history.

Entries are only ever inserted and read. The entry type is derived from a
leading tag in the note, e.g. ``[QUERY] bank asked for ITR``.
"""

from datetime import datetime

from db import Case, StatusHistoryEntry
from db.enums import HistoryEntryType
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.auth import UserContext
from .scope import load_case

_NOTE_TAGS: tuple[tuple[str, HistoryEntryType], ...] = (
    ("[QUERY]", HistoryEntryType.QUERY),
    ("[PROOF]", HistoryEntryType.PROOF),
    ("[DOC]", HistoryEntryType.DOCS),
    ("[PACK]", HistoryEntryType.PACKS),
    ("[WHATSAPP]", HistoryEntryType.WHATSAPP),
)


def classify_note(note: str | None) -> HistoryEntryType:
    """Entry type for a note; untagged or empty notes are status entries."""
    if not note:
        return HistoryEntryType.STATUS
    head = note.lstrip().upper()
    for tag, entry_type in _NOTE_TAGS:
        if head.startswith(tag):
            return entry_type
    return HistoryEntryType.STATUS


def append_history(
    session: AsyncSession,
    case: Case,
    *,
    changed_by: str,
    note: str | None,
    now: datetime | None = None,
) -> StatusHistoryEntry:
    """Stage one history row for the case's current status and awaiting party."""
    entry = StatusHistoryEntry(
        case_id=case.id,
        status=case.status,
        awaiting_party=case.awaiting_party,
        changed_by=changed_by,
        entry_type=classify_note(note),
        note=note,
    )
    if now is not None:
        entry.created_at = now
    session.add(entry)
    return entry


async def get_history(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
) -> list[StatusHistoryEntry]:
    """History for a case, newest first."""
    await load_case(session, user, case_id)
    result = await session.execute(
        select(StatusHistoryEntry)
        .where(StatusHistoryEntry.case_id == case_id)
        .order_by(StatusHistoryEntry.id.desc())
    )
    return list(result.scalars().all())
