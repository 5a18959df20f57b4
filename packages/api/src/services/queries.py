# This project was developed with assistance from AI tools.
"""Query threads.

A thread moves Open -> Waiting{Student,Staff,Bank} -> Resolved/Closed.
Resolved and Closed stamp a resolution time. A thread raised by the bank
spawns one high-priority student task referencing it. Closed threads
accept no further messages.
"""

import logging
from datetime import UTC, datetime

from db import BankApplication, QueryAttachment, QueryMessage, QueryThread
from db.enums import ActionCode, ActionOrigin, Party, Priority, QueryStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.auth import party_for_role
from ..core.errors import NotFoundError, StateError, ValidationError
from ..schemas.auth import UserContext
from .case_lock import case_lock
from .next_action import build_spawned_action
from .scope import load_case

logger = logging.getLogger(__name__)

_TERMINAL = QueryStatus.terminal_statuses()


def parse_thread_status(value: str | QueryStatus) -> QueryStatus:
    """Coerce a raw status value. Unknown values are a state error."""
    if isinstance(value, QueryStatus):
        return value
    try:
        return QueryStatus(str(value).strip().lower())
    except ValueError:
        raise StateError(f"Invalid thread status: {value!r}") from None


def _thread_stmt(case_id: int):
    return (
        select(QueryThread)
        .options(selectinload(QueryThread.messages).selectinload(QueryMessage.attachments))
        .where(QueryThread.case_id == case_id)
    )


async def _load_thread(session: AsyncSession, case_id: int, thread_id: int) -> QueryThread:
    result = await session.execute(
        _thread_stmt(case_id).where(QueryThread.id == thread_id).execution_options(populate_existing=True)
    )
    thread = result.scalar_one_or_none()
    if thread is None:
        raise NotFoundError("QueryThread", thread_id)
    return thread


def _add_message(
    session: AsyncSession,
    thread: QueryThread,
    user: UserContext,
    sender_party: Party,
    message: str,
    attachments: list[dict] | None,
) -> QueryMessage:
    msg = QueryMessage(
        thread_id=thread.id,
        sender_party=sender_party,
        sender_user_id=user.user_id,
        sender_name=user.name,
        message=message.strip(),
    )
    for attachment in attachments or []:
        msg.attachments.append(
            QueryAttachment(
                thread_id=thread.id,
                file_url=attachment["file_url"],
                file_name=attachment.get("file_name"),
                mime_type=attachment.get("mime_type"),
                size_bytes=attachment.get("size_bytes"),
            )
        )
    session.add(msg)
    return msg


async def create_thread(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    *,
    title: str | None,
    raised_by: Party | None = None,
    priority: Priority = Priority.NORMAL,
    message: str | None = None,
    bank_application_id: int | None = None,
    due_at: datetime | None = None,
    now: datetime | None = None,
) -> QueryThread:
    """Open a thread, optionally with a first message.

    ``raised_by`` defaults to the caller's party.
    """
    if not title or not title.strip():
        raise ValidationError("title is required", details={"title": "missing"})
    if now is None:
        now = datetime.now(UTC)
    if raised_by is None:
        raised_by = party_for_role(user.role)
    title = title.strip()

    async with case_lock(case_id):
        await load_case(session, user, case_id, for_update=True)
        if bank_application_id is not None:
            app = await session.get(BankApplication, bank_application_id)
            if app is None or app.case_id != case_id:
                raise NotFoundError("BankApplication", bank_application_id)
        try:
            thread = QueryThread(
                case_id=case_id,
                bank_application_id=bank_application_id,
                raised_by=raised_by,
                title=title,
                status=QueryStatus.OPEN,
                priority=priority,
                due_at=due_at,
            )
            session.add(thread)
            await session.flush()

            if message and message.strip():
                _add_message(session, thread, user, raised_by, message, None)

            if raised_by == Party.BANK:
                session.add(
                    build_spawned_action(
                        case_id=case_id,
                        origin=ActionOrigin.QUERY,
                        owner=Party.STUDENT,
                        action_code=ActionCode.UPLOAD_DOCS,
                        title=f"Respond to bank query: {title}",
                        priority=Priority.HIGH,
                        now=now,
                        query_thread_id=thread.id,
                        bank_application_id=bank_application_id,
                        created_by=user.name or user.user_id,
                    )
                )
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        thread = await _load_thread(session, case_id, thread.id)

    logger.info(
        "Query thread %s raised by %s on case %s", thread.id, raised_by.value, case_id,
    )
    return thread


async def add_message(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    thread_id: int,
    *,
    message: str | None,
    attachments: list[dict] | None = None,
) -> QueryMessage:
    """Append a message. Resolved threads still accept messages; Closed do not."""
    if not message or not message.strip():
        raise ValidationError("message is required", details={"message": "missing"})

    async with case_lock(case_id):
        await load_case(session, user, case_id)
        thread = await _load_thread(session, case_id, thread_id)
        if thread.status == QueryStatus.CLOSED:
            raise StateError(f"Query thread {thread_id} is closed")
        msg = _add_message(session, thread, user, party_for_role(user.role), message, attachments)
        await session.commit()

    result = await session.execute(
        select(QueryMessage)
        .options(selectinload(QueryMessage.attachments))
        .where(QueryMessage.id == msg.id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def set_thread_status(
    session: AsyncSession,
    user: UserContext,
    case_id: int,
    thread_id: int,
    status: str | QueryStatus,
    *,
    now: datetime | None = None,
) -> QueryThread:
    """Move a thread to ``status``. Resolved and Closed threads keep their status."""
    new_status = parse_thread_status(status)
    if now is None:
        now = datetime.now(UTC)

    async with case_lock(case_id):
        await load_case(session, user, case_id)
        thread = await _load_thread(session, case_id, thread_id)
        if thread.status in _TERMINAL and new_status != thread.status:
            raise StateError(
                f"Query thread {thread_id} is {thread.status.value} and cannot move to {new_status.value}"
            )
        if new_status == thread.status:
            return thread
        thread.status = new_status
        thread.resolved_at = now if new_status in _TERMINAL else None
        await session.commit()
        thread = await _load_thread(session, case_id, thread_id)

    logger.info("Query thread %s on case %s set to %s", thread_id, case_id, new_status.value)
    return thread


async def list_threads(session: AsyncSession, user: UserContext, case_id: int) -> list[QueryThread]:
    await load_case(session, user, case_id)
    result = await session.execute(_thread_stmt(case_id).order_by(QueryThread.id.desc()))
    return list(result.scalars().all())


async def get_thread(session: AsyncSession, user: UserContext, case_id: int, thread_id: int) -> QueryThread:
    await load_case(session, user, case_id)
    return await _load_thread(session, case_id, thread_id)
