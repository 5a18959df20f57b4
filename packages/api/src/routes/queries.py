# This project was developed with assistance from AI tools.
"""Query thread and escalation routes."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.query import (
    EscalationCreate,
    EscalationResponse,
    QueryMessageCreate,
    QueryMessageResponse,
    QueryStatusUpdate,
    QueryThreadCreate,
    QueryThreadResponse,
)
from ..services import escalations, queries

router = APIRouter()

_STAFF = (UserRole.ADMIN, UserRole.STAFF)
_ANY = (UserRole.ADMIN, UserRole.STAFF, UserRole.BANK, UserRole.STUDENT)


@router.get(
    "/cases/{case_id}/queries",
    response_model=list[QueryThreadResponse],
    dependencies=[Depends(require_roles(*_ANY))],
)
async def list_threads(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> list[QueryThreadResponse]:
    threads = await queries.list_threads(session, user, case_id)
    return [QueryThreadResponse.model_validate(t) for t in threads]


@router.post(
    "/cases/{case_id}/queries",
    response_model=QueryThreadResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def create_thread(
    case_id: int,
    body: QueryThreadCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> QueryThreadResponse:
    """Open a query thread. A bank-raised thread adds a student task."""
    thread = await queries.create_thread(session, user, case_id, **body.model_dump())
    return QueryThreadResponse.model_validate(thread)


@router.get(
    "/cases/{case_id}/queries/{thread_id}",
    response_model=QueryThreadResponse,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def get_thread(
    case_id: int,
    thread_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> QueryThreadResponse:
    thread = await queries.get_thread(session, user, case_id, thread_id)
    return QueryThreadResponse.model_validate(thread)


@router.post(
    "/cases/{case_id}/queries/{thread_id}/messages",
    response_model=QueryMessageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def add_message(
    case_id: int,
    thread_id: int,
    body: QueryMessageCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> QueryMessageResponse:
    message = await queries.add_message(
        session,
        user,
        case_id,
        thread_id,
        message=body.message,
        attachments=[a.model_dump() for a in body.attachments],
    )
    return QueryMessageResponse.model_validate(message)


@router.patch(
    "/cases/{case_id}/queries/{thread_id}/status",
    response_model=QueryThreadResponse,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def set_thread_status(
    case_id: int,
    thread_id: int,
    body: QueryStatusUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> QueryThreadResponse:
    thread = await queries.set_thread_status(session, user, case_id, thread_id, body.status)
    return QueryThreadResponse.model_validate(thread)


# ---------------------------------------------------------------------------
# Escalations
# ---------------------------------------------------------------------------


@router.get(
    "/cases/{case_id}/escalations",
    response_model=list[EscalationResponse],
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def list_escalations(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    open_only: bool = False,
) -> list[EscalationResponse]:
    rows = await escalations.list_escalations(session, user, case_id, open_only=open_only)
    return [EscalationResponse.model_validate(r) for r in rows]


@router.post(
    "/cases/{case_id}/escalations",
    response_model=EscalationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_escalation(
    case_id: int,
    body: EscalationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> EscalationResponse:
    escalation = await escalations.create_escalation(session, user, case_id, **body.model_dump())
    return EscalationResponse.model_validate(escalation)


@router.post(
    "/cases/{case_id}/escalations/{escalation_id}/resolve",
    response_model=EscalationResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def resolve_escalation(
    case_id: int,
    escalation_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> EscalationResponse:
    """Mark resolved. The task it spawned is left open."""
    escalation = await escalations.resolve_escalation(session, user, case_id, escalation_id)
    return EscalationResponse.model_validate(escalation)
