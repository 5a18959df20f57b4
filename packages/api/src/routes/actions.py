# This project was developed with assistance from AI tools.
"""Task routes: per-case next actions, manual tasks, and the open-task queue."""

from db import get_db
from db.enums import Party, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.action import ActionCreate, ActionListResponse, ActionResponse, ActionUpdate
from ..services import next_action

router = APIRouter()

_STAFF = (UserRole.ADMIN, UserRole.STAFF)
_ANY = (UserRole.ADMIN, UserRole.STAFF, UserRole.BANK, UserRole.STUDENT)


@router.get(
    "/actions",
    response_model=ActionListResponse,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def open_action_queue(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    owner: Party | None = None,
    limit: int = Query(default=200, ge=1, le=500),
) -> ActionListResponse:
    """Open tasks across every case the caller can see, most urgent first."""
    actions = await next_action.list_open_actions(session, user, owner=owner, limit=limit)
    return ActionListResponse(data=[ActionResponse.model_validate(a) for a in actions])


@router.get(
    "/cases/{case_id}/actions",
    response_model=ActionListResponse,
    dependencies=[Depends(require_roles(*_ANY))],
)
async def list_case_actions(
    case_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    open_only: bool = False,
) -> ActionListResponse:
    actions = await next_action.list_actions(session, user, case_id, open_only=open_only)
    return ActionListResponse(data=[ActionResponse.model_validate(a) for a in actions])


@router.post(
    "/cases/{case_id}/actions",
    response_model=ActionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def create_action(
    case_id: int,
    body: ActionCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ActionResponse:
    action = await next_action.create_manual_action(session, user, case_id, **body.model_dump())
    return ActionResponse.model_validate(action)


@router.patch(
    "/cases/{case_id}/actions/{action_id}",
    response_model=ActionResponse,
    dependencies=[Depends(require_roles(*_STAFF))],
)
async def update_action(
    case_id: int,
    action_id: int,
    body: ActionUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ActionResponse:
    action = await next_action.update_action(
        session, user, case_id, action_id, **body.model_dump(exclude_unset=True)
    )
    return ActionResponse.model_validate(action)
