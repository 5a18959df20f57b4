# This project was developed with assistance from AI tools.
"""Schemas for next-action (task) endpoints."""

from datetime import datetime

from db.enums import ActionCode, ActionOrigin, ActionStatus, Party, Priority
from pydantic import BaseModel, ConfigDict


class ActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    bank_application_id: int | None = None
    query_thread_id: int | None = None
    escalation_id: int | None = None
    owner: Party
    action_code: ActionCode
    title: str
    description: str | None = None
    priority: Priority
    status: ActionStatus
    origin: ActionOrigin
    due_at: datetime | None = None
    completed_at: datetime | None = None
    created_by: str | None = None
    created_at: datetime


class ActionListResponse(BaseModel):
    """Tasks ordered Urgent, High, Normal, then earliest due."""

    data: list[ActionResponse]


class ActionCreate(BaseModel):
    """Request body for a manually created task."""

    title: str | None = None
    owner: Party = Party.INTERNAL_OPS
    action_code: ActionCode = ActionCode.REVIEW
    priority: Priority = Priority.NORMAL
    description: str | None = None
    due_at: datetime | None = None


class ActionUpdate(BaseModel):
    status: ActionStatus | None = None
    title: str | None = None
    description: str | None = None
    due_at: datetime | None = None
    priority: Priority | None = None
    owner: Party | None = None
