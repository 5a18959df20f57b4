# This project was developed with assistance from AI tools.
"""Schemas for query threads and escalations."""

from datetime import datetime

from db.enums import Party, Priority, QueryStatus
from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Query threads
# ---------------------------------------------------------------------------


class AttachmentIn(BaseModel):
    file_url: str
    file_name: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)


class AttachmentResponse(AttachmentIn):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime


class QueryThreadCreate(BaseModel):
    title: str | None = None
    raised_by: Party | None = Field(
        default=None,
        description="Party raising the query. Defaults to the caller's party.",
    )
    priority: Priority = Priority.NORMAL
    message: str | None = None
    bank_application_id: int | None = None
    due_at: datetime | None = None


class QueryMessageCreate(BaseModel):
    message: str | None = None
    attachments: list[AttachmentIn] = Field(default_factory=list)


class QueryStatusUpdate(BaseModel):
    """Raw status string; unknown values are rejected by the service as a state error."""

    status: str


class QueryMessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    thread_id: int
    sender_party: Party
    sender_user_id: str | None = None
    sender_name: str | None = None
    message: str
    created_at: datetime
    attachments: list[AttachmentResponse] = []


class QueryThreadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    bank_application_id: int | None = None
    raised_by: Party
    title: str
    status: QueryStatus
    priority: Priority
    due_at: datetime | None = None
    created_at: datetime
    resolved_at: datetime | None = None
    messages: list[QueryMessageResponse] = []


# ---------------------------------------------------------------------------
# Escalations
# ---------------------------------------------------------------------------


class EscalationCreate(BaseModel):
    level: int = Field(default=1, ge=1)
    reason: str | None = None
    bank_application_id: int | None = None


class EscalationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    bank_application_id: int | None = None
    level: int
    reason: str
    created_by: str | None = None
    created_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None
