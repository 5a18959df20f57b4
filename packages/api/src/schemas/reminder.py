# This project was developed with assistance from AI tools.
"""Reminder rule and job schemas."""

from datetime import datetime

from db.enums import (
    AwaitingParty,
    ReminderChannel,
    ReminderJobStatus,
    ReminderScope,
    ReminderTrigger,
)
from pydantic import BaseModel, ConfigDict, Field


class ReminderCondition(BaseModel):
    """When a rule applies. Evaluated by the external scheduler."""

    model_config = ConfigDict(extra="forbid")

    awaiting_party: AwaitingParty | None = None
    age_hours: int | None = Field(default=None, ge=0)
    sla_breach: bool | None = None


class ReminderRuleCreate(BaseModel):
    scope: ReminderScope = ReminderScope.STUDENT
    trigger_type: ReminderTrigger = ReminderTrigger.AWAITING
    condition: dict = Field(default_factory=dict)
    template_name: str | None = None
    send_after_minutes: int = Field(default=1440, ge=0)
    repeat_every_minutes: int | None = Field(default=None, ge=1)
    max_retries: int = Field(default=3, ge=0)
    is_active: bool = True


class ReminderRuleUpdate(BaseModel):
    scope: ReminderScope | None = None
    trigger_type: ReminderTrigger | None = None
    condition: dict | None = None
    send_after_minutes: int | None = Field(default=None, ge=0)
    repeat_every_minutes: int | None = Field(default=None, ge=1)
    max_retries: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ReminderRuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    scope: ReminderScope
    trigger_type: ReminderTrigger
    condition: ReminderCondition
    template_name: str
    send_after_minutes: int
    repeat_every_minutes: int | None = None
    max_retries: int
    is_active: bool
    created_at: datetime


class ReminderJobCreate(BaseModel):
    to_type: ReminderScope = ReminderScope.STUDENT
    to_address: str | None = None
    channel: ReminderChannel = ReminderChannel.IN_APP
    template_name: str = "manual_reminder"
    scheduled_at: datetime | None = None
    payload: dict = Field(default_factory=dict)
    rule_id: int | None = None
    bank_application_id: int | None = None


class ReminderJobStatusUpdate(BaseModel):
    status: ReminderJobStatus
    last_error: str | None = None


class ReminderJobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    bank_application_id: int | None = None
    rule_id: int | None = None
    to_type: ReminderScope
    to_address: str
    channel: ReminderChannel
    template_name: str
    payload: dict
    scheduled_at: datetime
    status: ReminderJobStatus
    attempts: int
    last_error: str | None = None
    created_at: datetime
