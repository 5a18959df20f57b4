# This project was developed with assistance from AI tools.
"""Case, history, bank application and lead schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import AwaitingParty, BankStatus, CaseStatus, HistoryEntryType, LeadStage, Priority
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination
from .checklist import ChecklistOutcomeResponse
from .sla import SlaEvaluation

# ---------------------------------------------------------------------------
# Cases
# ---------------------------------------------------------------------------


class CaseCreate(BaseModel):
    student_name: str | None = None
    student_email: str | None = None
    student_phone: str | None = None
    student_user_id: str | None = None
    university: str | None = None
    course: str | None = None
    country: str | None = None
    intake: str | None = None
    loan_amount_requested: Decimal | None = Field(default=None, ge=0)
    collateral: str | None = Field(
        default="NA",
        description="Collateral description. Blank or NA means no collateral documents.",
    )
    preferred_bank: str | None = None
    assigned_to: str | None = None
    priority: Priority = Priority.NORMAL
    notes: str | None = None


class CaseUpdate(BaseModel):
    """Profile fields only. Workflow fields change through the transition endpoint."""

    student_name: str | None = None
    student_email: str | None = None
    student_phone: str | None = None
    university: str | None = None
    course: str | None = None
    country: str | None = None
    intake: str | None = None
    loan_amount_requested: Decimal | None = Field(default=None, ge=0)
    collateral: str | None = None
    preferred_bank: str | None = None
    assigned_to: str | None = None
    notes: str | None = None


class TransitionRequest(BaseModel):
    status: CaseStatus | None = None
    awaiting_party: AwaitingParty | None = None
    priority: Priority | None = None
    close_reason: str | None = None
    note: str | None = None


class StageExpectationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: CaseStatus
    expected_min_days: int
    expected_max_days: int
    student_text: str
    staff_text: str


class CaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_name: str
    student_email: str
    student_phone: str | None = None
    student_user_id: str | None = None
    university: str | None = None
    course: str | None = None
    country: str | None = None
    intake: str | None = None
    loan_amount_requested: Decimal | None = None
    collateral: str | None = None
    preferred_bank: str | None = None
    assigned_to: str | None = None
    notes: str | None = None
    status: CaseStatus
    awaiting_party: AwaitingParty
    priority: Priority
    close_reason: str | None = None
    status_changed_at: datetime
    created_at: datetime
    updated_at: datetime
    sla: SlaEvaluation | None = None


class CaseDetailResponse(CaseResponse):
    stage_expectation: StageExpectationResponse | None = None


class CaseCreateResponse(BaseModel):
    case: CaseResponse
    checklist: list[ChecklistOutcomeResponse]


class CaseListResponse(BaseModel):
    data: list[CaseResponse]
    pagination: Pagination


class HistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    status: CaseStatus
    awaiting_party: AwaitingParty
    changed_by: str
    entry_type: HistoryEntryType
    note: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Bank applications
# ---------------------------------------------------------------------------


class BankApplicationCreate(BaseModel):
    bank_id: str | None = None
    bank_reference: str | None = None


class BankStatusSync(BaseModel):
    bank_status: BankStatus
    close_reason: str | None = None


class BankApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int | None = None
    bank_id: str
    status: BankStatus
    bank_reference: str | None = None
    last_bank_update_at: datetime | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------


class LeadCreate(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    email: str | None = None
    country: str | None = None
    course: str | None = None
    intake: str | None = None
    loan_amount: Decimal | None = Field(default=None, ge=0)
    stage: LeadStage = LeadStage.NEW
    priority: Priority = Priority.NORMAL


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    phone: str | None = None
    email: str | None = None
    country: str | None = None
    course: str | None = None
    intake: str | None = None
    loan_amount: Decimal | None = None
    stage: LeadStage
    priority: Priority
    created_at: datetime


class LeadConvertRequest(BaseModel):
    student_email: str | None = None
    student_phone: str | None = None
    student_user_id: str | None = None
    university: str | None = None
    collateral: str | None = "NA"
    preferred_bank: str | None = None
    assigned_to: str | None = None
