# This project was developed with assistance from AI tools.
"""Document checklist, catalog, co-applicant and override schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import (
    ChecklistItemStatus,
    DocumentOwner,
    OverrideType,
    RequiredBy,
    RequirementLevel,
)
from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class DocumentMasterCreate(BaseModel):
    doc_code: str | None = None
    display_name: str | None = None
    description: str | None = None
    category: str | None = None
    owner_type: DocumentOwner = DocumentOwner.STUDENT
    co_applicant_types: list[str] | None = Field(
        default=None,
        description="Co-applicant types this document applies to. Null means every type.",
    )
    default_required: bool = True
    sort_order: int = 0


class DocumentMasterUpdate(BaseModel):
    display_name: str | None = None
    description: str | None = None
    category: str | None = None
    co_applicant_types: list[str] | None = None
    default_required: bool | None = None
    sort_order: int | None = None
    is_active: bool | None = None


class DocumentMasterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    doc_code: str
    display_name: str
    description: str | None = None
    category: str | None = None
    owner_type: DocumentOwner
    co_applicant_types: list[str] | None = None
    default_required: bool
    sort_order: int
    is_active: bool


# ---------------------------------------------------------------------------
# Checklist
# ---------------------------------------------------------------------------


class ChecklistItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    doc_code: str
    display_name: str
    owner_entity_type: DocumentOwner
    owner_entity_id: str | None = None
    requirement_level: RequirementLevel
    status: ChecklistItemStatus
    required_by: RequiredBy
    bank_id: str | None = None
    bank_application_id: int | None = None
    document_id: int | None = None
    due_at: datetime | None = None
    last_requested_at: datetime | None = None
    notes: str | None = None
    rejection_reason: str | None = None
    created_at: datetime
    updated_at: datetime


class ChecklistItemUpdate(BaseModel):
    requirement_level: RequirementLevel | None = None
    status: ChecklistItemStatus | None = None
    notes: str | None = None
    due_at: datetime | None = None
    rejection_reason: str | None = None
    document_id: int | None = None
    last_requested_at: datetime | None = None


class ChecklistSummary(BaseModel):
    required_total: int
    required_completed: int
    optional_total: int
    overdue_required: int


class ChecklistGroup(BaseModel):
    """Items owned by one entity: the student, collateral, or one co-applicant."""

    owner_key: str
    owner_entity_type: DocumentOwner
    owner_entity_id: str | None = None
    items: list[ChecklistItemResponse]


class ChecklistResponse(BaseModel):
    case_id: int
    summary: ChecklistSummary
    groups: list[ChecklistGroup]


class ChecklistOutcomeResponse(BaseModel):
    """Result of ensuring one checklist item during generation."""

    doc_code: str
    owner_entity_type: DocumentOwner
    owner_entity_id: str | None = None
    created: bool
    ok: bool = True
    error: str | None = None


class DocumentUploadRecord(BaseModel):
    """Reference to a file already persisted by the storage collaborator."""

    file_name: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)
    storage_key: str | None = None


class CaseDocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    checklist_item_id: int | None = None
    file_name: str
    mime_type: str | None = None
    size_bytes: int | None = None
    storage_key: str | None = None
    uploaded_by: str | None = None
    created_at: datetime


# ---------------------------------------------------------------------------
# Co-applicants
# ---------------------------------------------------------------------------


class CoApplicantCreate(BaseModel):
    name: str | None = None
    co_applicant_type: str | None = None
    relation: str | None = None
    phone: str | None = None
    email: str | None = None
    income: Decimal | None = Field(default=None, ge=0)


class CoApplicantUpdate(BaseModel):
    name: str | None = None
    co_applicant_type: str | None = None
    relation: str | None = None
    phone: str | None = None
    email: str | None = None
    income: Decimal | None = Field(default=None, ge=0)


class CoApplicantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    case_id: int
    name: str
    co_applicant_type: str
    relation: str | None = None
    phone: str | None = None
    email: str | None = None
    income: Decimal | None = None
    created_at: datetime


class CoApplicantChangeResponse(BaseModel):
    """Co-applicant after a roster change, with the checklist generation outcomes."""

    co_applicant: CoApplicantResponse
    checklist: list[ChecklistOutcomeResponse]


# ---------------------------------------------------------------------------
# Requirement overrides
# ---------------------------------------------------------------------------


class OverrideCreate(BaseModel):
    override_type: OverrideType | None = None
    doc_code: str | None = None
    owner_entity_type: DocumentOwner = DocumentOwner.STUDENT
    owner_entity_id: str | None = None
    reason: str | None = None


class OverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bank_application_id: int
    bank_id: str | None = None
    override_type: OverrideType
    doc_code: str
    owner_entity_type: DocumentOwner
    owner_entity_id: str | None = None
    reason: str | None = None
    created_by: str | None = None
    created_at: datetime


class OverrideResultResponse(BaseModel):
    override: OverrideResponse
    affected_items: list[ChecklistItemResponse]
