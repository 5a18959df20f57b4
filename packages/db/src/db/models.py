# This project was developed with assistance from AI tools.
"""
Education-loan workflow -- domain models

Cases and their append-only status history, co-applicants, the document
catalog and per-case checklist, bank-side applications and their requirement
overrides, next actions, query threads, escalations, and reminder rules/jobs.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ActionCode,
    ActionOrigin,
    ActionStatus,
    AwaitingParty,
    BankStatus,
    CaseStatus,
    ChecklistItemStatus,
    DocumentOwner,
    HistoryEntryType,
    LeadStage,
    OverrideType,
    Party,
    Priority,
    QueryStatus,
    ReminderChannel,
    ReminderJobStatus,
    ReminderScope,
    ReminderTrigger,
    RequiredBy,
    RequirementLevel,
)

DEFAULT_CO_APPLICANT_TYPE = "INDIA_SALARIED"


class Case(Base):
    """Education-loan case tracked end to end.

    Workflow fields (status, awaiting_party, priority, close_reason,
    status_changed_at) are written only by the case workflow service.
    """

    __tablename__ = "cases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_name = Column(String(255), nullable=False)
    student_email = Column(String(255), nullable=False, index=True)
    student_phone = Column(String(50), nullable=True)
    student_user_id = Column(String(255), nullable=True, index=True)
    university = Column(String(255), nullable=True)
    course = Column(String(255), nullable=True)
    country = Column(String(100), nullable=True)
    intake = Column(String(50), nullable=True)
    loan_amount_requested = Column(Numeric(14, 2), nullable=True)
    collateral = Column(String(100), nullable=True, default="NA")
    preferred_bank = Column(String(255), nullable=True)
    assigned_to = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    status = Column(
        Enum(CaseStatus, name="case_status", native_enum=False),
        nullable=False,
        default=CaseStatus.NOT_CONNECTED,
        index=True,
    )
    awaiting_party = Column(
        Enum(AwaitingParty, name="awaiting_party", native_enum=False),
        nullable=False,
        default=AwaitingParty.INTERNAL_OPS,
        index=True,
    )
    priority = Column(
        Enum(Priority, name="priority", native_enum=False),
        nullable=False,
        default=Priority.NORMAL,
    )
    close_reason = Column(Text, nullable=True)
    status_changed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    history = relationship(
        "StatusHistoryEntry", back_populates="case", cascade="all, delete-orphan",
    )
    co_applicants = relationship(
        "CoApplicant", back_populates="case", cascade="all, delete-orphan",
    )
    checklist_items = relationship(
        "ChecklistItem", back_populates="case", cascade="all, delete-orphan",
    )
    bank_applications = relationship("BankApplication", back_populates="case")
    next_actions = relationship(
        "NextAction", back_populates="case", cascade="all, delete-orphan",
    )
    query_threads = relationship(
        "QueryThread", back_populates="case", cascade="all, delete-orphan",
    )
    escalations = relationship(
        "Escalation", back_populates="case", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Case(id={self.id}, status='{self.status}', awaiting='{self.awaiting_party}')>"


class StatusHistoryEntry(Base):
    """Append-only case history. INSERT + SELECT only."""

    __tablename__ = "status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    status = Column(Enum(CaseStatus, name="case_status", native_enum=False), nullable=False)
    awaiting_party = Column(
        Enum(AwaitingParty, name="awaiting_party", native_enum=False), nullable=False,
    )
    changed_by = Column(String(255), nullable=False, default="System")
    entry_type = Column(
        Enum(HistoryEntryType, name="history_entry_type", native_enum=False),
        nullable=False,
        default=HistoryEntryType.STATUS,
    )
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    case = relationship("Case", back_populates="history")

    def __repr__(self):
        return f"<StatusHistoryEntry(id={self.id}, case_id={self.case_id}, status='{self.status}')>"


class CoApplicant(Base):
    """Co-applicant on a case. The type code scopes checklist generation."""

    __tablename__ = "co_applicants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    name = Column(String(255), nullable=False)
    co_applicant_type = Column(String(50), nullable=False, default=DEFAULT_CO_APPLICANT_TYPE)
    relation = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    income = Column(Numeric(14, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    case = relationship("Case", back_populates="co_applicants")

    def __repr__(self):
        return f"<CoApplicant(id={self.id}, case_id={self.case_id}, type='{self.co_applicant_type}')>"


class DocumentMasterEntry(Base):
    """Global document catalog row.

    ``co_applicant_types`` is only meaningful for co-applicant documents;
    NULL means the entry applies to every co-applicant type.
    """

    __tablename__ = "document_master"

    id = Column(Integer, primary_key=True, autoincrement=True)
    doc_code = Column(String(64), unique=True, nullable=False, index=True)
    display_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    owner_type = Column(
        Enum(DocumentOwner, name="document_owner", native_enum=False), nullable=False,
    )
    co_applicant_types = Column(JSON, nullable=True)
    default_required = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<DocumentMasterEntry(doc_code='{self.doc_code}', owner='{self.owner_type}')>"


class ChecklistItem(Base):
    """One document obligation on a case.

    (case_id, doc_code, owner_entity_type, owner_entity_id) identifies the
    item; generation and overrides check for it before inserting.
    """

    __tablename__ = "checklist_items"
    __table_args__ = (
        UniqueConstraint(
            "case_id", "doc_code", "owner_entity_type", "owner_entity_id",
            name="uq_checklist_item_key",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    doc_code = Column(String(64), nullable=False)
    display_name = Column(String(255), nullable=False)
    owner_entity_type = Column(
        Enum(DocumentOwner, name="document_owner", native_enum=False), nullable=False,
    )
    owner_entity_id = Column(String(64), nullable=True)
    requirement_level = Column(
        Enum(RequirementLevel, name="requirement_level", native_enum=False),
        nullable=False,
        default=RequirementLevel.REQUIRED,
    )
    status = Column(
        Enum(ChecklistItemStatus, name="checklist_item_status", native_enum=False),
        nullable=False,
        default=ChecklistItemStatus.PENDING,
    )
    required_by = Column(
        Enum(RequiredBy, name="required_by", native_enum=False),
        nullable=False,
        default=RequiredBy.SYSTEM,
    )
    bank_id = Column(String(100), nullable=True)
    bank_application_id = Column(
        Integer, ForeignKey("bank_applications.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    document_id = Column(Integer, nullable=True)
    due_at = Column(DateTime(timezone=True), nullable=True)
    last_requested_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    case = relationship("Case", back_populates="checklist_items")

    def __repr__(self):
        return (
            f"<ChecklistItem(id={self.id}, case_id={self.case_id}, doc_code='{self.doc_code}', "
            f"owner='{self.owner_entity_type}:{self.owner_entity_id}')>"
        )


class CaseDocument(Base):
    """Reference to an uploaded file. Content lives in external storage."""

    __tablename__ = "case_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    checklist_item_id = Column(
        Integer, ForeignKey("checklist_items.id", ondelete="SET NULL"), nullable=True,
    )
    file_name = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size_bytes = Column(Integer, nullable=True)
    storage_key = Column(String(500), nullable=True)
    uploaded_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<CaseDocument(id={self.id}, case_id={self.case_id}, file='{self.file_name}')>"


class BankApplication(Base):
    """A case's application as seen by one partner bank."""

    __tablename__ = "bank_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="SET NULL"), nullable=True, index=True,
    )
    bank_id = Column(String(100), nullable=False, index=True)
    status = Column(
        Enum(BankStatus, name="bank_status", native_enum=False),
        nullable=False,
        default=BankStatus.INITIATED,
    )
    bank_reference = Column(String(100), nullable=True)
    last_bank_update_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    case = relationship("Case", back_populates="bank_applications")

    def __repr__(self):
        return f"<BankApplication(id={self.id}, bank='{self.bank_id}', status='{self.status}')>"


class RequirementOverride(Base):
    """Immutable log of a bank's change to a document requirement."""

    __tablename__ = "requirement_overrides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bank_application_id = Column(
        Integer, ForeignKey("bank_applications.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    bank_id = Column(String(100), nullable=True)
    override_type = Column(
        Enum(OverrideType, name="override_type", native_enum=False), nullable=False,
    )
    doc_code = Column(String(64), nullable=False)
    owner_entity_type = Column(
        Enum(DocumentOwner, name="document_owner", native_enum=False),
        nullable=False,
        default=DocumentOwner.STUDENT,
    )
    owner_entity_id = Column(String(64), nullable=True)
    reason = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<RequirementOverride(id={self.id}, type='{self.override_type}', doc='{self.doc_code}')>"


class NextAction(Base):
    """A task on a case: the automatic next step, or one spawned by a query,
    an escalation, or a staff member."""

    __tablename__ = "next_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    bank_application_id = Column(
        Integer, ForeignKey("bank_applications.id", ondelete="SET NULL"), nullable=True,
    )
    query_thread_id = Column(
        Integer, ForeignKey("query_threads.id", ondelete="SET NULL"), nullable=True,
    )
    escalation_id = Column(
        Integer, ForeignKey("escalations.id", ondelete="SET NULL"), nullable=True,
    )
    owner = Column(Enum(Party, name="party", native_enum=False), nullable=False)
    action_code = Column(
        Enum(ActionCode, name="action_code", native_enum=False),
        nullable=False,
        default=ActionCode.REVIEW,
    )
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(
        Enum(Priority, name="priority", native_enum=False),
        nullable=False,
        default=Priority.NORMAL,
    )
    status = Column(
        Enum(ActionStatus, name="action_status", native_enum=False),
        nullable=False,
        default=ActionStatus.OPEN,
        index=True,
    )
    origin = Column(
        Enum(ActionOrigin, name="action_origin", native_enum=False),
        nullable=False,
        default=ActionOrigin.AUTOMATIC,
    )
    due_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    case = relationship("Case", back_populates="next_actions")

    def __repr__(self):
        return f"<NextAction(id={self.id}, case_id={self.case_id}, code='{self.action_code}', status='{self.status}')>"


class QueryThread(Base):
    """Clarification conversation on a case (optionally tied to a bank application)."""

    __tablename__ = "query_threads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    bank_application_id = Column(
        Integer, ForeignKey("bank_applications.id", ondelete="SET NULL"), nullable=True,
    )
    raised_by = Column(Enum(Party, name="party", native_enum=False), nullable=False)
    title = Column(String(500), nullable=False)
    status = Column(
        Enum(QueryStatus, name="query_status", native_enum=False),
        nullable=False,
        default=QueryStatus.OPEN,
    )
    priority = Column(
        Enum(Priority, name="priority", native_enum=False),
        nullable=False,
        default=Priority.NORMAL,
    )
    due_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)

    case = relationship("Case", back_populates="query_threads")
    messages = relationship(
        "QueryMessage",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="QueryMessage.id",
    )

    def __repr__(self):
        return f"<QueryThread(id={self.id}, case_id={self.case_id}, status='{self.status}')>"


class QueryMessage(Base):
    __tablename__ = "query_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    thread_id = Column(
        Integer, ForeignKey("query_threads.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    sender_party = Column(Enum(Party, name="party", native_enum=False), nullable=False)
    sender_user_id = Column(String(255), nullable=True)
    sender_name = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    thread = relationship("QueryThread", back_populates="messages")
    attachments = relationship(
        "QueryAttachment", back_populates="message", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<QueryMessage(id={self.id}, thread_id={self.thread_id})>"


class QueryAttachment(Base):
    __tablename__ = "query_attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    thread_id = Column(
        Integer, ForeignKey("query_threads.id", ondelete="CASCADE"), nullable=False,
    )
    message_id = Column(
        Integer, ForeignKey("query_messages.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    file_url = Column(String(1000), nullable=False)
    file_name = Column(String(500), nullable=True)
    mime_type = Column(String(100), nullable=True)
    size_bytes = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    message = relationship("QueryMessage", back_populates="attachments")


class Escalation(Base):
    """Severity flag on a case. Resolving it leaves its spawned action alone."""

    __tablename__ = "escalations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    bank_application_id = Column(
        Integer, ForeignKey("bank_applications.id", ondelete="SET NULL"), nullable=True,
    )
    level = Column(Integer, nullable=False, default=1)
    reason = Column(String(255), nullable=False, default="SLA_BREACH")
    created_by = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(String(255), nullable=True)

    case = relationship("Case", back_populates="escalations")

    def __repr__(self):
        return f"<Escalation(id={self.id}, case_id={self.case_id}, level={self.level})>"


class ReminderRule(Base):
    """Declarative reminder trigger. Evaluated by an external scheduler."""

    __tablename__ = "reminder_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    scope = Column(
        Enum(ReminderScope, name="reminder_scope", native_enum=False),
        nullable=False,
        default=ReminderScope.STUDENT,
    )
    trigger_type = Column(
        Enum(ReminderTrigger, name="reminder_trigger", native_enum=False),
        nullable=False,
        default=ReminderTrigger.AWAITING,
    )
    condition = Column(JSON, nullable=False, default=dict)
    template_name = Column(String(255), nullable=False, unique=True)
    send_after_minutes = Column(Integer, nullable=False, default=1440)
    repeat_every_minutes = Column(Integer, nullable=True)
    max_retries = Column(Integer, nullable=False, default=3)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<ReminderRule(id={self.id}, template='{self.template_name}')>"


class ReminderJob(Base):
    """A concrete scheduled reminder. Delivery is performed elsewhere."""

    __tablename__ = "reminder_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    bank_application_id = Column(
        Integer, ForeignKey("bank_applications.id", ondelete="SET NULL"), nullable=True,
    )
    rule_id = Column(
        Integer, ForeignKey("reminder_rules.id", ondelete="SET NULL"), nullable=True,
    )
    to_type = Column(
        Enum(ReminderScope, name="reminder_scope", native_enum=False),
        nullable=False,
        default=ReminderScope.STUDENT,
    )
    to_address = Column(String(255), nullable=False)
    channel = Column(
        Enum(ReminderChannel, name="reminder_channel", native_enum=False),
        nullable=False,
        default=ReminderChannel.IN_APP,
    )
    template_name = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False, default=dict)
    scheduled_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(
        Enum(ReminderJobStatus, name="reminder_job_status", native_enum=False),
        nullable=False,
        default=ReminderJobStatus.QUEUED,
        index=True,
    )
    attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<ReminderJob(id={self.id}, case_id={self.case_id}, status='{self.status}')>"


class StageExpectation(Base):
    """Expected time in a status plus student/staff guidance. Informational only."""

    __tablename__ = "stage_expectations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(
        Enum(CaseStatus, name="case_status", native_enum=False), nullable=False, unique=True,
    )
    expected_min_days = Column(Integer, nullable=False, default=1)
    expected_max_days = Column(Integer, nullable=False, default=7)
    student_text = Column(Text, nullable=False)
    staff_text = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<StageExpectation(status='{self.status}', days={self.expected_min_days}-{self.expected_max_days})>"


class Lead(Base):
    """Pre-case prospect. Converted into a case at most once."""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, autoincrement=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    country = Column(String(100), nullable=True)
    course = Column(String(255), nullable=True)
    intake = Column(String(50), nullable=True)
    loan_amount = Column(Numeric(14, 2), nullable=True)
    stage = Column(
        Enum(LeadStage, name="lead_stage", native_enum=False),
        nullable=False,
        default=LeadStage.NEW,
    )
    priority = Column(
        Enum(Priority, name="priority", native_enum=False),
        nullable=False,
        default=Priority.NORMAL,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<Lead(id={self.id}, stage='{self.stage}')>"


class LeadCaseMapping(Base):
    __tablename__ = "lead_case_mappings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(
        Integer, ForeignKey("leads.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    case_id = Column(
        Integer, ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    converted_by = Column(String(255), nullable=True)
    converted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<LeadCaseMapping(lead_id={self.lead_id}, case_id={self.case_id})>"
