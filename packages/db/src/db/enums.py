# This project was developed with assistance from AI tools.
"""
Domain enums for the education-loan case workflow.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class StatusGroup(str, enum.Enum):
    PRE_LOGIN = "pre_login"
    LOGIN = "login"
    DOCS = "docs"
    REVIEW = "review"
    DECISION = "decision"
    POST_SANCTION = "post_sanction"
    CLOSED = "closed"


class CaseStatus(str, enum.Enum):
    # Pre-login
    NOT_CONNECTED = "not_connected"
    CONTACTED = "contacted"
    YET_TO_CONNECT = "yet_to_connect"
    # Login
    LOGIN_SUBMITTED = "login_submitted"
    LOGIN_IN_PROGRESS = "login_in_progress"
    LOGIN_REJECTED = "login_rejected"
    DUPLICATE_LOGIN = "duplicate_login"
    # Docs
    DOCS_PENDING = "docs_pending"
    DOCS_SUBMITTED = "docs_submitted"
    DOCS_VERIFICATION = "docs_verification"
    # Review
    UNDER_REVIEW = "under_review"
    CREDIT_CHECK_IN_PROGRESS = "credit_check_in_progress"
    FIELD_VERIFICATION = "field_verification"
    QUERY_RAISED = "query_raised"
    # Decision
    SANCTIONED = "sanctioned"
    CONDITIONAL_SANCTION = "conditional_sanction"
    REJECTED = "rejected"
    # Post-sanction
    SANCTION_ACCEPTED = "sanction_accepted"
    AGREEMENT_SIGNED = "agreement_signed"
    DISBURSEMENT_PENDING = "disbursement_pending"
    DISBURSED = "disbursed"
    # Closed
    CLOSED = "closed"
    DROPPED = "dropped"
    EXPIRED = "expired"

    @property
    def group(self) -> StatusGroup:
        return _STATUS_GROUPS[self]

    @classmethod
    def close_reason_statuses(cls) -> frozenset["CaseStatus"]:
        """Statuses that cannot be entered without a close reason on the case."""
        return frozenset(
            {cls.CLOSED, cls.DROPPED, cls.EXPIRED, cls.REJECTED, cls.LOGIN_REJECTED}
        )

    @classmethod
    def terminal_statuses(cls) -> frozenset["CaseStatus"]:
        """Statuses after which no automatic next action is created."""
        return cls.close_reason_statuses() | {cls.DISBURSED}

    # Any status may follow any other. There is deliberately no
    # valid_transitions() table for cases.


_STATUS_GROUPS: dict[CaseStatus, StatusGroup] = {
    CaseStatus.NOT_CONNECTED: StatusGroup.PRE_LOGIN,
    CaseStatus.CONTACTED: StatusGroup.PRE_LOGIN,
    CaseStatus.YET_TO_CONNECT: StatusGroup.PRE_LOGIN,
    CaseStatus.LOGIN_SUBMITTED: StatusGroup.LOGIN,
    CaseStatus.LOGIN_IN_PROGRESS: StatusGroup.LOGIN,
    CaseStatus.LOGIN_REJECTED: StatusGroup.LOGIN,
    CaseStatus.DUPLICATE_LOGIN: StatusGroup.LOGIN,
    CaseStatus.DOCS_PENDING: StatusGroup.DOCS,
    CaseStatus.DOCS_SUBMITTED: StatusGroup.DOCS,
    CaseStatus.DOCS_VERIFICATION: StatusGroup.DOCS,
    CaseStatus.UNDER_REVIEW: StatusGroup.REVIEW,
    CaseStatus.CREDIT_CHECK_IN_PROGRESS: StatusGroup.REVIEW,
    CaseStatus.FIELD_VERIFICATION: StatusGroup.REVIEW,
    CaseStatus.QUERY_RAISED: StatusGroup.REVIEW,
    CaseStatus.SANCTIONED: StatusGroup.DECISION,
    CaseStatus.CONDITIONAL_SANCTION: StatusGroup.DECISION,
    CaseStatus.REJECTED: StatusGroup.DECISION,
    CaseStatus.SANCTION_ACCEPTED: StatusGroup.POST_SANCTION,
    CaseStatus.AGREEMENT_SIGNED: StatusGroup.POST_SANCTION,
    CaseStatus.DISBURSEMENT_PENDING: StatusGroup.POST_SANCTION,
    CaseStatus.DISBURSED: StatusGroup.POST_SANCTION,
    CaseStatus.CLOSED: StatusGroup.CLOSED,
    CaseStatus.DROPPED: StatusGroup.CLOSED,
    CaseStatus.EXPIRED: StatusGroup.CLOSED,
}


class AwaitingParty(str, enum.Enum):
    STUDENT = "student"
    BANK = "bank"
    INTERNAL_OPS = "internal_ops"
    CLOSED = "closed"


class Party(str, enum.Enum):
    """Actor that owns a task, raised a query, or sent a message."""

    STUDENT = "student"
    BANK = "bank"
    INTERNAL_OPS = "internal_ops"


class Priority(str, enum.Enum):
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """Sort key: urgent first."""
        return {Priority.URGENT: 0, Priority.HIGH: 1, Priority.NORMAL: 2}[self]


class HistoryEntryType(str, enum.Enum):
    STATUS = "status"
    QUERY = "query"
    PROOF = "proof"
    DOCS = "docs"
    PACKS = "packs"
    WHATSAPP = "whatsapp"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    STAFF = "staff"
    BANK = "bank"
    STUDENT = "student"


class LeadStage(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    DOCS_RECEIVED = "docs_received"
    CASE_CREATED = "case_created"
    DROPPED = "dropped"

    @classmethod
    def convertible_stages(cls) -> frozenset["LeadStage"]:
        return frozenset({cls.QUALIFIED, cls.DOCS_RECEIVED})


class BankStatus(str, enum.Enum):
    """Status vocabulary reported by the bank portal."""

    INITIATED = "initiated"
    DOCS_PENDING = "docs_pending"
    LOGIN_DONE = "login_done"
    UNDER_REVIEW = "under_review"
    SANCTIONED = "sanctioned"
    REJECTED = "rejected"
    DISBURSED = "disbursed"
    CLOSED = "closed"


class DocumentOwner(str, enum.Enum):
    STUDENT = "student"
    CO_APPLICANT = "co_applicant"
    COLLATERAL = "collateral"


class RequirementLevel(str, enum.Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    NOT_NEEDED = "not_needed"


class ChecklistItemStatus(str, enum.Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"
    VERIFIED = "verified"
    REJECTED = "rejected"
    WAIVED = "waived"


class RequiredBy(str, enum.Enum):
    SYSTEM = "system"
    BANK = "bank"


class OverrideType(str, enum.Enum):
    ADD_REQUIRED = "add_required"
    ADD_OPTIONAL = "add_optional"
    WAIVE = "waive"
    SET_OPTIONAL = "set_optional"


class ActionCode(str, enum.Enum):
    UPLOAD_DOCS = "upload_docs"
    PING_BANK = "ping_bank"
    VERIFY_PROOF = "verify_proof"
    FOLLOW_UP = "follow_up"
    ESCALATE = "escalate"
    REVIEW = "review"


class ActionStatus(str, enum.Enum):
    OPEN = "open"
    DONE = "done"
    CANCELLED = "cancelled"


class ActionOrigin(str, enum.Enum):
    """What created a next action. Only AUTOMATIC actions are retired on transition."""

    AUTOMATIC = "automatic"
    QUERY = "query"
    ESCALATION = "escalation"
    MANUAL = "manual"


class QueryStatus(str, enum.Enum):
    OPEN = "open"
    WAITING_STUDENT = "waiting_student"
    WAITING_STAFF = "waiting_staff"
    WAITING_BANK = "waiting_bank"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @classmethod
    def terminal_statuses(cls) -> frozenset["QueryStatus"]:
        return frozenset({cls.RESOLVED, cls.CLOSED})


class ReminderScope(str, enum.Enum):
    STUDENT = "student"
    BANK = "bank"
    STAFF = "staff"


class ReminderTrigger(str, enum.Enum):
    AWAITING = "awaiting"
    SLA = "sla"


class ReminderChannel(str, enum.Enum):
    IN_APP = "in_app"
    EMAIL = "email"
    WHATSAPP = "whatsapp"
    SMS = "sms"


class ReminderJobStatus(str, enum.Enum):
    QUEUED = "queued"
    SENT = "sent"
    FAILED = "failed"
    CANCELLED = "cancelled"
