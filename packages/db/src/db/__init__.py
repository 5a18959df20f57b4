# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
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
    StatusGroup,
    UserRole,
)
from .models import (
    BankApplication,
    Case,
    CaseDocument,
    ChecklistItem,
    CoApplicant,
    DocumentMasterEntry,
    Escalation,
    Lead,
    LeadCaseMapping,
    NextAction,
    QueryAttachment,
    QueryMessage,
    QueryThread,
    ReminderJob,
    ReminderRule,
    RequirementOverride,
    StageExpectation,
    StatusHistoryEntry,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ActionCode",
    "ActionOrigin",
    "ActionStatus",
    "AwaitingParty",
    "BankStatus",
    "CaseStatus",
    "ChecklistItemStatus",
    "DocumentOwner",
    "HistoryEntryType",
    "LeadStage",
    "OverrideType",
    "Party",
    "Priority",
    "QueryStatus",
    "ReminderChannel",
    "ReminderJobStatus",
    "ReminderScope",
    "ReminderTrigger",
    "RequiredBy",
    "RequirementLevel",
    "StatusGroup",
    "UserRole",
    # Models
    "BankApplication",
    "Case",
    "CaseDocument",
    "ChecklistItem",
    "CoApplicant",
    "DocumentMasterEntry",
    "Escalation",
    "Lead",
    "LeadCaseMapping",
    "NextAction",
    "QueryAttachment",
    "QueryMessage",
    "QueryThread",
    "ReminderJob",
    "ReminderRule",
    "RequirementOverride",
    "StageExpectation",
    "StatusHistoryEntry",
]
