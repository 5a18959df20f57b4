# This project was developed with assistance from AI tools.
"""
Reference data for the education-loan workflow.

Baseline document catalog, default reminder rules, and per-status stage
expectations. Defined as Python dicts so enums can be referenced directly.
Seeding is keyed on natural keys (doc code, template name, status), so
re-running it never duplicates rows.
"""

from db.enums import AwaitingParty, CaseStatus, DocumentOwner, ReminderScope, ReminderTrigger

# ---------------------------------------------------------------------------
# Co-applicant type codes
# ---------------------------------------------------------------------------

INDIA_SALARIED = "INDIA_SALARIED"
INDIA_SELF_EMPLOYED = "INDIA_SELF_EMPLOYED"
NRI_SALARIED = "NRI_SALARIED"
NON_FINANCIAL = "NON_FINANCIAL"
COLLATERAL_OWNER_ONLY = "COLLATERAL_OWNER_ONLY"

_INDIAN_IDENTITY_TYPES = [INDIA_SALARIED, INDIA_SELF_EMPLOYED, NRI_SALARIED, NON_FINANCIAL]


def _student(doc_code, display_name, description, category, sort_order, required=True):
    return {
        "doc_code": doc_code,
        "display_name": display_name,
        "description": description,
        "category": category,
        "owner_type": DocumentOwner.STUDENT,
        "co_applicant_types": None,
        "default_required": required,
        "sort_order": sort_order,
    }


def _co_applicant(doc_code, display_name, description, category, sort_order, types, required=True):
    return {
        "doc_code": doc_code,
        "display_name": display_name,
        "description": description,
        "category": category,
        "owner_type": DocumentOwner.CO_APPLICANT,
        "co_applicant_types": list(types),
        "default_required": required,
        "sort_order": sort_order,
    }


def _collateral(doc_code, display_name, description, sort_order, required=False):
    return {
        "doc_code": doc_code,
        "display_name": display_name,
        "description": description,
        "category": "COLLATERAL",
        "owner_type": DocumentOwner.COLLATERAL,
        "co_applicant_types": None,
        "default_required": required,
        "sort_order": sort_order,
    }


# ---------------------------------------------------------------------------
# Document catalog
# ---------------------------------------------------------------------------

BASELINE_DOCUMENTS: list[dict] = [
    # Student
    _student("STU_AADHAAR", "Aadhaar Card", "Student Aadhaar card (front+back)", "IDENTITY", 101),
    _student("STU_PAN", "PAN Card", "Student PAN card", "IDENTITY", 102),
    _student("STU_PHOTO", "Passport Size Photo", "Recent passport size photo", "IDENTITY", 103),
    _student("STU_PASSPORT", "Passport Copy", "Valid passport (all pages)", "IDENTITY", 104),
    _student("STU_10TH", "10th Marksheet", "Class 10 mark sheet + certificate", "ACADEMIC", 105),
    _student("STU_12TH", "12th Marksheet", "Class 12 mark sheet + certificate", "ACADEMIC", 106),
    _student("STU_GRADUATION", "Graduation Documents", "Degree + all semester marksheets", "ACADEMIC", 107),
    _student("STU_RESUME", "Resume / CV", "Updated resume", "ACADEMIC", 108, required=False),
    _student(
        "STU_WORK_PROOF", "Work Experience Proof", "Experience letter / appointment letter",
        "ACADEMIC", 109, required=False,
    ),
    _student(
        "STU_EXAM_SCORES", "Exam Score Cards", "IELTS/TOEFL/GRE/GMAT score card",
        "ACADEMIC", 110, required=False,
    ),
    _student("STU_OFFER_LETTER", "Offer/Admission Letter", "University admission/offer letter", "ACADEMIC", 111),
    # Co-applicant identity (all Indian-resident and NRI types)
    _co_applicant(
        "COAPP_IND_AADHAAR", "Co-App Aadhaar Card", "Co-applicant Aadhaar (front+back)",
        "IDENTITY", 201, _INDIAN_IDENTITY_TYPES,
    ),
    _co_applicant(
        "COAPP_IND_PAN", "Co-App PAN Card", "Co-applicant PAN card",
        "IDENTITY", 202, _INDIAN_IDENTITY_TYPES,
    ),
    _co_applicant(
        "COAPP_IND_PHOTO", "Co-App Photo", "Co-applicant passport size photo",
        "IDENTITY", 203, _INDIAN_IDENTITY_TYPES,
    ),
    # Co-applicant salaried
    _co_applicant(
        "COAPP_SAL_PAYSLIPS", "Payslips (3 months)", "Last 3 months salary slips",
        "FINANCIAL", 210, [INDIA_SALARIED],
    ),
    _co_applicant(
        "COAPP_SAL_CERT", "Salary Certificate", "Salary certificate from employer",
        "FINANCIAL", 211, [INDIA_SALARIED], required=False,
    ),
    _co_applicant(
        "COAPP_SAL_CREDITS", "Salary Credit Statements", "Bank stmt showing salary credits (6M)",
        "FINANCIAL", 212, [INDIA_SALARIED],
    ),
    _co_applicant(
        "COAPP_SAL_ITR", "ITR / Form 16", "ITR last 2 years or Form 16",
        "FINANCIAL", 213, [INDIA_SALARIED],
    ),
    # Co-applicant self-employed
    _co_applicant(
        "COAPP_BIZ_PROOF", "Business Proof (GST etc.)", "GST registration / business license",
        "FINANCIAL", 220, [INDIA_SELF_EMPLOYED],
    ),
    _co_applicant(
        "COAPP_BIZ_ITR", "ITR Full Set (3 years)", "ITR for last 3 assessment years",
        "FINANCIAL", 221, [INDIA_SELF_EMPLOYED],
    ),
    _co_applicant(
        "COAPP_BIZ_BANKSTMT", "Business Bank Statements", "Last 12 months bank statements",
        "FINANCIAL", 222, [INDIA_SELF_EMPLOYED],
    ),
    # Co-applicant NRI salaried
    _co_applicant(
        "COAPP_NRI_PASSPORT", "NRI Passport", "Valid passport with visa/PR stamp",
        "IMMIGRATION", 230, [NRI_SALARIED],
    ),
    _co_applicant(
        "COAPP_NRI_VISA", "Visa / PR Copy", "Current visa or PR document",
        "IMMIGRATION", 231, [NRI_SALARIED],
    ),
    _co_applicant(
        "COAPP_NRI_ADDRESS", "Abroad Address Proof", "Abroad residence address proof",
        "IMMIGRATION", 232, [NRI_SALARIED],
    ),
    _co_applicant(
        "COAPP_NRI_ABROAD_CIBIL", "Abroad CIBIL / Credit Report", "Credit report from abroad country",
        "FINANCIAL", 233, [NRI_SALARIED], required=False,
    ),
    _co_applicant(
        "COAPP_NRI_SAL_CREDITS", "NRI Salary Credit Stmt", "NRI account salary credit statement",
        "FINANCIAL", 234, [NRI_SALARIED],
    ),
    _co_applicant(
        "COAPP_NRI_ACCT_STMT", "NRI Account Statement", "NRI bank account statement (6M)",
        "FINANCIAL", 235, [NRI_SALARIED],
    ),
    _co_applicant(
        "COAPP_NRI_PAYSLIPS", "NRI Payslips (3M)", "Last 3 months overseas salary slips",
        "FINANCIAL", 236, [NRI_SALARIED], required=False,
    ),
    # Co-applicant non-financial
    _co_applicant(
        "COAPP_NONFIN_HOUSE", "House Ownership Proof", "Property tax receipt / sale deed",
        "IDENTITY", 240, [NON_FINANCIAL, COLLATERAL_OWNER_ONLY],
    ),
    # Collateral
    _collateral("COLL_PROPERTY_DEED", "Property Sale Deed", "Original sale deed / title deed", 301),
    _collateral("COLL_PROPERTY_TAX", "Property Tax Receipt", "Latest property tax paid receipt", 302),
    _collateral("COLL_ENCUMBRANCE", "Encumbrance Certificate", "EC for last 13 / 30 years", 303),
]


# ---------------------------------------------------------------------------
# Reminder rules
# ---------------------------------------------------------------------------

DEFAULT_REMINDER_RULES: list[dict] = [
    {
        "scope": ReminderScope.STUDENT,
        "trigger_type": ReminderTrigger.AWAITING,
        "condition": {"awaiting_party": AwaitingParty.STUDENT.value, "age_hours": 24},
        "template_name": "student_docs_reminder_24h",
        "send_after_minutes": 1440,
        "repeat_every_minutes": 1440,
        "max_retries": 3,
    },
    {
        "scope": ReminderScope.STUDENT,
        "trigger_type": ReminderTrigger.AWAITING,
        "condition": {"awaiting_party": AwaitingParty.STUDENT.value, "age_hours": 72},
        "template_name": "student_docs_reminder_72h",
        "send_after_minutes": 4320,
        "repeat_every_minutes": None,
        "max_retries": 1,
    },
    {
        "scope": ReminderScope.BANK,
        "trigger_type": ReminderTrigger.SLA,
        "condition": {"awaiting_party": AwaitingParty.BANK.value, "sla_breach": True},
        "template_name": "bank_sla_breach_reminder",
        "send_after_minutes": 2880,
        "repeat_every_minutes": 1440,
        "max_retries": 3,
    },
    {
        "scope": ReminderScope.STAFF,
        "trigger_type": ReminderTrigger.SLA,
        "condition": {"awaiting_party": AwaitingParty.INTERNAL_OPS.value, "age_hours": 48},
        "template_name": "staff_internal_overdue",
        "send_after_minutes": 2880,
        "repeat_every_minutes": None,
        "max_retries": 1,
    },
]


# ---------------------------------------------------------------------------
# Stage expectations
# ---------------------------------------------------------------------------

STAGE_EXPECTATIONS: list[dict] = [
    {
        "status": CaseStatus.NOT_CONNECTED,
        "expected_min_days": 1,
        "expected_max_days": 2,
        "student_text": "We are connecting with your bank. Usually takes 1-2 working days.",
        "staff_text": "Initiate bank contact within 1 day. Escalate if >2 days.",
    },
    {
        "status": CaseStatus.LOGIN_SUBMITTED,
        "expected_min_days": 1,
        "expected_max_days": 3,
        "student_text": "Your application has been submitted to the bank. Usually takes 1-3 working days.",
        "staff_text": "Follow up with bank after 2 days if no response.",
    },
    {
        "status": CaseStatus.DOCS_PENDING,
        "expected_min_days": 1,
        "expected_max_days": 4,
        "student_text": "Please upload the requested documents. The sooner you upload, the faster we proceed.",
        "staff_text": "Send doc reminder after 24 hours. Escalate after 3 days.",
    },
    {
        "status": CaseStatus.UNDER_REVIEW,
        "expected_min_days": 3,
        "expected_max_days": 7,
        "student_text": "Your documents are under review at the bank. Usually takes 3-7 working days.",
        "staff_text": "Ping bank after day 5. Escalate if no update by day 7.",
    },
    {
        "status": CaseStatus.QUERY_RAISED,
        "expected_min_days": 1,
        "expected_max_days": 5,
        "student_text": "The bank has raised a query. Please respond as soon as possible to avoid delays.",
        "staff_text": "Student must respond within 2 days. Escalate if >4 days.",
    },
    {
        "status": CaseStatus.SANCTIONED,
        "expected_min_days": 1,
        "expected_max_days": 2,
        "student_text": "Your loan has been sanctioned! Please review and accept the sanction letter.",
        "staff_text": "Confirm sanction acceptance within 2 days.",
    },
    {
        "status": CaseStatus.AGREEMENT_SIGNED,
        "expected_min_days": 1,
        "expected_max_days": 5,
        "student_text": "Agreement received. Disbursement is being processed. Usually takes 2-5 working days.",
        "staff_text": "Follow up on disbursement. Escalate if >5 days.",
    },
    {
        "status": CaseStatus.DISBURSEMENT_PENDING,
        "expected_min_days": 1,
        "expected_max_days": 7,
        "student_text": "Disbursement is pending. Funds will be transferred to the university shortly.",
        "staff_text": "Ping bank for disbursement confirmation. Escalate after day 5.",
    },
]
