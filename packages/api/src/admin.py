# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).
"""

from db import (
    BankApplication,
    Case,
    DocumentMasterEntry,
    Escalation,
    Lead,
    ReminderJob,
    ReminderRule,
    StageExpectation,
    StatusHistoryEntry,
)
from db.database import engine
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    Otherwise, requires login with SQLADMIN_USER / SQLADMIN_PASSWORD.
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class CaseAdmin(ModelView, model=Case):
    column_list = [
        Case.id,
        Case.student_name,
        Case.status,
        Case.awaiting_party,
        Case.priority,
        Case.assigned_to,
        Case.status_changed_at,
    ]
    column_searchable_list = [Case.student_name, Case.student_email, Case.assigned_to]
    column_sortable_list = [Case.id, Case.status, Case.status_changed_at]
    column_default_sort = [(Case.status_changed_at, True)]
    # Workflow fields change only through the transition endpoint
    form_excluded_columns = [
        Case.status,
        Case.awaiting_party,
        Case.close_reason,
        Case.status_changed_at,
        Case.history,
        Case.next_actions,
    ]
    can_create = False
    can_delete = False
    name = "Case"
    name_plural = "Cases"
    icon = "fa-solid fa-folder-open"


class StatusHistoryAdmin(ModelView, model=StatusHistoryEntry):
    column_list = [
        StatusHistoryEntry.id,
        StatusHistoryEntry.case_id,
        StatusHistoryEntry.status,
        StatusHistoryEntry.awaiting_party,
        StatusHistoryEntry.entry_type,
        StatusHistoryEntry.changed_by,
        StatusHistoryEntry.created_at,
    ]
    column_sortable_list = [StatusHistoryEntry.id, StatusHistoryEntry.created_at]
    column_default_sort = [(StatusHistoryEntry.created_at, True)]
    can_create = False
    can_edit = False
    can_delete = False
    name = "History Entry"
    name_plural = "Status History"
    icon = "fa-solid fa-history"


class BankApplicationAdmin(ModelView, model=BankApplication):
    column_list = [
        BankApplication.id,
        BankApplication.case_id,
        BankApplication.bank_id,
        BankApplication.status,
        BankApplication.last_bank_update_at,
    ]
    column_searchable_list = [BankApplication.bank_id, BankApplication.bank_reference]
    can_create = False
    name = "Bank Application"
    name_plural = "Bank Applications"
    icon = "fa-solid fa-university"


class DocumentMasterAdmin(ModelView, model=DocumentMasterEntry):
    column_list = [
        DocumentMasterEntry.id,
        DocumentMasterEntry.doc_code,
        DocumentMasterEntry.display_name,
        DocumentMasterEntry.owner_type,
        DocumentMasterEntry.default_required,
        DocumentMasterEntry.sort_order,
        DocumentMasterEntry.is_active,
    ]
    column_searchable_list = [DocumentMasterEntry.doc_code, DocumentMasterEntry.display_name]
    column_sortable_list = [DocumentMasterEntry.sort_order, DocumentMasterEntry.doc_code]
    column_default_sort = [(DocumentMasterEntry.sort_order, False)]
    can_delete = False
    name = "Catalog Entry"
    name_plural = "Document Catalog"
    icon = "fa-solid fa-list-check"


class ReminderRuleAdmin(ModelView, model=ReminderRule):
    column_list = [
        ReminderRule.id,
        ReminderRule.template_name,
        ReminderRule.scope,
        ReminderRule.trigger_type,
        ReminderRule.send_after_minutes,
        ReminderRule.is_active,
    ]
    can_delete = False
    name = "Reminder Rule"
    name_plural = "Reminder Rules"
    icon = "fa-solid fa-bell"


class ReminderJobAdmin(ModelView, model=ReminderJob):
    column_list = [
        ReminderJob.id,
        ReminderJob.case_id,
        ReminderJob.channel,
        ReminderJob.template_name,
        ReminderJob.scheduled_at,
        ReminderJob.status,
        ReminderJob.attempts,
    ]
    column_default_sort = [(ReminderJob.scheduled_at, True)]
    can_create = False
    can_edit = False
    name = "Reminder Job"
    name_plural = "Reminder Jobs"
    icon = "fa-solid fa-paper-plane"


class EscalationAdmin(ModelView, model=Escalation):
    column_list = [
        Escalation.id,
        Escalation.case_id,
        Escalation.level,
        Escalation.reason,
        Escalation.created_at,
        Escalation.resolved_at,
    ]
    can_create = False
    can_edit = False
    can_delete = False
    name = "Escalation"
    name_plural = "Escalations"
    icon = "fa-solid fa-triangle-exclamation"


class StageExpectationAdmin(ModelView, model=StageExpectation):
    column_list = [
        StageExpectation.status,
        StageExpectation.expected_min_days,
        StageExpectation.expected_max_days,
        StageExpectation.is_active,
    ]
    can_delete = False
    name = "Stage Expectation"
    name_plural = "Stage Expectations"
    icon = "fa-solid fa-hourglass-half"


class LeadAdmin(ModelView, model=Lead):
    column_list = [Lead.id, Lead.full_name, Lead.stage, Lead.priority, Lead.created_at]
    column_searchable_list = [Lead.full_name, Lead.email]
    column_default_sort = [(Lead.created_at, True)]
    name = "Lead"
    name_plural = "Leads"
    icon = "fa-solid fa-user-plus"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="Education Loan Admin", authentication_backend=auth_backend)

    admin.add_view(CaseAdmin)
    admin.add_view(StatusHistoryAdmin)
    admin.add_view(BankApplicationAdmin)
    admin.add_view(DocumentMasterAdmin)
    admin.add_view(ReminderRuleAdmin)
    admin.add_view(ReminderJobAdmin)
    admin.add_view(EscalationAdmin)
    admin.add_view(StageExpectationAdmin)
    admin.add_view(LeadAdmin)

    return admin
