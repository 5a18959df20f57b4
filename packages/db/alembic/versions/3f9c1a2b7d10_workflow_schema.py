# This project was developed with assistance from AI tools.
"""workflow schema

Revision ID: 3f9c1a2b7d10
Revises:
Create Date: 2026-10-19 09:00:00

"""

import sqlalchemy as sa
from alembic import op

revision = "3f9c1a2b7d10"
down_revision = None
branch_labels = None
depends_on = None


def _ts(name: str, nullable: bool = False, server_default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("now()") if server_default else None,
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "cases",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("student_email", sa.String(255), nullable=False),
        sa.Column("student_phone", sa.String(50), nullable=True),
        sa.Column("student_user_id", sa.String(255), nullable=True),
        sa.Column("university", sa.String(255), nullable=True),
        sa.Column("course", sa.String(255), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("intake", sa.String(50), nullable=True),
        sa.Column("loan_amount_requested", sa.Numeric(14, 2), nullable=True),
        sa.Column("collateral", sa.String(100), nullable=True),
        sa.Column("preferred_bank", sa.String(255), nullable=True),
        sa.Column("assigned_to", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(50), nullable=False, server_default="NOT_CONNECTED"),
        sa.Column("awaiting_party", sa.String(50), nullable=False, server_default="INTERNAL_OPS"),
        sa.Column("priority", sa.String(50), nullable=False, server_default="NORMAL"),
        sa.Column("close_reason", sa.Text(), nullable=True),
        _ts("status_changed_at"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cases_student_email", "cases", ["student_email"])
    op.create_index("ix_cases_student_user_id", "cases", ["student_user_id"])
    op.create_index("ix_cases_assigned_to", "cases", ["assigned_to"])
    op.create_index("ix_cases_status", "cases", ["status"])
    op.create_index("ix_cases_awaiting_party", "cases", ["awaiting_party"])

    op.create_table(
        "status_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("awaiting_party", sa.String(50), nullable=False),
        sa.Column("changed_by", sa.String(255), nullable=False, server_default="System"),
        sa.Column("entry_type", sa.String(50), nullable=False, server_default="STATUS"),
        sa.Column("note", sa.Text(), nullable=True),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_status_history_case_id", "status_history", ["case_id"])

    op.create_table(
        "co_applicants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("co_applicant_type", sa.String(50), nullable=False, server_default="INDIA_SALARIED"),
        sa.Column("relation", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("income", sa.Numeric(14, 2), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_co_applicants_case_id", "co_applicants", ["case_id"])

    op.create_table(
        "document_master",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("doc_code", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("owner_type", sa.String(50), nullable=False),
        sa.Column("co_applicant_types", sa.JSON(), nullable=True),
        sa.Column("default_required", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _ts("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_document_master_doc_code", "document_master", ["doc_code"], unique=True)

    op.create_table(
        "bank_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=True),
        sa.Column("bank_id", sa.String(100), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="INITIATED"),
        sa.Column("bank_reference", sa.String(100), nullable=True),
        _ts("last_bank_update_at", nullable=True, server_default=False),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bank_applications_case_id", "bank_applications", ["case_id"])
    op.create_index("ix_bank_applications_bank_id", "bank_applications", ["bank_id"])

    op.create_table(
        "checklist_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("doc_code", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("owner_entity_type", sa.String(50), nullable=False),
        sa.Column("owner_entity_id", sa.String(64), nullable=True),
        sa.Column("requirement_level", sa.String(50), nullable=False, server_default="REQUIRED"),
        sa.Column("status", sa.String(50), nullable=False, server_default="PENDING"),
        sa.Column("required_by", sa.String(50), nullable=False, server_default="SYSTEM"),
        sa.Column("bank_id", sa.String(100), nullable=True),
        sa.Column("bank_application_id", sa.Integer(), nullable=True),
        sa.Column("document_id", sa.Integer(), nullable=True),
        _ts("due_at", nullable=True, server_default=False),
        _ts("last_requested_at", nullable=True, server_default=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["bank_application_id"], ["bank_applications.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "case_id", "doc_code", "owner_entity_type", "owner_entity_id",
            name="uq_checklist_item_key",
        ),
    )
    op.create_index("ix_checklist_items_case_id", "checklist_items", ["case_id"])
    op.create_index(
        "ix_checklist_items_bank_application_id", "checklist_items", ["bank_application_id"]
    )

    op.create_table(
        "case_documents",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("checklist_item_id", sa.Integer(), nullable=True),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=True),
        sa.Column("storage_key", sa.String(500), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["checklist_item_id"], ["checklist_items.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_case_documents_case_id", "case_documents", ["case_id"])

    op.create_table(
        "requirement_overrides",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("bank_application_id", sa.Integer(), nullable=False),
        sa.Column("bank_id", sa.String(100), nullable=True),
        sa.Column("override_type", sa.String(50), nullable=False),
        sa.Column("doc_code", sa.String(64), nullable=False),
        sa.Column("owner_entity_type", sa.String(50), nullable=False, server_default="STUDENT"),
        sa.Column("owner_entity_id", sa.String(64), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        _ts("created_at"),
        sa.ForeignKeyConstraint(
            ["bank_application_id"], ["bank_applications.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_requirement_overrides_bank_application_id",
        "requirement_overrides",
        ["bank_application_id"],
    )

    op.create_table(
        "query_threads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("bank_application_id", sa.Integer(), nullable=True),
        sa.Column("raised_by", sa.String(50), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="OPEN"),
        sa.Column("priority", sa.String(50), nullable=False, server_default="NORMAL"),
        _ts("due_at", nullable=True, server_default=False),
        _ts("created_at"),
        _ts("resolved_at", nullable=True, server_default=False),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["bank_application_id"], ["bank_applications.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_query_threads_case_id", "query_threads", ["case_id"])

    op.create_table(
        "query_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=False),
        sa.Column("sender_party", sa.String(50), nullable=False),
        sa.Column("sender_user_id", sa.String(255), nullable=True),
        sa.Column("sender_name", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=False),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["thread_id"], ["query_threads.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_query_messages_thread_id", "query_messages", ["thread_id"])

    op.create_table(
        "query_attachments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("thread_id", sa.Integer(), nullable=False),
        sa.Column("message_id", sa.Integer(), nullable=False),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("file_name", sa.String(500), nullable=True),
        sa.Column("mime_type", sa.String(100), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=True),
        _ts("created_at"),
        sa.ForeignKeyConstraint(["thread_id"], ["query_threads.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["message_id"], ["query_messages.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_query_attachments_message_id", "query_attachments", ["message_id"])

    op.create_table(
        "escalations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("bank_application_id", sa.Integer(), nullable=True),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("reason", sa.String(255), nullable=False, server_default="SLA_BREACH"),
        sa.Column("created_by", sa.String(255), nullable=True),
        _ts("created_at"),
        _ts("resolved_at", nullable=True, server_default=False),
        sa.Column("resolved_by", sa.String(255), nullable=True),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["bank_application_id"], ["bank_applications.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_escalations_case_id", "escalations", ["case_id"])

    op.create_table(
        "next_actions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("bank_application_id", sa.Integer(), nullable=True),
        sa.Column("query_thread_id", sa.Integer(), nullable=True),
        sa.Column("escalation_id", sa.Integer(), nullable=True),
        sa.Column("owner", sa.String(50), nullable=False),
        sa.Column("action_code", sa.String(50), nullable=False, server_default="REVIEW"),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(50), nullable=False, server_default="NORMAL"),
        sa.Column("status", sa.String(50), nullable=False, server_default="OPEN"),
        sa.Column("origin", sa.String(50), nullable=False, server_default="AUTOMATIC"),
        _ts("due_at", nullable=True, server_default=False),
        _ts("completed_at", nullable=True, server_default=False),
        sa.Column("created_by", sa.String(255), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["bank_application_id"], ["bank_applications.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["query_thread_id"], ["query_threads.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["escalation_id"], ["escalations.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_next_actions_case_id", "next_actions", ["case_id"])
    op.create_index("ix_next_actions_status", "next_actions", ["status"])

    op.create_table(
        "reminder_rules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("scope", sa.String(50), nullable=False, server_default="STUDENT"),
        sa.Column("trigger_type", sa.String(50), nullable=False, server_default="AWAITING"),
        sa.Column("condition", sa.JSON(), nullable=False),
        sa.Column("template_name", sa.String(255), nullable=False),
        sa.Column("send_after_minutes", sa.Integer(), nullable=False, server_default="1440"),
        sa.Column("repeat_every_minutes", sa.Integer(), nullable=True),
        sa.Column("max_retries", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _ts("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("template_name"),
    )

    op.create_table(
        "reminder_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("bank_application_id", sa.Integer(), nullable=True),
        sa.Column("rule_id", sa.Integer(), nullable=True),
        sa.Column("to_type", sa.String(50), nullable=False, server_default="STUDENT"),
        sa.Column("to_address", sa.String(255), nullable=False),
        sa.Column("channel", sa.String(50), nullable=False, server_default="IN_APP"),
        sa.Column("template_name", sa.String(255), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        _ts("scheduled_at", server_default=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="QUEUED"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["bank_application_id"], ["bank_applications.id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["rule_id"], ["reminder_rules.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reminder_jobs_case_id", "reminder_jobs", ["case_id"])
    op.create_index("ix_reminder_jobs_scheduled_at", "reminder_jobs", ["scheduled_at"])
    op.create_index("ix_reminder_jobs_status", "reminder_jobs", ["status"])

    op.create_table(
        "stage_expectations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("expected_min_days", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("expected_max_days", sa.Integer(), nullable=False, server_default="7"),
        sa.Column("student_text", sa.Text(), nullable=False),
        sa.Column("staff_text", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("status"),
    )

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("course", sa.String(255), nullable=True),
        sa.Column("intake", sa.String(50), nullable=True),
        sa.Column("loan_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("stage", sa.String(50), nullable=False, server_default="NEW"),
        sa.Column("priority", sa.String(50), nullable=False, server_default="NORMAL"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "lead_case_mappings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lead_id", sa.Integer(), nullable=False),
        sa.Column("case_id", sa.Integer(), nullable=False),
        sa.Column("converted_by", sa.String(255), nullable=True),
        _ts("converted_at"),
        sa.ForeignKeyConstraint(["lead_id"], ["leads.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("lead_id"),
    )
    op.create_index("ix_lead_case_mappings_case_id", "lead_case_mappings", ["case_id"])

    # History rows are never edited. Deletes happen only by cascade from cases.
    op.execute(
        """
        CREATE OR REPLACE FUNCTION status_history_append_only() RETURNS trigger AS $$
        BEGIN
            RAISE EXCEPTION 'status_history is append-only';
        END;
        $$ LANGUAGE plpgsql
        """
    )
    op.execute(
        """
        CREATE TRIGGER status_history_no_update
        BEFORE UPDATE ON status_history
        FOR EACH ROW EXECUTE FUNCTION status_history_append_only()
        """
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS status_history_no_update ON status_history")
    op.execute("DROP FUNCTION IF EXISTS status_history_append_only()")
    for table in (
        "lead_case_mappings",
        "leads",
        "stage_expectations",
        "reminder_jobs",
        "reminder_rules",
        "next_actions",
        "escalations",
        "query_attachments",
        "query_messages",
        "query_threads",
        "requirement_overrides",
        "case_documents",
        "checklist_items",
        "bank_applications",
        "document_master",
        "co_applicants",
        "status_history",
        "cases",
    ):
        op.drop_table(table)
