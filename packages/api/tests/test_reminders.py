# This project was developed with assistance from AI tools.
"""Service tests for reminder rules and jobs."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from db.enums import ReminderChannel, ReminderJobStatus, ReminderScope, ReminderTrigger

from src.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from src.services import case_workflow, reminders

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def case_id(db_session, staff_user):
    case, _ = await case_workflow.create_case(
        db_session, staff_user, student_name="Aarav Mehta", student_email="aarav@example.com",
    )
    return case.id


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def test_validate_condition_drops_unset_keys():
    assert reminders.validate_condition({"awaiting_party": "bank", "sla_breach": True}) == {
        "awaiting_party": "bank",
        "sla_breach": True,
    }


def test_validate_condition_rejects_unknown_keys():
    with pytest.raises(ValidationError) as exc_info:
        reminders.validate_condition({"awaiting": "bank"})
    assert "awaiting" in exc_info.value.details


def test_validate_condition_rejects_bad_values():
    with pytest.raises(ValidationError):
        reminders.validate_condition({"awaiting_party": "registrar"})
    with pytest.raises(ValidationError):
        reminders.validate_condition({"age_hours": -1})


@pytest.mark.asyncio
async def test_create_rule_and_conflict(db_session):
    rule = await reminders.create_rule(
        db_session,
        template_name=" bank_ping_48h ",
        scope=ReminderScope.BANK,
        trigger_type=ReminderTrigger.SLA,
        condition={"awaiting_party": "bank", "age_hours": 48},
    )
    assert rule.template_name == "bank_ping_48h"
    assert rule.condition == {"awaiting_party": "bank", "age_hours": 48}
    assert rule.is_active is True

    with pytest.raises(ConflictError):
        await reminders.create_rule(db_session, template_name="bank_ping_48h")


@pytest.mark.asyncio
async def test_create_rule_requires_template(db_session):
    with pytest.raises(ValidationError):
        await reminders.create_rule(db_session, template_name="")


@pytest.mark.asyncio
async def test_deactivated_rule_hidden_from_active_list(db_session):
    rule = await reminders.create_rule(db_session, template_name="student_nudge")
    await reminders.deactivate_rule(db_session, rule.id)

    assert await reminders.list_rules(db_session, active_only=True) == []
    assert [r.id for r in await reminders.list_rules(db_session)] == [rule.id]


@pytest.mark.asyncio
async def test_update_rule_validates_condition(db_session):
    rule = await reminders.create_rule(db_session, template_name="student_nudge")
    rule = await reminders.update_rule(db_session, rule.id, condition={"age_hours": 12}, max_retries=5)
    assert rule.condition == {"age_hours": 12}
    assert rule.max_retries == 5

    with pytest.raises(ValidationError):
        await reminders.update_rule(db_session, rule.id, condition={"bogus": 1})


@pytest.mark.asyncio
async def test_seed_default_rules_skips_present(db_session):
    first = await reminders.seed_default_rules(db_session)
    await db_session.commit()
    second = await reminders.seed_default_rules(db_session)
    assert first == 4
    assert second == 0


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_schedule_defaults_to_now(db_session, case_id, staff_user):
    job = await reminders.schedule_reminder(
        db_session, staff_user, case_id, to_address="aarav@example.com", channel=ReminderChannel.EMAIL, now=NOW,
    )
    assert job.status == ReminderJobStatus.QUEUED
    assert job.attempts == 0
    assert job.template_name == "manual_reminder"
    assert job.scheduled_at.replace(tzinfo=UTC) == NOW


@pytest.mark.asyncio
async def test_schedule_with_unknown_rule(db_session, case_id, staff_user):
    with pytest.raises(NotFoundError):
        await reminders.schedule_reminder(
            db_session, staff_user, case_id, to_address="aarav@example.com", rule_id=404,
        )


@pytest.mark.asyncio
async def test_due_jobs_only_queued_and_due(db_session, case_id, staff_user):
    due = await reminders.schedule_reminder(
        db_session, staff_user, case_id, to_address="a@example.com", scheduled_at=NOW - timedelta(hours=1),
    )
    await reminders.schedule_reminder(
        db_session, staff_user, case_id, to_address="b@example.com", scheduled_at=NOW + timedelta(hours=1),
    )
    sent = await reminders.schedule_reminder(
        db_session, staff_user, case_id, to_address="c@example.com", scheduled_at=NOW - timedelta(hours=2),
    )
    await reminders.update_job_status(db_session, sent.id, ReminderJobStatus.SENT)

    jobs = await reminders.list_due_jobs(db_session, now=NOW)
    assert [j.id for j in jobs] == [due.id]


@pytest.mark.asyncio
async def test_failed_job_can_retry_then_sent_is_final(db_session, case_id, staff_user):
    job = await reminders.schedule_reminder(db_session, staff_user, case_id, to_address="a@example.com")

    job = await reminders.update_job_status(
        db_session, job.id, ReminderJobStatus.FAILED, last_error="SMTP 451",
    )
    assert job.attempts == 1
    assert job.last_error == "SMTP 451"

    job = await reminders.update_job_status(db_session, job.id, ReminderJobStatus.SENT)
    assert job.attempts == 2

    with pytest.raises(StateError):
        await reminders.update_job_status(db_session, job.id, ReminderJobStatus.FAILED)


@pytest.mark.asyncio
async def test_cancel_does_not_count_attempt(db_session, case_id, staff_user):
    job = await reminders.schedule_reminder(db_session, staff_user, case_id, to_address="a@example.com")
    job = await reminders.update_job_status(db_session, job.id, ReminderJobStatus.CANCELLED)
    assert job.attempts == 0


@pytest.mark.asyncio
async def test_job_cannot_return_to_queued(db_session, case_id, staff_user):
    job = await reminders.schedule_reminder(db_session, staff_user, case_id, to_address="a@example.com")
    with pytest.raises(StateError):
        await reminders.update_job_status(db_session, job.id, ReminderJobStatus.QUEUED)
