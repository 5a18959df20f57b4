# This project was developed with assistance from AI tools.
"""Service tests for leads and lead-to-case conversion."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from db import LeadCaseMapping
from db.enums import AwaitingParty, CaseStatus, LeadStage, Priority
from sqlalchemy import select

from src.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from src.services import leads
from src.services.history import get_history

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_create_lead_defaults(db_session):
    lead = await leads.create_lead(db_session, full_name="  Kabir Rao ", email="kabir@example.com")
    assert lead.full_name == "Kabir Rao"
    assert lead.stage == LeadStage.NEW
    assert lead.priority == Priority.NORMAL


@pytest.mark.asyncio
async def test_create_lead_requires_name(db_session):
    with pytest.raises(ValidationError) as exc_info:
        await leads.create_lead(db_session, full_name=None)
    assert exc_info.value.details == {"full_name": "missing"}


@pytest.mark.asyncio
async def test_list_leads_by_stage(db_session):
    await leads.create_lead(db_session, full_name="Kabir Rao")
    qualified = await leads.create_lead(db_session, full_name="Isha Nair", stage=LeadStage.QUALIFIED)
    rows = await leads.list_leads(db_session, stage=LeadStage.QUALIFIED)
    assert [r.id for r in rows] == [qualified.id]


@pytest.mark.asyncio
async def test_convert_qualified_lead(seeded_session, staff_user):
    lead = await leads.create_lead(
        seeded_session,
        full_name="Isha Nair",
        email="isha@example.com",
        country="Canada",
        course="MEng",
        loan_amount=Decimal("3500000.00"),
        stage=LeadStage.QUALIFIED,
        priority=Priority.HIGH,
    )
    lead_id = lead.id

    case, outcomes = await leads.convert_lead(seeded_session, staff_user, lead_id, university="UofT", now=NOW)

    assert case.status == CaseStatus.NOT_CONNECTED
    assert case.awaiting_party == AwaitingParty.INTERNAL_OPS
    assert case.student_name == "Isha Nair"
    assert case.student_email == "isha@example.com"
    assert case.country == "Canada"
    assert case.priority == Priority.HIGH
    assert outcomes and all(o.ok for o in outcomes)

    [entry] = await get_history(seeded_session, staff_user, case.id)
    assert entry.note == f"Created from Lead {lead_id}"
    assert entry.changed_by == "Priya Sharma"

    lead = await leads.get_lead(seeded_session, lead_id)
    assert lead.stage == LeadStage.CASE_CREATED
    mapping = await seeded_session.execute(select(LeadCaseMapping).where(LeadCaseMapping.lead_id == lead_id))
    assert mapping.scalar_one().case_id == case.id


@pytest.mark.asyncio
async def test_lead_converts_once(seeded_session, staff_user):
    lead = await leads.create_lead(seeded_session, full_name="Isha Nair", stage=LeadStage.DOCS_RECEIVED)
    lead_id = lead.id
    await leads.convert_lead(seeded_session, staff_user, lead_id, student_email="isha@example.com")

    with pytest.raises(ConflictError):
        await leads.convert_lead(seeded_session, staff_user, lead_id, student_email="isha@example.com")


@pytest.mark.asyncio
@pytest.mark.parametrize("stage", [LeadStage.NEW, LeadStage.CONTACTED, LeadStage.DROPPED])
async def test_unqualified_lead_cannot_convert(db_session, staff_user, stage):
    lead = await leads.create_lead(db_session, full_name="Kabir Rao", stage=stage)
    with pytest.raises(StateError):
        await leads.convert_lead(db_session, staff_user, lead.id, student_email="kabir@example.com")


@pytest.mark.asyncio
async def test_unknown_lead(db_session, staff_user):
    with pytest.raises(NotFoundError):
        await leads.convert_lead(db_session, staff_user, 4242)
