# This project was developed with assistance from AI tools.
"""Service tests for checklist generation, co-applicants and document uploads."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
import pytest_asyncio
from db import Case, ChecklistItem, DocumentMasterEntry
from db.enums import (
    AwaitingParty,
    CaseStatus,
    ChecklistItemStatus,
    DocumentOwner,
    HistoryEntryType,
    RequirementLevel,
)
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.core.errors import NotFoundError, ValidationError
from src.services import checklist, co_applicants
from src.services.history import get_history

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

_real_insert_item = checklist._insert_item


@pytest_asyncio.fixture
async def catalog(db_session):
    """A small catalog: two student docs, one collateral doc, two co-applicant docs."""
    db_session.add_all(
        [
            DocumentMasterEntry(
                doc_code="STU_PAN", display_name="PAN Card",
                owner_type=DocumentOwner.STUDENT, default_required=True, sort_order=1,
            ),
            DocumentMasterEntry(
                doc_code="STU_OFFER", display_name="Offer Letter",
                owner_type=DocumentOwner.STUDENT, default_required=True, sort_order=2,
            ),
            DocumentMasterEntry(
                doc_code="STU_RESUME", display_name="Resume",
                owner_type=DocumentOwner.STUDENT, default_required=False, sort_order=3,
            ),
            DocumentMasterEntry(
                doc_code="COLL_DEED", display_name="Sale Deed",
                owner_type=DocumentOwner.COLLATERAL, default_required=True, sort_order=10,
            ),
            DocumentMasterEntry(
                doc_code="COAPP_PAYSLIPS", display_name="Payslips",
                owner_type=DocumentOwner.CO_APPLICANT, co_applicant_types=["INDIA_SALARIED"],
                default_required=True, sort_order=20,
            ),
            DocumentMasterEntry(
                doc_code="COAPP_PAN", display_name="Co-App PAN",
                owner_type=DocumentOwner.CO_APPLICANT, co_applicant_types=None,
                default_required=True, sort_order=21,
            ),
        ]
    )
    await db_session.commit()


async def _case(session, collateral="NA"):
    case = Case(
        student_name="Aarav Mehta",
        student_email="aarav@example.com",
        collateral=collateral,
        status=CaseStatus.DOCS_PENDING,
        awaiting_party=AwaitingParty.STUDENT,
        status_changed_at=NOW,
    )
    session.add(case)
    await session.commit()
    return case


async def _items(session, case_id):
    result = await session.execute(
        select(ChecklistItem).where(ChecklistItem.case_id == case_id).order_by(ChecklistItem.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "collateral,expected",
    [(None, False), ("", False), ("NA", False), ("n/a", False), (" none ", False), ("Flat in Pune", True)],
)
def test_has_collateral(collateral, expected):
    assert checklist.has_collateral(collateral) is expected


def test_unscoped_entry_applies_to_every_type():
    entry = DocumentMasterEntry(co_applicant_types=None)
    assert checklist.co_applicant_in_scope(entry, "NRI_SALARIED") is True


def test_scoped_entry_filters_types():
    entry = DocumentMasterEntry(co_applicant_types=["INDIA_SALARIED"])
    assert checklist.co_applicant_in_scope(entry, "INDIA_SALARIED") is True
    assert checklist.co_applicant_in_scope(entry, "NON_FINANCIAL") is False


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generation_covers_default_required_student_docs(db_session, catalog):
    case = await _case(db_session)
    outcomes = await checklist.generate_checklist(db_session, case)
    await db_session.commit()

    assert [o.doc_code for o in outcomes] == ["STU_PAN", "STU_OFFER"]
    items = await _items(db_session, case.id)
    assert {i.doc_code for i in items} == {"STU_PAN", "STU_OFFER"}
    assert all(i.requirement_level == RequirementLevel.REQUIRED for i in items)
    assert all(i.status == ChecklistItemStatus.PENDING for i in items)


@pytest.mark.asyncio
async def test_generation_is_idempotent(db_session, catalog):
    """A second run with an unchanged roster creates nothing."""
    case = await _case(db_session, collateral="Flat in Pune")
    await checklist.generate_checklist(db_session, case)
    await db_session.commit()
    first = len(await _items(db_session, case.id))

    outcomes = await checklist.generate_checklist(db_session, case)
    await db_session.commit()

    assert not any(o.created for o in outcomes)
    assert len(await _items(db_session, case.id)) == first


@pytest.mark.asyncio
async def test_collateral_sentinel_skips_collateral_docs(db_session, catalog):
    case = await _case(db_session, collateral="N/A")
    outcomes = await checklist.generate_checklist(db_session, case)
    assert DocumentOwner.COLLATERAL not in {o.owner_entity_type for o in outcomes}


@pytest.mark.asyncio
async def test_declared_collateral_adds_collateral_docs(db_session, catalog):
    case = await _case(db_session, collateral="Flat in Pune")
    await checklist.generate_checklist(db_session, case)
    await db_session.commit()
    collateral_items = [
        i for i in await _items(db_session, case.id) if i.owner_entity_type == DocumentOwner.COLLATERAL
    ]
    assert [i.doc_code for i in collateral_items] == ["COLL_DEED"]
    assert collateral_items[0].owner_entity_id is None


@pytest.mark.asyncio
async def test_failed_insert_reported_without_stopping_others(db_session, catalog):
    """One failing item comes back as an outcome; the rest are still created."""
    case = await _case(db_session)

    async def _flaky_insert(session, case, entry, owner_type, owner_id):
        if entry.doc_code == "STU_PAN":
            raise IntegrityError("INSERT INTO checklist_items", {}, Exception("simulated"))
        return await _real_insert_item(session, case, entry, owner_type, owner_id)

    with patch("src.services.checklist._insert_item", side_effect=_flaky_insert):
        outcomes = await checklist.generate_checklist(db_session, case)
    await db_session.commit()

    by_code = {o.doc_code: o for o in outcomes}
    assert by_code["STU_PAN"].ok is False
    assert by_code["STU_PAN"].created is False
    assert "simulated" in by_code["STU_PAN"].error
    assert by_code["STU_OFFER"].ok is True
    assert by_code["STU_OFFER"].created is True
    assert [i.doc_code for i in await _items(db_session, case.id)] == ["STU_OFFER"]


# ---------------------------------------------------------------------------
# Co-applicants
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_each_scoped_co_applicant_gets_own_item(db_session, catalog, staff_user):
    """Two co-applicants of the same type produce two distinctly keyed items."""
    case = await _case(db_session)
    case_id = case.id

    first, outcomes = await co_applicants.add_co_applicant(
        db_session, staff_user, case_id, name="Rajesh Mehta", co_applicant_type="india_salaried",
    )
    created = [o for o in outcomes if o.created and o.doc_code == "COAPP_PAYSLIPS"]
    assert len(created) == 1
    assert first.co_applicant_type == "INDIA_SALARIED"

    second, _ = await co_applicants.add_co_applicant(
        db_session, staff_user, case_id, name="Sunita Mehta", co_applicant_type="INDIA_SALARIED",
    )

    payslips = [i for i in await _items(db_session, case_id) if i.doc_code == "COAPP_PAYSLIPS"]
    assert len(payslips) == 2
    assert {i.owner_entity_id for i in payslips} == {str(first.id), str(second.id)}


@pytest.mark.asyncio
async def test_out_of_scope_co_applicant_gets_only_unscoped_docs(db_session, catalog, staff_user):
    case = await _case(db_session)
    await co_applicants.add_co_applicant(
        db_session, staff_user, case.id, name="Anil Mehta", co_applicant_type="NON_FINANCIAL",
    )
    co_app_codes = {
        i.doc_code
        for i in await _items(db_session, case.id)
        if i.owner_entity_type == DocumentOwner.CO_APPLICANT
    }
    assert co_app_codes == {"COAPP_PAN"}


@pytest.mark.asyncio
async def test_removed_co_applicant_items_stay(db_session, catalog, staff_user):
    """Removing a co-applicant leaves their checklist items in place."""
    case = await _case(db_session)
    case_id = case.id
    co_app, _ = await co_applicants.add_co_applicant(
        db_session, staff_user, case_id, name="Rajesh Mehta", co_applicant_type="INDIA_SALARIED",
    )
    before = len(await _items(db_session, case_id))

    await co_applicants.remove_co_applicant(db_session, staff_user, case_id, co_app.id)

    assert len(await _items(db_session, case_id)) == before
    response = await checklist.get_checklist(db_session, staff_user, case_id, now=NOW)
    assert f"co_applicant:{co_app.id}" in {g.owner_key for g in response.groups}


@pytest.mark.asyncio
async def test_co_applicant_requires_name(db_session, catalog, staff_user):
    case = await _case(db_session)
    with pytest.raises(ValidationError):
        await co_applicants.add_co_applicant(db_session, staff_user, case.id, name="")


# ---------------------------------------------------------------------------
# Reads, updates and uploads
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_checklist_summary(db_session, catalog, staff_user):
    case = await _case(db_session)
    case_id = case.id
    await checklist.generate_checklist(db_session, case)
    await db_session.commit()
    items = await _items(db_session, case_id)

    await checklist.update_checklist_item(
        db_session, staff_user, case_id, items[0].id, status=ChecklistItemStatus.VERIFIED,
    )
    response = await checklist.get_checklist(db_session, staff_user, case_id, now=NOW)

    assert response.summary.required_total == 2
    assert response.summary.required_completed == 1
    assert [g.owner_key for g in response.groups] == ["student"]


@pytest.mark.asyncio
async def test_upload_marks_item_and_logs_doc_note(db_session, catalog, staff_user):
    case = await _case(db_session)
    case_id = case.id
    await checklist.generate_checklist(db_session, case)
    await db_session.commit()
    item_id = (await _items(db_session, case_id))[0].id

    document = await checklist.record_document_upload(
        db_session, staff_user, case_id, item_id, file_name="pan.pdf", mime_type="application/pdf", now=NOW,
    )

    item = await db_session.get(ChecklistItem, item_id)
    assert item.status == ChecklistItemStatus.UPLOADED
    assert item.document_id == document.id
    [entry] = await get_history(db_session, staff_user, case_id)
    assert entry.entry_type == HistoryEntryType.DOCS
    assert entry.note == "[DOC] Uploaded: pan.pdf"


@pytest.mark.asyncio
async def test_item_from_other_case_not_found(db_session, catalog, staff_user):
    first = await _case(db_session)
    second = await _case(db_session)
    await checklist.generate_checklist(db_session, first)
    await db_session.commit()
    item_id = (await _items(db_session, first.id))[0].id

    with pytest.raises(NotFoundError):
        await checklist.update_checklist_item(
            db_session, staff_user, second.id, item_id, notes="wrong case",
        )
