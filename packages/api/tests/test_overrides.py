# This project was developed with assistance from AI tools.
"""Service tests for bank requirement overrides."""

import pytest
import pytest_asyncio
from db import ChecklistItem, RequirementOverride
from db.enums import ChecklistItemStatus, DocumentOwner, OverrideType, RequiredBy, RequirementLevel
from sqlalchemy import func, select

from src.core.errors import ForbiddenError, NotFoundError, ValidationError
from src.services import case_workflow, overrides


@pytest_asyncio.fixture
async def hdfc_app(seeded_session, staff_user):
    """A seeded case with an HDFC application; returns (case_id, app_id)."""
    case, _ = await case_workflow.create_case(
        seeded_session, staff_user, student_name="Aarav Mehta", student_email="aarav@example.com",
    )
    app = await case_workflow.create_bank_application(seeded_session, staff_user, case.id, bank_id="HDFC")
    return case.id, app.id


async def _item(session, case_id, doc_code):
    result = await session.execute(
        select(ChecklistItem).where(ChecklistItem.case_id == case_id, ChecklistItem.doc_code == doc_code)
    )
    return result.scalar_one()


async def _item_for(session, case_id, doc_code, owner):
    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.case_id == case_id,
            ChecklistItem.doc_code == doc_code,
            ChecklistItem.owner_entity_type == owner,
        )
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_waive_sets_not_needed_and_waived(seeded_session, hdfc_app, bank_user):
    """Waive applies regardless of the item's prior state."""
    case_id, app_id = hdfc_app
    item = await _item(seeded_session, case_id, "STU_PASSPORT")
    item.status = ChecklistItemStatus.REJECTED
    await seeded_session.commit()

    override, affected = await overrides.apply_override(
        seeded_session,
        bank_user,
        app_id,
        override_type=OverrideType.WAIVE,
        doc_code="stu_passport",
        reason="Passport not required for domestic disbursal",
    )

    assert override.doc_code == "STU_PASSPORT"
    assert override.bank_id == "HDFC"
    assert [i.id for i in affected] == [item.id]
    item = await _item(seeded_session, case_id, "STU_PASSPORT")
    assert item.requirement_level == RequirementLevel.NOT_NEEDED
    assert item.status == ChecklistItemStatus.WAIVED


@pytest.mark.asyncio
async def test_waive_matches_every_owner_on_this_application_or_none(
    seeded_session, hdfc_app, bank_user, staff_user,
):
    """Items match on doc code and application link, not on who owns them."""
    case_id, app_id = hdfc_app
    icici = await case_workflow.create_bank_application(seeded_session, staff_user, case_id, bank_id="ICICI")
    co_item = ChecklistItem(
        case_id=case_id,
        doc_code="STU_PASSPORT",
        display_name="Passport",
        owner_entity_type=DocumentOwner.CO_APPLICANT,
        owner_entity_id="1",
    )
    other_app_item = ChecklistItem(
        case_id=case_id,
        doc_code="STU_PASSPORT",
        display_name="Passport",
        owner_entity_type=DocumentOwner.CO_APPLICANT,
        owner_entity_id="2",
        bank_application_id=icici.id,
    )
    seeded_session.add_all([co_item, other_app_item])
    await seeded_session.commit()
    student_item = await _item_for(seeded_session, case_id, "STU_PASSPORT", DocumentOwner.STUDENT)

    _, affected = await overrides.apply_override(
        seeded_session, bank_user, app_id, override_type=OverrideType.WAIVE, doc_code="STU_PASSPORT",
    )

    assert sorted(i.id for i in affected) == sorted([student_item.id, co_item.id])
    await seeded_session.refresh(other_app_item)
    assert other_app_item.status == ChecklistItemStatus.PENDING


@pytest.mark.asyncio
async def test_set_optional_keeps_status(seeded_session, hdfc_app, bank_user):
    case_id, app_id = hdfc_app
    await overrides.apply_override(
        seeded_session, bank_user, app_id, override_type=OverrideType.SET_OPTIONAL, doc_code="STU_PHOTO",
    )
    item = await _item(seeded_session, case_id, "STU_PHOTO")
    assert item.requirement_level == RequirementLevel.OPTIONAL
    assert item.status == ChecklistItemStatus.PENDING


@pytest.mark.asyncio
async def test_add_required_inserts_bank_item_once(seeded_session, hdfc_app, bank_user):
    """Adding the same bank document twice logs two overrides but one item."""
    case_id, app_id = hdfc_app
    _, affected = await overrides.apply_override(
        seeded_session, bank_user, app_id, override_type=OverrideType.ADD_REQUIRED, doc_code="STU_RESUME",
    )
    assert len(affected) == 1
    item = affected[0]
    assert item.required_by == RequiredBy.BANK
    assert item.bank_application_id == app_id
    assert item.display_name == "Resume / CV"

    _, affected = await overrides.apply_override(
        seeded_session, bank_user, app_id, override_type=OverrideType.ADD_REQUIRED, doc_code="STU_RESUME",
    )
    assert affected == []

    log_count = await seeded_session.execute(
        select(func.count()).select_from(RequirementOverride).where(
            RequirementOverride.bank_application_id == app_id
        )
    )
    assert log_count.scalar() == 2
    assert len(await overrides.list_overrides(seeded_session, bank_user, app_id)) == 2


@pytest.mark.asyncio
async def test_add_optional_unknown_code_uses_code_as_name(seeded_session, hdfc_app, staff_user):
    _, app_id = hdfc_app
    _, [item] = await overrides.apply_override(
        seeded_session, staff_user, app_id, override_type=OverrideType.ADD_OPTIONAL, doc_code="HDFC_FORM_7",
    )
    assert item.display_name == "HDFC_FORM_7"
    assert item.requirement_level == RequirementLevel.OPTIONAL


@pytest.mark.asyncio
async def test_override_requires_type_and_code(seeded_session, hdfc_app, bank_user):
    _, app_id = hdfc_app
    with pytest.raises(ValidationError) as exc_info:
        await overrides.apply_override(seeded_session, bank_user, app_id, override_type=None, doc_code=" ")
    assert set(exc_info.value.details) == {"override_type", "doc_code"}


@pytest.mark.asyncio
async def test_other_bank_cannot_override(seeded_session, hdfc_app, other_bank_user):
    _, app_id = hdfc_app
    with pytest.raises(ForbiddenError):
        await overrides.apply_override(
            seeded_session, other_bank_user, app_id, override_type=OverrideType.WAIVE, doc_code="STU_PAN",
        )


@pytest.mark.asyncio
async def test_unknown_bank_application(seeded_session, bank_user):
    with pytest.raises(NotFoundError):
        await overrides.apply_override(
            seeded_session, bank_user, 9999, override_type=OverrideType.WAIVE, doc_code="STU_PAN",
        )
