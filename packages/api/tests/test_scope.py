# This project was developed with assistance from AI tools.
"""Tenant scope: which cases each role can see."""

import pytest
import pytest_asyncio
from db.enums import UserRole

from src.core.auth import build_data_scope
from src.core.errors import ForbiddenError, NotFoundError
from src.schemas.auth import UserContext
from src.services import case_workflow
from src.services.history import get_history
from src.services.scope import load_case

STUDENT_USER_ID = "student-aarav"


@pytest_asyncio.fixture
async def cases(db_session, staff_user):
    """Three cases: Aarav's with an HDFC application, Meera's with Axis, an unassigned one."""
    aarav, _ = await case_workflow.create_case(
        db_session, staff_user,
        student_name="Aarav Mehta", student_email="aarav@example.com", student_user_id=STUDENT_USER_ID,
    )
    meera, _ = await case_workflow.create_case(
        db_session, staff_user,
        student_name="Meera Iyer", student_email="meera@example.com", student_user_id="student-meera",
    )
    walk_in, _ = await case_workflow.create_case(
        db_session, staff_user, student_name="Dev Kapoor", student_email="dev@example.com",
    )
    await case_workflow.create_bank_application(db_session, staff_user, aarav.id, bank_id="HDFC")
    await case_workflow.create_bank_application(db_session, staff_user, meera.id, bank_id="AXIS")
    return {"aarav": aarav.id, "meera": meera.id, "walk_in": walk_in.id}


async def _visible(session, user):
    rows, total = await case_workflow.list_cases(session, user, limit=100)
    assert total == len(rows)
    return {case.id for case, _ in rows}


@pytest.mark.asyncio
async def test_staff_and_admin_see_everything(db_session, cases, staff_user, admin_user):
    assert await _visible(db_session, staff_user) == set(cases.values())
    assert await _visible(db_session, admin_user) == set(cases.values())


@pytest.mark.asyncio
async def test_student_sees_only_own_cases(db_session, cases, student_user):
    assert await _visible(db_session, student_user) == {cases["aarav"]}
    case = await load_case(db_session, student_user, cases["aarav"])
    assert case.student_name == "Aarav Mehta"


@pytest.mark.asyncio
async def test_student_forbidden_on_other_case(db_session, cases, student_user):
    with pytest.raises(ForbiddenError):
        await get_history(db_session, student_user, cases["meera"])


@pytest.mark.asyncio
async def test_missing_case_is_not_found_before_forbidden(db_session, cases, student_user):
    with pytest.raises(NotFoundError):
        await load_case(db_session, student_user, 987654)


@pytest.mark.asyncio
async def test_bank_sees_cases_with_its_application(db_session, cases, bank_user, other_bank_user):
    assert await _visible(db_session, bank_user) == {cases["aarav"]}
    assert await _visible(db_session, other_bank_user) == {cases["meera"]}
    with pytest.raises(ForbiddenError):
        await load_case(db_session, bank_user, cases["walk_in"])


@pytest.mark.asyncio
async def test_bank_user_without_bank_sees_nothing(db_session, cases):
    orphan = UserContext(
        user_id="orphan-bank",
        role=UserRole.BANK,
        email="orphan@example.com",
        name="Orphan",
        data_scope=build_data_scope(UserRole.BANK, "orphan-bank", None),
    )
    assert orphan.data_scope.bank_id is None
    assert await _visible(db_session, orphan) == set()


def test_student_scope_shape():
    scope = build_data_scope(UserRole.STUDENT, STUDENT_USER_ID, None)
    assert scope.own_cases_only is True
    assert scope.full_pipeline is False
    assert scope.user_id == STUDENT_USER_ID
