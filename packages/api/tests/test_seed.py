# This project was developed with assistance from AI tools.
"""Tests for reference data fixtures and the admin seed endpoint."""

from unittest.mock import AsyncMock, patch

from db import get_db
from db.enums import CaseStatus, DocumentOwner, UserRole
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.core.auth import build_data_scope
from src.middleware.auth import get_current_user
from src.routes.admin import router
from src.schemas.auth import UserContext
from src.services.reminders import validate_condition
from src.services.seed.fixtures import (
    BASELINE_DOCUMENTS,
    DEFAULT_REMINDER_RULES,
    NON_FINANCIAL,
    STAGE_EXPECTATIONS,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_ADMIN_USER = UserContext(
    user_id="admin",
    role=UserRole.ADMIN,
    email="admin@example.com",
    name="Admin User",
    data_scope=build_data_scope(UserRole.ADMIN, "admin"),
)


def _make_app(user: UserContext = _ADMIN_USER):
    """Build a test app with admin routes and mocked auth."""
    app = FastAPI()
    app.include_router(router, prefix="/api/admin")

    async def fake_user():
        return user

    async def fake_db():
        yield AsyncMock()

    app.dependency_overrides[get_current_user] = fake_user
    app.dependency_overrides[get_db] = fake_db
    return app


# ---------------------------------------------------------------------------
# Fixture data tests
# ---------------------------------------------------------------------------


def test_doc_codes_unique():
    codes = [d["doc_code"] for d in BASELINE_DOCUMENTS]
    assert len(codes) == len(set(codes))


def test_catalog_covers_every_owner_type():
    assert {d["owner_type"] for d in BASELINE_DOCUMENTS} == set(DocumentOwner)


def test_scope_lists_only_on_co_applicant_docs():
    for doc in BASELINE_DOCUMENTS:
        if doc["owner_type"] != DocumentOwner.CO_APPLICANT:
            assert doc["co_applicant_types"] is None, doc["doc_code"]


def test_non_financial_co_applicant_has_identity_docs():
    """A non-financial co-applicant still gets at least one required document."""
    assert any(
        NON_FINANCIAL in (d["co_applicant_types"] or []) and d["default_required"]
        for d in BASELINE_DOCUMENTS
    )


def test_default_rule_conditions_are_valid():
    for rule in DEFAULT_REMINDER_RULES:
        assert validate_condition(rule["condition"]) == rule["condition"]


def test_eight_stage_expectations_one_per_status():
    statuses = [e["status"] for e in STAGE_EXPECTATIONS]
    assert len(statuses) == 8
    assert len(set(statuses)) == 8
    assert CaseStatus.NOT_CONNECTED in statuses


def test_stage_expectation_windows_ordered():
    for expectation in STAGE_EXPECTATIONS:
        assert 0 < expectation["expected_min_days"] <= expectation["expected_max_days"]


# ---------------------------------------------------------------------------
# Endpoint tests
# ---------------------------------------------------------------------------


def test_admin_can_seed():
    result = {"status": "seeded", "catalog_entries": 30, "reminder_rules": 4, "stage_expectations": 8}
    with patch("src.routes.admin.seed_reference_data", AsyncMock(return_value=result)) as seeder:
        client = TestClient(_make_app())
        response = client.post("/api/admin/seed")

    assert response.status_code == 200
    assert response.json() == result
    seeder.assert_awaited_once()


def test_student_cannot_seed():
    """Student role gets 403 on seed endpoint."""
    student = UserContext(
        user_id="student-1",
        role=UserRole.STUDENT,
        email="student@example.com",
        name="Test Student",
        data_scope=build_data_scope(UserRole.STUDENT, "student-1"),
    )
    client = TestClient(_make_app(user=student))
    response = client.post("/api/admin/seed")
    assert response.status_code == 403


def test_staff_cannot_seed():
    staff = UserContext(
        user_id="ops-1",
        role=UserRole.STAFF,
        email="ops@example.com",
        name="Ops",
        data_scope=build_data_scope(UserRole.STAFF, "ops-1"),
    )
    client = TestClient(_make_app(user=staff))
    assert client.post("/api/admin/seed").status_code == 403
