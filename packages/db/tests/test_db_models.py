# This project was developed with assistance from AI tools.
"""Model metadata and persistence tests (in-memory SQLite, no server needed)."""

from datetime import UTC, datetime

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db import Base, Case, ChecklistItem, DatabaseService
from db.enums import CaseStatus, DocumentOwner

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

EXPECTED_TABLES = {
    "cases",
    "status_history",
    "co_applicants",
    "document_master",
    "checklist_items",
    "case_documents",
    "bank_applications",
    "requirement_overrides",
    "next_actions",
    "query_threads",
    "query_messages",
    "query_attachments",
    "escalations",
    "reminder_rules",
    "reminder_jobs",
    "stage_expectations",
    "leads",
    "lead_case_mappings",
}


@pytest_asyncio.fixture
async def service():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    svc = DatabaseService(engine=engine)
    await svc.create_all()
    yield svc
    await svc.dispose()


@pytest_asyncio.fixture
async def session(service):
    factory = async_sessionmaker(bind=service.engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


def test_all_tables_registered():
    assert set(Base.metadata.tables) == EXPECTED_TABLES


def test_checklist_item_key_constraint():
    constraints = {c.name for c in Base.metadata.tables["checklist_items"].constraints}
    assert "uq_checklist_item_key" in constraints


def test_history_rows_cascade_with_case():
    fk = next(iter(Base.metadata.tables["status_history"].c.case_id.foreign_keys))
    assert fk.ondelete == "CASCADE"


@pytest.mark.asyncio
async def test_health_check_ok(service):
    assert await service.health_check() is True


@pytest.mark.asyncio
async def test_health_check_unreachable():
    engine = create_async_engine("sqlite+aiosqlite:////nonexistent-dir/loans.db")
    svc = DatabaseService(engine=engine)
    try:
        assert await svc.health_check() is False
    finally:
        await svc.dispose()


@pytest.mark.asyncio
async def test_case_defaults_and_enum_storage(session):
    case = Case(student_name="Aarav Mehta", student_email="aarav@example.com", status_changed_at=NOW)
    session.add(case)
    await session.commit()

    assert case.status == CaseStatus.NOT_CONNECTED
    assert case.collateral == "NA"
    stored = await session.execute(text("SELECT status, awaiting_party FROM cases"))
    assert stored.one() == ("NOT_CONNECTED", "INTERNAL_OPS")


@pytest.mark.asyncio
async def test_duplicate_checklist_key_rejected(session):
    case = Case(student_name="Aarav Mehta", student_email="aarav@example.com", status_changed_at=NOW)
    session.add(case)
    await session.commit()

    def _item():
        return ChecklistItem(
            case_id=case.id,
            doc_code="COAPP_PAN",
            display_name="Co-applicant PAN",
            owner_entity_type=DocumentOwner.CO_APPLICANT,
            owner_entity_id="7",
        )

    session.add(_item())
    await session.commit()
    session.add(_item())
    with pytest.raises(IntegrityError):
        await session.commit()
