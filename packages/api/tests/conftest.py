# This project was developed with assistance from AI tools.
"""Shared fixtures.

Service and route tests run against a per-test in-memory SQLite database
(aiosqlite). pysqlite's own transaction handling is switched off and BEGIN
is emitted by SQLAlchemy instead, so SAVEPOINTs behave the way they do on
PostgreSQL; checklist generation depends on that.

Route tests get an ``httpx.AsyncClient`` per persona from
``client_factory``. The caller's identity travels in a test-only header,
so several personas can talk to the same app inside one test.
"""

import pytest
import pytest_asyncio
from db import Base, get_db
from db.enums import UserRole
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.auth import build_data_scope
from src.main import app as real_app
from src.middleware.auth import get_current_user
from src.schemas.auth import UserContext
from src.services.seed.seeder import seed_reference_data

ADMIN_USER_ID = "admin-user"
STAFF_USER_ID = "priya-ops"
HDFC_USER_ID = "hdfc-portal"
AXIS_USER_ID = "axis-portal"
STUDENT_USER_ID = "student-aarav"
OTHER_STUDENT_USER_ID = "student-meera"

_PERSONA_HEADER = "x-test-persona"


# ---------------------------------------------------------------------------
# Personas
# ---------------------------------------------------------------------------


def make_user(role: UserRole, user_id: str, *, name: str = "", bank_id: str | None = None) -> UserContext:
    """UserContext with the same DataScope the auth middleware would build."""
    return UserContext(
        user_id=user_id,
        role=role,
        email=f"{user_id}@example.com",
        name=name or user_id,
        data_scope=build_data_scope(role, user_id, bank_id),
    )


@pytest.fixture
def admin_user() -> UserContext:
    return make_user(UserRole.ADMIN, ADMIN_USER_ID, name="Admin User")


@pytest.fixture
def staff_user() -> UserContext:
    return make_user(UserRole.STAFF, STAFF_USER_ID, name="Priya Sharma")


@pytest.fixture
def bank_user() -> UserContext:
    return make_user(UserRole.BANK, HDFC_USER_ID, name="HDFC Credit Desk", bank_id="HDFC")


@pytest.fixture
def other_bank_user() -> UserContext:
    return make_user(UserRole.BANK, AXIS_USER_ID, name="Axis Credit Desk", bank_id="AXIS")


@pytest.fixture
def student_user() -> UserContext:
    return make_user(UserRole.STUDENT, STUDENT_USER_ID, name="Aarav Mehta")


@pytest.fixture
def other_student_user() -> UserContext:
    return make_user(UserRole.STUDENT, OTHER_STUDENT_USER_ID, name="Meera Iyer")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_session(db_session):
    """Session over a database holding the baseline catalog, rules and expectations."""
    await seed_reference_data(db_session)
    return db_session


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client_factory(session_factory):
    """Factory fixture: ``client_factory(user)`` returns an AsyncClient acting as ``user``.

    Every request gets its own session from the test engine. Overrides are
    cleared after the test so nothing leaks into the next one.
    """
    personas: dict[str, UserContext] = {}
    clients: list[AsyncClient] = []

    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def _current_user(request: Request) -> UserContext:
        return personas[request.headers[_PERSONA_HEADER]]

    real_app.dependency_overrides[get_db] = _get_db
    real_app.dependency_overrides[get_current_user] = _current_user

    def _make(user: UserContext) -> AsyncClient:
        personas[user.user_id] = user
        client = AsyncClient(
            transport=ASGITransport(app=real_app),
            base_url="http://test",
            headers={_PERSONA_HEADER: user.user_id},
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
    real_app.dependency_overrides.clear()
