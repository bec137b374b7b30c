"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test settings before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from staffdesk.auth.service import hash_password, issue_session
from staffdesk.common.constants import UserRole
from staffdesk.database import Base, get_db
from staffdesk.holidays.calendar import holiday_calendar
from staffdesk.main import create_app
from staffdesk.profiles.models import Profile

# Import ALL model modules so every table exists for create_all
import staffdesk.attendance.models  # noqa: F401
import staffdesk.auth.models  # noqa: F401
import staffdesk.common.audit  # noqa: F401
import staffdesk.holidays.models  # noqa: F401
import staffdesk.leave.models  # noqa: F401
import staffdesk.work_summary.models  # noqa: F401

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() and uuid_generate_v4() as SQLite custom functions."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )
    dbapi_conn.create_function(
        "uuid_generate_v4", 0, lambda: str(uuid.uuid4()),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from staffdesk.common.rate_limit import limiter
    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def _reset_holiday_calendar():
    """The calendar is process-wide; start every test with no holidays."""
    holiday_calendar.replace([])
    yield
    holiday_calendar.replace([])


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

async def make_profile(
    db: AsyncSession,
    *,
    name: str = "Nimal Perera",
    email: Optional[str] = None,
    password: str = "password123",
    role: UserRole = UserRole.employee,
    enrolled_on: date = date(2025, 1, 1),
    sick: Decimal = Decimal("7"),
    casual: Decimal = Decimal("14"),
    is_active: bool = True,
) -> Profile:
    profile = Profile(
        id=uuid.uuid4(),
        name=name,
        email=email or f"{uuid.uuid4().hex[:8]}@staffdesk.com",
        password_hash=hash_password(password),
        role=role,
        enrolled_on=enrolled_on,
        sick_leave_balance=sick,
        casual_leave_balance=casual,
        is_active=is_active,
    )
    db.add(profile)
    await db.flush()
    return profile


async def headers_for(db: AsyncSession, profile: Profile) -> dict[str, str]:
    """Bearer headers backed by a persisted session row."""
    token, _ = await issue_session(db, profile)
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def employee(db) -> Profile:
    profile = await make_profile(db, name="Nimal Perera", email="nimal@staffdesk.com")
    await db.commit()
    return profile


@pytest.fixture
async def admin(db) -> Profile:
    profile = await make_profile(
        db, name="Admin User", email="admin@staffdesk.com", role=UserRole.admin,
    )
    await db.commit()
    return profile


@pytest.fixture
async def employee_headers(db, employee) -> dict[str, str]:
    return await headers_for(db, employee)


@pytest.fixture
async def admin_headers(db, admin) -> dict[str, str]:
    return await headers_for(db, admin)
