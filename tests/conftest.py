# tests/conftest.py
import os
from datetime import datetime, timedelta, timezone

# app.database builds its engine at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import Settings
from app.database import Base, build_engine
from app.models import Location, Tenant
from tests.mocks import RecordingRouter, add_credential



@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        GOOGLE_CLIENT_ID="google-client",
        GOOGLE_CLIENT_SECRET="google-secret",
        GOOGLE_PLACES_API_KEY="places-key",
        HTTP_TIMEOUT_SECONDS=5.0,
    )


@pytest.fixture
async def test_engine(tmp_path):
    """Create and configure the test database engine (function-scoped)."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Provide a database session for tests"""
    async_session_local = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session_local() as session:
        yield session
        await session.rollback()


@pytest.fixture
def router():
    return RecordingRouter()


@pytest.fixture
async def tenant(db_session):
    tenant = Tenant(name="Acme Coffee", slug="acme-coffee")
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest.fixture
async def other_tenant(db_session):
    tenant = Tenant(name="Other Co", slug="other-co")
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest.fixture
async def location(db_session, tenant):
    """Location bound to Facebook Page pg1 only."""
    location = Location(
        tenant_id=tenant.id,
        name="Acme Coffee Downtown",
        address="1 Main St",
        city="Springfield",
        state="IL",
        postal_code="62701",
        country="US",
        phone="555-0100",
        website="https://acme.example",
        facebook_page_id="pg1",
    )
    db_session.add(location)
    await db_session.commit()
    return location


@pytest.fixture
async def unlinked_location(db_session, tenant):
    location = Location(tenant_id=tenant.id, name="Acme Coffee Warehouse")
    db_session.add(location)
    await db_session.commit()
    return location


@pytest.fixture
async def facebook_credential(db_session, tenant):
    return await add_credential(
        db_session,
        tenant,
        "facebook",
        external_id="pg1",
        access_token="user-token-1",
        meta={"page_id": "pg1", "page_access_token": "page-token-1"},
        scopes=["pages_read_engagement", "pages_manage_engagement"],
    )


@pytest.fixture
def future():
    return datetime.now(timezone.utc) + timedelta(hours=1)


@pytest.fixture
def past():
    return datetime.now(timezone.utc) - timedelta(hours=1)
