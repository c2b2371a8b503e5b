"""Service test fixtures — async DB, fake ORCID API, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - get_orcid_client overridden with a real ResilientOrcidClient over MockTransport
    - db_manager patched so the readiness probe sees the test engine
    - search page cache cleared around every test

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (ADR: PostgreSQL-specific features not exercised here)
    - MockTransport over patching client methods: retry and error mapping stay under test
"""

import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import app.models  # noqa: F401
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.orcid_client import ResilientOrcidClient, get_orcid_client
import app.infrastructure.database as db_module
from app.main import app
from app.services.search_service import clear_search_cache

from tests.services.orcid_fixtures import FakeOrcid


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_orcid():
    return FakeOrcid()


@pytest.fixture
async def orcid_client(fake_orcid):
    client = ResilientOrcidClient(
        transport=httpx.MockTransport(fake_orcid),
        max_retries=2, base_delay_ms=0, max_delay_ms=0,
    )
    yield client
    await client.close()


@pytest.fixture
async def client(test_engine, test_session_factory, orcid_client):
    """FastAPI test client with DB and ORCID dependencies overridden."""
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory

    app.dependency_overrides[get_db] = fake_manager_session(fake_manager)
    app.dependency_overrides[get_orcid_client] = lambda: orcid_client

    original_manager = db_module.db_manager
    db_module.db_manager = fake_manager
    clear_search_cache()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    clear_search_cache()


def fake_manager_session(manager: DatabaseSessionManager):
    """get_db replacement that keeps the rollback/error mapping of the real manager."""
    async def override_get_db():
        async with manager.session() as session:
            yield session
    return override_get_db
