"""Database Session Manager — rollback and error mapping.

Invariants:
    - Unique violations surface as ConcurrentWriteError (409)
    - Domain errors propagate unchanged and nothing is committed
    - SQLite engines enforce foreign keys
    - Health check reports True against a live engine
"""

import pytest
from sqlalchemy import select, text

import app.models  # noqa: F401
from app.core.errors import ConcurrentWriteError, ValidationFailedError
from app.db.base import Base
from app.infrastructure.database import DatabaseSessionManager
from app.models.user import User

from tests.services.orcid_fixtures import ORCID_A


@pytest.fixture
async def manager():
    m = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    async with m.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield m
    await m.close()


async def test_duplicate_orcid_maps_to_concurrent_write(manager):
    async with manager.session() as db:
        db.add(User(orcid_id=ORCID_A, name="Ada"))
        await db.commit()

    with pytest.raises(ConcurrentWriteError) as exc_info:
        async with manager.session() as db:
            db.add(User(orcid_id=ORCID_A, name="Ada again"))
            await db.commit()
    assert exc_info.value.http_status == 409


async def test_domain_error_rolls_back(manager):
    with pytest.raises(ValidationFailedError):
        async with manager.session() as db:
            db.add(User(orcid_id=ORCID_A, name="Ada"))
            await db.flush()
            raise ValidationFailedError("Institution is required", "institution")

    async with manager.session() as db:
        result = await db.execute(select(User))
        assert result.scalars().all() == []


async def test_sqlite_foreign_keys_enabled(manager):
    async with manager.session() as db:
        result = await db.execute(text("PRAGMA foreign_keys"))
        assert result.scalar() == 1


async def test_health_check(manager):
    assert await manager.health_check() is True
