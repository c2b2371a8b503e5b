"""Database Session Manager — async engine, per-request sessions, rollback and error mapping.

Invariants:
    - Every session rolls back on exception (no partial profile/work/project writes)
    - Domain errors raised inside a session propagate unchanged after the rollback
    - Unique-constraint violations become ConcurrentWriteError (409); every other
      SQLAlchemy failure becomes DatabaseError (503)
    - SQLite connections enforce foreign keys, so ON DELETE rules match PostgreSQL

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - expire_on_commit=False: services render rows after commit without lazy loads
    - Pool sizing only applied to server databases (SQLite uses a static pool)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker,
)

from app.core.errors import ConcurrentWriteError, DatabaseError, OrcidPlusError

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _constraint_name(error: IntegrityError) -> str | None:
    diag = getattr(error.orig, "diag", None)
    return getattr(diag, "constraint_name", None)


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back and map errors."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        is_sqlite = database_url.startswith("sqlite")
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not is_sqlite:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        if is_sqlite:
            _enable_sqlite_foreign_keys(self.engine)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session; roll back and translate on any failure."""
        session = self._session_factory()
        try:
            yield session
        except OrcidPlusError:
            await session.rollback()
            raise
        except IntegrityError as e:
            await session.rollback()
            constraint = _constraint_name(e)
            logger.warning(
                f"Unique/foreign key violation on commit: {e.orig}",
                extra={"error_code": "CONCURRENT_WRITE"},
            )
            raise ConcurrentWriteError(constraint)
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise DatabaseError("Database operation failed", "unknown")
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 through a fresh session (readiness probe)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except OrcidPlusError as e:
            logger.error(f"DB health check failed: {e.message}")
            return False
        except OSError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    logger.info(f"Database engine ready ({database_url.split(':', 1)[0]})")
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
