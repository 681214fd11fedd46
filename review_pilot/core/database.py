"""Database connection and session management.

Transaction Guarantees:
- Each request gets its own session
- All operations within a request are atomic
- On any exception, the entire transaction is rolled back
- Sessions are properly closed after each request

The engine is built once at process start (see ``init_db``) and lives on
``app.state.db``; nothing here is created at import time.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .config import Settings

logger = logging.getLogger(__name__)


def _on_sqlite_connect(dbapi_connection, connection_record) -> None:
    # Driver-managed BEGIN breaks SAVEPOINT; _on_sqlite_begin issues it instead
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def _on_sqlite_begin(conn) -> None:
    # Writers queue at BEGIN; a deferred reader cannot become a writer once
    # another connection has committed (SQLITE_BUSY_SNAPSHOT)
    conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """Owns the engine and session factory for one process."""

    def __init__(self, settings: Settings):
        url = make_url(settings.database_url_async)
        engine_kwargs: dict = {"echo": settings.database_echo}

        if url.get_backend_name() == "sqlite":
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            else:
                # In-memory databases must share one connection
                engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        else:
            engine_kwargs.update(pool_pre_ping=True, pool_size=10, max_overflow=20)

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

        if url.get_backend_name() == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _on_sqlite_connect)
            event.listen(self.engine.sync_engine, "begin", _on_sqlite_begin)

        # Session factory - creates new sessions for each request
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Don't expire objects after commit
            autoflush=False,         # Manual flush for better control
        )

    async def create_all(self) -> None:
        """Apply the schema. Safe to call on an existing database."""
        from ..models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for database sessions (for use outside FastAPI)."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()


async def init_db(settings: Settings) -> Database:
    """Build the process-wide database handle and apply the schema."""
    db = Database(settings)
    await db.create_all()
    logger.info(f"Database initialized ({make_url(settings.database_url_async).get_backend_name()})")
    return db


async def close_db(db: Database) -> None:
    """Close database connections."""
    await db.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.db


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a transactional database session.

    Transaction Behavior:
    - Session starts in a transaction automatically
    - On successful completion: COMMIT
    - On any exception: ROLLBACK
    - Session is always closed properly
    """
    db = get_database(request)
    async with db.session_factory() as session:
        try:
            yield session
            await session.commit()
            logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error, transaction rolled back: {e}")
            raise
        except Exception as e:
            await session.rollback()
            logger.debug(f"Request failed, transaction rolled back: {e}")
            raise
        finally:
            await session.close()
