"""
Database connection management.

Provides the Database collaborator: one async engine (connection pool) built
at application startup, a session factory, and a transaction scope that
commits on success, rolls back on any failure and always returns the
connection to the pool.

Usage:
    database = Database.from_settings(get_settings())

    async with database.transaction() as session:
        session.add(photo)
        await session.flush()

    await database.dispose()
"""

import logging
import ssl
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import event, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from database.errors import StoreError, translate_integrity_error
from shared.config import Settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores foreign keys unless enabled per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_engine(
    database_url: str,
    use_ssl: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
) -> AsyncEngine:
    """
    Create the async engine.

    Args:
        database_url: SQLAlchemy URL with an async driver
        use_ssl: TLS without certificate verification (managed Postgres)
        pool_size: Persistent connections kept in the pool
        max_overflow: Extra connections allowed under load
    """
    is_sqlite = database_url.startswith("sqlite")

    if is_sqlite:
        engine = create_async_engine(database_url, poolclass=NullPool)
        _enable_sqlite_foreign_keys(engine)
        return engine

    connect_args = {}
    if use_ssl:
        ssl_context = ssl.create_default_context()
        ssl_context.check_hostname = False
        ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context

    return create_async_engine(
        database_url,
        connect_args=connect_args,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
    )


class Database:
    """Relational store collaborator shared by all requests."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            create_engine(
                settings.DATABASE_URL,
                use_ssl=settings.DATABASE_SSL,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
            )
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session and a transaction around the block.

        Commits when the block exits normally. On any exception the
        transaction is rolled back and the session closed before the
        exception propagates; store failures are re-raised as StoreError
        (ConstraintViolationError / ForeignKeyViolationError for integrity
        failures).
        """
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except IntegrityError as e:
                raise translate_integrity_error(e) from e
            except SQLAlchemyError as e:
                raise StoreError(f"Database error: {e}", original_error=e) from e

    async def ping(self) -> datetime:
        """Return the store's current time (connectivity probe)."""
        async with self.session_factory() as session:
            result = await session.execute(select(func.now()))
            return result.scalar_one()

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")
