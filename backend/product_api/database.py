"""
Product API - Database Handle and Session Management
======================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI session dependency.
How:   A `Database` object owns one engine (with its connection pool) for the
       life of the process. It is created at startup, attached to
       `app.state.database`, and each request borrows a session from it that
       commits on success and rolls back on error.
Who:   Created by the app lifespan (or injected by tests); read by
       `get_db_session` and the health check.

Connection Pooling:
    Server databases (PostgreSQL) get a sized pool with pre-ping and hourly
    recycling. SQLite URLs use SQLAlchemy's default pool for the dialect,
    which does not accept sizing arguments.
"""

import logging
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from product_api.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shares one metadata object)."""
    pass


# Dialects whose default isolation level can be raised to a snapshot read
# for the duration of a single transaction.
SNAPSHOT_READ_DIALECTS = {"postgresql"}


class Database:
    """
    Long-lived store connection handle.

    Attributes:
        engine:            AsyncEngine managing the connection pool
        session_factory:   async_sessionmaker producing per-request sessions
        supports_snapshot_reads: True when multi-statement reads can run
                           under REPEATABLE READ (PostgreSQL)
    """

    def __init__(self, url: str, config: Optional[Settings] = None):
        config = config or default_settings
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **self._engine_options(url, config))
        # expire_on_commit=False: ORM objects committed by the store stay
        # readable while the response is being serialized
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _engine_options(url: str, config: Settings) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": config.log_level == "DEBUG"}
        if make_url(url).get_backend_name() == "sqlite":
            return options
        options.update(
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_pre_ping=config.db_pool_pre_ping,
            pool_recycle=3600,
        )
        return options

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @property
    def supports_snapshot_reads(self) -> bool:
        return self.dialect_name in SNAPSHOT_READ_DIALECTS

    async def create_all(self) -> None:
        """
        Create every table registered on Base.metadata that does not exist yet.

        The product model is imported here so its table is registered
        even when the caller never imported it.
        """
        from product_api.models import product  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured (%s)", self.dialect_name)

    async def ping(self) -> bool:
        """Run SELECT 1; returns False instead of raising when unreachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections (called during application shutdown)."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """FastAPI dependency returning the process-wide Database handle."""
    return request.app.state.database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the handle's factory
        2. Yields it to the route handler
        3. On success: commits (ends the read transaction; store writes
           have already committed themselves)
        4. On error: rolls back and re-raises for the global error handlers
        5. Always: closes the session (returns the connection to the pool)
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
