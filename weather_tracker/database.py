"""
Database configuration and session management.

This module contains the SQLAlchemy declarative base and the ``Database``
handle that owns the async engine and session factory. The handle is
constructed during application startup and disposed on shutdown; nothing
connects at import time.
"""

from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from weather_tracker.utils.logging_config import get_logger

logger = get_logger(__name__)

# Base class for all database models
Base = declarative_base()


class Database:
    """
    Async database handle.

    Wraps an ``AsyncEngine`` and its session factory so both can be passed
    explicitly to whatever needs them.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected")
        return self._engine

    def connect(self) -> None:
        """Create the engine and session factory."""
        if self._engine is not None:
            return

        kwargs = {"echo": self.echo}
        if self.url.startswith("sqlite") and ":memory:" in self.url:
            # In-memory SQLite needs a single shared connection
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}

        self._engine = create_async_engine(self.url, **kwargs)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Database engine created: {self.url.split('://')[0]}")

    async def disconnect(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None

    def session(self) -> AsyncSession:
        """Open a new session."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        return self._session_factory()

    async def create_tables(self) -> None:
        """
        Create all database tables.

        Production deployments use Alembic migrations instead.
        """
        # Import models so they are registered with Base
        import weather_tracker.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """
        Drop all database tables.

        WARNING: This will delete all data. Use with caution.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency function to get database session.

    Yields an async database session and ensures proper cleanup.
    """
    database: Database = request.app.state.db

    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
