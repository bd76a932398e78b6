"""Async database configuration for the color catalog.

Provides:
- Async SQLAlchemy engine and session factory over SQLite (aiosqlite)
- Transactional session context manager
- Schema creation for the catalog tables
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from datastore_showcase.infra.logging import get_logger
from datastore_showcase.models.base import Base

logger = get_logger(__name__)


class Database:
    """Owns the catalog engine and session factory.

    Construct once at startup and call ``close()`` at shutdown.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        """Initialize the database.

        Args:
            url: Async SQLAlchemy URL, e.g. ``sqlite+aiosqlite:///data/app.db``
            echo: Log emitted SQL
        """
        self.url = url
        self._echo = echo
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Get or create the async engine."""
        if self._engine is None:
            logger.info("Creating database engine", url=self.url)
            self._engine = create_async_engine(self.url, echo=self._echo)
        return self._engine

    def _get_session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session that commits on success and rolls back on error.

        Example:
            async with database.session() as session:
                result = await session.execute(select(ColorEntity))
        """
        session = self._get_session_factory()()

        try:
            yield session
            await session.commit()

        except Exception as e:
            await session.rollback()
            logger.error("Database session error", error=str(e))
            raise

        finally:
            await session.close()

    async def create_all(self) -> None:
        """Create any missing catalog tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ready", tables=sorted(Base.metadata.tables))

    async def close(self) -> None:
        """Dispose the engine and all connections."""
        if self._engine is not None:
            logger.info("Closing database engine")
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    async def verify_connection(self) -> bool:
        """Verify database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            async with self.session() as session:
                await session.execute(text("SELECT 1"))
            logger.info("Database connection verified")
            return True
        except Exception as e:
            logger.error("Database connection failed", error=str(e))
            return False
