"""Async SQLAlchemy database handle.

A single ``Database`` is created during application startup and passed to
every service, so tests can point the whole app at a throwaway database.

Usage:
    database = Database(settings)
    async with database.connection() as conn:
        result = await conn.execute(select(modules))
        rows = result.mappings().all()
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from src.config.settings import Settings
from src.core.database.tables import metadata


logger = structlog.get_logger(__name__)


class Database:
    """Owns the async engine and hands out connections."""

    def __init__(self, settings: Settings, engine: AsyncEngine | None = None) -> None:
        self.settings = settings
        self._engine = engine or create_async_engine(
            settings.async_database_url,
            echo=settings.database_echo,
            **self._pool_options(settings),
        )

    @staticmethod
    def _pool_options(settings: Settings) -> dict[str, Any]:
        # SQLite (used in tests) has no sized connection pool
        if settings.async_database_url.startswith("sqlite"):
            return {}
        return {
            "pool_size": settings.database_pool_size,
            "max_overflow": settings.database_max_overflow,
            "pool_timeout": settings.database_pool_timeout,
            "pool_recycle": settings.database_pool_recycle,
            "pool_pre_ping": True,
        }

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """Connection for read-only work (no explicit commit)."""
        async with self._engine.connect() as conn:
            yield conn

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncConnection, None]:
        """Connection inside a transaction.

        Commits on success, rolls back if the block raises.
        """
        async with self._engine.begin() as conn:
            yield conn

    async def create_all(self) -> None:
        """Create missing tables."""
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("database_tables_ensured", tables=sorted(metadata.tables))

    async def ping(self) -> bool:
        """Return True when the database answers ``SELECT 1``."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("database_ping_failed", error=str(e))
            return False
        return True

    async def dispose(self) -> None:
        """Close all pooled connections."""
        await self._engine.dispose()
        logger.info("database_disposed")
