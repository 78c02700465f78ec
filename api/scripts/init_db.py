"""Create the LearnHub tables.

Creates users, enrollments, modules and lessons (with their indexes) when
they do not exist yet. Existing tables are left untouched, so the script is
safe to run on every deploy.

Usage:
    cd api && python -m scripts.init_db
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncConnection

from src.config.settings import get_settings
from src.core.context import RequestContext
from src.core.database import Database, metadata
from src.core.logging import configure_structlog


logger = structlog.get_logger(__name__)


async def existing_tables(conn: AsyncConnection) -> set[str]:
    """Names of the tables already present in the database."""
    names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    return set(names)


async def init_db(database: Database) -> tuple[list[str], list[str]]:
    """Create missing tables.

    Returns:
        Tuple of (created, skipped) table names.
    """
    async with database.transaction() as conn:
        before = await existing_tables(conn)
        await conn.run_sync(metadata.create_all)

    created = [name for name in metadata.tables if name not in before]
    skipped = [name for name in metadata.tables if name in before]

    for name in created:
        logger.info("table_created", table=name)
    for name in skipped:
        logger.info("table_exists", table=name)

    return created, skipped


async def run() -> None:
    """Run against the configured database."""
    settings = get_settings()
    configure_structlog(settings, log_dir=settings.log_dir)
    database = Database(settings)

    with RequestContext(request_id="init-db"):
        logger.info("init_db_starting", environment=settings.environment)
        try:
            created, skipped = await init_db(database)
            logger.info(
                "init_db_completed", created=len(created), skipped=len(skipped)
            )
        finally:
            await database.dispose()


if __name__ == "__main__":
    asyncio.run(run())
