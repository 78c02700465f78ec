"""Tests for the table creation script."""

import pytest

from scripts.init_db import init_db
from src.core.database import Database, metadata


@pytest.mark.asyncio
async def test_init_db_is_idempotent(settings) -> None:
    """First run creates every table, the second run skips them all."""
    database = Database(settings)
    try:
        created, skipped = await init_db(database)
        assert set(created) == set(metadata.tables)
        assert skipped == []

        created, skipped = await init_db(database)
        assert created == []
        assert set(skipped) == set(metadata.tables)
    finally:
        await database.dispose()
