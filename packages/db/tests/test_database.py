# This project was developed with assistance from AI tools.
"""Database connection tests (requires running PostgreSQL)."""

import pytest
from sqlalchemy import text

from db.database import engine

pytestmark = pytest.mark.integration


async def test_database_connection():
    """Test database connection."""
    async with engine.begin() as conn:
        result = await conn.execute(text("SELECT 1"))
        assert result.scalar() == 1


async def test_health_check_reports_status():
    from db import get_db_service

    service = await get_db_service()
    assert (await service.health_check())["status"] == "healthy"
