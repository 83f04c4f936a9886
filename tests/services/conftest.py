"""Service test fixtures: in-memory record table and session manager.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the cheque table
    - db_manager is a real DatabaseSessionManager bound to the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for a single
      parameterized SELECT (PostgreSQL-specific features not exercised here)
    - StaticPool: every session sees the same in-memory database
    - db_manager built via __new__: skips pool sizing arguments SQLite rejects
"""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cheque_relay.db.cheque_table import build_cheque_table
from cheque_relay.infrastructure.database import DatabaseSessionManager


@pytest.fixture
def cheque_table():
    return build_cheque_table()


@pytest.fixture
async def test_engine(cheque_table):
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(cheque_table.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_manager(test_engine):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    return manager


@pytest.fixture
async def seed_cheques(test_engine, cheque_table):
    """Insert a few records into the test table."""
    rows = [
        {
            "cheque_number": "0012345678",
            "status": "Issued",
            "payment_issue_date": date(2024, 1, 15),
            "applied_amount": Decimal("1000.50"),
        },
        {
            "cheque_number": "12345678",
            "status": "Cancelled",
            "payment_issue_date": date(2023, 6, 30),
            "applied_amount": Decimal("250.00"),
        },
    ]
    async with test_engine.begin() as conn:
        await conn.execute(cheque_table.insert(), rows)
    return rows
