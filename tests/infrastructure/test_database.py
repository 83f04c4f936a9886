"""Database Session Manager: tests for error mapping, release and health checks.

Tests cover:
    - SQLAlchemy errors inside a session surface as DatabaseError (503)
    - The session is closed on success and on error
    - A failing close is logged, not raised
    - health_check reports True/False
    - Error logs carry the exception type, never statement parameters
"""

import logging

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cheque_relay.core.errors import DatabaseError
from cheque_relay.infrastructure.database import DatabaseSessionManager


@pytest.fixture
async def db_manager():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", poolclass=StaticPool,
    )
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = engine
    manager._session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
    yield manager
    await engine.dispose()


class _TrackingSession:
    def __init__(self, fail_close: bool = False):
        self.closed = False
        self.fail_close = fail_close

    async def close(self):
        self.closed = True
        if self.fail_close:
            raise RuntimeError("close failed")


def _with_session(manager, session):
    manager._session_factory = lambda: session
    return manager


# ─── session ─────────────────────────────────────────────────────

async def test_session_executes_queries(db_manager):
    async with db_manager.session() as db:
        result = await db.execute(text("SELECT 1"))
        assert result.scalar() == 1


@pytest.mark.parametrize("error, operation", [
    (PoolTimeoutError("pool exhausted"), "acquire"),
    (OperationalError("SELECT 1", {}, Exception("connection refused")), "execute"),
    (SQLAlchemyError("boom"), "unknown"),
])
async def test_sqlalchemy_errors_become_database_error(db_manager, error, operation):
    with pytest.raises(DatabaseError) as exc_info:
        async with db_manager.session():
            raise error
    assert exc_info.value.http_status == 503
    assert exc_info.value.operation == operation


async def test_invalid_sql_becomes_database_error(db_manager):
    with pytest.raises(DatabaseError):
        async with db_manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))


async def test_non_database_errors_propagate_unchanged(db_manager):
    with pytest.raises(KeyError):
        async with db_manager.session():
            raise KeyError("x")


async def test_error_logs_never_include_parameters(db_manager, caplog):
    error = OperationalError(
        "SELECT * FROM cheque_verification WHERE cheque_number = ?",
        ("9876543210123",),
        Exception("connection refused"),
    )
    with caplog.at_level(logging.ERROR):
        with pytest.raises(DatabaseError):
            async with db_manager.session():
                raise error
    assert "DB operational error: OperationalError" in caplog.text
    assert "9876543210123" not in caplog.text


# ─── release ─────────────────────────────────────────────────────

async def test_session_closed_on_success(db_manager):
    session = _TrackingSession()
    async with _with_session(db_manager, session).session():
        pass
    assert session.closed


async def test_session_closed_on_error(db_manager):
    session = _TrackingSession()
    with pytest.raises(DatabaseError):
        async with _with_session(db_manager, session).session():
            raise SQLAlchemyError("boom")
    assert session.closed


async def test_close_failure_is_swallowed(db_manager):
    session = _TrackingSession(fail_close=True)
    async with _with_session(db_manager, session).session():
        pass
    assert session.closed


async def test_close_failure_does_not_mask_original_error(db_manager):
    session = _TrackingSession(fail_close=True)
    with pytest.raises(DatabaseError):
        async with _with_session(db_manager, session).session():
            raise SQLAlchemyError("boom")


# ─── health_check ────────────────────────────────────────────────

async def test_health_check_true_when_reachable(db_manager):
    assert await db_manager.health_check() is True


async def test_health_check_false_when_unreachable(db_manager):
    async def failing_execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    session = _TrackingSession()
    session.execute = failing_execute
    assert await _with_session(db_manager, session).health_check() is False
