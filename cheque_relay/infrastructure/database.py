"""Database Session Manager: async connection pool with guaranteed release and health checks.

Invariants:
    - Every session is closed on every exit path (success, not-found, error)
    - A failure to close is logged, never raised: it cannot mask the result
      or the original error
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py)
    - Read-only: sessions are never committed
    - Errors are logged by type only and the engine hides bound parameters:
      a failed lookup never writes its identifier to the logs

Design Decisions:
    - One DatabaseSessionManager per internal app, created in the lifespan and
      disposed on shutdown (app.state.db_manager)
    - pool_timeout bounds how long a fetch waits when the pool is exhausted
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, OperationalError, SQLAlchemyError, TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from cheque_relay.core.errors import DatabaseError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, release, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 5,
        max_overflow: int = 0,
        pool_timeout: float = 5.0,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
            pool_recycle=3600,
            hide_parameters=True,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that is always released."""
        session = self._session_factory()
        try:
            yield session
        except PoolTimeoutError as e:
            logger.error(f"DB pool exhausted: {type(e).__name__}")
            raise DatabaseError("Connection pool exhausted", "acquire")
        except OperationalError as e:
            logger.error(f"DB operational error: {type(e).__name__}")
            raise DatabaseError("Connection or operational error", "execute")
        except DBAPIError as e:
            logger.error(f"DB driver error: {type(e).__name__}")
            raise DatabaseError("Database driver error", "query")
        except SQLAlchemyError as e:
            logger.error(f"SQLAlchemy error: {type(e).__name__}")
            raise DatabaseError("Database operation failed", "unknown")
        finally:
            await self._release(session)

    async def _release(self, session: AsyncSession) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.error(f"DB session release failed: {e}")

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {type(e).__name__}")
            return False

    async def dispose(self) -> None:
        try:
            await self.engine.dispose()
        except Exception as e:
            logger.error(f"DB engine dispose failed: {e}")
