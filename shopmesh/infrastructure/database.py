"""Database Session Manager - async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Every session is bounded by timeout_seconds; overrunning it is INTERNAL
    - Connection pool uses pool_pre_ping for stale connection detection
    - SQLAlchemy exceptions mapped to AppError: IntegrityError -> CONFLICT,
      everything else (driver and conversion errors included) -> INTERNAL;
      AppErrors raised inside the block pass through unchanged

Design Decisions:
    - One manager per service process, owned by the FastAPI lifespan (app.state)
    - A session per repository call: concurrent requests never share a session
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from shopmesh.core.errors import AppError, ConflictError, InternalError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 10,
        max_overflow: int = 5,
        timeout_seconds: float = 30.0,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            async with asyncio.timeout(self.timeout_seconds):
                yield session
        except IntegrityError as e:
            await session.rollback()
            logger.warning(f"DB integrity error: {e}")
            raise ConflictError("integrity constraint violated") from e
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise InternalError("database connection or operational error", cause=e) from e
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise InternalError("database driver error", cause=e) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise InternalError("database operation failed", cause=e) from e
        except TimeoutError as e:
            await session.rollback()
            logger.error(f"DB operation exceeded {self.timeout_seconds}s")
            raise InternalError("database operation timed out", cause=e) from e
        except AppError:
            await session.rollback()
            raise
        except Exception as e:
            await session.rollback()
            logger.error(f"unexpected DB error: {e}", exc_info=True)
            raise InternalError("database operation failed", cause=e) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
