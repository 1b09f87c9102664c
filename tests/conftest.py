"""Root conftest - shared test configuration and fixtures.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - No test talks to PostgreSQL, RabbitMQ or a gRPC peer outside the test process
    - Settings cache is cleared around each test (env overrides stay local)
"""

import os

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

# Ensure tests never reach real infrastructure
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("EVENTS_ENABLED", "false")
os.environ.setdefault("LOG_FORMAT", "text")

from shopmesh.config import get_settings  # noqa: E402
from shopmesh.db.base import Base  # noqa: E402
from shopmesh.infrastructure.database import DatabaseSessionManager  # noqa: E402
import shopmesh.models  # noqa: E402,F401

from tests.fakes import (  # noqa: E402
    FakeUserClient, InMemoryOrderRepository, InMemoryUserRepository,
    RecordingPublisher,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def test_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_manager(test_engine):
    """DatabaseSessionManager bound to the test engine (pool args don't apply to SQLite)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    manager.timeout_seconds = 5.0
    return manager


@pytest.fixture
def order_repo():
    return InMemoryOrderRepository()


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def user_client():
    return FakeUserClient(known_ids={1, 2, 3})


@pytest.fixture
def publisher():
    return RecordingPublisher()
