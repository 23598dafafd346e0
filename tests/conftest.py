"""Pytest configuration and shared fixtures."""

from typing import List

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from core.infrastructure.database.config import create_session_factory, init_database


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """File-backed SQLite engine; one connection per session so submitters can run concurrently."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'fanout.db'}",
        poolclass=NullPool,
        echo=False,
    )
    await init_database(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Create test session factory."""
    yield create_session_factory(test_engine)


class RecordingSleep:
    """Backoff sleep that returns at once and remembers the delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()
