"""Global test fixtures."""

import os

import pytest
import pytest_asyncio

from courier.config import DatabaseConfig
from courier.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    create_session_factory,
)
from courier.infrastructure.persistence.repository import (
    InMemoryPublicationStore,
    SQLAlchemyPublicationStore,
)
from courier.testing import ManualClock, PublishedOccurrences

# Keep a developer's config file out of the test run
os.environ.pop("COURIER_CONFIG_FILE", None)

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def published_occurrences() -> PublishedOccurrences:
    """Fresh capture per test, never shared."""
    return PublishedOccurrences()


@pytest.fixture
def memory_store(clock: ManualClock) -> InMemoryPublicationStore:
    return InMemoryPublicationStore(clock)


@pytest_asyncio.fixture
async def sqlite_store(clock: ManualClock):
    """Per-test store on an in-memory SQLite database with the ledger schema."""
    engine = create_db_engine(DatabaseConfig(url=SQLITE_MEMORY_URL))
    await create_schema(engine)
    yield SQLAlchemyPublicationStore(create_session_factory(engine), clock)
    await engine.dispose()


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request: pytest.FixtureRequest, clock: ManualClock):
    """Both PublicationStore implementations, for behaviour they must share."""
    if request.param == "memory":
        yield InMemoryPublicationStore(clock)
        return

    engine = create_db_engine(DatabaseConfig(url=SQLITE_MEMORY_URL))
    await create_schema(engine)
    yield SQLAlchemyPublicationStore(create_session_factory(engine), clock)
    await engine.dispose()
