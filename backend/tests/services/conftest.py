"""Service test fixtures — async DB, the four components, and a FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - Components share one AsyncSession per test, like one request
    - get_db dependency overridden to use the test session factory
    - The clock advances one second per edge so newest-first order is deterministic

Design Decisions:
    - SQLite in-memory with StaticPool: every connection sees the same database
    - Unique constraints are real on SQLite, so conflict translation is exercised
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from persona_graph.core.domain_types import ActorContext
from persona_graph.db.base import Base
from persona_graph.infrastructure.database import get_db, DatabaseSessionManager
import persona_graph.infrastructure.database as db_module
import persona_graph.models  # noqa: F401
from persona_graph.main import app
from persona_graph.services.active_persona import ActivePersonaBinder
from persona_graph.services.follow_graph import FollowGraphStore
from persona_graph.services.integrity_coordinator import ReferentialIntegrityCoordinator
from persona_graph.services.persona_registry import PersonaRegistry


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    """Strictly increasing timestamps, one second apart."""
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ticks = {"n": 0}

    def _now():
        ticks["n"] += 1
        return start + timedelta(seconds=ticks["n"])

    return _now


@pytest.fixture
def registry(test_db):
    return PersonaRegistry(test_db)


@pytest.fixture
def graph(test_db, registry, clock):
    return FollowGraphStore(test_db, registry, clock=clock)


@pytest.fixture
def binder(test_db, registry):
    return ActivePersonaBinder(test_db, registry)


@pytest.fixture
def coordinator(test_db, registry, graph, binder):
    return ReferentialIntegrityCoordinator(test_db, registry, graph, binder)


@pytest.fixture
async def alice(registry):
    return await registry.create("ann", "alice", "Alice A")


@pytest.fixture
async def bob(registry):
    return await registry.create("ben", "bob", "Bob")


@pytest.fixture
async def carol(registry):
    return await registry.create("ann", "carol", "Carol C")


@pytest.fixture
def ann_actor():
    """Account 'ann' on session s-ann with no active persona."""
    return ActorContext(account_username="ann", session_key="s-ann")


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
