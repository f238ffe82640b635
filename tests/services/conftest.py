"""Service test fixtures — async DB, seeded actors, engines, and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - The notification publisher is an InMemoryPublisher for the duration of a test

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares the one connection,
      so data written by the client is visible to assertions on test_db
    - Race tests use a file-backed database (file_session_factory) so each
      session has its own connection and SQLite's write lock is real
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

from collabhub.db.base import Base
from collabhub.infrastructure.database import DatabaseSessionManager, get_db
import collabhub.infrastructure.database as db_module
from collabhub.infrastructure.notifications import (
    InMemoryPublisher, LoggingPublisher, set_publisher,
)
from collabhub.main import app
from collabhub.models.actor import Actor
from collabhub.services.actor_directory import ActorDirectory
from collabhub.services.lifecycle_engine import LifecycleEngine
from collabhub.services.negotiation import NegotiationService
from collabhub.services.request_store import RequestStore
from tests.services.factories import SEED_ACTORS


async def _seed(session_factory) -> None:
    async with session_factory() as session:
        session.add_all([
            Actor(id=i, role=r, display_name=n, is_active=active)
            for i, r, n, active in SEED_ACTORS
        ])
        await session.commit()


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
    factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )
    await _seed(factory)
    return factory


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def publisher():
    pub = InMemoryPublisher()
    set_publisher(pub)
    yield pub
    set_publisher(LoggingPublisher())


@pytest.fixture
def store(test_db):
    return RequestStore(test_db)


@pytest.fixture
def lifecycle(test_db, publisher):
    return LifecycleEngine(
        RequestStore(test_db), ActorDirectory(test_db), publisher, ttl_days=30,
    )


@pytest.fixture
def negotiation(test_db, publisher):
    return NegotiationService(RequestStore(test_db), publisher)


@pytest.fixture
async def file_session_factory(tmp_path):
    """Separate connection per session, for concurrency tests."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
    await _seed(factory)
    yield factory
    await engine.dispose()


@pytest.fixture
async def client(test_engine, test_session_factory, publisher):
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
