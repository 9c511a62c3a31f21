"""Tests for ledger API endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from skyledger.db.database import get_session
from skyledger.db.operations import write_document
from skyledger.db.store import DEFAULT_COLLECTION, LEDGER_DOCUMENT, PREVIOUS_SNAPSHOT_DOCUMENT
from skyledger.main import app
from skyledger.models.db import Base


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for seeding documents."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestGetLedger:
    async def test_empty_ledger(self, client: AsyncClient) -> None:
        """Returns an empty ledger before any run persisted one."""
        response = await client.get("/ledger")

        assert response.status_code == 200
        assert response.json() == {"items": {}, "total_invested": 0, "unique_items": 0}

    async def test_persisted_ledger(self, client: AsyncClient, session: AsyncSession) -> None:
        await write_document(
            session, DEFAULT_COLLECTION, LEDGER_DOCUMENT, {"Diamond": 5, "Sword": 2}
        )
        await session.commit()

        response = await client.get("/ledger")

        data = response.json()
        assert data["items"] == {"Diamond": 5, "Sword": 2}
        assert data["total_invested"] == 7
        assert data["unique_items"] == 2


class TestGetSnapshot:
    async def test_persisted_snapshot(self, client: AsyncClient, session: AsyncSession) -> None:
        await write_document(
            session, DEFAULT_COLLECTION, PREVIOUS_SNAPSHOT_DOCUMENT, {"Coal": 64, "Bread": 3}
        )
        await session.commit()

        response = await client.get("/snapshot")

        assert response.status_code == 200
        data = response.json()
        assert data["items"] == {"Coal": 64, "Bread": 3}
        assert data["total_items"] == 67
        assert data["unique_items"] == 2

    async def test_other_collections_ignored(
        self, client: AsyncClient, session: AsyncSession
    ) -> None:
        await write_document(session, "someone_else", PREVIOUS_SNAPSHOT_DOCUMENT, {"Coal": 1})
        await session.commit()

        response = await client.get("/snapshot")

        assert response.json()["items"] == {}
