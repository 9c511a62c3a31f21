"""
Database engine and session management.

Engines are created explicitly by whoever owns the process lifecycle
(the tracker context or the API lifespan); nothing connects at import.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from skyledger.config import StoreSettings
from skyledger.db.store import DEFAULT_COLLECTION
from skyledger.models.db import Base


def create_engine(settings: StoreSettings) -> AsyncEngine:
    """Create the async engine for the configured document store."""
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    The session factory is installed on app.state by the API lifespan.

    Usage in FastAPI:
        @app.get("/ledger")
        async def get_ledger(session: AsyncSession = Depends(get_session)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError:
            await session.rollback()
            raise


def get_collection(request: Request) -> str:
    """Dependency that provides the tracker's document collection name."""
    return getattr(request.app.state, "document_collection", DEFAULT_COLLECTION)


async def init_db(engine: AsyncEngine) -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at process startup.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
