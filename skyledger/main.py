from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI

from skyledger.api import health_router, ledger_router
from skyledger.config import load_store_settings
from skyledger.db.database import create_engine, create_session_factory, init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the document store engine on startup and dispose it on shutdown."""
    settings = load_store_settings()
    engine = create_engine(settings)
    await init_db(engine)
    app.state.session_factory = create_session_factory(engine)
    app.state.document_collection = settings.document_collection
    yield
    await engine.dispose()


app = FastAPI(
    title="skyledger",
    version=pkg_version("skyledger"),
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(ledger_router)
