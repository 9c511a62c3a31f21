"""
Health check endpoints.

/health only says the process is up. /ready checks that the document
table can be queried and reports which tracker documents exist, so a
deployment can tell "never ran" apart from "store unreachable".
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skyledger.db.database import get_collection, get_session
from skyledger.db.operations import list_documents
from skyledger.db.store import LEDGER_DOCUMENT, PREVIOUS_SNAPSHOT_DOCUMENT

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str


class StoreStatusResponse(BaseModel):
    """Document store readiness."""

    status: str
    collection: str
    snapshot_recorded: bool = False
    ledger_recorded: bool = False


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=StoreStatusResponse,
    responses={503: {"model": StoreStatusResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
    collection: Annotated[str, Depends(get_collection)],
) -> StoreStatusResponse:
    """
    Readiness probe.

    Returns 503 if the document table cannot be queried. A reachable
    store with no documents yet is ready; the flags show whether a run
    has persisted the snapshot and the ledger.
    """
    try:
        names = set(await list_documents(session, collection))
    except (SQLAlchemyError, OSError):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return StoreStatusResponse(status="unavailable", collection=collection)

    return StoreStatusResponse(
        status="ready",
        collection=collection,
        snapshot_recorded=PREVIOUS_SNAPSHOT_DOCUMENT in names,
        ledger_recorded=LEDGER_DOCUMENT in names,
    )
