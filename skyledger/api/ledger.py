"""
Ledger API endpoints.

Read-only views of the persisted investment ledger and last snapshot.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from skyledger.db.database import get_collection, get_session
from skyledger.db.operations import read_document
from skyledger.db.store import LEDGER_DOCUMENT, PREVIOUS_SNAPSHOT_DOCUMENT

router = APIRouter(tags=["ledger"])


class LedgerResponse(BaseModel):
    """Response model for the investment ledger."""

    items: dict[str, int] = Field(
        default_factory=dict,
        description="Map of item names to net invested quantity",
    )
    total_invested: int = 0
    unique_items: int = 0


class SnapshotResponse(BaseModel):
    """Response model for the last observed inventory snapshot."""

    items: dict[str, int] = Field(
        default_factory=dict,
        description="Map of item names to quantity held",
    )
    total_items: int = 0
    unique_items: int = 0


@router.get("/ledger", response_model=LedgerResponse)
async def get_ledger(
    collection: Annotated[str, Depends(get_collection)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> LedgerResponse:
    """
    Get the investment ledger.

    Returns an empty ledger if no run has persisted one yet.
    """
    data = await read_document(session, collection, LEDGER_DOCUMENT)
    items = {name: int(count) for name, count in data.items()}
    return LedgerResponse(
        items=items,
        total_invested=sum(items.values()),
        unique_items=len(items),
    )


@router.get("/snapshot", response_model=SnapshotResponse)
async def get_snapshot(
    collection: Annotated[str, Depends(get_collection)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SnapshotResponse:
    """
    Get the last observed inventory snapshot.

    Returns an empty snapshot if no run has persisted one yet.
    """
    data = await read_document(session, collection, PREVIOUS_SNAPSHOT_DOCUMENT)
    items = {name: int(count) for name, count in data.items()}
    return SnapshotResponse(
        items=items,
        total_items=sum(items.values()),
        unique_items=len(items),
    )
