"""
Database document operations.

Provides async functions for reading, replacing and listing named
documents within a collection.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skyledger.models.db import TrackerDocumentDB

async def get_document(
    session: AsyncSession, collection: str, name: str
) -> TrackerDocumentDB | None:
    """
    Get a document by collection and name.

    Returns None if the document does not exist.
    """
    result = await session.execute(
        select(TrackerDocumentDB).where(
            TrackerDocumentDB.collection == collection,
            TrackerDocumentDB.name == name,
        )
    )
    return result.scalar_one_or_none()

async def read_document(session: AsyncSession, collection: str, name: str) -> dict[str, Any]:
    """Read a document's data, or an empty mapping if it does not exist."""
    document = await get_document(session, collection, name)
    if document is None:
        return {}
    return dict(document.data or {})

async def write_document(
    session: AsyncSession,
    collection: str,
    name: str,
    data: dict[str, Any],
) -> TrackerDocumentDB:
    """
    Replace a document's data wholesale, creating it if needed.

    No merge with the previous contents takes place.
    """
    document = await get_document(session, collection, name)
    if document is None:
        document = TrackerDocumentDB(collection=collection, name=name, data=dict(data))
        session.add(document)
    else:
        # Assign a new object so the JSON column is flagged as modified
        document.data = dict(data)

    await session.flush()
    return document


async def list_documents(session: AsyncSession, collection: str) -> list[str]:
    """Names of all documents in a collection, sorted."""
    result = await session.execute(
        select(TrackerDocumentDB.name)
        .where(TrackerDocumentDB.collection == collection)
        .order_by(TrackerDocumentDB.name)
    )
    return list(result.scalars().all())
