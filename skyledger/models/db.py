"""
SQLAlchemy ORM models for persistent storage.

The tracker persists whole JSON documents addressed by collection and
name, mirroring a document store: reads return the full document and
writes replace it.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class TrackerDocumentDB(Base):
    """
    A named JSON document inside a logical collection.

    Holds either the last observed snapshot or the investment ledger.
    """

    __tablename__ = "tracker_documents"
    __table_args__ = (UniqueConstraint("collection", "name", name="uq_collection_document"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<TrackerDocumentDB(collection={self.collection}, name={self.name})>"
