"""
Document store used by tracker runs.

Each read opens its own session, so independent documents can be
loaded concurrently with asyncio.gather. Writes of related documents
go through write_many, which commits them together.
"""

import logging
from collections.abc import Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skyledger.db.operations import read_document, write_document
from skyledger.models.db import Base
from skyledger.models.failure import TransientIOError
from skyledger.services.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)

PREVIOUS_SNAPSHOT_DOCUMENT = "prev_inventory"
LEDGER_DOCUMENT = "investment_record"

DEFAULT_COLLECTION = "skyblock_tracker"


class DocumentStore:
    """Reads and fully replaces item-count documents."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        collection: str = DEFAULT_COLLECTION,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.collection = collection
        self.retry_policy = retry_policy or RetryPolicy()

    async def _create_tables(self) -> None:
        async with self.session_factory() as session:
            conn = await session.connection()
            await conn.run_sync(Base.metadata.create_all)
            await session.commit()

    async def ensure_schema(self) -> None:
        """
        Create the document table if it does not exist yet.

        Raises:
            TransientIOError: If every attempt failed
        """
        try:
            await retry_async(
                self._create_tables,
                self.retry_policy,
                description="Document store schema check",
                retry_on=(SQLAlchemyError,),
            )
        except SQLAlchemyError as e:
            raise TransientIOError(f"Document store unavailable: {e}", detail=str(e)) from e

    async def _read_once(self, name: str) -> dict[str, int]:
        async with self.session_factory() as session:
            data = await read_document(session, self.collection, name)
        return {item: int(count) for item, count in data.items()}

    async def _write_once(self, documents: Mapping[str, Mapping[str, int]]) -> None:
        async with self.session_factory() as session:
            try:
                for name, data in documents.items():
                    await write_document(session, self.collection, name, dict(data))
                await session.commit()
            except SQLAlchemyError:
                await session.rollback()
                raise

    async def read(self, name: str) -> dict[str, int]:
        """
        Read a document, returning an empty mapping if it does not exist.

        Raises:
            TransientIOError: If every attempt failed
        """
        try:
            data = await retry_async(
                lambda: self._read_once(name),
                self.retry_policy,
                description=f"Read of {self.collection}/{name}",
                retry_on=(SQLAlchemyError,),
            )
        except SQLAlchemyError as e:
            raise TransientIOError(f"Failed to read {name}: {e}", detail=str(e)) from e

        logger.debug("Read %s/%s (%d entries)", self.collection, name, len(data))
        return data

    async def write(self, name: str, data: Mapping[str, int]) -> None:
        """
        Replace a document with the given data.

        Raises:
            TransientIOError: If every attempt failed
        """
        await self.write_many({name: data})

    async def write_many(self, documents: Mapping[str, Mapping[str, int]]) -> None:
        """
        Replace several documents in a single transaction.

        Either every document is replaced or none is.

        Raises:
            TransientIOError: If every attempt failed
        """
        names = ", ".join(documents)
        try:
            await retry_async(
                lambda: self._write_once(documents),
                self.retry_policy,
                description=f"Write of {self.collection}/{names}",
                retry_on=(SQLAlchemyError,),
            )
        except SQLAlchemyError as e:
            raise TransientIOError(f"Failed to write {names}: {e}", detail=str(e)) from e

        for name, data in documents.items():
            logger.debug("Wrote %s/%s (%d entries)", self.collection, name, len(data))
