from skyledger.db.database import (
    create_engine,
    create_session_factory,
    get_collection,
    get_session,
    init_db,
)
from skyledger.db.operations import (
    get_document,
    list_documents,
    read_document,
    write_document,
)
from skyledger.db.store import LEDGER_DOCUMENT, PREVIOUS_SNAPSHOT_DOCUMENT, DocumentStore

__all__ = [
    "LEDGER_DOCUMENT",
    "PREVIOUS_SNAPSHOT_DOCUMENT",
    "DocumentStore",
    "create_engine",
    "create_session_factory",
    "get_collection",
    "get_document",
    "get_session",
    "init_db",
    "list_documents",
    "read_document",
    "write_document",
]
