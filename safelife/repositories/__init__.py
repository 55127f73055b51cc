"""
Repository Pattern for Document Store Operations

Provides an abstraction layer over the hosted document database so that the
same data layout can be served from Firestore or MongoDB Atlas.

Public API:
- create_document_store(): Factory building the configured document store
- DocumentStoreInterface: Abstract path-level interface
- WriteResult: Result dataclass for write operations
- StoredDocument: Document returned by collection listings

Usage:
    from safelife.repositories import StoreConfig, create_document_store, document_path

    store = create_document_store(StoreConfig.from_env())
    store.upsert_document(document_path("compare", "commit"), {"lastcommit": sha}, merge=True)
    doc = store.get_document("compare/commit")
"""

from .base import (
    DocumentStoreInterface,
    StoredDocument,
    WriteResult,
    document_path,
    split_document_path,
)
from .config import (
    StoreBackend,
    StoreConfig,
    create_document_store,
)

__all__ = [
    "create_document_store",
    "DocumentStoreInterface",
    "StoredDocument",
    "WriteResult",
    "document_path",
    "split_document_path",
    "StoreBackend",
    "StoreConfig",
]
