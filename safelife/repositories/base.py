"""
Document Store Interface Definitions

Defines the abstract interface for path-addressed document store operations.
This enables swapping implementations (Firestore, Atlas) without changing
consumer code.

Paths are slash-separated: an odd number of segments names a collection
("data", "Users/u1/queries"), an even number names a document
("data/food", "compare/commit").
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

# Collection names (schema-in-code)
COLLECTION_USERS = "Users"
COLLECTION_QUERIES = "queries"
COLLECTION_DATA = "data"
COLLECTION_COMPARE = "compare"
COLLECTION_WEBHOOKS = "webhooks"

# Fixed document ids
DOCUMENT_DISTRICTS = "districts"
DOCUMENT_COMMIT = "commit"
DOCUMENT_ETAGS = "etags"


def document_path(*segments: str) -> str:
    """
    Join path segments into a store path.

    Raises:
        ValueError: If a segment is empty or contains "/"
    """
    for segment in segments:
        if not segment or "/" in segment:
            raise ValueError(f"Invalid path segment: {segment!r}")
    return "/".join(segments)


def split_document_path(path: str) -> tuple:
    """
    Split a document path into (collection_path, document_id).

    Raises:
        ValueError: If the path does not name a document
    """
    segments = path.split("/")
    if len(segments) < 2 or len(segments) % 2 != 0 or not all(segments):
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


@dataclass
class StoredDocument:
    """
    A document as read from a collection listing.

    Attributes:
        id: Document key (last path segment)
        path: Full document path
        data: Document fields
    """
    id: str
    path: str
    data: Dict[str, Any]


@dataclass
class WriteResult:
    """
    Result of a single document write.

    Attributes:
        path: Path of the written document
        update_time: Server-side (Firestore) or acknowledged (Atlas) write time
        document_id: Key of the written document (store-generated for inserts)
        success: Whether the write succeeded
        error: Error message if the write failed
    """
    path: str
    update_time: Optional[datetime] = None
    document_id: Optional[str] = None
    success: bool = True
    error: Optional[str] = None


class DocumentStoreInterface(ABC):
    """
    Abstract interface for document store operations.

    Implementations:
    - FirestoreDocumentStore: Google Cloud Firestore
    - AtlasDocumentStore: MongoDB Atlas, collection paths used as collection names

    All methods are single round trips and follow fail-fast semantics:
    driver exceptions propagate to the caller. Writes at a caller-supplied
    key (upsert_document) and writes at a store-generated key
    (insert_document) are deliberately separate operations.
    """

    backend_name: str = "unknown"

    @abstractmethod
    def get_document(self, path: str) -> Optional[Dict[str, Any]]:
        """
        Read a single document.

        Args:
            path: Document path (e.g., "compare/commit")

        Returns:
            Document fields if the document exists, None otherwise
        """
        pass

    @abstractmethod
    def list_documents(self, collection_path: str) -> List[StoredDocument]:
        """
        Read every document of a collection.

        Args:
            collection_path: Collection path (e.g., "Users/u1/queries")

        Returns:
            Documents in the order returned by the store
        """
        pass

    @abstractmethod
    def upsert_document(
        self,
        path: str,
        data: Dict[str, Any],
        merge: bool = False,
    ) -> WriteResult:
        """
        Write a document at a caller-supplied key, creating it if needed.

        Args:
            path: Document path
            data: Fields to write
            merge: If True only the supplied fields are updated,
                   otherwise the whole document is replaced

        Returns:
            WriteResult with the write time
        """
        pass

    @abstractmethod
    def insert_document(self, collection_path: str, data: Dict[str, Any]) -> WriteResult:
        """
        Insert a new document under a store-generated key.

        Args:
            collection_path: Collection path (e.g., "webhooks")
            data: Document fields

        Returns:
            WriteResult with document_id set to the generated key
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the connection and pooled transport resources."""
        pass
