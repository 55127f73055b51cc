"""
Atlas Document Store

MongoDB implementation of the document store, for deployments that keep the
same data layout on Atlas instead of Firestore.

Collection paths are used verbatim as MongoDB collection names
("Users/u1/queries" is one collection) and the last document path segment
becomes the document _id.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..common.error_handling import StoreConnectionError
from .base import DocumentStoreInterface, StoredDocument, WriteResult, split_document_path

logger = logging.getLogger(__name__)


class AtlasDocumentStore(DocumentStoreInterface):
    """
    Atlas implementation of DocumentStoreInterface.

    Connection Management:
    - One MongoClient per store, created at construction
    - PyMongo handles the connection pool internally
    - Reachability is verified with a ping when verify=True

    Error Handling:
    - Fail-fast: All errors propagate to caller
    - No silent failures - consumers must handle exceptions
    """

    backend_name = "atlas"

    def __init__(
        self,
        mongodb_uri: str,
        database: str = "safelife",
        client: Optional[MongoClient] = None,
        verify: bool = True,
        server_selection_timeout_ms: int = 5000,
    ):
        """
        Initialize Atlas store with connection parameters.

        Args:
            mongodb_uri: MongoDB connection string (Atlas URI)
            database: Database name (default: "safelife")
            client: Pre-built MongoClient, mainly for tests
            verify: Ping the server before returning
            server_selection_timeout_ms: Fail fast when the cluster is unreachable
        """
        if not mongodb_uri and client is None:
            raise StoreConnectionError("MongoDB URI is required")

        self._mongodb_uri = mongodb_uri
        self._database_name = database

        try:
            if client is not None:
                self._client = client
            else:
                self._client = MongoClient(
                    mongodb_uri,
                    serverSelectionTimeoutMS=server_selection_timeout_ms,
                )
            if verify:
                self._client.admin.command("ping")
        except PyMongoError as e:
            raise StoreConnectionError(f"Could not connect to MongoDB: {e}") from e

        self._db: Database = self._client[database]
        logger.info(f"Atlas store connected: {database}")

    def _get_collection(self, collection_path: str) -> Collection:
        """Get the MongoDB collection backing a collection path."""
        return self._db[collection_path]

    def get_document(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a single document."""
        collection_path, doc_id = split_document_path(path)
        document = self._get_collection(collection_path).find_one({"_id": doc_id})
        if document is None:
            return None
        document.pop("_id", None)
        return document

    def list_documents(self, collection_path: str) -> List[StoredDocument]:
        """Read every document of a collection."""
        documents = []
        for document in self._get_collection(collection_path).find({}):
            doc_id = str(document.pop("_id"))
            documents.append(
                StoredDocument(id=doc_id, path=f"{collection_path}/{doc_id}", data=document)
            )
        return documents

    def upsert_document(
        self,
        path: str,
        data: Dict[str, Any],
        merge: bool = False,
    ) -> WriteResult:
        """
        Write a document at a caller-supplied key.

        Merge uses $set so that fields not supplied are left untouched;
        otherwise the document is replaced.
        Fail-fast behavior: exceptions propagate to caller.
        """
        collection_path, doc_id = split_document_path(path)
        collection = self._get_collection(collection_path)

        if merge:
            collection.update_one({"_id": doc_id}, {"$set": data}, upsert=True)
        else:
            collection.replace_one({"_id": doc_id}, data, upsert=True)

        return WriteResult(
            path=path,
            update_time=datetime.now(timezone.utc),
            document_id=doc_id,
        )

    def insert_document(self, collection_path: str, data: Dict[str, Any]) -> WriteResult:
        """Insert a document under a generated ObjectId."""
        # insert_one adds _id to the dict it is given
        result = self._get_collection(collection_path).insert_one(dict(data))
        doc_id = str(result.inserted_id)

        return WriteResult(
            path=f"{collection_path}/{doc_id}",
            update_time=datetime.now(timezone.utc),
            document_id=doc_id,
        )

    def close(self) -> None:
        """Close the MongoDB client and its connection pool."""
        self._client.close()
        logger.info(f"Atlas store closed: {self._database_name}")
