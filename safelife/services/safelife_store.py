"""
Safelife Store - typed data access over the document store.

Provides:
1. User listing with nested resource queries
2. Resource data documents (full replace) and per-state district documents (merge)
3. Commit and ETag markers used by the upstream ingestion job
4. Webhook registration

Every operation is one or more round trips with no retry. Failures surface as
StoreError subclasses, except per-state writes of put_food_data, which are
reported in its returned list.
"""

import os
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..common.error_handling import (
    DecodeError,
    NotFoundError,
    QueryError,
    StoreConnectionError,
    WriteError,
    store_operation,
)
from ..common.logger import get_logger
from ..common.models import Data, ResourceData, ResourceQuery, User
from ..repositories.base import (
    COLLECTION_COMPARE,
    COLLECTION_DATA,
    COLLECTION_QUERIES,
    COLLECTION_USERS,
    COLLECTION_WEBHOOKS,
    DOCUMENT_COMMIT,
    DOCUMENT_DISTRICTS,
    DOCUMENT_ETAGS,
    DocumentStoreInterface,
    WriteResult,
    document_path,
)
from ..repositories.config import StoreConfig, create_document_store

ModelT = TypeVar("ModelT", bound=BaseModel)

FIELD_LAST_COMMIT = "lastcommit"
FIELD_ETAG = "etag"
FIELD_URL = "url"


def group_by_state_and_district(
    records: List[ResourceData],
) -> Dict[str, Dict[str, List[ResourceData]]]:
    """
    Group resource records by state, then by district.

    States and districts keep the order in which they first appear.
    """
    grouped: Dict[str, Dict[str, List[ResourceData]]] = {}
    for record in records:
        grouped.setdefault(record.state, {}).setdefault(record.district, []).append(record)
    return grouped


class SafelifeStore:
    """
    Data-access facade over a Firestore or Atlas document store.

    The store holds one connection for its whole life. It is safe to share
    between threads to the extent the underlying client is; no locking is
    done here. After close() every operation raises StoreConnectionError.
    """

    def __init__(self, document_store: DocumentStoreInterface):
        self._document_store = document_store
        self._closed = False
        self.logger = get_logger(
            __name__,
            project=getattr(document_store, "project_id", None),
            backend=document_store.backend_name,
        )

    @classmethod
    def connect(cls, project_id: str, credentials_json: Optional[str] = None) -> "SafelifeStore":
        """
        Connect to Firestore.

        Args:
            project_id: Google Cloud project id
            credentials_json: Raw service-account JSON; defaults to FIREBASE_JSON

        Raises:
            StoreConnectionError: If credentials are absent or malformed
        """
        from ..repositories.firestore_repository import FirestoreDocumentStore

        if credentials_json is None:
            credentials_json = os.getenv("FIREBASE_JSON")
        return cls(FirestoreDocumentStore(project_id, credentials_json=credentials_json))

    @classmethod
    def from_env(cls) -> "SafelifeStore":
        """Connect to the backend selected by STORE_BACKEND."""
        return cls(create_document_store(StoreConfig.from_env()))

    def __enter__(self) -> "SafelifeStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    @property
    def document_store(self) -> DocumentStoreInterface:
        """The live document store; raises once the facade is closed."""
        if self._closed:
            raise StoreConnectionError("Store is closed")
        return self._document_store

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the connection. Later calls are no-ops."""
        if self._closed:
            return
        self._document_store.close()
        self._closed = True

    def _decode(self, model: Type[ModelT], data: Dict[str, Any], path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"Unexpected document shape at {path}: {e}", path=path) from e

    def _get_existing(self, path: str) -> Dict[str, Any]:
        data = self.document_store.get_document(path)
        if data is None:
            raise NotFoundError(f"No document at {path}", path=path)
        return data

    def _read_marker(self, path: str, field: str) -> Optional[str]:
        value = self._get_existing(path).get(field)
        if value is not None and not isinstance(value, str):
            raise DecodeError(f"{path}.{field} is not a string: {value!r}", path=path)
        return value

    # ===== Users =====

    @store_operation("list users with queries", error_cls=QueryError)
    def list_users_with_queries(self) -> List[User]:
        """
        List every user with its nested resource queries.

        One listing of Users, then one sequential fetch of
        Users/{id}/queries per user, in the order the store returned the users.
        """
        store = self.document_store
        users = []
        for document in store.list_documents(COLLECTION_USERS):
            self.logger.bind(path=document.path).debug("Reading user queries")
            queries = [
                self._decode(ResourceQuery, query.data, query.path)
                for query in store.list_documents(
                    document_path(COLLECTION_USERS, document.id, COLLECTION_QUERIES)
                )
            ]
            fields = {**document.data, "id": document.id, "queries": queries}
            users.append(self._decode(User, fields, document.path))
        return users

    # ===== Resource data =====

    @store_operation("get data", error_cls=QueryError)
    def get_data(self, resource: str) -> Data:
        """
        Read the resource document at data/{resource}.

        Raises:
            NotFoundError: If the document does not exist
            DecodeError: If the document is not a valid Data record
        """
        path = document_path(COLLECTION_DATA, resource)
        return self._decode(Data, self._get_existing(path), path)

    def get_food_data(self, resource: str) -> Data:
        """Read data/{resource}; same document and contract as get_data()."""
        return self.get_data(resource)

    @store_operation("put data", error_cls=WriteError)
    def put_data(self, details: Data, resource: str) -> WriteResult:
        """Replace the whole document at data/{resource}."""
        path = document_path(COLLECTION_DATA, resource)
        result = self.document_store.upsert_document(path, details.model_dump(), merge=False)
        self.logger.bind(path=path).info(f"Data written - {result.update_time}")
        return result

    @store_operation("put food data", error_cls=WriteError)
    def put_food_data(self, details: Data, resource: str) -> List[WriteResult]:
        """
        Merge resource records into one districts document per state.

        Records are grouped by state then district and each state is written
        to data/{resource}/{state}/districts as {district: [records]}.
        States are written one after another; a failed state is logged and
        recorded, and the remaining states are still attempted. There is no
        atomicity across states.

        Returns:
            One WriteResult per distinct state, in first-appearance order
        """
        store = self.document_store
        results = []
        for state, districts in group_by_state_and_district(details.data).items():
            try:
                path = document_path(COLLECTION_DATA, resource, state, DOCUMENT_DISTRICTS)
            except ValueError as e:
                # Empty or slash-containing states would address another document
                self.logger.error(f"Data initialisation skipped {resource} for {state!r}: {e}")
                results.append(WriteResult(
                    path=f"{COLLECTION_DATA}/{resource}/{state}/{DOCUMENT_DISTRICTS}",
                    success=False,
                    error=str(e),
                ))
                continue

            state_logger = self.logger.bind(path=path)
            payload = {
                district: [record.model_dump() for record in records]
                for district, records in districts.items()
            }
            try:
                result = store.upsert_document(path, payload, merge=True)
            except Exception as e:
                state_logger.exception(f"Data initialisation failed {resource} for {state}: {e}")
                results.append(WriteResult(path=path, success=False, error=str(e)))
                continue
            state_logger.info(f"Data initialised {resource} for {state} - {result.update_time}")
            results.append(result)

        failed = sum(1 for result in results if not result.success)
        if failed:
            self.logger.warning(f"{failed}/{len(results)} state writes failed for {resource}")
        return results

    # ===== Markers =====

    @store_operation("set last checked commit", error_cls=WriteError)
    def set_last_checked_commit(self, commit_id: str) -> WriteResult:
        path = document_path(COLLECTION_COMPARE, DOCUMENT_COMMIT)
        return self.document_store.upsert_document(path, {FIELD_LAST_COMMIT: commit_id}, merge=True)

    @store_operation("get last checked commit", error_cls=QueryError)
    def get_last_checked_commit(self) -> Optional[str]:
        """
        Read compare/commit.lastcommit.

        Returns None when the marker document exists without the field.

        Raises:
            NotFoundError: If the marker document was never written
        """
        return self._read_marker(document_path(COLLECTION_COMPARE, DOCUMENT_COMMIT), FIELD_LAST_COMMIT)

    @store_operation("set etag", error_cls=WriteError)
    def set_etag(self, tag: str) -> WriteResult:
        path = document_path(COLLECTION_COMPARE, DOCUMENT_ETAGS)
        return self.document_store.upsert_document(path, {FIELD_ETAG: tag}, merge=True)

    @store_operation("get etag", error_cls=QueryError)
    def get_etag(self) -> Optional[str]:
        """Read compare/etags.etag; same missing-document rules as get_last_checked_commit()."""
        return self._read_marker(document_path(COLLECTION_COMPARE, DOCUMENT_ETAGS), FIELD_ETAG)

    # ===== Webhooks =====

    @store_operation("register webhook", error_cls=WriteError)
    def register_webhook(self, url: str) -> WriteResult:
        """
        Store a webhook URL under a generated key.

        URLs are not deduplicated.
        """
        result = self.document_store.insert_document(COLLECTION_WEBHOOKS, {FIELD_URL: url})
        self.logger.bind(path=result.path).info("Webhook registered")
        return result

    @store_operation("list webhooks", error_cls=QueryError)
    def list_webhooks(self) -> List[str]:
        """All registered webhook URLs, in the order the store returns them."""
        urls = []
        for document in self.document_store.list_documents(COLLECTION_WEBHOOKS):
            url = document.data.get(FIELD_URL)
            if url is None:
                self.logger.bind(path=document.path).debug("Skipping webhook without url")
                continue
            urls.append(url)
        return urls


# Singleton store instance
_store_instance: Optional[SafelifeStore] = None


def get_store() -> SafelifeStore:
    """
    Get the process-wide store.

    Uses singleton pattern so that the underlying client (and its
    connection pool) is shared by every caller.

    Raises:
        StoreConnectionError: If the configured backend cannot be reached
    """
    global _store_instance

    if _store_instance is None or _store_instance.closed:
        _store_instance = SafelifeStore.from_env()

    return _store_instance


def reset_store() -> None:
    """
    Close and forget the store singleton.

    Used for testing or when configuration changes.
    """
    global _store_instance

    if _store_instance is not None:
        _store_instance.close()

    _store_instance = None
