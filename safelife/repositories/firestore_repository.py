"""
Firestore Document Store

Primary implementation that wraps Google Cloud Firestore operations.
Paths map one-to-one onto Firestore collection/document paths, including
nested sub-collections such as Users/{id}/queries.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore
from google.oauth2 import service_account

from ..common.error_handling import StoreConnectionError
from .base import DocumentStoreInterface, StoredDocument, WriteResult

logger = logging.getLogger(__name__)


def load_credentials(credentials_json: Optional[str]) -> service_account.Credentials:
    """
    Build service-account credentials from raw credential JSON.

    Args:
        credentials_json: Contents of a service-account key file

    Returns:
        Credentials usable by the Firestore client

    Raises:
        StoreConnectionError: If the JSON is absent or malformed
    """
    if not credentials_json:
        raise StoreConnectionError("Firestore credential JSON is missing (FIREBASE_JSON)")
    try:
        info = json.loads(credentials_json)
        return service_account.Credentials.from_service_account_info(info)
    except (ValueError, TypeError, GoogleAuthError) as e:
        raise StoreConnectionError(f"Firestore credential JSON is malformed: {e}") from e


class FirestoreDocumentStore(DocumentStoreInterface):
    """
    Firestore implementation of DocumentStoreInterface.

    Connection Management:
    - One firestore.Client per store, created at construction
    - The client multiplexes concurrent requests over its gRPC channel
    - close() releases the channel

    Error Handling:
    - Fail-fast: google.api_core errors propagate to caller
    """

    backend_name = "firestore"

    def __init__(
        self,
        project_id: str,
        credentials_json: Optional[str] = None,
        client: Optional[firestore.Client] = None,
    ):
        """
        Initialize Firestore store.

        Args:
            project_id: Google Cloud project id
            credentials_json: Raw service-account JSON (ignored when client is given)
            client: Pre-built Firestore client, mainly for tests
        """
        self.project_id = project_id

        if client is not None:
            self._client = client
        else:
            credentials = load_credentials(credentials_json)
            try:
                self._client = firestore.Client(project=project_id, credentials=credentials)
            except (ValueError, GoogleAuthError) as e:
                raise StoreConnectionError(f"Could not create Firestore client: {e}") from e
            logger.info(f"Firestore store connected: project={project_id}")

    def get_document(self, path: str) -> Optional[Dict[str, Any]]:
        """Read a single document."""
        snapshot = self._client.document(path).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def list_documents(self, collection_path: str) -> List[StoredDocument]:
        """Read every document of a collection."""
        return [
            StoredDocument(
                id=snapshot.id,
                path=f"{collection_path}/{snapshot.id}",
                data=snapshot.to_dict() or {},
            )
            for snapshot in self._client.collection(collection_path).stream()
        ]

    def upsert_document(
        self,
        path: str,
        data: Dict[str, Any],
        merge: bool = False,
    ) -> WriteResult:
        """
        Write a document at a caller-supplied key.

        Fail-fast behavior: exceptions propagate to caller.
        """
        doc_ref = self._client.document(path)
        result = doc_ref.set(data, merge=merge)

        return WriteResult(
            path=path,
            update_time=result.update_time,
            document_id=doc_ref.id,
        )

    def insert_document(self, collection_path: str, data: Dict[str, Any]) -> WriteResult:
        """Insert a document under a Firestore auto-id."""
        update_time, doc_ref = self._client.collection(collection_path).add(data)

        return WriteResult(
            path=f"{collection_path}/{doc_ref.id}",
            update_time=update_time,
            document_id=doc_ref.id,
        )

    def close(self) -> None:
        """Close the gRPC channels of the client."""
        self._client.close()
        logger.info(f"Firestore store closed: project={self.project_id}")
