"""
Document Store Configuration and Factory

Provides factory function to get the appropriate document store
implementation based on environment configuration.
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .base import DocumentStoreInterface

logger = logging.getLogger(__name__)


class StoreBackend(str, Enum):
    """Document store backend."""
    FIRESTORE = "firestore"
    ATLAS = "atlas"


@dataclass
class StoreConfig:
    """
    Configuration for document store initialization.

    Loaded from environment variables with sensible defaults.
    """
    backend: StoreBackend = StoreBackend.FIRESTORE

    # Firestore
    project_id: Optional[str] = None
    credentials_json: Optional[str] = None

    # Atlas
    mongodb_uri: Optional[str] = None
    database: str = "safelife"

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - STORE_BACKEND: firestore (default) or atlas
        - FIREBASE_PROJECT_ID: Google Cloud project id
        - FIREBASE_JSON: Raw service-account credential JSON
        - MONGODB_URI: Atlas MongoDB connection string
        - MONGODB_DATABASE: Database name (default: safelife)

        Credentials are not validated here; the store constructors raise
        StoreConnectionError when they are absent or malformed.

        Returns:
            StoreConfig instance
        """
        backend_str = os.getenv("STORE_BACKEND", "firestore").lower()
        try:
            backend = StoreBackend(backend_str)
        except ValueError:
            logger.warning(f"Invalid STORE_BACKEND '{backend_str}', defaulting to firestore")
            backend = StoreBackend.FIRESTORE

        return cls(
            backend=backend,
            project_id=os.getenv("FIREBASE_PROJECT_ID"),
            credentials_json=os.getenv("FIREBASE_JSON"),
            mongodb_uri=os.getenv("MONGODB_URI"),
            database=os.getenv("MONGODB_DATABASE", "safelife"),
        )


def create_document_store(config: StoreConfig) -> DocumentStoreInterface:
    """
    Build a document store for the configured backend.

    Args:
        config: Store configuration

    Returns:
        DocumentStoreInterface implementation

    Raises:
        StoreConnectionError: If credentials are missing/malformed or the
            backend cannot be reached
    """
    if config.backend == StoreBackend.ATLAS:
        from .atlas_repository import AtlasDocumentStore
        return AtlasDocumentStore(
            mongodb_uri=config.mongodb_uri or "",
            database=config.database,
        )

    from .firestore_repository import FirestoreDocumentStore
    return FirestoreDocumentStore(
        project_id=config.project_id or "",
        credentials_json=config.credentials_json,
    )

