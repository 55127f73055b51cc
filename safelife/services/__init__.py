"""
Services module for typed store operations.

SafelifeStore wraps a document store with the operations the resource
ingestion and notification jobs rely on.
"""

from safelife.services.safelife_store import (
    SafelifeStore,
    get_store,
    group_by_state_and_district,
    reset_store,
)

__all__ = [
    "SafelifeStore",
    "get_store",
    "group_by_state_and_district",
    "reset_store",
]
