"""
Centralized error handling for the safelife store.

Defines the store exception hierarchy and the decorators/utilities that
translate backend driver failures (Firestore, PyMongo) into it, with
consistent logging across all store operations.
"""

import logging
from functools import wraps
from typing import Callable, Optional, Type, TypeVar

# Type variable for generic return types
T = TypeVar("T")


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, *, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class StoreConnectionError(StoreError):
    """Credential or network failure while connecting, or use after close()."""


class QueryError(StoreError):
    """A read round trip to the document store failed."""


class NotFoundError(QueryError):
    """The requested document does not exist."""


class WriteError(StoreError):
    """A write round trip to the document store failed."""


class DecodeError(StoreError):
    """A stored document does not have the expected shape."""


def store_operation(
    operation_name: str,
    error_cls: Type[StoreError] = QueryError,
):
    """
    Decorator for store operations with consistent error handling.

    Provides:
    - ERROR logging with stack trace on failure
    - Translation of driver exceptions into ``error_cls`` (cause chained)
    - StoreError subclasses raised inside the operation pass through unchanged

    Nothing is swallowed: every failure reaches the caller.

    Args:
        operation_name: Human-readable operation name (e.g., "get data")
        error_cls: StoreError subclass raised for driver failures

    Usage:
        @store_operation("get data", error_cls=QueryError)
        def get_data(self, resource: str) -> Data:
            ...
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            logger = logging.getLogger(func.__module__)
            try:
                return func(*args, **kwargs)
            except StoreError as e:
                logger.error(f"[{operation_name}] Failed: {e}")
                raise
            except Exception as e:
                logger.error(f"[{operation_name}] Failed: {e}", exc_info=True)
                raise error_cls(f"{operation_name} failed: {e}") from e

        return wrapper

    return decorator
