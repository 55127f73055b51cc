"""
Logging setup for the safelife store.

Store log lines carry their context (project, backend and the document or
collection path being touched) as a key=value prefix, so a failed write in
the log can be traced back to the document it addressed:

    [project=coronasafe-life backend=firestore path=data/food/Kerala/districts] Data initialised ...
"""

import logging
import sys
from typing import Any, Optional

from .config import Config

SIMPLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# Parseable by log aggregators
JSON_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", "message": "%(message)s"}'


class StoreLogAdapter(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with the store context.

    Context keys with a None value are left out. bind() returns a new
    adapter with extra keys; the original is unchanged.
    """

    def process(self, msg, kwargs):
        context = " ".join(f"{key}={value}" for key, value in self.extra.items() if value is not None)
        if context:
            return f"[{context}] {msg}", kwargs
        return msg, kwargs

    def bind(self, **context: Any) -> "StoreLogAdapter":
        """Return an adapter for the same logger with additional context."""
        return StoreLogAdapter(self.logger, {**self.extra, **context})


def setup_logging(
    level: Optional[str] = None,
    format: Optional[str] = None,
    debug: Optional[bool] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name; defaults to Config.LOG_LEVEL
        format: "simple" or "json"; defaults to Config.LOG_FORMAT
        debug: Force DEBUG regardless of level; defaults to Config.DEBUG_MODE
    """
    if debug is None:
        debug = Config.DEBUG_MODE
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if (format or Config.LOG_FORMAT) == "json":
        handler.setFormatter(logging.Formatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)


def get_logger(name: str, **context: Any) -> StoreLogAdapter:
    """
    Get a store logger.

    Args:
        name: Logger name (usually __name__)
        **context: Prefix fields, e.g. project="coronasafe-life", backend="firestore"
    """
    return StoreLogAdapter(logging.getLogger(name), context)
