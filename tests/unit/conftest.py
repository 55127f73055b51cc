"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- Environment variable isolation (prevents credential leakage)
- Store singleton reset between tests

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from helpers.fake_document_store import FakeDocumentStore
from safelife.services.safelife_store import SafelifeStore, reset_store


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate test environment from real credentials and configurations.

    Unit tests must never reach Firestore or Atlas.
    """
    for name in (
        "STORE_BACKEND",
        "FIREBASE_PROJECT_ID",
        "FIREBASE_JSON",
        "MONGODB_URI",
        "MONGODB_DATABASE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DEBUG_MODE", "false")


@pytest.fixture(autouse=True)
def reset_store_singleton():
    """Reset the store singleton before and after each test."""
    reset_store()
    yield
    reset_store()


@pytest.fixture
def fake_document_store():
    """Empty in-memory document store."""
    return FakeDocumentStore()


@pytest.fixture
def store(fake_document_store):
    """SafelifeStore over the in-memory document store."""
    return SafelifeStore(fake_document_store)
