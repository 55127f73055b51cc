"""
Tests for the document store implementations.

Both backends are exercised against mocked driver clients; no network
access happens.
"""

import json
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from pymongo.errors import ServerSelectionTimeoutError

from safelife.common.error_handling import StoreConnectionError
from safelife.repositories import (
    StoredDocument,
    WriteResult,
    document_path,
    split_document_path,
)
from safelife.repositories.atlas_repository import AtlasDocumentStore
from safelife.repositories.firestore_repository import FirestoreDocumentStore, load_credentials

UPDATE_TIME = datetime(2021, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestPaths:
    """Tests for path helpers."""

    def test_document_path_joins_segments(self):
        assert document_path("data", "food", "Kerala", "districts") == "data/food/Kerala/districts"

    def test_split_document_path(self):
        assert split_document_path("Users/u1/queries/q1") == ("Users/u1/queries", "q1")
        assert split_document_path("compare/commit") == ("compare", "commit")

    @pytest.mark.parametrize("segment", ["", "Jammu/Kashmir"])
    def test_document_path_rejects_bad_segments(self, segment):
        with pytest.raises(ValueError, match="Invalid path segment"):
            document_path("data", "food", segment, "districts")

    @pytest.mark.parametrize("path", ["webhooks", "Users/u1/queries", "data//districts", ""])
    def test_split_rejects_non_document_paths(self, path):
        with pytest.raises(ValueError):
            split_document_path(path)


class TestWriteResult:
    """Tests for WriteResult dataclass."""

    def test_write_result_defaults(self):
        result = WriteResult(path="compare/commit")

        assert result.update_time is None
        assert result.document_id is None
        assert result.success is True
        assert result.error is None


class TestFirestoreDocumentStore:
    """Tests for FirestoreDocumentStore."""

    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def repo(self, client):
        return FirestoreDocumentStore("safelife-test", client=client)

    def test_get_document(self, repo, client):
        snapshot = MagicMock(exists=True)
        snapshot.to_dict.return_value = {"lastcommit": "abc"}
        client.document.return_value.get.return_value = snapshot

        assert repo.get_document("compare/commit") == {"lastcommit": "abc"}
        client.document.assert_called_once_with("compare/commit")

    def test_get_document_missing(self, repo, client):
        client.document.return_value.get.return_value = MagicMock(exists=False)

        assert repo.get_document("data/nothing") is None

    def test_get_empty_document_returns_empty_dict(self, repo, client):
        snapshot = MagicMock(exists=True)
        snapshot.to_dict.return_value = None
        client.document.return_value.get.return_value = snapshot

        assert repo.get_document("compare/etags") == {}

    def test_list_documents(self, repo, client):
        first = MagicMock(id="u1")
        first.to_dict.return_value = {"token": "t1"}
        second = MagicMock(id="u2")
        second.to_dict.return_value = {"token": "t2"}
        client.collection.return_value.stream.return_value = [first, second]

        documents = repo.list_documents("Users")

        client.collection.assert_called_once_with("Users")
        assert documents == [
            StoredDocument(id="u1", path="Users/u1", data={"token": "t1"}),
            StoredDocument(id="u2", path="Users/u2", data={"token": "t2"}),
        ]

    @pytest.mark.parametrize("merge", [True, False])
    def test_upsert_document(self, repo, client, merge):
        doc_ref = client.document.return_value
        doc_ref.id = "commit"
        doc_ref.set.return_value.update_time = UPDATE_TIME

        result = repo.upsert_document("compare/commit", {"lastcommit": "abc"}, merge=merge)

        doc_ref.set.assert_called_once_with({"lastcommit": "abc"}, merge=merge)
        assert result == WriteResult(path="compare/commit", update_time=UPDATE_TIME, document_id="commit")

    def test_insert_document_uses_generated_id(self, repo, client):
        client.collection.return_value.add.return_value = (UPDATE_TIME, MagicMock(id="Xy12"))

        result = repo.insert_document("webhooks", {"url": "https://a"})

        client.collection.return_value.add.assert_called_once_with({"url": "https://a"})
        assert result.document_id == "Xy12"
        assert result.path == "webhooks/Xy12"
        assert result.update_time == UPDATE_TIME

    def test_errors_propagate(self, repo, client):
        client.document.return_value.get.side_effect = RuntimeError("unavailable")

        with pytest.raises(RuntimeError):
            repo.get_document("data/food")

    def test_close(self, repo, client):
        repo.close()

        client.close.assert_called_once()

    def test_builds_client_from_credential_json(self):
        info = {"type": "service_account", "project_id": "safelife-test"}
        with patch(
            "safelife.repositories.firestore_repository.service_account.Credentials.from_service_account_info"
        ) as from_info, patch(
            "safelife.repositories.firestore_repository.firestore"
        ) as firestore_module:
            FirestoreDocumentStore("safelife-test", credentials_json=json.dumps(info))

        from_info.assert_called_once_with(info)
        firestore_module.Client.assert_called_once_with(
            project="safelife-test",
            credentials=from_info.return_value,
        )


class TestLoadCredentials:
    """Tests for load_credentials."""

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        with pytest.raises(StoreConnectionError, match="missing"):
            load_credentials(value)

    def test_not_json(self):
        with pytest.raises(StoreConnectionError, match="malformed"):
            load_credentials("not-json")

    def test_not_a_service_account(self):
        with pytest.raises(StoreConnectionError, match="malformed"):
            load_credentials(json.dumps({"type": "service_account"}))


class TestAtlasDocumentStore:
    """Tests for AtlasDocumentStore."""

    @pytest.fixture
    def mock_client(self):
        """Create a mock MongoClient class."""
        with patch("safelife.repositories.atlas_repository.MongoClient") as mock_client:
            yield mock_client

    @pytest.fixture
    def mock_db(self, mock_client):
        mock_db = MagicMock()
        mock_client.return_value.__getitem__.return_value = mock_db
        return mock_db

    @pytest.fixture
    def mock_collection(self, mock_db):
        mock_collection = MagicMock()
        mock_db.__getitem__.return_value = mock_collection
        return mock_collection

    def test_connect_pings_server(self, mock_client, mock_db):
        AtlasDocumentStore("mongodb://test", database="safelife")

        mock_client.assert_called_once_with("mongodb://test", serverSelectionTimeoutMS=5000)
        mock_client.return_value.admin.command.assert_called_once_with("ping")
        mock_client.return_value.__getitem__.assert_called_once_with("safelife")

    def test_connect_unreachable_raises(self, mock_client):
        mock_client.return_value.admin.command.side_effect = ServerSelectionTimeoutError("timed out")

        with pytest.raises(StoreConnectionError, match="timed out"):
            AtlasDocumentStore("mongodb://test")

    def test_connect_without_uri_raises(self):
        with pytest.raises(StoreConnectionError, match="URI"):
            AtlasDocumentStore("")

    def test_get_document_strips_id(self, mock_db, mock_collection):
        mock_collection.find_one.return_value = {"_id": "commit", "lastcommit": "abc"}

        repo = AtlasDocumentStore("mongodb://test")
        result = repo.get_document("compare/commit")

        mock_db.__getitem__.assert_called_with("compare")
        mock_collection.find_one.assert_called_once_with({"_id": "commit"})
        assert result == {"lastcommit": "abc"}

    def test_get_document_not_found(self, mock_collection):
        mock_collection.find_one.return_value = None

        repo = AtlasDocumentStore("mongodb://test")

        assert repo.get_document("data/nothing") is None

    def test_list_documents_uses_collection_path_as_name(self, mock_db, mock_collection):
        mock_collection.find.return_value = [{"_id": "q1", "resource": "food"}]

        repo = AtlasDocumentStore("mongodb://test")
        documents = repo.list_documents("Users/u1/queries")

        mock_db.__getitem__.assert_called_with("Users/u1/queries")
        assert documents == [
            StoredDocument(id="q1", path="Users/u1/queries/q1", data={"resource": "food"})
        ]

    def test_merge_upsert_uses_set(self, mock_db, mock_collection):
        payload = {"Ernakulam": [{"state": "Kerala", "district": "Ernakulam"}]}

        repo = AtlasDocumentStore("mongodb://test")
        result = repo.upsert_document("data/food/Kerala/districts", payload, merge=True)

        mock_db.__getitem__.assert_called_with("data/food/Kerala")
        mock_collection.update_one.assert_called_once_with(
            {"_id": "districts"}, {"$set": payload}, upsert=True
        )
        assert result.path == "data/food/Kerala/districts"
        assert result.document_id == "districts"
        assert result.update_time is not None

    def test_full_upsert_replaces(self, mock_collection):
        repo = AtlasDocumentStore("mongodb://test")
        repo.upsert_document("data/food", {"data": []}, merge=False)

        mock_collection.replace_one.assert_called_once_with({"_id": "food"}, {"data": []}, upsert=True)
        mock_collection.update_one.assert_not_called()

    def test_insert_document_returns_generated_id(self, mock_collection):
        mock_collection.insert_one.return_value = MagicMock(inserted_id="665f1c2e9b")
        data = {"url": "https://a"}

        repo = AtlasDocumentStore("mongodb://test")
        result = repo.insert_document("webhooks", data)

        assert result.document_id == "665f1c2e9b"
        assert result.path == "webhooks/665f1c2e9b"
        assert data == {"url": "https://a"}

    def test_invalid_path_raises(self, mock_collection):
        repo = AtlasDocumentStore("mongodb://test")

        with pytest.raises(ValueError):
            repo.get_document("webhooks")

    def test_close(self, mock_client):
        repo = AtlasDocumentStore("mongodb://test")
        repo.close()

        mock_client.return_value.close.assert_called_once()
