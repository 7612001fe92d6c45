"""Tests for the base repository."""
import pytest
from unittest.mock import MagicMock

from serenity.shared.utils import configure_pii_salt
from serenity.shared.database.connection import FirestoreConnection, StoreUnavailableError
from serenity.config import FirebaseConfig
from serenity.shared.database.repository import (
    BaseRepository,
    BulkDeleteError,
    NotFoundError,
    OwnershipError,
    RepositoryError,
    chunked,
)


@pytest.fixture(autouse=True)
def setup_pii_salt():
    configure_pii_salt("test_salt_that_is_at_least_32_characters_long")


def _snapshot(doc_id, data):
    snap = MagicMock()
    snap.exists = data is not None
    snap.id = doc_id
    snap.to_dict.return_value = data
    return snap


class TestRepositoryExceptions:

    def test_not_found_error(self):
        assert isinstance(NotFoundError("missing"), RepositoryError)

    def test_ownership_error(self):
        assert isinstance(OwnershipError("not yours"), RepositoryError)

    def test_bulk_delete_error_carries_counts(self):
        error = BulkDeleteError("boom", deleted_count=500, failed_batches=1)
        assert error.deleted_count == 500
        assert error.failed_batches == 1


class TestChunked:

    def test_exact_multiple(self):
        assert [len(c) for c in chunked(list(range(1000)), 500)] == [500, 500]

    def test_remainder_goes_to_last_chunk(self):
        assert [len(c) for c in chunked(list(range(1201)), 500)] == [500, 500, 201]

    def test_empty(self):
        assert chunked([], 500) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunked([1], 0)


class TestConnection:

    def test_db_unavailable_before_initialize(self):
        connection = FirestoreConnection(FirebaseConfig(project_id="p"))
        with pytest.raises(StoreUnavailableError):
            _ = connection.db
        assert connection.is_ready is False

    def test_initialize_requires_credentials(self):
        connection = FirestoreConnection(FirebaseConfig(project_id="p"))
        with pytest.raises(StoreUnavailableError):
            connection.initialize()

    def test_from_client(self):
        db = MagicMock()
        connection = FirestoreConnection.from_client(db)
        assert connection.db is db
        assert connection.is_ready is True

    def test_health_check_not_initialized(self):
        connection = FirestoreConnection(FirebaseConfig(project_id="p"))
        assert connection.health_check()["healthy"] is False


class TestBaseRepository:

    @pytest.fixture
    def db(self):
        return MagicMock()

    @pytest.fixture
    def repository(self, db):
        return BaseRepository(FirestoreConnection.from_client(db), "journalEntries")

    def test_find_by_id_returns_none_when_missing(self, repository, db):
        db.collection.return_value.document.return_value.get.return_value = _snapshot("x", None)
        assert repository.find_by_id("x") is None

    def test_find_by_id_includes_id(self, repository, db):
        db.collection.return_value.document.return_value.get.return_value = _snapshot(
            "e1", {"userId": "u1", "title": "Day"}
        )
        doc = repository.find_by_id("e1")
        assert doc == {"id": "e1", "userId": "u1", "title": "Day"}
        db.collection.assert_called_with("journalEntries")

    def test_get_owned_raises_not_found(self, repository, db):
        db.collection.return_value.document.return_value.get.return_value = _snapshot("x", None)
        with pytest.raises(NotFoundError):
            repository.get_owned("x", "u1")

    def test_get_owned_raises_for_other_owner(self, repository, db):
        db.collection.return_value.document.return_value.get.return_value = _snapshot(
            "e1", {"userId": "someone_else"}
        )
        with pytest.raises(OwnershipError):
            repository.get_owned("e1", "u1")

    def test_add_returns_generated_id(self, repository, db):
        doc_ref = MagicMock()
        doc_ref.id = "new_id"
        db.collection.return_value.add.return_value = (None, doc_ref)
        assert repository.add({"userId": "u1"}) == "new_id"


class TestBulkDelete:

    @pytest.fixture
    def db(self):
        db = MagicMock()
        self.batches = []

        def new_batch():
            batch = MagicMock()
            self.batches.append(batch)
            return batch

        db.batch.side_effect = new_batch
        return db

    @pytest.fixture
    def repository(self, db):
        return BaseRepository(FirestoreConnection.from_client(db), "chatConversations")

    def _seed(self, db, count):
        docs = [MagicMock(reference=f"ref_{i}") for i in range(count)]
        db.collection.return_value.where.return_value.stream.return_value = docs

    def test_no_documents_returns_zero(self, repository, db):
        self._seed(db, 0)
        assert repository.delete_all_for_user("u1") == 0
        db.batch.assert_not_called()

    def test_deletes_exactly_n_across_batches(self, repository, db):
        self._seed(db, 1234)

        deleted = repository.delete_all_for_user("u1")

        assert deleted == 1234
        assert len(self.batches) == 3
        sizes = [batch.delete.call_count for batch in self.batches]
        assert sizes == [500, 500, 234]
        assert all(batch.commit.call_count == 1 for batch in self.batches)

    def test_every_reference_deleted_once(self, repository, db):
        self._seed(db, 501)
        repository.delete_all_for_user("u1")
        refs = [c.args[0] for batch in self.batches for c in batch.delete.call_args_list]
        assert sorted(refs) == sorted(f"ref_{i}" for i in range(501))

    def test_partial_failure_keeps_other_batches(self, repository, db):
        self._seed(db, 1000)
        original = db.batch.side_effect

        def failing_second_batch():
            batch = original()
            if len(self.batches) == 2:
                batch.commit.side_effect = RuntimeError("unavailable")
            return batch

        db.batch.side_effect = failing_second_batch

        with pytest.raises(BulkDeleteError) as exc_info:
            repository.delete_all_for_user("u1")

        assert exc_info.value.deleted_count == 500
        assert exc_info.value.failed_batches == 1
        assert self.batches[0].commit.call_count == 1
