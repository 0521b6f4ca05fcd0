"""
Tests for document store backends.

Both backends must share atomic-write semantics:
- all-or-nothing batches
- version bump per touched document
- expected_version checks (0 = must not exist)
- array-contains / equality queries
"""

import pytest

from equiprent.domain.interfaces.document_store import QueryOp, WriteBatch, WriteOpType
from equiprent.domain.models import ConcurrentModificationError, ConsistencyWriteError
from equiprent.infrastructure.database import InMemoryDocumentStore, SQLAlchemyDocumentStore
from equiprent.infrastructure.database import sqlalchemy_document_store


@pytest.fixture(params=["inmemory", "sqlalchemy"])
def store(request, tmp_path):
    if request.param == "inmemory":
        yield InMemoryDocumentStore()
    else:
        sql_store = SQLAlchemyDocumentStore(f"sqlite:///{tmp_path / 'documents.db'}")
        yield sql_store
        sql_store.close()


class TestWriteBatch:
    """Tests for the batch builder."""

    def test_chaining_and_order(self):
        batch = (
            WriteBatch()
            .set("machines", "m1", {"brand": "Toyota"}, expected_version=0)
            .update("auxiliary_equipment", "a1", {"linked_equipment_id": "m1"})
            .delete("machines", "m0")
        )

        assert len(batch) == 3
        assert [op.op_type for op in batch] == [WriteOpType.SET, WriteOpType.UPDATE, WriteOpType.DELETE]
        assert batch.ops[0].expected_version == 0
        assert [op.doc_id for op in batch.ops_for("machines")] == ["m1", "m0"]

    def test_set_copies_data(self):
        data = {"brand": "Toyota"}
        batch = WriteBatch().set("machines", "m1", data)
        data["brand"] = "Hyster"
        assert batch.ops[0].data == {"brand": "Toyota"}

    def test_query_op_parse(self):
        assert QueryOp.parse("array-contains") == QueryOp.ARRAY_CONTAINS
        assert QueryOp.parse(QueryOp.EQUALS) == QueryOp.EQUALS
        with pytest.raises(ValueError):
            QueryOp.parse("in")


class TestDocumentStoreBasics:
    """CRUD and query behaviour."""

    def test_set_and_get(self, store):
        store.set("machines", "m1", {"brand": "Toyota", "ids": ["a1"]})

        snapshot = store.get("machines", "m1")
        assert snapshot.id == "m1"
        assert snapshot.data == {"brand": "Toyota", "ids": ["a1"]}
        assert snapshot.version == 1

    def test_get_missing_returns_none(self, store):
        assert store.get("machines", "nope") is None

    def test_new_ids_are_unique(self, store):
        ids = {store.new_id("machines") for _ in range(50)}
        assert len(ids) == 50

    def test_update_merges_fields(self, store):
        store.set("machines", "m1", {"brand": "Toyota", "model": "8FG"})
        store.update("machines", "m1", {"model": "8FGU25"})

        snapshot = store.get("machines", "m1")
        assert snapshot.data == {"brand": "Toyota", "model": "8FGU25"}
        assert snapshot.version == 2

    def test_delete(self, store):
        store.set("machines", "m1", {"brand": "Toyota"})
        store.delete("machines", "m1")
        assert store.get("machines", "m1") is None

    def test_delete_missing_is_noop(self, store):
        store.delete("machines", "ghost")
        assert store.list("machines") == []

    def test_list_is_per_collection(self, store):
        store.set("machines", "m1", {})
        store.set("auxiliary_equipment", "a1", {})
        assert [s.id for s in store.list("machines")] == ["m1"]

    def test_array_contains_query(self, store):
        store.set("machines", "m1", {"linked": ["a1", "a2"]})
        store.set("machines", "m2", {"linked": ["a3"]})
        store.set("machines", "m3", {"linked": None})

        matches = store.query("machines", "linked", "array-contains", "a2")
        assert [s.id for s in matches] == ["m1"]

    def test_equality_query(self, store):
        store.set("machines", "m1", {"chassis_number": "CH-1"})
        store.set("machines", "m2", {"chassis_number": "CH-2"})

        matches = store.query("machines", "chassis_number", QueryOp.EQUALS, "CH-2")
        assert [s.id for s in matches] == ["m2"]

    def test_read_results_are_copies(self, store):
        store.set("machines", "m1", {"linked": ["a1"]})
        store.get("machines", "m1").data["linked"].append("a2")
        assert store.get("machines", "m1").data["linked"] == ["a1"]


class TestAtomicWrite:
    """All-or-nothing semantics and optimistic versions."""

    def test_multi_document_commit(self, store):
        store.set("auxiliary_equipment", "a1", {"linked_equipment_id": None})

        store.atomic_write(
            WriteBatch()
            .set("machines", "m1", {"linked": ["a1"]}, expected_version=0)
            .update("auxiliary_equipment", "a1", {"linked_equipment_id": "m1"}, expected_version=1)
        )

        assert store.get("machines", "m1").data["linked"] == ["a1"]
        aux = store.get("auxiliary_equipment", "a1")
        assert aux.data["linked_equipment_id"] == "m1"
        assert aux.version == 2

    def test_update_of_missing_doc_rejects_whole_batch(self, store):
        batch = (
            WriteBatch()
            .set("machines", "m1", {"linked": ["a1"]})
            .update("auxiliary_equipment", "a1", {"linked_equipment_id": "m1"})
        )

        with pytest.raises(ConsistencyWriteError):
            store.atomic_write(batch)

        assert store.get("machines", "m1") is None

    def test_version_mismatch_rejects_whole_batch(self, store):
        store.set("machines", "m1", {"brand": "A"})
        store.set("auxiliary_equipment", "a1", {"linked_equipment_id": None})
        store.update("machines", "m1", {"brand": "B"})

        batch = (
            WriteBatch()
            .update("auxiliary_equipment", "a1", {"linked_equipment_id": "m1"}, expected_version=1)
            .update("machines", "m1", {"brand": "C"}, expected_version=1)
        )
        with pytest.raises(ConcurrentModificationError) as exc_info:
            store.atomic_write(batch)

        assert exc_info.value.doc_id == "m1"
        assert exc_info.value.actual_version == 2
        assert store.get("auxiliary_equipment", "a1").data["linked_equipment_id"] is None
        assert store.get("machines", "m1").data["brand"] == "B"

    def test_expected_version_zero_requires_absence(self, store):
        store.set("machines", "m1", {"brand": "A"})

        with pytest.raises(ConcurrentModificationError):
            store.atomic_write(WriteBatch().set("machines", "m1", {"brand": "B"}, expected_version=0))

        assert store.get("machines", "m1").data == {"brand": "A"}

    def test_delete_with_version_of_missing_doc_fails(self, store):
        with pytest.raises(ConcurrentModificationError):
            store.atomic_write(WriteBatch().delete("machines", "m1", expected_version=3))

    def test_document_touched_twice_bumps_version_once(self, store):
        store.set("machines", "m1", {"a": 1})
        store.atomic_write(
            WriteBatch()
            .update("machines", "m1", {"a": 2})
            .update("machines", "m1", {"b": 3})
        )

        snapshot = store.get("machines", "m1")
        assert snapshot.data == {"a": 2, "b": 3}
        assert snapshot.version == 2

    def test_set_then_delete_in_one_batch(self, store):
        store.atomic_write(WriteBatch().set("machines", "m1", {}).delete("machines", "m1"))
        assert store.get("machines", "m1") is None

    def test_empty_batch_is_noop(self, store):
        store.atomic_write(WriteBatch())
        assert store.list("machines") == []


class TestSQLAlchemyPersistence:
    """Documents survive reopening the database."""

    def test_reopen(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'persist.db'}"
        first = SQLAlchemyDocumentStore(url)
        first.set("machines", "m1", {"brand": "Toyota", "image_urls": ["u1"]})
        first.close()

        second = SQLAlchemyDocumentStore(url)
        snapshot = second.get("machines", "m1")
        second.close()

        assert snapshot.data == {"brand": "Toyota", "image_urls": ["u1"]}
        assert snapshot.version == 1


# ═══════════════════════════════════════════════════════════════════════════════
# Writers sharing one database
# ═══════════════════════════════════════════════════════════════════════════════

def commit_during_write(monkeypatch, action):
    """Run ``action`` once, after the next atomic write has read its rows."""
    real_apply = sqlalchemy_document_store.apply_batch
    pending = [action]

    def apply_after_action(current, ops):
        if pending:
            pending.pop()()
        return real_apply(current, ops)

    monkeypatch.setattr(sqlalchemy_document_store, "apply_batch", apply_after_action)


@pytest.fixture
def shared_stores(tmp_path):
    """Two stores on one sqlite file, like two server processes."""
    url = f"sqlite:///{tmp_path / 'shared.db'}"
    first, second = SQLAlchemyDocumentStore(url), SQLAlchemyDocumentStore(url)
    yield first, second
    first.close()
    second.close()


class TestSQLAlchemyInterleavedWriters:
    """A commit landing between another writer's read and its flush."""

    def test_interleaved_update_is_rejected(self, shared_stores, monkeypatch):
        ours, theirs = shared_stores
        ours.set("machines", "m1", {"linked_auxiliary_equipment_ids": []})
        commit_during_write(monkeypatch, lambda: theirs.atomic_write(
            WriteBatch().update("machines", "m1", {"linked_auxiliary_equipment_ids": ["a1"]}, expected_version=1)
        ))

        with pytest.raises(ConcurrentModificationError) as exc_info:
            ours.atomic_write(
                WriteBatch().update(
                    "machines", "m1", {"linked_auxiliary_equipment_ids": ["a1", "a2", "a3"]}, expected_version=1
                )
            )

        assert exc_info.value.doc_id == "m1"
        assert exc_info.value.expected_version == 1
        assert exc_info.value.actual_version == 2
        snapshot = ours.get("machines", "m1")
        assert snapshot.data == {"linked_auxiliary_equipment_ids": ["a1"]}
        assert snapshot.version == 2

    def test_interleaved_commit_rejects_whole_batch(self, shared_stores, monkeypatch):
        ours, theirs = shared_stores
        ours.set("machines", "m1", {"brand": "A"})
        ours.set("auxiliary_equipment", "a1", {"linked_equipment_id": None})
        commit_during_write(monkeypatch, lambda: theirs.update("machines", "m1", {"brand": "B"}))

        with pytest.raises(ConcurrentModificationError):
            ours.atomic_write(
                WriteBatch()
                .update("auxiliary_equipment", "a1", {"linked_equipment_id": "m1"}, expected_version=1)
                .update("machines", "m1", {"brand": "C"}, expected_version=1)
            )

        assert ours.get("auxiliary_equipment", "a1").data["linked_equipment_id"] is None
        assert ours.get("auxiliary_equipment", "a1").version == 1
        assert ours.get("machines", "m1").data["brand"] == "B"

    def test_interleaved_update_blocks_stale_delete(self, shared_stores, monkeypatch):
        ours, theirs = shared_stores
        ours.set("machines", "m1", {"brand": "A"})
        commit_during_write(monkeypatch, lambda: theirs.update("machines", "m1", {"brand": "B"}))

        with pytest.raises(ConcurrentModificationError):
            ours.atomic_write(WriteBatch().delete("machines", "m1", expected_version=1))

        assert theirs.get("machines", "m1").data == {"brand": "B"}

    def test_interleaved_create_of_same_key_is_rejected(self, shared_stores, monkeypatch):
        ours, theirs = shared_stores
        commit_during_write(monkeypatch, lambda: theirs.atomic_write(
            WriteBatch().set("machines", "m1", {"brand": "Theirs"}, expected_version=0)
        ))

        with pytest.raises(ConcurrentModificationError) as exc_info:
            ours.atomic_write(WriteBatch().set("machines", "m1", {"brand": "Ours"}, expected_version=0))

        assert exc_info.value.expected_version == 0
        assert exc_info.value.actual_version == 1
        assert ours.get("machines", "m1").data == {"brand": "Theirs"}

    def test_equality_query_filters_in_database(self, shared_stores):
        ours, _ = shared_stores
        ours.set("machines", "m1", {"chassis_number": "CH-1"})
        ours.set("machines", "m2", {"chassis_number": 7})
        ours.set("machines", "m3", {})

        assert [s.id for s in ours.query("machines", "chassis_number", "==", "CH-1")] == ["m1"]
        assert [s.id for s in ours.query("machines", "chassis_number", "==", 7)] == ["m2"]
