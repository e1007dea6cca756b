"""Tests for vectorkit.vectorstores.memory: the in-process backend."""

import pytest

from vectorkit.config.schema import ConsistencyLevel
from vectorkit.exceptions import StoreError
from vectorkit.vectorstores.base import CollectionSchema, ColumnarBatch
from vectorkit.vectorstores.lifecycle import CollectionLifecycleManager
from vectorkit.vectorstores.memory import CollectionState, MemoryVectorBackend


def _batch(*rows):
    return ColumnarBatch(
        ids=[row[0] for row in rows],
        contents=[row[1] for row in rows],
        metadata=[row[2] for row in rows],
        embeddings=[row[3] for row in rows],
    )


@pytest.fixture
def loaded_backend(memory_backend, store_config):
    CollectionLifecycleManager(memory_backend, store_config).ensure_ready()
    return memory_backend


class TestStateMachine:
    def test_starts_absent(self, memory_backend):
        assert memory_backend.state is CollectionState.ABSENT
        assert not memory_backend.has_collection()
        assert not memory_backend.has_index()

    def test_load_requires_index(self, memory_backend):
        memory_backend.create_collection(
            CollectionSchema.for_documents(3), ConsistencyLevel.STRONG, 2
        )

        with pytest.raises(StoreError) as excinfo:
            memory_backend.load_collection()
        assert excinfo.value.operation == "load-collection"

    def test_double_create_is_rejected(self, loaded_backend):
        with pytest.raises(StoreError):
            loaded_backend.create_collection(
                CollectionSchema.for_documents(3), ConsistencyLevel.STRONG, 2
            )

    def test_release_keeps_index(self, loaded_backend):
        loaded_backend.release_collection()

        assert loaded_backend.state is CollectionState.INDEXED
        assert loaded_backend.has_index()

    def test_search_requires_load(self, loaded_backend):
        loaded_backend.release_collection()

        with pytest.raises(StoreError) as excinfo:
            loaded_backend.search([1.0, 0.0, 0.0], 1)
        assert excinfo.value.operation == "search"

    def test_direct_drop_clears_index(self, memory_backend, store_config):
        manager = CollectionLifecycleManager(memory_backend, store_config)
        memory_backend.create_collection(manager.schema, ConsistencyLevel.STRONG, 2)
        memory_backend.create_index(manager.index_spec())

        memory_backend.drop_collection()

        assert not memory_backend.has_index()
        manager.ensure_ready()
        assert memory_backend.state is CollectionState.LOADED

    def test_insert_requires_collection(self, memory_backend):
        with pytest.raises(StoreError) as excinfo:
            memory_backend.insert(_batch(("a", "cat", {}, [1.0, 0.0, 0.0])))
        assert excinfo.value.operation == "insert"


class TestRows:
    def test_insert_and_count(self, loaded_backend):
        result = loaded_backend.insert(
            _batch(("a", "cat", {}, [1.0, 0.0, 0.0]), ("b", "dog", {}, [0.0, 1.0, 0.0]))
        )

        assert result.count == 2
        assert result.succeeded
        assert loaded_backend.count() == 2

    def test_dimension_mismatch(self, loaded_backend):
        with pytest.raises(StoreError, match="dim mismatch"):
            loaded_backend.insert(_batch(("a", "cat", {}, [1.0, 0.0])))

    def test_delete_reports_actual_count(self, loaded_backend):
        loaded_backend.insert(_batch(("a", "cat", {}, [1.0, 0.0, 0.0])))

        result = loaded_backend.delete(["a", "missing"])

        assert result.count == 1
        assert loaded_backend.count() == 0

    def test_metadata_is_isolated_from_caller(self, loaded_backend):
        metadata = {"tags": ["pet"]}
        loaded_backend.insert(_batch(("a", "cat", metadata, [1.0, 0.0, 0.0])))
        metadata["tags"].append("changed")

        hit = loaded_backend.search([1.0, 0.0, 0.0], 1)[0]

        assert hit.entity["metadata"] == {"tags": ["pet"]}


class TestSearch:
    def test_l2_orders_by_ascending_squared_distance(self, loaded_backend):
        loaded_backend.insert(
            _batch(
                ("far", "car", {}, [0.0, 0.0, 1.0]),
                ("near", "cat", {}, [1.0, 0.0, 0.0]),
                ("mid", "dog", {}, [0.0, 1.0, 0.0]),
            )
        )

        hits = loaded_backend.search([0.8, 0.6, 0.0], 3)

        assert [hit.entity["doc_id"] for hit in hits] == ["near", "mid", "far"]
        assert [hit.distance for hit in hits] == pytest.approx([0.4, 0.8, 2.0])

    def test_ip_orders_by_descending_score(self, ip_config):
        backend = MemoryVectorBackend(ip_config)
        CollectionLifecycleManager(backend, ip_config).ensure_ready()
        backend.insert(
            _batch(("low", "car", {}, [0.0, 0.0, 1.0]), ("high", "cat", {}, [1.0, 0.0, 0.0]))
        )

        hits = backend.search([0.8, 0.6, 0.0], 2)

        assert [hit.entity["doc_id"] for hit in hits] == ["high", "low"]
        assert [hit.distance for hit in hits] == pytest.approx([0.8, 0.0])

    def test_limits_to_top_k_and_output_fields(self, loaded_backend):
        loaded_backend.insert(
            _batch(("a", "cat", {"k": 1}, [1.0, 0.0, 0.0]), ("b", "dog", {}, [0.0, 1.0, 0.0]))
        )

        hits = loaded_backend.search([1.0, 0.0, 0.0], 1, output_fields=["doc_id"])

        assert len(hits) == 1
        assert hits[0].entity == {"doc_id": "a"}

    def test_empty_collection(self, loaded_backend):
        assert loaded_backend.search([1.0, 0.0, 0.0], 4) == []
