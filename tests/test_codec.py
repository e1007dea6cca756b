"""Tests for vectorkit.vectorstores.codec: row/column mapping."""

import numpy as np
import pytest

from vectorkit.vectorstores.base import ColumnarBatch, Document
from vectorkit.vectorstores.codec import (
    annotate_distance,
    decode_row,
    encode_documents,
    id_filter_expression,
    to_float32,
)


@pytest.fixture
def documents():
    return [
        Document(id="a", text="cat", metadata={"kind": "animal"}, embedding=[0.1, 0.2]),
        Document(id="b", text="car", metadata={"kind": "vehicle", "wheels": 4}, embedding=[0.3, 0.4]),
    ]


class TestEncode:
    def test_columns_follow_input_order(self, documents):
        batch = encode_documents(documents)

        assert batch.ids == ["a", "b"]
        assert batch.contents == ["cat", "car"]
        assert batch.metadata == [{"kind": "animal"}, {"kind": "vehicle", "wheels": 4}]
        assert len(batch) == 2

    def test_embeddings_are_narrowed_to_float32(self, documents):
        batch = encode_documents(documents)

        assert batch.embeddings[0] == [float(np.float32(0.1)), float(np.float32(0.2))]
        assert batch.embeddings[0][0] != 0.1

    def test_metadata_is_copied(self, documents):
        batch = encode_documents(documents)
        batch.metadata[0]["kind"] = "changed"

        assert documents[0].metadata == {"kind": "animal"}

    def test_missing_embedding_is_rejected(self):
        with pytest.raises(ValueError, match="no embedding"):
            encode_documents([Document(id="a", text="cat")])

    def test_empty_input(self):
        batch = encode_documents([])
        assert len(batch) == 0
        assert batch.rows() == []

    def test_rows_transpose_columns(self, documents):
        rows = encode_documents(documents).rows()

        assert rows[1]["doc_id"] == "b"
        assert rows[1]["content"] == "car"
        assert rows[1]["metadata"] == {"kind": "vehicle", "wheels": 4}
        assert set(rows[0]) == {"doc_id", "content", "metadata", "embedding"}

    def test_batch_rejects_ragged_columns(self):
        with pytest.raises(ValueError, match="equal length"):
            ColumnarBatch(ids=["a"], contents=[], metadata=[{}], embeddings=[[0.0]])


class TestDecode:
    def test_structured_metadata(self):
        document = decode_row({"doc_id": "a", "content": "cat", "metadata": {"kind": "animal"}})

        assert document == Document(id="a", text="cat", metadata={"kind": "animal"})

    def test_json_text_metadata(self):
        document = decode_row({"doc_id": "a", "content": "cat", "metadata": '{"kind": "animal"}'})
        assert document.metadata == {"kind": "animal"}

    def test_missing_metadata_and_content(self):
        document = decode_row({"doc_id": "a"})

        assert document.text == ""
        assert document.metadata == {}
        assert document.embedding is None


class TestAnnotate:
    def test_adds_distance_without_touching_original(self):
        original = Document(id="a", text="cat", metadata={"kind": "animal"})

        annotated = annotate_distance(original, 0.25)

        assert annotated.metadata == {"kind": "animal", "distance": 0.25}
        assert original.metadata == {"kind": "animal"}

    def test_overwrites_caller_distance(self):
        original = Document(id="a", text="cat", metadata={"distance": "far"})
        assert annotate_distance(original, 0.5).metadata == {"distance": 0.5}


class TestHelpers:
    def test_id_filter_expression(self):
        assert id_filter_expression(["a", "b"]) == 'doc_id in ["a", "b"]'

    def test_id_filter_expression_escapes_quotes(self):
        assert id_filter_expression(['it"s']) == 'doc_id in ["it\\"s"]'

    def test_to_float32_accepts_arrays(self):
        assert to_float32(np.array([1.0, 2.0], dtype=np.float64)) == [1.0, 2.0]

    def test_document_create_assigns_uuid(self):
        document = Document.create("cat", metadata={"kind": "animal"})

        assert len(document.id) == 36
        assert document.metadata == {"kind": "animal"}
        assert Document.create("cat").id != document.id
