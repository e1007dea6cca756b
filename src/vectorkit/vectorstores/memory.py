"""
In-memory vector backend useful for tests and local development.
"""

from __future__ import annotations

import json
import threading
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from vectorkit.config.schema import ConsistencyLevel, MetricType, StoreConfig
from vectorkit.exceptions import StoreError
from vectorkit.vectorstores.base import (
    CONTENT_FIELD,
    DOC_ID_FIELD,
    METADATA_FIELD,
    SEARCH_OUTPUT_FIELDS,
    CollectionSchema,
    ColumnarBatch,
    IndexSpec,
    MutationResult,
    SearchHit,
    VectorBackend,
)


class CollectionState(str, Enum):
    """Provisioning stages of a collection."""

    ABSENT = "absent"
    CREATED = "created"
    INDEXED = "indexed"
    LOADED = "loaded"


class MemoryVectorBackend(VectorBackend):
    """
    Simple NumPy-based backend that mirrors the remote contract.

    It enforces the same ordering a real database does: rows can only be
    written to an existing collection and searched once it is loaded.
    """

    def __init__(self, config: StoreConfig) -> None:
        """Initialize the ephemeral store."""
        super().__init__(config)
        self.state = CollectionState.ABSENT
        self.schema: Optional[CollectionSchema] = None
        self.index: Optional[IndexSpec] = None
        self._rows: Dict[str, Tuple[str, str, np.ndarray]] = {}
        self._lock = threading.Lock()

    def _require(self, operation: str, *states: CollectionState) -> None:
        if self.state not in states:
            raise StoreError(
                operation,
                message=f"Collection '{self.collection}' is {self.state.value}",
            )

    def has_collection(self) -> bool:
        return self.state is not CollectionState.ABSENT

    def create_collection(
        self,
        schema: CollectionSchema,
        consistency_level: ConsistencyLevel,
        shards_num: int,
    ) -> None:
        with self._lock:
            self._require("create-collection", CollectionState.ABSENT)
            self.schema = schema
            self.state = CollectionState.CREATED

    def has_index(self) -> bool:
        return self.index is not None

    def create_index(self, spec: IndexSpec) -> None:
        with self._lock:
            self._require("create-index", CollectionState.CREATED, CollectionState.INDEXED, CollectionState.LOADED)
            self.index = spec
            if self.state is CollectionState.CREATED:
                self.state = CollectionState.INDEXED

    def load_collection(self) -> None:
        with self._lock:
            self._require("load-collection", CollectionState.INDEXED, CollectionState.LOADED)
            self.state = CollectionState.LOADED

    def release_collection(self) -> None:
        with self._lock:
            self._require("release-collection", CollectionState.CREATED, CollectionState.INDEXED, CollectionState.LOADED)
            if self.state is CollectionState.LOADED:
                self.state = CollectionState.INDEXED

    def drop_index(self) -> None:
        with self._lock:
            self._require("drop-index", CollectionState.CREATED, CollectionState.INDEXED)
            self.index = None
            self.state = CollectionState.CREATED

    def drop_collection(self) -> None:
        with self._lock:
            self._require("drop-collection", CollectionState.CREATED, CollectionState.INDEXED)
            self._rows.clear()
            self.schema = None
            self.index = None
            self.state = CollectionState.ABSENT

    def insert(self, batch: ColumnarBatch) -> MutationResult:
        dim = self.config.embedding_dimension
        with self._lock:
            self._require("insert", CollectionState.CREATED, CollectionState.INDEXED, CollectionState.LOADED)
            for doc_id, content, metadata, embedding in zip(
                batch.ids, batch.contents, batch.metadata, batch.embeddings
            ):
                vector = np.asarray(embedding, dtype=np.float32)
                if vector.shape != (dim,):
                    raise StoreError(
                        "insert",
                        message=f"Vector dim mismatch for {doc_id}: {vector.shape[-1]} != {dim}",
                    )
                # Stored as JSON text so callers never share a dict with the store.
                self._rows[doc_id] = (content, json.dumps(metadata), vector)
        return MutationResult(count=len(batch))

    def flush(self) -> None:
        self._require("flush", CollectionState.CREATED, CollectionState.INDEXED, CollectionState.LOADED)

    def delete(self, ids: Sequence[str]) -> MutationResult:
        with self._lock:
            self._require("delete", CollectionState.CREATED, CollectionState.INDEXED, CollectionState.LOADED)
            deleted = sum(1 for doc_id in set(ids) if self._rows.pop(doc_id, None) is not None)
        return MutationResult(count=deleted)

    def search(
        self,
        vector: List[float],
        top_k: int,
        output_fields: Sequence[str] = SEARCH_OUTPUT_FIELDS,
    ) -> List[SearchHit]:
        """Exact nearest neighbours: IP descending, squared L2 ascending."""
        query = np.asarray(vector, dtype=np.float32)
        with self._lock:
            self._require("search", CollectionState.LOADED)
            if query.shape != (self.config.embedding_dimension,):
                raise StoreError("search", message="Query vector dimension mismatch.")
            rows = list(self._rows.items())

        if not rows:
            return []
        matrix = np.stack([row[2] for _, row in rows])
        if self.config.metric_type is MetricType.IP:
            distances = matrix @ query
            order = np.argsort(-distances, kind="stable")
        else:
            distances = np.sum((matrix - query) ** 2, axis=1)
            order = np.argsort(distances, kind="stable")

        hits: List[SearchHit] = []
        for position in order[:top_k]:
            doc_id, (content, metadata, _) = rows[position]
            entity = {DOC_ID_FIELD: doc_id, CONTENT_FIELD: content, METADATA_FIELD: json.loads(metadata)}
            hits.append(
                SearchHit(
                    entity={name: entity[name] for name in output_fields if name in entity},
                    distance=float(distances[position]),
                )
            )
        return hits

    def count(self) -> int:
        """Number of stored rows."""
        with self._lock:
            return len(self._rows)
