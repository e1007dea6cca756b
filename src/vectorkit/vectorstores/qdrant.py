"""
Qdrant-backed vector backend.

Qdrant serves a collection as soon as it exists and every upsert here waits
for completion, so load, release and flush have nothing to do. The "index"
step creates a keyword payload index on the document id, which the deletes
filter on. Point ids must be UUIDs, so each caller id maps to a UUID5.
"""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence

import grpc

from vectorkit.config.schema import ConnectionSettings, ConsistencyLevel, MetricType, StoreConfig
from vectorkit.exceptions import StoreError, VectorStoreError
from vectorkit.utils import compute_uuid5
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

try:
    from qdrant_client import QdrantClient
    from qdrant_client.http import models as rest
    from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
except ImportError:  # pragma: no cover - optional dependency
    QdrantClient = None  # type: ignore[assignment]
    rest = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class QdrantVectorBackend(VectorBackend):
    """Vector backend implementation layered on top of Qdrant."""

    def __init__(
        self,
        config: StoreConfig,
        connection: Optional[ConnectionSettings] = None,
        client: Optional[Any] = None,
    ) -> None:
        """Create the Qdrant client."""
        if rest is None:  # pragma: no cover - import guard
            raise VectorStoreError(
                "qdrant-client is not installed. Install it to use the Qdrant backend."
            )
        super().__init__(config)
        if client is None:
            connection = connection or ConnectionSettings()
            client = QdrantClient(
                url=connection.url,
                api_key=connection.api_key,
                prefer_grpc=connection.prefer_grpc,
                timeout=math.ceil(connection.timeout) if connection.timeout else None,
            )
        self.client = client

    @contextmanager
    def _call(self, operation: str) -> Iterator[None]:
        """Wrap client failures into :class:`StoreError`."""
        try:
            yield
        except (UnexpectedResponse, ResponseHandlingException, grpc.RpcError) as exc:
            raise StoreError(operation, exc) from exc

    def _point_id(self, doc_id: str) -> str:
        return compute_uuid5(doc_id, namespace=self.collection)

    def _id_filter(self, ids: Sequence[str]) -> "rest.Filter":
        return rest.Filter(
            must=[rest.FieldCondition(key=DOC_ID_FIELD, match=rest.MatchAny(any=list(ids)))]
        )

    def _distance(self) -> "rest.Distance":
        if self.config.metric_type is MetricType.IP:
            return rest.Distance.DOT
        return rest.Distance.EUCLID

    def has_collection(self) -> bool:
        with self._call("has-collection"):
            return bool(self.client.collection_exists(self.collection))

    def create_collection(
        self,
        schema: CollectionSchema,
        consistency_level: ConsistencyLevel,
        shards_num: int,
    ) -> None:
        with self._call("create-collection"):
            self.client.create_collection(
                collection_name=self.collection,
                vectors_config=rest.VectorParams(
                    size=schema.vector_field.dim, distance=self._distance()
                ),
                shard_number=shards_num,
            )

    def has_index(self) -> bool:
        with self._call("describe-index"):
            info = self.client.get_collection(self.collection)
        return DOC_ID_FIELD in (info.payload_schema or {})

    def create_index(self, spec: IndexSpec) -> None:
        logger.debug(
            "Qdrant builds HNSW itself; ignoring %s parameters %s", spec.index_type.value, spec.params
        )
        with self._call("create-index"):
            self.client.create_payload_index(
                collection_name=self.collection,
                field_name=DOC_ID_FIELD,
                field_schema=rest.PayloadSchemaType.KEYWORD,
                wait=spec.sync,
            )

    def load_collection(self) -> None:
        logger.debug("Qdrant collection '%s' needs no load", self.collection)

    def release_collection(self) -> None:
        logger.debug("Qdrant collection '%s' needs no release", self.collection)

    def drop_index(self) -> None:
        with self._call("drop-index"):
            self.client.delete_payload_index(collection_name=self.collection, field_name=DOC_ID_FIELD)

    def drop_collection(self) -> None:
        with self._call("drop-collection"):
            self.client.delete_collection(collection_name=self.collection)

    def insert(self, batch: ColumnarBatch) -> MutationResult:
        """Upsert one point per row and wait for completion."""
        points = [
            rest.PointStruct(
                id=self._point_id(doc_id),
                vector=embedding,
                payload={DOC_ID_FIELD: doc_id, CONTENT_FIELD: content, METADATA_FIELD: metadata},
            )
            for doc_id, content, metadata, embedding in zip(
                batch.ids, batch.contents, batch.metadata, batch.embeddings
            )
        ]
        with self._call("insert"):
            result = self.client.upsert(collection_name=self.collection, points=points, wait=True)
        return MutationResult(
            count=len(points), succeeded=result.status == rest.UpdateStatus.COMPLETED
        )

    def flush(self) -> None:
        """Upserts already wait for completion."""

    def delete(self, ids: Sequence[str]) -> MutationResult:
        """Count the matching points, then delete them by filter."""
        selection = self._id_filter(ids)
        with self._call("delete"):
            matched = self.client.count(
                collection_name=self.collection, count_filter=selection, exact=True
            ).count
            result = self.client.delete(
                collection_name=self.collection,
                points_selector=rest.FilterSelector(filter=selection),
                wait=True,
            )
        return MutationResult(count=matched, succeeded=result.status == rest.UpdateStatus.COMPLETED)

    def search(
        self,
        vector: List[float],
        top_k: int,
        output_fields: Sequence[str] = SEARCH_OUTPUT_FIELDS,
    ) -> List[SearchHit]:
        """Search for nearest neighbours; Euclidean scores are squared."""
        with self._call("search"):
            response = self.client.query_points(
                collection_name=self.collection,
                query=vector,
                limit=top_k,
                with_payload=list(output_fields),
                consistency=rest.ReadConsistencyType.ALL,
            )
        squared = self.config.metric_type is MetricType.L2
        hits: List[SearchHit] = []
        for point in response.points:
            score = float(point.score)
            hits.append(
                SearchHit(entity=dict(point.payload or {}), distance=score * score if squared else score)
            )
        return hits

    def close(self) -> None:
        self.client.close()
