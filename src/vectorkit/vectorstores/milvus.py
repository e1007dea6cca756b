"""
Milvus-backed vector backend.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence

import grpc

from vectorkit.config.schema import ConnectionSettings, ConsistencyLevel, StoreConfig
from vectorkit.exceptions import StoreError, VectorStoreError
from vectorkit.vectorstores.base import (
    DOC_ID_FIELD,
    EMBEDDING_FIELD,
    SEARCH_OUTPUT_FIELDS,
    CollectionSchema,
    ColumnarBatch,
    FieldKind,
    FieldSpec,
    IndexSpec,
    MutationResult,
    SearchHit,
    VectorBackend,
)
from vectorkit.vectorstores.codec import id_filter_expression

try:
    from pymilvus import (
        CollectionSchema as MilvusCollectionSchema,
        DataType,
        FieldSchema,
        MilvusClient,
        MilvusException,
    )
except ImportError:  # pragma: no cover - optional dependency
    MilvusClient = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def _field_schema(spec: FieldSpec) -> "FieldSchema":
    """Translate a backend-neutral field into a pymilvus ``FieldSchema``."""
    if spec.kind is FieldKind.VARCHAR:
        return FieldSchema(
            name=spec.name,
            dtype=DataType.VARCHAR,
            is_primary=spec.is_primary,
            auto_id=spec.auto_id if spec.is_primary else False,
            max_length=spec.max_length,
        )
    if spec.kind is FieldKind.JSON:
        return FieldSchema(name=spec.name, dtype=DataType.JSON)
    return FieldSchema(name=spec.name, dtype=DataType.FLOAT_VECTOR, dim=spec.dim)


class MilvusVectorBackend(VectorBackend):
    """
    Vector backend implementation on top of :class:`pymilvus.MilvusClient`.
    """

    def __init__(
        self,
        config: StoreConfig,
        connection: Optional[ConnectionSettings] = None,
        client: Optional[Any] = None,
    ) -> None:
        """Create the Milvus client bound to the configured database."""
        super().__init__(config)
        if client is None:
            if MilvusClient is None:  # pragma: no cover - import guard
                raise VectorStoreError(
                    "pymilvus is not installed. Install 'pymilvus' to use the Milvus backend."
                )
            connection = connection or ConnectionSettings()
            client = MilvusClient(
                uri=connection.uri,
                token=connection.token or "",
                db_name=config.database_name,
                timeout=connection.timeout,
            )
        self.client = client

    @contextmanager
    def _call(self, operation: str) -> Iterator[None]:
        """Wrap client failures into :class:`StoreError`."""
        try:
            yield
        except (MilvusException, grpc.RpcError) as exc:
            raise StoreError(operation, exc) from exc

    def has_collection(self) -> bool:
        with self._call("has-collection"):
            return bool(self.client.has_collection(collection_name=self.collection))

    def create_collection(
        self,
        schema: CollectionSchema,
        consistency_level: ConsistencyLevel,
        shards_num: int,
    ) -> None:
        milvus_schema = MilvusCollectionSchema(
            fields=[_field_schema(spec) for spec in schema.fields],
            description=schema.description,
        )
        with self._call("create-collection"):
            self.client.create_collection(
                collection_name=self.collection,
                schema=milvus_schema,
                consistency_level=consistency_level.value,
                num_shards=shards_num,
            )

    def has_index(self) -> bool:
        with self._call("describe-index"):
            return bool(
                self.client.list_indexes(collection_name=self.collection, field_name=EMBEDDING_FIELD)
            )

    def create_index(self, spec: IndexSpec) -> None:
        with self._call("create-index"):
            index_params = self.client.prepare_index_params()
            index_params.add_index(
                field_name=spec.field_name,
                index_type=spec.index_type.value,
                metric_type=spec.metric_type.value,
                params=dict(spec.params),
            )
            self.client.create_index(
                collection_name=self.collection,
                index_params=index_params,
                sync=spec.sync,
            )

    def load_collection(self) -> None:
        with self._call("load-collection"):
            self.client.load_collection(collection_name=self.collection)

    def release_collection(self) -> None:
        with self._call("release-collection"):
            self.client.release_collection(collection_name=self.collection)

    def drop_index(self) -> None:
        with self._call("drop-index"):
            for index_name in self.client.list_indexes(
                collection_name=self.collection, field_name=EMBEDDING_FIELD
            ):
                self.client.drop_index(collection_name=self.collection, index_name=index_name)

    def drop_collection(self) -> None:
        with self._call("drop-collection"):
            self.client.drop_collection(collection_name=self.collection)

    def insert(self, batch: ColumnarBatch) -> MutationResult:
        """Insert the batch; ``MilvusClient`` takes it row by row."""
        with self._call("insert"):
            result = self.client.insert(collection_name=self.collection, data=batch.rows())
        return MutationResult(count=int(result.get("insert_count", len(batch))))

    def flush(self) -> None:
        with self._call("flush"):
            self.client.flush(collection_name=self.collection)

    def delete(self, ids: Sequence[str]) -> MutationResult:
        expression = id_filter_expression(ids)
        logger.debug("Deleting from '%s' where %s", self.collection, expression)
        with self._call("delete"):
            result = self.client.delete(collection_name=self.collection, filter=expression)
        if isinstance(result, dict):
            count = int(result.get("delete_count", 0))
        else:
            count = len(result)
        return MutationResult(count=count)

    def search(
        self,
        vector: List[float],
        top_k: int,
        output_fields: Sequence[str] = SEARCH_OUTPUT_FIELDS,
    ) -> List[SearchHit]:
        """Return the ANN results for *vector*."""
        with self._call("search"):
            response = self.client.search(
                collection_name=self.collection,
                data=[vector],
                anns_field=EMBEDDING_FIELD,
                limit=top_k,
                output_fields=list(output_fields),
                search_params={"metric_type": self.config.metric_type.value, "params": {}},
                consistency_level=self.config.consistency_level.value,
            )
        matches = response[0] if response else []
        hits: List[SearchHit] = []
        for match in matches:
            entity = dict(match.get("entity") or {})
            entity.setdefault(DOC_ID_FIELD, match.get("id"))
            hits.append(SearchHit(entity=entity, distance=float(match["distance"])))
        return hits

    def close(self) -> None:
        self.client.close()
