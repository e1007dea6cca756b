"""
Core vector store types and the backend contract.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from vectorkit.config.schema import ConsistencyLevel, IndexType, MetricType, StoreConfig

DOC_ID_FIELD = "doc_id"
CONTENT_FIELD = "content"
METADATA_FIELD = "metadata"
EMBEDDING_FIELD = "embedding"
# Reserved metadata key holding the computed distance of a search hit.
DISTANCE_FIELD = "distance"

SEARCH_OUTPUT_FIELDS: Tuple[str, ...] = (DOC_ID_FIELD, CONTENT_FIELD, METADATA_FIELD)

DOC_ID_MAX_LENGTH = 36
CONTENT_MAX_LENGTH = 65535


@dataclass
class Document:
    """A piece of text plus metadata, and its embedding once computed."""

    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    embedding: Optional[List[float]] = None

    @classmethod
    def create(cls, text: str, metadata: Optional[Dict[str, Any]] = None) -> "Document":
        """Build a document with a random UUID4 id."""
        return cls(id=str(uuid.uuid4()), text=text, metadata=dict(metadata or {}))


@dataclass
class SearchHit:
    """Raw search row as returned by a backend, with its native distance."""

    entity: Dict[str, Any]
    distance: float


@dataclass
class MutationResult:
    """Outcome of an insert or delete call."""

    count: int
    succeeded: bool = True


@dataclass
class ColumnarBatch:
    """Parallel columns of a batch insert; index ``i`` of every column is one row."""

    ids: List[str]
    contents: List[str]
    metadata: List[Dict[str, Any]]
    embeddings: List[List[float]]

    def __post_init__(self) -> None:
        sizes = {len(self.ids), len(self.contents), len(self.metadata), len(self.embeddings)}
        if len(sizes) > 1:
            raise ValueError(f"Columns of a batch must have equal length, got {sorted(sizes)}")

    def __len__(self) -> int:
        return len(self.ids)

    def columns(self) -> Dict[str, List[Any]]:
        """Return the batch keyed by collection field name."""
        return {
            DOC_ID_FIELD: self.ids,
            CONTENT_FIELD: self.contents,
            METADATA_FIELD: self.metadata,
            EMBEDDING_FIELD: self.embeddings,
        }

    def rows(self) -> List[Dict[str, Any]]:
        """Transpose the columns for clients that insert row dictionaries."""
        names = list(self.columns())
        return [dict(zip(names, values)) for values in zip(*self.columns().values())]


class FieldKind(str, Enum):
    """Backend-neutral field types."""

    VARCHAR = "varchar"
    JSON = "json"
    FLOAT_VECTOR = "float_vector"


@dataclass(frozen=True)
class FieldSpec:
    """One field of a collection."""

    name: str
    kind: FieldKind
    max_length: Optional[int] = None
    dim: Optional[int] = None
    is_primary: bool = False
    auto_id: bool = False


@dataclass(frozen=True)
class CollectionSchema:
    """Static layout every document collection is created with."""

    fields: Tuple[FieldSpec, ...]
    description: str = ""

    @classmethod
    def for_documents(cls, dim: int, description: str = "") -> "CollectionSchema":
        """Id, content, metadata and embedding fields for vectors of *dim*."""
        return cls(
            fields=(
                FieldSpec(
                    name=DOC_ID_FIELD,
                    kind=FieldKind.VARCHAR,
                    max_length=DOC_ID_MAX_LENGTH,
                    is_primary=True,
                    auto_id=False,
                ),
                FieldSpec(name=CONTENT_FIELD, kind=FieldKind.VARCHAR, max_length=CONTENT_MAX_LENGTH),
                FieldSpec(name=METADATA_FIELD, kind=FieldKind.JSON),
                FieldSpec(name=EMBEDDING_FIELD, kind=FieldKind.FLOAT_VECTOR, dim=dim),
            ),
            description=description,
        )

    def get_field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    @property
    def vector_field(self) -> FieldSpec:
        return next(spec for spec in self.fields if spec.kind is FieldKind.FLOAT_VECTOR)


@dataclass(frozen=True)
class IndexSpec:
    """ANN index request for the vector field."""

    field_name: str
    index_type: IndexType
    metric_type: MetricType
    params: Dict[str, Any] = field(default_factory=dict)
    sync: bool = False


class VectorBackend(ABC):
    """
    Primitive remote calls against one (database, collection) pair.

    Every method raises :class:`~vectorkit.exceptions.StoreError` naming the
    failed operation when the underlying client fails.
    """

    def __init__(self, config: StoreConfig) -> None:
        self.config = config

    @property
    def collection(self) -> str:
        return self.config.collection_name

    @abstractmethod
    def has_collection(self) -> bool:
        """Return whether the collection exists."""

    @abstractmethod
    def create_collection(
        self,
        schema: CollectionSchema,
        consistency_level: ConsistencyLevel,
        shards_num: int,
    ) -> None:
        """Create the collection with *schema*."""

    @abstractmethod
    def has_index(self) -> bool:
        """Return whether an index exists on the vector field."""

    @abstractmethod
    def create_index(self, spec: IndexSpec) -> None:
        """Request index creation; asynchronous unless ``spec.sync``."""

    @abstractmethod
    def load_collection(self) -> None:
        """Load the collection into serving memory."""

    @abstractmethod
    def release_collection(self) -> None:
        """Release the collection from serving memory."""

    @abstractmethod
    def drop_index(self) -> None:
        """Drop the vector index."""

    @abstractmethod
    def drop_collection(self) -> None:
        """Drop the collection and its data."""

    @abstractmethod
    def insert(self, batch: ColumnarBatch) -> MutationResult:
        """Insert a columnar batch in one call."""

    @abstractmethod
    def flush(self) -> None:
        """Make inserted rows durable and visible to subsequent searches."""

    @abstractmethod
    def delete(self, ids: Sequence[str]) -> MutationResult:
        """Delete the rows whose id is in *ids*."""

    @abstractmethod
    def search(
        self,
        vector: List[float],
        top_k: int,
        output_fields: Sequence[str] = SEARCH_OUTPUT_FIELDS,
    ) -> List[SearchHit]:
        """Return up to *top_k* hits ranked best first."""

    def close(self) -> None:
        """Close the client connection. No-op by default."""
