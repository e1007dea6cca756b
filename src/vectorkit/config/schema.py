"""
Typed configuration objects for vectorkit.

All knobs converge into :class:`VectorKitSettings` so downstream modules do not
have to touch YAML or dictionaries directly. :class:`StoreConfig` is the only
piece the vector store itself needs and is immutable once built.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_NAME = "default"
DEFAULT_COLLECTION_NAME = "vector_store"
DEFAULT_EMBEDDING_DIMENSION = 1536
MAX_EMBEDDING_DIMENSION = 2048


class MetricType(str, Enum):
    """Distance functions understood by the backends."""

    L2 = "L2"
    IP = "IP"
    COSINE = "COSINE"


SUPPORTED_METRICS = frozenset({MetricType.IP, MetricType.L2})


class IndexType(str, Enum):
    """ANN index families."""

    FLAT = "FLAT"
    IVF_FLAT = "IVF_FLAT"
    IVF_SQ8 = "IVF_SQ8"
    IVF_PQ = "IVF_PQ"
    HNSW = "HNSW"
    DISKANN = "DISKANN"
    AUTOINDEX = "AUTOINDEX"


class ConsistencyLevel(str, Enum):
    """Read-after-write guarantees a backend may offer."""

    STRONG = "Strong"
    BOUNDED = "Bounded"
    SESSION = "Session"
    EVENTUALLY = "Eventually"


class StoreConfig(BaseModel):
    """Immutable description of the (database, collection) pair a store owns."""

    database_name: str = DEFAULT_DATABASE_NAME
    collection_name: str = DEFAULT_COLLECTION_NAME
    embedding_dimension: int = Field(
        default=DEFAULT_EMBEDDING_DIMENSION, ge=1, le=MAX_EMBEDDING_DIMENSION
    )
    index_type: IndexType = IndexType.IVF_FLAT
    metric_type: MetricType = MetricType.L2
    index_parameters: Dict[str, Any] = Field(default_factory=lambda: {"nlist": 1024})
    shards_num: int = Field(default=2, ge=1)
    description: str = "vectorkit vector store"

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("database_name", "collection_name", mode="before")
    @classmethod
    def _default_when_blank(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return cls.model_fields[info.field_name].default
        return value

    @field_validator("metric_type", "index_type", mode="before")
    @classmethod
    def _upper_case(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, Enum):
            return value.strip().upper()
        return value

    @field_validator("metric_type")
    @classmethod
    def _supported_metric(cls, value: MetricType) -> MetricType:
        if value not in SUPPORTED_METRICS:
            raise ValueError("Only the metric types IP and L2 are supported")
        return value

    @field_validator("index_parameters", mode="before")
    @classmethod
    def _parse_index_parameters(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            return json.loads(value) if value.strip() else {}
        return value

    @property
    def consistency_level(self) -> ConsistencyLevel:
        """Always the strongest level; not configurable."""
        return ConsistencyLevel.STRONG


class ConnectionSettings(BaseSettings):
    """Client connection parameters, overridable through ``VECTORKIT_*`` env vars."""

    model_config = SettingsConfigDict(
        env_prefix="VECTORKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: str = "http://localhost:19530"
    token: Optional[str] = None
    url: str = "http://localhost:6333"
    api_key: Optional[str] = None
    prefer_grpc: bool = False
    timeout: Optional[float] = Field(default=None, gt=0)


class EmbeddingSettings(BaseModel):
    """Embedding backend configuration."""

    model: str = "text-embedding-3-small"
    dim: int = Field(default=DEFAULT_EMBEDDING_DIMENSION, ge=1)
    base_url: str | None = None
    api_key: str | None = None
    batch_size: int = Field(default=16, ge=1)
    normalize_embeddings: bool = True

    requests_per_minute: int = Field(default=0, ge=0)
    request_timeout: float = Field(default=60.0, ge=1.0)

    max_retries: int = Field(default=3, ge=1)
    retry_min_wait: float = Field(default=1.0, ge=0.0)
    retry_max_wait: float = Field(default=30.0, ge=0.0)

    model_config = {"extra": "forbid"}


class VectorStoreSettings(BaseModel):
    """Vector database configuration."""

    backend: str = "milvus"
    store: StoreConfig = Field(default_factory=StoreConfig)
    connection: ConnectionSettings = Field(default_factory=ConnectionSettings)
    auto_start: bool = True

    model_config = {"extra": "forbid"}


class VectorKitSettings(BaseModel):
    """Aggregated settings tree consumed by :class:`VectorStoreFactory`."""

    embeddings: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vector_store: VectorStoreSettings = Field(default_factory=VectorStoreSettings)

    @model_validator(mode="after")
    def _matching_dimensions(self) -> "VectorKitSettings":
        expected = self.vector_store.store.embedding_dimension
        if self.embeddings.dim != expected:
            raise ValueError(
                f"Embedding dim {self.embeddings.dim} does not match "
                f"store embedding_dimension {expected}"
            )
        return self
