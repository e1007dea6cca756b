"""
Configuration helpers for vectorkit.

The submodule currently exposes:

- :mod:`schema` with strongly typed pydantic models.
- :mod:`loader` which reads YAML files into those models.
"""

from vectorkit.config.schema import (
    ConnectionSettings,
    ConsistencyLevel,
    EmbeddingSettings,
    IndexType,
    MetricType,
    StoreConfig,
    VectorKitSettings,
    VectorStoreSettings,
)
from vectorkit.config.loader import load_settings

__all__ = [
    "ConnectionSettings",
    "ConsistencyLevel",
    "EmbeddingSettings",
    "IndexType",
    "MetricType",
    "StoreConfig",
    "VectorKitSettings",
    "VectorStoreSettings",
    "load_settings",
]
