"""
vectorkit: a vector store over pluggable backends.

Documents are stored as (id, text, metadata, embedding) rows in a backend
collection that is provisioned on demand, and retrieved by similarity to a
query with a metric-aware relevance threshold.
"""

from vectorkit.config import StoreConfig, load_settings
from vectorkit.exceptions import EmbeddingError, StoreError, ValidationError, VectorStoreError
from vectorkit.vectorstores import Document, VectorStore, VectorStoreFactory

__all__ = [
    "Document",
    "EmbeddingError",
    "StoreConfig",
    "StoreError",
    "ValidationError",
    "VectorStore",
    "VectorStoreError",
    "VectorStoreFactory",
    "load_settings",
]
