"""
Vector store facade, backend contract and backend implementations.
"""

from vectorkit.vectorstores.base import (
    ColumnarBatch,
    CollectionSchema,
    Document,
    IndexSpec,
    MutationResult,
    SearchHit,
    VectorBackend,
)
from vectorkit.vectorstores.factory import VectorStoreFactory
from vectorkit.vectorstores.lifecycle import CollectionLifecycleManager
from vectorkit.vectorstores.memory import MemoryVectorBackend
from vectorkit.vectorstores.milvus import MilvusVectorBackend
from vectorkit.vectorstores.qdrant import QdrantVectorBackend
from vectorkit.vectorstores.similarity import SimilarityNormalizer
from vectorkit.vectorstores.store import VectorStore

__all__ = [
    "CollectionLifecycleManager",
    "CollectionSchema",
    "ColumnarBatch",
    "Document",
    "IndexSpec",
    "MemoryVectorBackend",
    "MilvusVectorBackend",
    "MutationResult",
    "QdrantVectorBackend",
    "SearchHit",
    "SimilarityNormalizer",
    "VectorBackend",
    "VectorStore",
    "VectorStoreFactory",
]
