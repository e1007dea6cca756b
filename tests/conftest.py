"""Shared test fixtures for vectorkit."""

from typing import Dict, List

import numpy as np
import pytest

from vectorkit.config.schema import EmbeddingSettings, MetricType, StoreConfig
from vectorkit.embeddings.base import BaseEmbeddingModel
from vectorkit.vectorstores.memory import MemoryVectorBackend
from vectorkit.vectorstores.store import VectorStore

DIM = 3

# Similar words sit close together: "kitten" is nearest to "cat", then "dog".
ANIMAL_VECTORS: Dict[str, List[float]] = {
    "cat": [1.0, 0.0, 0.0],
    "kitten": [0.8, 0.6, 0.0],
    "dog": [0.0, 1.0, 0.0],
    "car": [0.0, 0.0, 1.0],
}


class StubEmbeddingModel(BaseEmbeddingModel):
    """Looks texts up in a fixed table and records every call."""

    def __init__(self, vectors: Dict[str, List[float]], dim: int = DIM) -> None:
        super().__init__(EmbeddingSettings(dim=dim))
        self.vectors = vectors
        self.calls: List[List[str]] = []

    def embed(self, texts: List[str]) -> np.ndarray:
        self.calls.append(list(texts))
        return np.array([self.vectors[text] for text in texts], dtype=np.float32)


@pytest.fixture
def store_config():
    return StoreConfig(collection_name="test_docs", embedding_dimension=DIM)


@pytest.fixture
def ip_config():
    return StoreConfig(collection_name="test_docs_ip", embedding_dimension=DIM, metric_type=MetricType.IP)


@pytest.fixture
def memory_backend(store_config):
    return MemoryVectorBackend(store_config)


@pytest.fixture
def embedding_model():
    return StubEmbeddingModel(dict(ANIMAL_VECTORS))


@pytest.fixture
def vector_store(memory_backend, embedding_model, store_config):
    return VectorStore(memory_backend, embedding_model, store_config)


@pytest.fixture
def started_store(vector_store):
    """A store whose collection is provisioned and loaded."""
    vector_store.start()
    yield vector_store
    vector_store.stop()
