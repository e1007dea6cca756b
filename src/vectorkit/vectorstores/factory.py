"""
Factory that instantiates vector stores based on configuration.
"""

from __future__ import annotations

import logging

from vectorkit.config.schema import VectorStoreSettings
from vectorkit.embeddings.base import BaseEmbeddingModel
from vectorkit.vectorstores.base import VectorBackend
from vectorkit.vectorstores.memory import MemoryVectorBackend
from vectorkit.vectorstores.milvus import MilvusVectorBackend
from vectorkit.vectorstores.qdrant import QdrantVectorBackend
from vectorkit.vectorstores.store import VectorStore

logger = logging.getLogger(__name__)


class VectorStoreFactory:
    """Create vector stores for the configured backend."""

    def __init__(self, settings: VectorStoreSettings) -> None:
        """Store the factory settings."""
        self.settings = settings

    def create_backend(self) -> VectorBackend:
        """
        Instantiate the configured backend.
        """
        config = self.settings.store
        backend = self.settings.backend.lower()
        if backend == "memory":
            return MemoryVectorBackend(config)
        if backend == "milvus":
            return MilvusVectorBackend(config, connection=self.settings.connection)
        if backend == "qdrant":
            return QdrantVectorBackend(config, connection=self.settings.connection)
        raise ValueError(f"Unsupported vector store backend '{self.settings.backend}'.")

    def create(self, embedding_model: BaseEmbeddingModel) -> VectorStore:
        """
        Build a store around a fresh backend, starting it when ``auto_start`` is set.
        """
        store = VectorStore(self.create_backend(), embedding_model, self.settings.store)
        if self.settings.auto_start:
            logger.info(
                "Starting %s vector store for collection '%s'",
                self.settings.backend,
                self.settings.store.collection_name,
            )
            store.start()
        return store
