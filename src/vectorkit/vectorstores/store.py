"""
Public vector store facade.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Iterable, List, Optional

import numpy as np

from vectorkit.config.schema import StoreConfig
from vectorkit.embeddings.base import BaseEmbeddingModel
from vectorkit.exceptions import EmbeddingError, ValidationError
from vectorkit.vectorstores.base import SEARCH_OUTPUT_FIELDS, Document, VectorBackend
from vectorkit.vectorstores.codec import (
    annotate_distance,
    decode_row,
    encode_documents,
    to_float32,
)
from vectorkit.vectorstores.lifecycle import CollectionLifecycleManager
from vectorkit.vectorstores.similarity import SimilarityNormalizer

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 4
DEFAULT_SIMILARITY_THRESHOLD = 0.0


class VectorStore:
    """
    Stores documents with their embeddings and answers similarity queries.

    One instance talks to exactly one (database, collection) pair. ``add``,
    ``delete`` and ``similarity_search`` may be called from many threads; the
    backend arbitrates concurrent writes. They are also allowed before
    :meth:`start`, in which case the collection must already be provisioned.
    """

    def __init__(
        self,
        backend: VectorBackend,
        embedding_model: BaseEmbeddingModel,
        config: Optional[StoreConfig] = None,
    ) -> None:
        if backend is None:
            raise ValidationError("Vector backend must not be None", operation="init")
        if embedding_model is None:
            raise ValidationError("Embedding model must not be None", operation="init")
        self.backend = backend
        self.embedding_model = embedding_model
        self.config = config or backend.config
        self.lifecycle = CollectionLifecycleManager(backend, self.config)
        self.normalizer = SimilarityNormalizer(self.config.metric_type)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start(self) -> None:
        """Provision and load the collection. Errors propagate."""
        self.lifecycle.start()

    def stop(self) -> None:
        """Release the collection; never raises on backend failure."""
        self.lifecycle.stop()

    @property
    def is_running(self) -> bool:
        return self.lifecycle.is_running

    def drop_collection(self) -> None:
        """Remove the collection, its index and all stored documents."""
        self.lifecycle.drop()

    def close(self) -> None:
        """Stop the store and close the backend client."""
        self.stop()
        self.backend.close()

    def __enter__(self) -> "VectorStore":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #
    def _embed(self, texts: List[str]) -> np.ndarray:
        """Embed *texts* and check the provider returned one row per text."""
        vectors = np.asarray(self.embedding_model.embed(texts))
        expected = (len(texts), self.config.embedding_dimension)
        if vectors.shape != expected:
            raise EmbeddingError(
                f"Embedding model returned shape {vectors.shape}, expected {expected}",
                operation="embed",
            )
        return vectors

    def add(self, documents: Iterable[Document]) -> List[str]:
        """
        Embed and insert *documents* as one batch, then flush.

        The batch is all-or-nothing: an embedding failure aborts it before any
        remote write.

        :return: ids of the inserted documents, in input order.
        """
        if documents is None:
            raise ValidationError("Documents must not be None", operation="add")
        documents = list(documents)
        if not documents:
            logger.debug("No documents to add to '%s'", self.config.collection_name)
            return []

        vectors = self._embed([document.text for document in documents])
        embedded = [
            replace(document, embedding=vector.tolist())
            for document, vector in zip(documents, vectors)
        ]
        batch = encode_documents(embedded)
        result = self.backend.insert(batch)
        self.backend.flush()
        logger.info(
            "Inserted %d documents into '%s'", result.count, self.config.collection_name
        )
        return batch.ids

    def delete(self, ids: Iterable[str]) -> Optional[bool]:
        """
        Delete the documents with the given ids.

        A deleted count lower than requested is only logged.

        :return: the backend's success status, or ``None`` when *ids* is empty
            and no call was issued.
        """
        if ids is None:
            raise ValidationError("Document id list must not be None", operation="delete")
        ids = list(ids)
        if not ids:
            return None

        result = self.backend.delete(ids)
        if result.count != len(ids):
            logger.warning("Deleted only %d entries from requested %d", result.count, len(ids))
        return result.succeeded

    # ------------------------------------------------------------------ #
    # Search
    # ------------------------------------------------------------------ #
    def similarity_search(
        self,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    ) -> List[Document]:
        """
        Return up to *top_k* documents nearest to *query*, best first.

        Hits whose relevance is below *similarity_threshold* are dropped. Each
        returned document carries ``metadata["distance"]``, ``1 - relevance``.
        """
        if query is None:
            raise ValidationError("Query string must not be None", operation="search")
        if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
            raise ValidationError(f"top_k must be a positive integer, got {top_k!r}", operation="search")
        if not math.isfinite(similarity_threshold):
            raise ValidationError(
                f"similarity_threshold must be finite, got {similarity_threshold!r}",
                operation="search",
            )

        vector = self._embed([query])[0]
        hits = self.backend.search(to_float32(vector), top_k, SEARCH_OUTPUT_FIELDS)

        results: List[Document] = []
        for hit in hits:
            document = decode_row(hit.entity)
            relevance = self.normalizer.relevance(hit.distance)
            if not self.normalizer.passes(relevance, similarity_threshold):
                continue
            results.append(annotate_distance(document, self.normalizer.stored_distance(relevance)))
        logger.debug(
            "Search in '%s' returned %d of %d hits", self.config.collection_name, len(results), len(hits)
        )
        return results
