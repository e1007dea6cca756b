"""
Abstract embedding interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

import numpy as np

from vectorkit.config.schema import EmbeddingSettings


class BaseEmbeddingModel(ABC):
    """Base contract for embedding backends."""

    def __init__(self, settings: EmbeddingSettings) -> None:
        """Persist settings for downstream use."""
        self.settings = settings

    @property
    def dim(self) -> int:
        """Dimension of the vectors this model produces."""
        return self.settings.dim

    @abstractmethod
    def embed(self, texts: List[str]) -> np.ndarray:
        """
        Encode the provided texts into embedding vectors.

        Implementations raise :class:`~vectorkit.exceptions.EmbeddingError`
        when the provider fails.

        :param texts: List of texts.
        :return: 2-D array ``(len(texts), dim)``.
        """

    def embed_one(self, text: str) -> np.ndarray:
        """
        Convenience helper to encode a single string.
        """
        return self.embed([text])[0]

    def close(self) -> None:
        """Release provider resources. No-op by default."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
