"""
Embedding backends.
"""

from vectorkit.embeddings.base import BaseEmbeddingModel
from vectorkit.embeddings.openai import OpenAIEmbeddingModel

__all__ = ["BaseEmbeddingModel", "OpenAIEmbeddingModel"]
