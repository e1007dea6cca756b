"""
OpenAI-compatible embedding backend with retries and rate limiting.
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np
from openai import APIConnectionError, APITimeoutError, OpenAI, OpenAIError, RateLimitError
from tenacity import (
    after_log,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vectorkit.config.schema import EmbeddingSettings
from vectorkit.embeddings.base import BaseEmbeddingModel
from vectorkit.exceptions import EmbeddingError
from vectorkit.utils import RateLimiter

logger = logging.getLogger(__name__)


class OpenAIEmbeddingModel(BaseEmbeddingModel):
    """
    Embedding wrapper that talks to any OpenAI-compatible service.
    """

    RETRYABLE_ERRORS = (
        RateLimitError,
        APIConnectionError,
        APITimeoutError,
    )

    def __init__(self, settings: EmbeddingSettings, client: OpenAI | None = None) -> None:
        """Initialize the OpenAI client."""
        super().__init__(settings)
        self.client = client or OpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
            max_retries=0,
        )
        self._rate_limiter = RateLimiter(rpm=settings.requests_per_minute)

    def _normalize(self, embeddings: np.ndarray) -> np.ndarray:
        """
        Normalize embeddings if the config requests it.
        """
        if not self.settings.normalize_embeddings:
            return embeddings
        norms = np.linalg.norm(embeddings, axis=1, keepdims=True)
        norms[norms == 0] = 1e-9
        return embeddings / norms

    def embed(self, texts: List[str]) -> np.ndarray:
        """
        Encode *texts* batch by batch and return an ndarray.
        """
        cleaned = [text.replace("\n", " ").strip() or " " for text in texts]
        embeddings: List[List[float]] = []
        batch_size = self.settings.batch_size
        for start in range(0, len(cleaned), batch_size):
            batch = cleaned[start : start + batch_size]
            self._rate_limiter.acquire()
            try:
                embeddings.extend(self._call_with_retry(batch))
            except OpenAIError as exc:
                raise EmbeddingError(
                    f"Embedding request to '{self.settings.model}' failed: {exc}",
                    operation="embed",
                    cause=exc,
                ) from exc
        if not embeddings:
            return np.empty((0, self.settings.dim), dtype=np.float32)
        return self._normalize(np.array(embeddings, dtype=np.float32))

    def _call_with_retry(self, batch: List[str]) -> List[List[float]]:
        """Call the API with exponential backoff."""

        @retry(
            retry=retry_if_exception_type(self.RETRYABLE_ERRORS),
            wait=wait_exponential(
                multiplier=1,
                min=self.settings.retry_min_wait,
                max=self.settings.retry_max_wait,
            ),
            stop=stop_after_attempt(self.settings.max_retries),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            after=after_log(logger, logging.DEBUG),
            reraise=True,
        )
        def _do_call() -> List[List[float]]:
            response = self.client.embeddings.create(
                model=self.settings.model,
                input=batch,
                encoding_format="float",
            )
            if response.usage:
                logger.debug(f"Embedding batch usage: {response.usage.total_tokens} tokens")
            return [row.embedding for row in response.data]

        return _do_call()

    def close(self) -> None:
        """Close the client connection."""
        self.client.close()
