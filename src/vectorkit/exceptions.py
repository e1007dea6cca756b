"""
Exception hierarchy shared by the vector store, its backends and embedders.
"""

from __future__ import annotations

from typing import Optional


class VectorStoreError(RuntimeError):
    """Generic vector store exception."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.cause = cause


class ValidationError(VectorStoreError, ValueError):
    """A required argument was missing or out of range."""


class EmbeddingError(VectorStoreError):
    """The embedding provider failed or returned unusable vectors."""


class StoreError(VectorStoreError):
    """
    A remote call against the vector database failed.

    :param operation: Name of the failed call, e.g. ``create-collection``.
    :param cause: Exception raised by the client library, if any.
    """

    def __init__(
        self,
        operation: str,
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
    ) -> None:
        text = message or f"Backend call '{operation}' failed"
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text, operation=operation, cause=cause)
