"""
Row/column mapping between :class:`Document` and backend payloads.

Documents go in row by row and leave as a :class:`ColumnarBatch`; search rows
come back as mappings keyed by field name and are turned into documents again.
All functions here are pure.
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import numpy as np

from vectorkit.vectorstores.base import (
    CONTENT_FIELD,
    DISTANCE_FIELD,
    DOC_ID_FIELD,
    METADATA_FIELD,
    ColumnarBatch,
    Document,
)


def to_float32(vector: Iterable[float]) -> List[float]:
    """Narrow *vector* to float32 precision, as stored by the backends."""
    return np.asarray(vector, dtype=np.float32).tolist()


def encode_documents(documents: Sequence[Document]) -> ColumnarBatch:
    """
    Split *documents* into the four parallel insert columns.

    Every document must already carry its embedding.
    """
    ids: List[str] = []
    contents: List[str] = []
    metadata: List[Dict[str, Any]] = []
    embeddings: List[List[float]] = []
    for document in documents:
        if document.embedding is None:
            raise ValueError(f"Document '{document.id}' has no embedding")
        ids.append(document.id)
        contents.append(document.text)
        metadata.append(dict(document.metadata))
        embeddings.append(to_float32(document.embedding))
    return ColumnarBatch(ids=ids, contents=contents, metadata=metadata, embeddings=embeddings)


def _load_metadata(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        return json.loads(raw or "{}")
    return dict(raw)


def decode_row(row: Mapping[str, Any]) -> Document:
    """Rebuild a document from a search row keyed by field name."""
    return Document(
        id=str(row[DOC_ID_FIELD]),
        text=row.get(CONTENT_FIELD) or "",
        metadata=_load_metadata(row.get(METADATA_FIELD)),
    )


def annotate_distance(document: Document, distance: float) -> Document:
    """
    Return a copy of *document* with ``distance`` set in its metadata.

    A caller-supplied ``distance`` key is overwritten.
    """
    metadata = dict(document.metadata)
    metadata[DISTANCE_FIELD] = float(distance)
    return replace(document, metadata=metadata)


def id_filter_expression(ids: Iterable[str], field_name: str = DOC_ID_FIELD) -> str:
    """Boolean expression matching rows whose *field_name* is one of *ids*."""
    return f"{field_name} in {json.dumps(list(ids))}"
