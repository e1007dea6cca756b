"""
Hash helpers.
"""

from __future__ import annotations

import uuid


def compute_uuid5(content: str, namespace: str = "") -> str:
    """
    Compute a deterministic UUID5 string for *content*.

    Backends that only accept UUID or integer keys use this to map a
    caller-assigned document id onto a stable point id. A non-empty
    *namespace* (typically the collection name) keeps ids of different
    collections apart.
    """
    space = uuid.uuid5(uuid.NAMESPACE_URL, namespace) if namespace else uuid.NAMESPACE_URL
    return str(uuid.uuid5(space, content))
