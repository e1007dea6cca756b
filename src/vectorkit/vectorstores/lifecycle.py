"""
Provisioning and teardown of the collection backing a vector store.

The remote collection moves through ``absent -> created -> indexed -> loaded``.
:meth:`CollectionLifecycleManager.ensure_ready` walks it forward from wherever
it currently is, so it is safe on a cold start and safe to repeat.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from vectorkit.config.schema import StoreConfig
from vectorkit.vectorstores.base import CollectionSchema, IndexSpec, VectorBackend

logger = logging.getLogger(__name__)


@contextmanager
def _settle_flag(flag: threading.Event, running: bool) -> Iterator[None]:
    """Leave *flag* set (or cleared) however the block exits."""
    try:
        yield
    finally:
        if running:
            flag.set()
        else:
            flag.clear()


class CollectionLifecycleManager:
    """
    Idempotently provisions, loads and releases one collection.
    """

    def __init__(self, backend: VectorBackend, config: StoreConfig) -> None:
        self.backend = backend
        self.config = config
        self.schema = CollectionSchema.for_documents(
            config.embedding_dimension, description=config.description
        )
        self._running = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def index_spec(self) -> IndexSpec:
        """Index request built from the store configuration."""
        return IndexSpec(
            field_name=self.schema.vector_field.name,
            index_type=self.config.index_type,
            metric_type=self.config.metric_type,
            params=dict(self.config.index_parameters),
            sync=False,
        )

    def ensure_ready(self) -> None:
        """
        Create the collection and its index when missing, then load it.

        :raises StoreError: on the first failed remote call; nothing is retried.
        """
        name = self.config.collection_name
        if not self.backend.has_collection():
            logger.info("Creating collection '%s' in database '%s'", name, self.config.database_name)
            self.backend.create_collection(
                self.schema, self.config.consistency_level, self.config.shards_num
            )

        if not self.backend.has_index():
            spec = self.index_spec()
            logger.info(
                "Requesting %s index (%s) on '%s.%s'",
                spec.index_type.value,
                spec.metric_type.value,
                name,
                spec.field_name,
            )
            self.backend.create_index(spec)

        logger.debug("Loading collection '%s'", name)
        self.backend.load_collection()

    def release(self) -> bool:
        """
        Release the collection from serving memory if it exists.

        Failures are logged and swallowed so shutdown always completes.

        :return: ``False`` when a remote call failed.
        """
        try:
            if self.backend.has_collection():
                self.backend.release_collection()
                logger.info("Released collection '%s'", self.config.collection_name)
        except Exception as exc:
            logger.warning("Releasing collection '%s' failed: %s", self.config.collection_name, exc)
            return False
        return True

    def drop(self) -> None:
        """Release the collection, drop its index and drop the collection."""
        if not self.backend.has_collection():
            return
        self.backend.release_collection()
        self.backend.drop_index()
        self.backend.drop_collection()
        logger.info("Dropped collection '%s'", self.config.collection_name)

    def start(self) -> None:
        """
        Run :meth:`ensure_ready`; the running flag is set even when it raises.
        """
        with _settle_flag(self._running, True):
            self.ensure_ready()

    def stop(self) -> None:
        """Run :meth:`release`; the running flag is cleared afterwards."""
        with _settle_flag(self._running, False):
            self.release()
