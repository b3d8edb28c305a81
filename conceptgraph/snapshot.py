"""
Copy-on-write publishing of immutable graph snapshots.

A snapshot is a frozen store plus the query engine and planner built on
it. Reloading content builds a complete new snapshot and then swaps one
reference, so a reader that called ``current()`` at the start of a
request never sees a half-built edge index.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from conceptgraph.config import DEFAULT_SETTINGS, EngineSettings
from conceptgraph.exceptions import StoreNotFrozenError
from conceptgraph.models import BatchResult
from conceptgraph.planner import PathPlanner
from conceptgraph.query import GraphQuery
from conceptgraph.store import ConceptInput, ConceptStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphSnapshot:
    """One published, read-only generation of the concept graph."""

    version: int
    store: ConceptStore
    query: GraphQuery
    planner: PathPlanner

    @classmethod
    def from_store(cls, store: ConceptStore, version: int = 1) -> "GraphSnapshot":
        store.freeze()
        query = GraphQuery(store)
        return cls(version=version, store=store, query=query, planner=PathPlanner(query))


class SnapshotPublisher:
    """Holds the current snapshot and replaces it wholesale on reload."""

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS
        self._current: Optional[GraphSnapshot] = None
        self._version = 0
        self._publish_lock = threading.Lock()

    def publish(self, records: Iterable[ConceptInput]) -> Tuple[GraphSnapshot, BatchResult]:
        """Register *records* into a fresh store and publish it.

        Invalid records are skipped and reported in the returned
        ``BatchResult``. In strict mode a ``GraphIntegrityError`` leaves the
        previous snapshot in place.
        """
        store = ConceptStore(settings=self.settings)
        result = store.register_batch(records)
        return self.publish_store(store), result

    def publish_store(self, store: ConceptStore) -> GraphSnapshot:
        """Freeze *store* (if needed) and make it the current snapshot."""
        with self._publish_lock:
            snapshot = GraphSnapshot.from_store(store, version=self._version + 1)
            self._version = snapshot.version
            self._current = snapshot

        logger.info(
            "Published snapshot v%d with %d concepts.", snapshot.version, len(store)
        )
        return snapshot

    def current(self) -> GraphSnapshot:
        """The latest snapshot; take it once per request and use it throughout.

        Raises:
            StoreNotFrozenError: if nothing has been published yet.
        """
        snapshot = self._current
        if snapshot is None:
            raise StoreNotFrozenError("No snapshot has been published yet.")
        return snapshot
