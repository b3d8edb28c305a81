"""
Learning-path planning on top of ``GraphQuery``.

Paths are built from a target's prerequisite chain, minus what the
learner has completed, ordered so every concept follows its own
remaining prerequisites. Ties go to the concept discovered first while
walking the chain, so the same inputs always give the same path.
"""

import logging
import math
from typing import AbstractSet, Dict, List, Optional, Set

import networkx as nx

from conceptgraph.models import LAYER_ORDER, Concept
from conceptgraph.query import GraphQuery
from conceptgraph.utils import format_minutes, layer_rank, parse_estimated_time

logger = logging.getLogger(__name__)

_NO_COMPLETED: AbstractSet[str] = frozenset()


class PathPlanner:
    """Study sequences, time estimates, progress, and next-step suggestions."""

    def __init__(self, query: GraphQuery):
        self.query = query
        self.store = query.store
        self.settings = query.settings

    # =====================================================================
    # Paths
    # =====================================================================

    def generate_learning_path(
        self,
        target_id: str,
        completed: AbstractSet[str] = _NO_COMPLETED,
    ) -> List[str]:
        """Ordered ids to study, ending with *target_id*.

        Returns an empty list when the target is already completed.
        """
        if target_id in completed:
            return []
        chain = self.query.get_prerequisite_chain(target_id)
        remaining = [c for c in chain if c not in completed]
        return self._linearize(remaining) + [target_id]

    def build_path_between(self, from_id: str, to_id: str) -> List[str]:
        """Path to *to_id* for a learner who knows *from_id* and its chain."""
        covered = set(self.query.get_prerequisite_chain(from_id))
        covered.add(from_id)
        remaining = [c for c in self.query.get_prerequisite_chain(to_id) if c not in covered]
        return self._linearize(remaining) + [to_id]

    def get_shortest_path(
        self,
        target_id: str,
        completed: AbstractSet[str] = _NO_COMPLETED,
    ) -> List[Concept]:
        """``generate_learning_path`` resolved to records; dangling ids dropped."""
        path = self.generate_learning_path(target_id, completed)
        return [c for c in (self.store.get(i) for i in path) if c is not None]

    def _linearize(self, remaining: List[str]) -> List[str]:
        """Order *remaining* so prerequisites come first.

        *remaining* is in discovery order, which doubles as the tie-break
        rank for ``nx.lexicographical_topological_sort``. Cycles are broken
        first, one edge at a time: the edge leading into the cycle's
        lowest-ranked node is dropped, so that node is studied first.
        """
        rank: Dict[str, int] = {cid: i for i, cid in enumerate(remaining)}
        G = nx.DiGraph()
        G.add_nodes_from(remaining)
        for cid in remaining:
            for prereq_id in self.query.get_prerequisites(cid):
                if prereq_id in rank:
                    G.add_edge(prereq_id, cid)

        while True:
            try:
                cycle = nx.find_cycle(G, orientation="original")
            except nx.NetworkXNoCycle:
                break
            u, v, _ = min(cycle, key=lambda edge: rank[edge[1]])
            logger.warning(
                "Prerequisite cycle %s; studying %r before its prerequisite %r.",
                " -> ".join(edge[0] for edge in cycle), v, u,
            )
            G.remove_edge(u, v)

        return list(nx.lexicographical_topological_sort(G, key=rank.__getitem__))

    # =====================================================================
    # Estimates & progress
    # =====================================================================

    def estimate_learning_minutes(
        self,
        target_id: str,
        completed: AbstractSet[str] = _NO_COMPLETED,
    ) -> Optional[int]:
        """Total minutes over the remaining path, or ``None`` if nothing is estimated."""
        total: Optional[int] = None
        for concept in self.get_shortest_path(target_id, completed):
            minutes = parse_estimated_time(concept.metadata.estimated_time)
            if minutes is not None:
                total = (total or 0) + minutes
        return total

    def estimate_learning_time(
        self,
        target_id: str,
        completed: AbstractSet[str] = _NO_COMPLETED,
    ) -> str:
        """Remaining study time as text, e.g. ``"2 hours 30 mins"``."""
        total = self.estimate_learning_minutes(target_id, completed)
        if total is None:
            return self.settings.unknown_time_marker
        return format_minutes(total)

    def calculate_progress(self, target_id: str, completed: AbstractSet[str]) -> int:
        """Percent (0-100) of the target's full required path already completed.

        Halves round up, so 1 of 8 is 13.
        """
        required = self.generate_learning_path(target_id, _NO_COMPLETED)
        if not required:
            return 100
        done = sum(1 for cid in required if cid in completed)
        return math.floor(done * 100 / len(required) + 0.5)

    # =====================================================================
    # Frontier & recommendations
    # =====================================================================

    def get_unlockable_concepts(self, completed: AbstractSet[str]) -> List[Concept]:
        """Not-yet-completed concepts whose direct prerequisites are all met."""
        return [
            c for c in self.store.get_all()
            if c.id not in completed and self.query.are_prerequisites_met(c.id, completed)
        ]

    def get_recommendations(
        self,
        completed: AbstractSet[str],
        limit: Optional[int] = None,
    ) -> List[Concept]:
        """The frontier, most elementary layer first, then easiest first."""
        if limit is None:
            limit = self.settings.recommendation_limit
        frontier = self.get_unlockable_concepts(completed)
        frontier.sort(key=lambda c: (layer_rank(c.layer), c.metadata.difficulty))
        return frontier[:limit]

    def get_next_concepts(self, concept_id: str) -> List[Concept]:
        """Enabled concepts, then same-layer peers, then the next layer up."""
        current = self.store.get(concept_id)
        if current is None:
            return []

        candidates = list(self.query.get_enabled_by(concept_id))
        candidates += [c for c in self.store.get_by_layer(current.layer) if c.id != concept_id]
        position = layer_rank(current.layer)
        if position + 1 < len(LAYER_ORDER):
            candidates += self.store.get_by_layer(LAYER_ORDER[position + 1])

        seen: Set[str] = set()
        unique: List[Concept] = []
        for concept in candidates:
            if concept.id not in seen:
                seen.add(concept.id)
                unique.append(concept)
        return unique
