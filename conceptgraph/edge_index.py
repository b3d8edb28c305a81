"""
Prerequisite edges indexed in both directions.

Edges are declared on the dependent's side (``Concept.prerequisites``);
the index stores them as a ``networkx.DiGraph`` pointing from
prerequisite to dependent. Prerequisites and dependents are both read
from that one graph, so an edge added from an ``enables`` list is seen
from either end.
"""

import logging
from typing import List, Sequence, Tuple

import networkx as nx

from conceptgraph.models import Concept

logger = logging.getLogger(__name__)

DECLARED = "prerequisites"
OVERRIDE = "enables"


class EdgeIndex:
    """Prerequisite → dependent edges, in registration order."""

    def __init__(self, graph: nx.DiGraph):
        self._graph = graph

    @classmethod
    def build(cls, concepts: Sequence[Concept]) -> "EdgeIndex":
        """Index every declared prerequisite edge of *concepts*.

        ``enables`` entries only add an edge that no prerequisites list
        already declares; they never shadow a declared one.
        """
        graph = nx.DiGraph()
        for concept in concepts:
            graph.add_node(concept.id)
            for prereq_id in concept.prerequisites:
                graph.add_edge(prereq_id, concept.id, source=DECLARED)

        overrides = 0
        for concept in concepts:
            for enabled_id in concept.enables:
                if graph.has_edge(concept.id, enabled_id):
                    continue
                graph.add_edge(concept.id, enabled_id, source=OVERRIDE)
                overrides += 1
                logger.debug(
                    "Edge %s → %s taken from 'enables' only.", concept.id, enabled_id
                )

        logger.info(
            "Edge index built: %d nodes, %d edges (%d from enables).",
            graph.number_of_nodes(), graph.number_of_edges(), overrides,
        )
        return cls(graph)

    def get_prerequisites(self, concept_id: str) -> List[str]:
        """Ids *concept_id* requires, declared ones first, then enables-only ones."""
        if concept_id not in self._graph:
            return []
        return list(self._graph.predecessors(concept_id))

    def get_dependents(self, concept_id: str) -> List[str]:
        """Ids that depend on *concept_id*; empty for unknown ids."""
        if concept_id not in self._graph:
            return []
        return list(self._graph.successors(concept_id))

    def declared_only_edges(self) -> List[Tuple[str, str]]:
        """Edges present only because of a concept's ``enables`` list."""
        return [
            (u, v) for u, v, source in self._graph.edges(data="source")
            if source == OVERRIDE
        ]

    def edges(self) -> List[Tuple[str, str]]:
        return list(self._graph.edges())

    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    def as_digraph(self) -> nx.DiGraph:
        """A copy of the underlying graph, safe for callers to mutate."""
        return self._graph.copy()
