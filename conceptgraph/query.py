"""
Read-only graph queries over a frozen ``ConceptStore``.

Every query is lenient: an id that does not resolve yields an empty or
neutral result (empty list, ``None``, depth 0, empty subgraph) instead of
raising, so presentation code can reference content that is not authored
yet. All transitive walks go through ``conceptgraph.traversal``.
"""

import logging
from typing import AbstractSet, Iterable, List, Optional

from conceptgraph.edge_index import EdgeIndex
from conceptgraph.models import (
    Breadcrumb,
    Concept,
    DependencyTree,
    GraphEdge,
    GraphNode,
    Subgraph,
)
from conceptgraph.store import ConceptStore
from conceptgraph.traversal import Direction, Neighbors, longest_chain, walk

logger = logging.getLogger(__name__)


class GraphQuery:
    """Structural queries: neighbours, chains, depth, gating, subgraphs."""

    def __init__(self, store: ConceptStore):
        self.store = store
        self.index: EdgeIndex = store.edge_index
        self.settings = store.settings

    # =====================================================================
    # Direct neighbours
    # =====================================================================

    def get_prerequisites(self, concept_id: str) -> List[str]:
        """Prerequisite ids in declared order (dangling ids included).

        An ``enables`` entry that no prerequisites list declares is
        appended as well, matching ``get_dependents``.
        """
        return self.index.get_prerequisites(concept_id)

    def get_dependents(self, concept_id: str) -> List[str]:
        return self.index.get_dependents(concept_id)

    def neighbors(self, direction: Direction) -> Neighbors:
        if direction == "prerequisites":
            return self.get_prerequisites
        if direction == "dependents":
            return self.get_dependents
        raise ValueError(f"Unknown direction: {direction!r}")

    def get_dependencies(self, concept_id: str) -> List[Concept]:
        """Prerequisite records; dangling ids are dropped."""
        return self._resolve(self.get_prerequisites(concept_id))

    def get_enabled_by(self, concept_id: str) -> List[Concept]:
        """Records named in the concept's declared ``enables`` list."""
        concept = self.store.get(concept_id)
        return self._resolve(concept.enables) if concept else []

    def get_related(self, concept_id: str) -> List[Concept]:
        concept = self.store.get(concept_id)
        return self._resolve(concept.related_concepts) if concept else []

    # =====================================================================
    # Transitive queries
    # =====================================================================

    def get_prerequisite_chain(self, concept_id: str) -> List[str]:
        """All transitive prerequisites, in first-discovery order.

        A dangling id is listed but not expanded; *concept_id* itself is
        never included.
        """
        return walk(concept_id, self.get_prerequisites)

    def get_dependent_chain(self, concept_id: str) -> List[str]:
        """All transitive dependents, in first-discovery order."""
        return walk(concept_id, self.get_dependents)

    def get_concept_depth(self, concept_id: str) -> int:
        """Longest prerequisite chain ending at *concept_id* (0 for roots)."""
        return longest_chain(concept_id, self.get_prerequisites)

    def depends_on(self, concept_id: str, other_id: str) -> bool:
        """True if *other_id* is a direct or transitive prerequisite."""
        return other_id in self.get_prerequisite_chain(concept_id)

    def find_common_prerequisites(self, concept_id: str, other_id: str) -> List[str]:
        other_chain = set(self.get_prerequisite_chain(other_id))
        return [c for c in self.get_prerequisite_chain(concept_id) if c in other_chain]

    def get_dependency_tree(self, concept_id: str) -> Optional[DependencyTree]:
        """Nested prerequisite tree; dangling ids and cycle repeats are pruned."""
        if self.store.get(concept_id) is None:
            return None

        def build(node_id: str, path: frozenset) -> Optional[DependencyTree]:
            concept = self.store.get(node_id)
            if concept is None or node_id in path:
                return None
            branch = path | {node_id}
            children = [build(p, branch) for p in self.get_prerequisites(node_id)]
            return DependencyTree(
                id=concept.id,
                name=concept.name,
                layer=concept.layer,
                prerequisites=[t for t in children if t is not None],
            )

        return build(concept_id, frozenset())

    def create_breadcrumbs(self, concept_id: str) -> List[Breadcrumb]:
        """Prerequisites in study order, followed by the concept itself."""
        ordered = sorted(
            self.get_prerequisite_chain(concept_id), key=self.get_concept_depth
        )
        ordered.append(concept_id)
        return [
            Breadcrumb(id=c.id, name=c.name, layer=c.layer)
            for c in self._resolve(ordered)
        ]

    # =====================================================================
    # Gating
    # =====================================================================

    def are_prerequisites_met(self, concept_id: str, completed: AbstractSet[str]) -> bool:
        """One-hop check: every direct prerequisite is in *completed*."""
        return all(p in completed for p in self.get_prerequisites(concept_id))

    def is_locked(self, concept_id: str, completed: AbstractSet[str]) -> bool:
        return not self.are_prerequisites_met(concept_id, completed)

    def get_missing_prerequisites(
        self, concept_id: str, completed: AbstractSet[str]
    ) -> List[Concept]:
        missing = [p for p in self.get_prerequisites(concept_id) if p not in completed]
        return self._resolve(missing)

    def get_unlocked_concepts(
        self, completed_id: str, completed: AbstractSet[str]
    ) -> List[str]:
        """Dependents of *completed_id* whose prerequisites are now all met."""
        return [
            dep for dep in self.get_dependents(completed_id)
            if dep not in completed and self.are_prerequisites_met(dep, completed)
        ]

    # =====================================================================
    # Subgraphs
    # =====================================================================

    def get_subgraph(self, concept_id: str, depth: Optional[int] = None) -> Subgraph:
        """Ancestors and descendants within *depth* hops, as nodes and edges."""
        if self.store.get(concept_id) is None:
            return Subgraph()
        if depth is None:
            depth = self.settings.default_subgraph_depth

        included = [concept_id]
        for direction in ("prerequisites", "dependents"):
            for node_id in walk(concept_id, self.neighbors(direction), max_depth=depth):
                if node_id not in included:
                    included.append(node_id)
        return self.get_graph_data(included)

    def get_graph_data(self, concept_ids: Optional[Iterable[str]] = None) -> Subgraph:
        """Nodes for the given ids (or all concepts) and edges among them."""
        if concept_ids is None:
            concepts = list(self.store.get_all())
            members = None
        else:
            concepts = self._resolve(dict.fromkeys(concept_ids))
            members = {c.id for c in concepts}

        nodes = [
            GraphNode(id=c.id, label=c.name, layer=c.layer, domain=c.domain, group=c.layer)
            for c in concepts
        ]
        edges = [
            GraphEdge(source=source, target=target)
            for source, target in self.index.edges()
            if members is None or (source in members and target in members)
        ]
        return Subgraph(nodes=nodes, edges=edges)

    # =====================================================================
    # Helpers
    # =====================================================================

    def _resolve(self, concept_ids: Iterable[str]) -> List[Concept]:
        resolved = (self.store.get(c) for c in concept_ids)
        return [c for c in resolved if c is not None]
