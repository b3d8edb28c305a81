"""
Strict content validation and graph metrics.

The query engine tolerates dangling references and cycles at run time.
This module is the explicit content check: it reports every dangling
prerequisite and every cycle, and can refuse to publish content that has
any. Uses ``networkx.DiGraph`` for cycle enumeration and topological-sort
validation.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

import networkx as nx
import numpy as np

from conceptgraph.edge_index import EdgeIndex
from conceptgraph.exceptions import GraphIntegrityError
from conceptgraph.models import LAYER_ORDER, Concept, GraphMetrics, HealthReport
from conceptgraph.traversal import longest_chain

logger = logging.getLogger(__name__)


def _requirement_graph(concepts: Sequence[Concept]) -> nx.DiGraph:
    """Directed graph with an edge from each concept to each of its prerequisites."""
    G = nx.DiGraph()
    for concept in concepts:
        G.add_node(concept.id)
        for prereq_id in concept.prerequisites:
            G.add_edge(concept.id, prereq_id)
    return G


def _rotate(cycle: List[str]) -> List[str]:
    """Start a cycle at its smallest id so reports are deterministic."""
    pivot = cycle.index(min(cycle))
    return cycle[pivot:] + cycle[:pivot]


# =========================================================================
# Validation
# =========================================================================


def find_cycles(concepts: Sequence[Concept]) -> List[List[str]]:
    """Every elementary requirement cycle, each starting at its smallest id."""
    cycles = [_rotate(list(c)) for c in nx.simple_cycles(_requirement_graph(concepts))]
    return sorted(cycles)


def validate_dag(concepts: Sequence[Concept]) -> bool:
    """Verify that the prerequisite edges form a DAG (topological sort succeeds)."""
    try:
        list(nx.topological_sort(_requirement_graph(concepts)))
        return True
    except nx.NetworkXUnfeasible:
        return False


def check_health(
    concepts: Sequence[Concept],
    index: Optional[EdgeIndex] = None,
) -> HealthReport:
    """Report dangling prerequisites, cycles, and enables-only edges.

    Enables-only edges are listed for review but do not make the content
    unhealthy.
    """
    known = {c.id for c in concepts}
    report = HealthReport()

    for concept in concepts:
        for prereq_id in concept.prerequisites:
            if prereq_id not in known:
                report.missing_prerequisites.append((concept.id, prereq_id))
                report.issues.append(
                    f'Concept "{concept.id}" references missing prerequisite "{prereq_id}"'
                )

    for cycle in find_cycles(concepts):
        report.cycles.append(cycle)
        report.issues.append(
            "Circular dependency detected: " + " -> ".join(cycle + cycle[:1])
        )

    if index is None:
        index = EdgeIndex.build(concepts)
    report.declared_only_edges = index.declared_only_edges()

    report.healthy = not report.issues
    logger.info(
        "Health check: %d missing prerequisite(s), %d cycle(s), %d enables-only edge(s).",
        len(report.missing_prerequisites), len(report.cycles),
        len(report.declared_only_edges),
    )
    return report


def assert_valid(
    concepts: Sequence[Concept],
    index: Optional[EdgeIndex] = None,
) -> HealthReport:
    """Run ``check_health`` and raise if the content is not publishable.

    Raises:
        GraphIntegrityError: listing every issue found.
    """
    report = check_health(concepts, index)
    if not report.healthy:
        for issue in report.issues:
            logger.error(issue)
        raise GraphIntegrityError(report.issues)
    return report


# =========================================================================
# Metrics
# =========================================================================


def compute_metrics(concepts: Sequence[Concept], index: EdgeIndex) -> GraphMetrics:
    """Compute summary statistics: layer/domain counts, roots, leaves, depth."""
    if not concepts:
        return GraphMetrics(by_layer={layer: 0 for layer in LAYER_ORDER})

    prereqs: Dict[str, Sequence[str]] = {c.id: c.prerequisites for c in concepts}

    def neighbors(concept_id: str) -> Sequence[str]:
        return prereqs.get(concept_id, ())

    layer_counts = Counter(c.layer for c in concepts)
    domain_counts: Counter = Counter()
    for concept in concepts:
        domain_counts[concept.domain] += 1
        for extra in concept.secondary_domains:
            if extra != concept.domain:
                domain_counts[extra] += 1

    prereq_counts = np.array([len(c.prerequisites) for c in concepts], dtype=np.int64)
    depths = np.array([longest_chain(c.id, neighbors) for c in concepts], dtype=np.int64)

    is_dag = validate_dag(concepts)
    if is_dag and index.number_of_edges() > 0:
        max_depth = nx.dag_longest_path_length(_requirement_graph(concepts))
    else:
        max_depth = int(depths.max())

    return GraphMetrics(
        total_concepts=len(concepts),
        total_edges=index.number_of_edges(),
        by_layer={layer: layer_counts.get(layer, 0) for layer in LAYER_ORDER},
        by_domain=dict(domain_counts),
        average_prerequisites=round(float(prereq_counts.mean()), 2),
        root_concepts=int(np.sum(prereq_counts == 0)),
        leaf_concepts=sum(1 for c in concepts if not index.get_dependents(c.id)),
        max_depth=int(max_depth),
        depth_distribution=np.bincount(depths).tolist(),
        is_dag=is_dag,
    )
