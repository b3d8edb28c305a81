"""
Cycle-safe depth-first traversal shared by every graph query.

Both helpers take a ``neighbors`` callable, so the same code walks
prerequisite edges (towards ancestors) or dependent edges (towards
descendants). Neither assumes the graph is acyclic: a corrupted graph
truncates the offending branch instead of looping.
"""

import logging
from typing import Callable, Dict, FrozenSet, List, Literal, Optional, Sequence, Tuple

import networkx as nx

logger = logging.getLogger(__name__)

Direction = Literal["prerequisites", "dependents"]
Neighbors = Callable[[str], Sequence[str]]


def walk(
    start: str,
    neighbors: Neighbors,
    max_depth: Optional[int] = None,
) -> List[str]:
    """Return every id reachable from *start*, in first-discovery order.

    *start* itself is never part of the result, even when a cycle leads
    back to it. With *max_depth* set, only nodes within that many hops are
    returned; a node first reached along a long branch is expanded again
    if a shorter branch reaches it later, so the bound is measured in
    shortest hops.
    """
    if max_depth is not None and max_depth < 1:
        return []

    best: Dict[str, int] = {start: 0}
    order: List[str] = []
    stack: List[Tuple[str, int]] = [(n, 1) for n in reversed(neighbors(start))]

    while stack:
        node, depth = stack.pop()
        seen = best.get(node)
        if seen is not None and (max_depth is None or seen <= depth):
            continue
        if seen is None:
            order.append(node)
        best[node] = depth

        if max_depth is not None and depth >= max_depth:
            continue
        for nxt in reversed(neighbors(node)):
            stack.append((nxt, depth + 1))

    return order


def _reachable_graph(start: str, neighbors: Neighbors) -> nx.DiGraph:
    """Every edge reachable from *start*, as a ``networkx.DiGraph``."""
    graph = nx.DiGraph()
    graph.add_node(start)
    stack = [start]
    while stack:
        node = stack.pop()
        for nxt in neighbors(node):
            if nxt not in graph:
                stack.append(nxt)
            graph.add_edge(node, nxt)
    return graph


def longest_chain(start: str, neighbors: Neighbors) -> int:
    """Length of the longest edge chain leaving *start*.

    Each branch carries its own path guard, so two branches converging on
    a shared ancestor are both measured fully. A node that reappears on
    its own path contributes 0 at that point.

    Only the part of the path inside a node's own cyclic component can
    change that node's result, so results are memoised per node and that
    part of the path. Acyclic nodes are computed once.
    """
    graph = _reachable_graph(start, neighbors)
    component: Dict[str, FrozenSet[str]] = {}
    for members in nx.strongly_connected_components(graph):
        member = next(iter(members))
        cyclic = len(members) > 1 or graph.has_edge(member, member)
        for node in members:
            component[node] = frozenset(members) if cyclic else frozenset()

    memo: Dict[Tuple[str, FrozenSet[str]], int] = {}

    def visit(node: str, path: FrozenSet[str]) -> int:
        if node in path:
            logger.debug("Cycle guard hit at %r; truncating branch.", node)
            return 0
        key = (node, path & component[node])
        if key in memo:
            return memo[key]

        branch_path = path | {node}
        best = 0
        for child in graph.successors(node):
            best = max(best, visit(child, branch_path) + 1)
        memo[key] = best
        return best

    return visit(start, frozenset())
