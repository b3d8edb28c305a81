"""
pytest suite for strict content validation and graph metrics.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from conceptgraph.edge_index import EdgeIndex
from conceptgraph.exceptions import GraphIntegrityError
from conceptgraph.models import Concept
from conceptgraph.validation import (
    assert_valid,
    check_health,
    compute_metrics,
    find_cycles,
    validate_dag,
)


# =========================================================================
# Helpers
# =========================================================================


def _concept(cid, prereqs=(), layer="objects", domain="linear-algebra", **extra):
    record = {
        "id": cid,
        "name": cid.replace("-", " ").title(),
        "layer": layer,
        "domain": domain,
        "definition": f"Definition of {cid}.",
        "visualization": f"{cid}-viz",
        "prerequisites": list(prereqs),
    }
    record.update(extra)
    return Concept.model_validate(record)


def _chain():
    return [_concept("a"), _concept("b", ["a"]), _concept("c", ["b"])]


# =========================================================================
# Test: Health check
# =========================================================================


class TestHealthCheck:
    """Dangling prerequisites and cycles make content unhealthy."""

    def test_healthy_chain(self):
        report = check_health(_chain())
        assert report.healthy is True
        assert report.issues == []

    def test_missing_prerequisite(self):
        report = check_health([_concept("x", ["ghost-concept"])])
        assert report.healthy is False
        assert report.missing_prerequisites == [("x", "ghost-concept")]
        assert report.issues == [
            'Concept "x" references missing prerequisite "ghost-concept"'
        ]

    def test_cycle_reported(self):
        report = check_health([_concept("q", ["p"]), _concept("p", ["q"])])
        assert report.healthy is False
        assert report.cycles == [["p", "q"]]
        assert "Circular dependency detected: p -> q -> p" in report.issues

    def test_self_loop_is_a_cycle(self):
        assert find_cycles([_concept("s", ["s"])]) == [["s"]]

    def test_enables_only_edges_are_informational(self):
        concepts = [_concept("a", enables=["b"]), _concept("b")]
        report = check_health(concepts, EdgeIndex.build(concepts))
        assert report.healthy is True
        assert report.declared_only_edges == [("a", "b")]


class TestDagValidation:
    """Topological-sort based DAG check and the raising variant."""

    def test_chain_is_dag(self):
        assert validate_dag(_chain()) is True

    def test_cycle_is_not_dag(self):
        assert validate_dag([_concept("p", ["q"]), _concept("q", ["p"])]) is False

    def test_assert_valid_passes(self):
        assert assert_valid(_chain()).healthy

    def test_assert_valid_lists_every_issue(self):
        concepts = [
            _concept("p", ["q"]),
            _concept("q", ["p"]),
            _concept("x", ["ghost-concept"]),
        ]
        with pytest.raises(GraphIntegrityError) as excinfo:
            assert_valid(concepts)
        assert len(excinfo.value.issues) == 2


# =========================================================================
# Test: Metrics
# =========================================================================


class TestMetrics:
    """Summary statistics over a concept set."""

    def test_metrics_basic(self):
        concepts = _chain() + [
            _concept("solo", layer="structures", domain="calculus",
                     secondary_domains=["probability"]),
        ]
        m = compute_metrics(concepts, EdgeIndex.build(concepts))
        assert m.total_concepts == 4
        assert m.total_edges == 2
        assert m.by_layer == {
            "objects": 3, "structures": 1, "rules": 0,
            "computation": 0, "applications": 0,
        }
        assert m.by_domain == {"linear-algebra": 3, "calculus": 1, "probability": 1}
        assert m.average_prerequisites == 0.5
        assert m.root_concepts == 2
        assert m.leaf_concepts == 2
        assert m.max_depth == 2
        assert m.depth_distribution == [2, 1, 1]
        assert m.is_dag is True

    def test_metrics_cyclic(self):
        concepts = [_concept("p", ["q"]), _concept("q", ["p"])]
        m = compute_metrics(concepts, EdgeIndex.build(concepts))
        assert m.is_dag is False
        assert m.max_depth == 2

    def test_metrics_empty(self):
        m = compute_metrics([], EdgeIndex.build([]))
        assert m.total_concepts == 0
        assert m.max_depth == 0
        assert m.by_layer["objects"] == 0
