"""
pytest suite for the traversal primitives and utility helpers.
"""

import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from conceptgraph.models import Concept
from conceptgraph.query import GraphQuery
from conceptgraph.store import ConceptStore
from conceptgraph.traversal import longest_chain, walk
from conceptgraph.utils import (
    filter_advanced,
    filter_by_difficulty,
    format_concept_list,
    format_minutes,
    get_layer_name,
    parse_estimated_time,
    setup_logging,
    sort_by_depth,
    sort_by_difficulty,
    sort_by_layer,
    timed,
)


# =========================================================================
# Helpers
# =========================================================================


def _concept(cid, prereqs=(), layer="objects", difficulty=1, advanced=False, name=None):
    return Concept.model_validate({
        "id": cid,
        "name": name or cid.title(),
        "layer": layer,
        "domain": "probability",
        "definition": f"Definition of {cid}.",
        "visualization": f"{cid}-viz",
        "prerequisites": list(prereqs),
        "metadata": {"difficulty": difficulty, "is_advanced": advanced},
    })


def _neighbors(adjacency):
    return lambda node: adjacency.get(node, [])


# =========================================================================
# Test: Traversal
# =========================================================================


class TestWalk:
    """Generic cycle-safe depth-first walk."""

    def test_first_discovery_order(self):
        adjacency = {"s": ["x", "y"], "x": ["z"], "y": ["z"]}
        assert walk("s", _neighbors(adjacency)) == ["x", "z", "y"]

    def test_cycle_back_to_start_excluded(self):
        adjacency = {"s": ["a"], "a": ["b"], "b": ["s", "a"]}
        assert walk("s", _neighbors(adjacency)) == ["a", "b"]

    def test_depth_bound(self):
        adjacency = {"s": ["a"], "a": ["b"], "b": ["c"]}
        assert walk("s", _neighbors(adjacency), max_depth=2) == ["a", "b"]
        assert walk("s", _neighbors(adjacency), max_depth=0) == []

    def test_bound_uses_shortest_hops(self):
        adjacency = {"s": ["x", "y"], "x": ["y"], "y": ["w"]}
        assert walk("s", _neighbors(adjacency), max_depth=2) == ["x", "y", "w"]


class TestLongestChain:
    """Longest-path depth with per-branch cycle guards."""

    def test_diamond(self):
        adjacency = {"d": ["b1", "b2"], "b1": ["a"], "b2": ["a"]}
        assert longest_chain("d", _neighbors(adjacency)) == 2

    def test_uneven_branches(self):
        adjacency = {"g": ["a", "c"], "c": ["b"], "b": ["a"]}
        assert longest_chain("g", _neighbors(adjacency)) == 3

    def test_cycle_terminates(self):
        adjacency = {"p": ["q"], "q": ["p"]}
        assert longest_chain("p", _neighbors(adjacency)) == 2

    def test_cycle_inside_longer_chain(self):
        adjacency = {"t": ["p"], "p": ["q"], "q": ["p", "r"], "r": []}
        assert longest_chain("t", _neighbors(adjacency)) == 3

    def test_acyclic_part_above_cycle_is_computed_once(self):
        calls = {}
        adjacency = {"base": ["base"]}
        below = ["base"]
        for level in range(1, 31):
            rung = [f"a{level}", f"b{level}"]
            for node in rung:
                adjacency[node] = below
            below = rung
        adjacency["top"] = below

        def counting(node):
            calls[node] = calls.get(node, 0) + 1
            return adjacency.get(node, [])

        assert longest_chain("top", counting) == 32
        assert max(calls.values()) == 1

    def test_isolated(self):
        assert longest_chain("lonely", _neighbors({})) == 0


# =========================================================================
# Test: Estimated time
# =========================================================================


class TestEstimatedTime:
    """Free-text estimates to minutes and back."""

    def test_parse_forms(self):
        assert parse_estimated_time("10 mins") == 10
        assert parse_estimated_time("1 hour") == 60
        assert parse_estimated_time("1 hour 30 mins") == 90
        assert parse_estimated_time("2 Hours") == 120
        assert parse_estimated_time("about 2 hrs") == 120
        assert parse_estimated_time("90 MINUTES") == 90

    def test_parse_decimal_hours(self):
        assert parse_estimated_time("1.5 hours") == 90
        assert parse_estimated_time("0.25 hrs") == 15
        assert parse_estimated_time("2.5 hours 10 mins") == 160

    def test_parse_unusable(self):
        assert parse_estimated_time(None) is None
        assert parse_estimated_time("") is None
        assert parse_estimated_time("a while") is None

    def test_format(self):
        assert format_minutes(0) == "0 mins"
        assert format_minutes(45) == "45 mins"
        assert format_minutes(60) == "1 hour"
        assert format_minutes(120) == "2 hours"
        assert format_minutes(90) == "1 hour 30 mins"
        assert format_minutes(125) == "2 hours 5 mins"


# =========================================================================
# Test: Sorting, filtering, formatting
# =========================================================================


class TestHelpers:
    """Thin helpers over concept records."""

    def test_sort_by_layer(self):
        concepts = [
            _concept("app", layer="applications"),
            _concept("obj", layer="objects"),
            _concept("rule", layer="rules"),
        ]
        assert [c.id for c in sort_by_layer(concepts)] == ["obj", "rule", "app"]

    def test_sort_by_difficulty_is_stable(self):
        concepts = [_concept("b", difficulty=3), _concept("a", difficulty=1),
                    _concept("c", difficulty=3)]
        assert [c.id for c in sort_by_difficulty(concepts)] == ["a", "b", "c"]

    def test_sort_by_depth(self):
        store = ConceptStore()
        for concept in (_concept("a"), _concept("b", ["a"]), _concept("c", ["b"])):
            store.register(concept)
        query = GraphQuery(store.freeze())
        shuffled = [store.get("c"), store.get("a"), store.get("b")]
        assert [c.id for c in sort_by_depth(shuffled, query)] == ["a", "b", "c"]

    def test_filters(self):
        concepts = [
            _concept("easy", difficulty=1),
            _concept("hard", difficulty=5, advanced=True),
        ]
        assert [c.id for c in filter_by_difficulty(concepts, 3)] == ["easy"]
        assert [c.id for c in filter_advanced(concepts, include_advanced=False)] == ["easy"]
        assert len(filter_advanced(concepts)) == 2

    def test_layer_name(self):
        assert get_layer_name("rules") == "Rules"
        assert get_layer_name("unheard-of") == "unheard-of"

    def test_format_concept_list(self):
        a, b, c = _concept("a", name="Sets"), _concept("b", name="Maps"), _concept("c", name="Groups")
        assert format_concept_list([]) == "None"
        assert format_concept_list([a]) == "Sets"
        assert format_concept_list([a, b]) == "Sets and Maps"
        assert format_concept_list([a, b, c]) == "Sets, Maps, and Groups"


class TestLogging:
    """Logging setup and step timing."""

    def test_setup_logging_accepts_level_name(self):
        setup_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG
        setup_logging(logging.INFO)
        assert logging.getLogger().level == logging.INFO

    def test_timed_logs_label(self, caplog):
        with caplog.at_level(logging.INFO, logger="conceptgraph.utils"):
            with timed("Index build"):
                pass
        assert "Index build completed" in caplog.text
