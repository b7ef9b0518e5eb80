"""Tests for cycle detection and topological ordering."""

from collections.abc import Callable

import pytest

from cornerstone.exceptions import CircularDependencyError
from cornerstone.models import DependencyEdge, WorkItem
from cornerstone.scheduler.cycles import find_cycle, topological_order
from cornerstone.scheduler.graph import DependencyGraph


@pytest.fixture
def build(
    make_item: Callable[..., WorkItem], make_dep: Callable[..., DependencyEdge]
) -> Callable[[list[str], list[tuple[str, str]]], DependencyGraph]:
    """Build a graph from node IDs and (predecessor, successor) pairs."""

    def _build(node_ids: list[str], edges: list[tuple[str, str]]) -> DependencyGraph:
        return DependencyGraph.build(
            [make_item(node_id) for node_id in node_ids],
            [make_dep(pred, succ) for pred, succ in edges],
        )

    return _build


class TestFindCycle:
    """Test three-color cycle detection."""

    def test_empty_graph(self, build: Callable[..., DependencyGraph]) -> None:
        assert find_cycle(build([], [])) is None

    def test_chain_has_no_cycle(self, build: Callable[..., DependencyGraph]) -> None:
        assert find_cycle(build(["a", "b", "c"], [("a", "b"), ("b", "c")])) is None

    def test_diamond_is_not_a_cycle(self, build: Callable[..., DependencyGraph]) -> None:
        """Reaching a finished node twice must not look like a cycle."""
        graph = build(
            ["a", "b", "c", "d"],
            [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")],
        )
        assert find_cycle(graph) is None

    def test_two_node_cycle(self, build: Callable[..., DependencyGraph]) -> None:
        assert find_cycle(build(["a", "b"], [("a", "b"), ("b", "a")])) == ["a", "b"]

    def test_cycle_excludes_lead_in(self, build: Callable[..., DependencyGraph]) -> None:
        """Nodes leading into the cycle are not part of it."""
        graph = build(
            ["x", "a", "b", "c"],
            [("x", "a"), ("a", "b"), ("b", "c"), ("c", "a")],
        )
        assert find_cycle(graph) == ["a", "b", "c"]

    def test_cycle_in_second_component(self, build: Callable[..., DependencyGraph]) -> None:
        graph = build(
            ["a", "b", "p", "q"],
            [("a", "b"), ("p", "q"), ("q", "p")],
        )
        assert find_cycle(graph) == ["p", "q"]

    def test_long_chain_does_not_recurse(self, build: Callable[..., DependencyGraph]) -> None:
        node_ids = [f"n{i:05d}" for i in range(5000)]
        edges = list(zip(node_ids, node_ids[1:]))
        assert find_cycle(build(node_ids, edges)) is None


class TestTopologicalOrder:
    """Test Kahn ordering."""

    def test_edges_point_forward(self, build: Callable[..., DependencyGraph]) -> None:
        graph = build(["d", "c", "b", "a"], [("a", "b"), ("b", "c"), ("a", "d")])
        order = topological_order(graph)
        assert order.index("a") < order.index("b") < order.index("c")
        assert order.index("a") < order.index("d")

    def test_ties_broken_by_id(self, build: Callable[..., DependencyGraph]) -> None:
        assert topological_order(build(["c", "a", "b"], [])) == ["a", "b", "c"]

    def test_deterministic(self, build: Callable[..., DependencyGraph]) -> None:
        graph = build(["a", "b", "c", "d"], [("a", "c"), ("b", "c"), ("c", "d")])
        assert topological_order(graph) == topological_order(graph) == ["a", "b", "c", "d"]

    def test_cycle_raises(self, build: Callable[..., DependencyGraph]) -> None:
        graph = build(["a", "b", "c"], [("a", "b"), ("b", "a")])
        with pytest.raises(CircularDependencyError) as exc_info:
            topological_order(graph)
        assert exc_info.value.cycle == ["a", "b"]
