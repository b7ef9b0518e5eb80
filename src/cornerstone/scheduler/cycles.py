"""Cycle detection and topological ordering for dependency graphs."""

import heapq
from enum import Enum

from cornerstone.exceptions import CircularDependencyError

from .graph import DependencyGraph


class _Mark(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def find_cycle(graph: DependencyGraph) -> list[str] | None:
    """Find one directed cycle using a three-color depth-first search.

    The search is iterative so deep chains do not hit the recursion limit.
    Reaching a node that is still in progress closes a cycle; the returned
    list walks that cycle from its first node back to the node before it.

    Returns:
        Node IDs forming a cycle, or None if the graph is a DAG
    """
    marks = dict.fromkeys(graph.node_ids, _Mark.UNVISITED)

    for root in graph.node_ids:
        if marks[root] is not _Mark.UNVISITED:
            continue

        path: list[str] = [root]
        # Each frame is (node, index of next successor to visit)
        stack: list[tuple[str, int]] = [(root, 0)]
        marks[root] = _Mark.IN_PROGRESS

        while stack:
            node, index = stack[-1]
            successors = graph.successors[node]

            if index >= len(successors):
                marks[node] = _Mark.DONE
                stack.pop()
                path.pop()
                continue

            stack[-1] = (node, index + 1)
            succ = successors[index].node_id
            mark = marks[succ]

            if mark is _Mark.IN_PROGRESS:
                return path[path.index(succ) :]
            if mark is _Mark.UNVISITED:
                marks[succ] = _Mark.IN_PROGRESS
                path.append(succ)
                stack.append((succ, 0))

    return None


def topological_order(graph: DependencyGraph) -> list[str]:
    """Order nodes so every edge points forward (Kahn's algorithm).

    Ready nodes are taken smallest ID first, which makes the order
    deterministic for a given graph.

    Raises:
        CircularDependencyError: If the graph has a cycle. Callers should run
            find_cycle first; this is a guard, not the detection path.
    """
    in_degree = {node_id: len(graph.predecessors[node_id]) for node_id in graph.node_ids}
    ready = [node_id for node_id, degree in in_degree.items() if degree == 0]
    heapq.heapify(ready)
    order: list[str] = []

    while ready:
        node_id = heapq.heappop(ready)
        order.append(node_id)
        for adj in graph.successors[node_id]:
            in_degree[adj.node_id] -= 1
            if in_degree[adj.node_id] == 0:
                heapq.heappush(ready, adj.node_id)

    if len(order) != len(graph):
        remaining = sorted(node_id for node_id, degree in in_degree.items() if degree > 0)
        raise CircularDependencyError(
            "Cannot order a cyclic dependency graph", cycle=remaining
        )

    return order
