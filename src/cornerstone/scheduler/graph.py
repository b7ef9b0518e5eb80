"""Dependency graph construction for the scheduler."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cornerstone.exceptions import UnknownNodeReferenceError

if TYPE_CHECKING:
    from cornerstone.models import DependencyEdge, DependencyType, WorkItem


@dataclass(frozen=True)
class Adjacency:
    """One end of a typed edge, as seen from the other end."""

    node_id: str
    dependency_type: DependencyType
    lead_lag_days: int


def partition_edges(
    node_ids: Iterable[str], dependencies: Iterable[DependencyEdge]
) -> tuple[list[DependencyEdge], list[DependencyEdge]]:
    """Split edges into those with both ends known and those that dangle.

    Returns:
        Tuple of (valid_edges, dangling_edges), each in input order
    """
    known = set(node_ids)
    valid: list[DependencyEdge] = []
    dangling: list[DependencyEdge] = []
    for edge in dependencies:
        if edge.predecessor_id in known and edge.successor_id in known:
            valid.append(edge)
        else:
            dangling.append(edge)
    return valid, dangling


def check_references(node_ids: Iterable[str], dependencies: Iterable[DependencyEdge]) -> None:
    """Raise on the first edge that names an unknown work item.

    Raises:
        UnknownNodeReferenceError: Carrying the edge and the missing IDs
    """
    known = set(node_ids)
    for edge in dependencies:
        missing = {edge.predecessor_id, edge.successor_id} - known
        if missing:
            raise UnknownNodeReferenceError(
                f"Dependency {edge} references unknown work item(s): "
                f"{', '.join(sorted(missing))}",
                missing_ids=missing,
                edge=edge,
            )


class DependencyGraph:
    """Adjacency representation of work items and their dependency edges.

    ``successors`` maps predecessor ID to outgoing adjacencies and
    ``predecessors`` is the reverse map used by the backward pass. Every node
    has an entry in both maps, possibly empty. Parallel edges are kept.
    """

    def __init__(self, node_ids: list[str]):
        self.node_ids = node_ids
        self.successors: dict[str, list[Adjacency]] = {node_id: [] for node_id in node_ids}
        self.predecessors: dict[str, list[Adjacency]] = {node_id: [] for node_id in node_ids}

    @classmethod
    def build(
        cls,
        work_items: Iterable[WorkItem],
        dependencies: Iterable[DependencyEdge],
        *,
        node_ids: set[str] | None = None,
    ) -> DependencyGraph:
        """Assemble the graph, validating edge references.

        Args:
            work_items: All known work items
            dependencies: Dependency edges between them
            node_ids: Optional subset to restrict the graph to. Edges that cross
                the subset boundary are ignored rather than reported.

        Raises:
            UnknownNodeReferenceError: If an edge names a work item not in work_items
        """
        all_ids = [item.id for item in work_items]
        dependencies = list(dependencies)
        check_references(all_ids, dependencies)

        included = all_ids if node_ids is None else [i for i in all_ids if i in node_ids]
        graph = cls(included)
        included_set = set(included)

        for edge in dependencies:
            if edge.predecessor_id not in included_set or edge.successor_id not in included_set:
                continue
            graph.add_edge(edge)

        return graph

    def add_edge(self, edge: DependencyEdge) -> None:
        """Register an edge in both directions."""
        self.successors[edge.predecessor_id].append(
            Adjacency(edge.successor_id, edge.dependency_type, edge.lead_lag_days)
        )
        self.predecessors[edge.successor_id].append(
            Adjacency(edge.predecessor_id, edge.dependency_type, edge.lead_lag_days)
        )

    def __len__(self) -> int:
        return len(self.node_ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.successors

    @property
    def edge_count(self) -> int:
        return sum(len(adj) for adj in self.successors.values())


def downstream_of(anchor_id: str, dependencies: Iterable[DependencyEdge]) -> set[str]:
    """Collect the anchor and every work item transitively depending on it."""
    successors_of: dict[str, list[str]] = {}
    for edge in dependencies:
        successors_of.setdefault(edge.predecessor_id, []).append(edge.successor_id)

    visited: set[str] = set()
    queue = deque([anchor_id])
    while queue:
        current = queue.popleft()
        if current in visited:
            continue
        visited.add(current)
        for succ in successors_of.get(current, []):
            if succ not in visited:
                queue.append(succ)

    return visited
