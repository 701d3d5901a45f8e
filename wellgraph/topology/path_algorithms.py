"""
Graph traversals over topology edges.

Edges are stored without direction. A ``TraversalPolicy`` decides which
edge costs may be crossed, which way each edge kind can be walked and
which nodes stop the walk.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from wellgraph.models.graph import Edge
from wellgraph.models.result import TraversalPolicy
from wellgraph.models.topology_types import SURFACE_NODE_ID, EdgeDirection, EdgeKind

ACTIVE_FLOW_TRAVERSAL_POLICY = TraversalPolicy(
    allow_costs=frozenset({0}),
    default_edge_direction=EdgeDirection.bidirectional,
    edge_directions_by_kind={EdgeKind.termination.value: EdgeDirection.forward},
    sink_node_ids=frozenset({SURFACE_NODE_ID}),
)

MINIMUM_FAILURE_TRAVERSAL_POLICY = TraversalPolicy(
    allow_costs=frozenset({0, 1}),
    default_edge_direction=EdgeDirection.bidirectional,
    edge_directions_by_kind={EdgeKind.termination.value: EdgeDirection.forward},
)


@dataclass(frozen=True)
class Neighbor:
    node_id: str
    edge_id: str
    cost: int


@dataclass
class MinimumFailurePath:
    min_failure_cost_to_surface: int | None = None
    min_cost_path_edge_ids: list[str] = field(default_factory=list)


def build_adjacency(
    edges: Iterable[Edge],
    policy: TraversalPolicy,
    excluded_edge_ids: Iterable[str] = (),
) -> dict[str, list[Neighbor]]:
    excluded = set(excluded_edge_ids)
    adjacency: dict[str, list[Neighbor]] = {}

    def append(from_id: str, to_id: str, edge: Edge) -> None:
        adjacency.setdefault(from_id, []).append(Neighbor(to_id, edge.edge_id, edge.cost))

    for edge in edges:
        if edge.edge_id in excluded:
            continue
        if edge.cost is None or edge.cost not in policy.allow_costs:
            continue
        direction = policy.direction_for(edge.kind)
        if direction in (EdgeDirection.forward, EdgeDirection.bidirectional):
            append(edge.source, edge.target, edge)
        if direction in (EdgeDirection.reverse, EdgeDirection.bidirectional):
            append(edge.target, edge.source, edge)
    return adjacency


def _unique(node_ids: Iterable[str]) -> list[str]:
    unique = []
    seen = set()
    for node_id in node_ids:
        if node_id and node_id not in seen:
            seen.add(node_id)
            unique.append(node_id)
    return unique


def compute_active_flow_node_ids(
    source_node_ids: Iterable[str],
    edges: Iterable[Edge],
    policy: TraversalPolicy = ACTIVE_FLOW_TRAVERSAL_POLICY,
) -> list[str]:
    """Every node reachable from a source without crossing a barrier.

    Sinks are reached but never expanded.
    """
    start = _unique(source_node_ids)
    if not start:
        return []

    adjacency = build_adjacency(edges, policy)
    visited = set(start)
    queue = deque(start)
    while queue:
        current = queue.popleft()
        if current in policy.sink_node_ids:
            continue
        for neighbor in adjacency.get(current, []):
            if neighbor.node_id in visited:
                continue
            visited.add(neighbor.node_id)
            queue.append(neighbor.node_id)
    return sorted(visited)


def compute_minimum_failure_path(
    source_node_ids: Iterable[str],
    target_node_id: str,
    edges: Iterable[Edge],
    policy: TraversalPolicy = MINIMUM_FAILURE_TRAVERSAL_POLICY,
    excluded_edge_ids: Iterable[str] = (),
    node_ids: Iterable[str] | None = None,
) -> MinimumFailurePath:
    """Fewest cost-1 edges from any source to the target (0-1 BFS).

    Returns an empty path when there are no sources or the target is
    unreachable. Raises ValueError when the target id is missing, or
    is not one of ``node_ids`` when those are given.
    """
    if not target_node_id:
        raise ValueError("target node id is required")
    if node_ids is not None and target_node_id not in set(node_ids):
        raise ValueError(f"target node {target_node_id} is not in the graph")

    start = _unique(source_node_ids)
    if not start:
        return MinimumFailurePath()

    adjacency = build_adjacency(edges, policy, excluded_edge_ids)
    distance: dict[str, int] = {node_id: 0 for node_id in start}
    previous_node: dict[str, str] = {}
    previous_edge: dict[str, str] = {}
    pending = deque(start)

    while pending:
        current = pending.popleft()
        current_distance = distance[current]
        for neighbor in adjacency.get(current, []):
            if neighbor.cost not in (0, 1):
                continue
            next_distance = current_distance + neighbor.cost
            known = distance.get(neighbor.node_id)
            if known is not None and known <= next_distance:
                continue
            distance[neighbor.node_id] = next_distance
            previous_node[neighbor.node_id] = current
            previous_edge[neighbor.node_id] = neighbor.edge_id
            if neighbor.cost == 0:
                pending.appendleft(neighbor.node_id)
            else:
                pending.append(neighbor.node_id)

    if target_node_id not in distance:
        return MinimumFailurePath()

    path_edge_ids = []
    cursor = target_node_id
    while cursor in previous_edge:
        path_edge_ids.append(previous_edge[cursor])
        cursor = previous_node[cursor]
    path_edge_ids.reverse()
    return MinimumFailurePath(
        min_failure_cost_to_surface=distance[target_node_id],
        min_cost_path_edge_ids=path_edge_ids,
    )


def compute_spof_edge_ids(
    min_failure_cost: int | None,
    path_edge_ids: list[str],
    edge_by_id: Mapping[str, Edge],
) -> list[str]:
    """Cost-1 edges on the minimum path, when one failure suffices."""
    if min_failure_cost != 1:
        return []
    return [
        edge_id
        for edge_id in path_edge_ids
        if edge_id in edge_by_id and edge_by_id[edge_id].cost == 1
    ]
