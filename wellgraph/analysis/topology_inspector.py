"""Row builders for inspecting a topology result.

Each helper filters the result by an inspector scope and flattens edges or
nodes into plain rows that a table view (or the CLI) can print directly.
Ids that do not resolve to a node or edge are dropped.
"""

from dataclasses import dataclass
from typing import Iterable

from wellgraph.models.graph import Edge, Node
from wellgraph.models.result import TopologyResult
from wellgraph.models.topology_types import InspectorScope


@dataclass
class EdgeRow:
    key: str
    edge_id: str
    kind: str
    cost: int | None
    state: str
    from_node_id: str
    to_node_id: str
    from_kind: str | None
    to_kind: str | None
    rule_id: str | None
    reason_summary: str | None
    is_on_min_path: bool
    is_spof: bool


@dataclass
class NodeRow:
    key: str
    node_id: str
    kind: str
    depth_top: float | None
    depth_bottom: float | None
    span: float | None
    is_active_flow: bool
    is_on_min_path: bool
    is_spof: bool


@dataclass
class PathEdgeSummaryRow:
    key: str
    step: int
    edge_id: str
    kind: str
    cost: int | None
    from_node_id: str
    to_node_id: str
    from_kind: str | None
    to_kind: str | None
    rule_id: str | None
    reason_summary: str | None


def normalize_inspector_scope(scope: object) -> InspectorScope:
    """Map a scope token to an InspectorScope; unknown values mean ``all``."""
    token = str(getattr(scope, "value", scope) or "").strip().lower()
    try:
        return InspectorScope(token)
    except ValueError:
        return InspectorScope.all


def _unique(ids: Iterable[str] | None) -> list[str]:
    unique = []
    seen = set()
    for item in ids or []:
        token = str(item or "").strip()
        if token and token not in seen:
            seen.add(token)
            unique.append(token)
    return unique


def _endpoint_node_ids(edge_ids: Iterable[str], edge_by_id: dict[str, Edge]) -> set[str]:
    node_ids = set()
    for edge_id in edge_ids:
        edge = edge_by_id.get(edge_id)
        if edge is None:
            continue
        node_ids.add(edge.source)
        node_ids.add(edge.target)
    return node_ids


def _reason_fields(result: TopologyResult, edge: Edge) -> tuple[str | None, str | None]:
    reason = result.edge_reasons.get(edge.edge_id) or edge.reason
    if reason is None:
        return None, None
    return reason.rule_id, reason.summary


def _node_kind(node: Node | None) -> str | None:
    return node.kind.value if node is not None else None


def resolve_scope_edge_ids(
    result: TopologyResult | None,
    scope: InspectorScope | str = InspectorScope.all,
    selected_barrier_edge_ids: Iterable[str] | None = None,
) -> list[str]:
    """Edge ids visible under a scope."""
    if result is None:
        return []

    scope = normalize_inspector_scope(scope)
    if scope == InspectorScope.min_path:
        return _unique(result.min_cost_path_edge_ids)
    if scope == InspectorScope.spof:
        return _unique(result.spof_edge_ids)
    if scope == InspectorScope.selected_barrier:
        return _unique(selected_barrier_edge_ids)
    if scope == InspectorScope.active_flow:
        active = set(result.active_flow_node_ids)
        return [
            edge.edge_id
            for edge in result.edges
            if edge.source in active and edge.target in active
        ]
    return [edge.edge_id for edge in result.edges]


def create_edge_rows(
    result: TopologyResult | None,
    scope: InspectorScope | str = InspectorScope.all,
    selected_barrier_edge_ids: Iterable[str] | None = None,
) -> list[EdgeRow]:
    if result is None:
        return []

    edge_by_id = result.edge_by_id()
    node_by_id = result.node_by_id()
    min_path = set(result.min_cost_path_edge_ids)
    spof = set(result.spof_edge_ids)

    rows = []
    for edge_id in resolve_scope_edge_ids(result, scope, selected_barrier_edge_ids):
        edge = edge_by_id.get(edge_id)
        if edge is None:
            continue
        rule_id, reason_summary = _reason_fields(result, edge)
        rows.append(
            EdgeRow(
                key=edge.edge_id,
                edge_id=edge.edge_id,
                kind=edge.kind.value,
                cost=edge.cost,
                state=edge.state,
                from_node_id=edge.source,
                to_node_id=edge.target,
                from_kind=_node_kind(node_by_id.get(edge.source)),
                to_kind=_node_kind(node_by_id.get(edge.target)),
                rule_id=rule_id,
                reason_summary=reason_summary,
                is_on_min_path=edge.edge_id in min_path,
                is_spof=edge.edge_id in spof,
            )
        )
    return rows


def create_node_rows(
    result: TopologyResult | None,
    scope: InspectorScope | str = InspectorScope.all,
    selected_barrier_edge_ids: Iterable[str] | None = None,
) -> list[NodeRow]:
    """Node rows for a scope.

    ``all`` lists every node and ``active_flow`` the reachable ones; other
    scopes list the endpoints of their edges in edge order.
    """
    if result is None:
        return []

    scope = normalize_inspector_scope(scope)
    edge_by_id = result.edge_by_id()
    node_by_id = result.node_by_id()

    if scope == InspectorScope.all:
        node_ids = [node.node_id for node in result.nodes]
    elif scope == InspectorScope.active_flow:
        node_ids = _unique(result.active_flow_node_ids)
    else:
        node_ids = []
        for edge_id in resolve_scope_edge_ids(result, scope, selected_barrier_edge_ids):
            edge = edge_by_id.get(edge_id)
            if edge is None:
                continue
            for node_id in (edge.source, edge.target):
                if node_id not in node_ids:
                    node_ids.append(node_id)

    active = set(result.active_flow_node_ids)
    path_nodes = _endpoint_node_ids(result.min_cost_path_edge_ids, edge_by_id)
    spof_nodes = _endpoint_node_ids(result.spof_edge_ids, edge_by_id)

    rows = []
    for node_id in node_ids:
        node = node_by_id.get(node_id)
        if node is None:
            continue
        span = None
        if node.depth_top is not None and node.depth_bottom is not None:
            span = max(0.0, node.depth_bottom - node.depth_top)
        rows.append(
            NodeRow(
                key=node.node_id,
                node_id=node.node_id,
                kind=node.kind.value,
                depth_top=node.depth_top,
                depth_bottom=node.depth_bottom,
                span=span,
                is_active_flow=node.node_id in active,
                is_on_min_path=node.node_id in path_nodes,
                is_spof=node.node_id in spof_nodes,
            )
        )
    return rows


def create_path_edge_summary_rows(
    result: TopologyResult | None,
    edge_ids: Iterable[str] | None = None,
) -> list[PathEdgeSummaryRow]:
    """Numbered steps along a path; defaults to the minimum failure path."""
    if result is None:
        return []

    path_edge_ids = result.min_cost_path_edge_ids if edge_ids is None else list(edge_ids)
    edge_by_id = result.edge_by_id()
    node_by_id = result.node_by_id()

    rows = []
    for index, edge_id in enumerate(path_edge_ids):
        edge = edge_by_id.get(edge_id)
        if edge is None:
            continue
        rule_id, reason_summary = _reason_fields(result, edge)
        rows.append(
            PathEdgeSummaryRow(
                key=f"path-step-{index}-{edge.edge_id}",
                step=index + 1,
                edge_id=edge.edge_id,
                kind=edge.kind.value,
                cost=edge.cost,
                from_node_id=edge.source,
                to_node_id=edge.target,
                from_kind=_node_kind(node_by_id.get(edge.source)),
                to_kind=_node_kind(node_by_id.get(edge.target)),
                rule_id=rule_id,
                reason_summary=reason_summary,
            )
        )
    return rows


def resolve_overlay_node_ids(
    result: TopologyResult | None,
    selected_barrier_node_ids: Iterable[str] | None = None,
    selected_node_id: str | None = None,
    selected_edge_id: str | None = None,
) -> list[str]:
    """Nodes to highlight: barrier selection, the selected node, and the
    endpoints of the selected edge when it exists."""
    node_ids = _unique(selected_barrier_node_ids)

    def add(node_id: str | None) -> None:
        token = str(node_id or "").strip()
        if token and token not in node_ids:
            node_ids.append(token)

    add(selected_node_id)
    if result is not None and selected_edge_id:
        edge = result.edge_by_id().get(str(selected_edge_id).strip())
        if edge is not None:
            add(edge.source)
            add(edge.target)
    return node_ids
