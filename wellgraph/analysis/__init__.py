"""Analysis utilities for topology results."""

from wellgraph.analysis.topology_summary import (
    BarrierElementSummary,
    TopologySummary,
    summarize_topology,
)
from wellgraph.analysis.topology_inspector import (
    EdgeRow,
    NodeRow,
    PathEdgeSummaryRow,
    create_edge_rows,
    create_node_rows,
    create_path_edge_summary_rows,
    normalize_inspector_scope,
    resolve_overlay_node_ids,
    resolve_scope_edge_ids,
)
from wellgraph.analysis.result_synchronization import (
    OverlaySynchronizationState,
    SynchronizationReason,
    is_topology_result_synchronized,
    resolve_overlay_synchronization_state,
    resolve_synchronized_topology_result,
)

__all__ = [
    # topology_summary exports
    "BarrierElementSummary",
    "TopologySummary",
    "summarize_topology",
    # topology_inspector exports
    "EdgeRow",
    "NodeRow",
    "PathEdgeSummaryRow",
    "create_edge_rows",
    "create_node_rows",
    "create_path_edge_summary_rows",
    "normalize_inspector_scope",
    "resolve_overlay_node_ids",
    "resolve_scope_edge_ids",
    # result_synchronization exports
    "OverlaySynchronizationState",
    "SynchronizationReason",
    "is_topology_result_synchronized",
    "resolve_overlay_synchronization_state",
    "resolve_synchronized_topology_result",
]
