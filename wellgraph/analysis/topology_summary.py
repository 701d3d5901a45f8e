"""Headline statistics for a topology result.

Used by the CLI and the server to report a build at a glance without
shipping the whole graph.
"""

from collections import Counter
from dataclasses import dataclass, field

from wellgraph.models.result import TopologyResult


@dataclass
class BarrierElementSummary:
    """One barrier element and where it sits relative to the two routes."""

    element_id: str
    equipment_types: list[str]
    on_primary: bool
    on_secondary: bool


@dataclass
class TopologySummary:
    """Summary of a topology result.

    Counts are keyed by the enum values so the summary serializes
    directly to JSON.
    """

    request_id: int | None
    well_id: str | None
    node_count: int
    edge_count: int
    nodes_by_kind: dict[str, int] = field(default_factory=dict)
    edges_by_kind: dict[str, int] = field(default_factory=dict)
    source_count: int = 0
    source_policy_mode: str | None = None
    active_flow_node_count: int = 0
    min_failure_cost_to_surface: int | None = None
    min_path_edge_count: int = 0
    spof_count: int = 0
    independence_heuristic: str | None = None
    barrier_elements: list[BarrierElementSummary] = field(default_factory=list)
    warnings_by_category: dict[str, int] = field(default_factory=dict)
    warnings_by_code: dict[str, int] = field(default_factory=dict)

    @property
    def surface_reachable(self) -> bool:
        return self.min_failure_cost_to_surface is not None


def summarize_topology(result: TopologyResult) -> TopologySummary:
    """Collapse a result into counts and the envelope verdict."""
    nodes_by_kind = Counter(node.kind.value for node in result.nodes)
    edges_by_kind = Counter(edge.kind.value for edge in result.edges)
    warnings_by_category = Counter(
        warning.category or "uncategorized" for warning in result.validation_warnings
    )
    warnings_by_code = Counter(warning.code for warning in result.validation_warnings)

    envelope = result.barrier_envelope
    barrier_elements = [
        BarrierElementSummary(
            element_id=element.element_id,
            equipment_types=list(element.equipment_types),
            on_primary=element.appears_on_primary_path,
            on_secondary=element.appears_on_secondary_path,
        )
        for element in envelope.barrier_elements
    ]

    return TopologySummary(
        request_id=result.request_id,
        well_id=result.well_id,
        node_count=len(result.nodes),
        edge_count=len(result.edges),
        nodes_by_kind=dict(sorted(nodes_by_kind.items())),
        edges_by_kind=dict(sorted(edges_by_kind.items())),
        source_count=len(result.source_entities),
        source_policy_mode=result.source_policy.mode.value,
        active_flow_node_count=len(result.active_flow_node_ids),
        min_failure_cost_to_surface=result.min_failure_cost_to_surface,
        min_path_edge_count=len(result.min_cost_path_edge_ids),
        spof_count=len(result.spof_edge_ids),
        independence_heuristic=envelope.summary.independence_heuristic.value,
        barrier_elements=barrier_elements,
        warnings_by_category=dict(sorted(warnings_by_category.items())),
        warnings_by_code=dict(sorted(warnings_by_code.items())),
    )
