"""
Topology result models.

A TopologyResult is the read-only product of one build: the graph, the
resolved sources, both traversal outcomes and the barrier envelope.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wellgraph.models.graph import Edge, EdgeReason, Node
from wellgraph.models.topology_types import (
    EdgeDirection,
    IndependenceHeuristic,
    SourcePolicyMode,
)
from wellgraph.models.warning import ValidationWarning

ENVELOPE_MODE = "heuristic_alternative_path_excluding_primary_edges"


class SourceEntity(BaseModel):
    """A resolved source: where fluid is assumed to enter the graph."""

    model_config = ConfigDict(frozen=True)

    source_id: str
    kind: str
    node_ids: list[str] = Field(default_factory=list)
    volume_key: str | None = None
    depth_top: float | None = None
    depth_bottom: float | None = None
    row_id: str | None = None
    origin: str  # marker | illustrative-fluid | scenario
    policy_mode: SourcePolicyMode


class SourcePolicy(BaseModel):
    """Which precedence tier produced the run's sources."""

    model_config = ConfigDict(frozen=True)

    mode: SourcePolicyMode
    marker_derived: bool
    illustrative_fluid_derived: bool
    explicit_scenario_derived: bool


class TraversalPolicy(BaseModel):
    """How a traversal walks the graph.

    Edges carry no direction; each traversal decides which costs it may
    cross, which way each edge kind can be walked and where to stop.
    """

    model_config = ConfigDict(frozen=True)

    allow_costs: frozenset[int]
    default_edge_direction: EdgeDirection = EdgeDirection.bidirectional
    edge_directions_by_kind: dict[str, EdgeDirection] = Field(default_factory=dict)
    sink_node_ids: frozenset[str] = frozenset()

    def direction_for(self, edge_kind: Any) -> EdgeDirection:
        kind = str(getattr(edge_kind, "value", edge_kind)).strip().lower()
        return self.edge_directions_by_kind.get(kind, self.default_edge_direction)

    def to_contract(self) -> dict[str, Any]:
        """JSON-friendly description, with sets rendered as sorted lists."""
        return {
            "allow_costs": sorted(self.allow_costs),
            "default_edge_direction": self.default_edge_direction.value,
            "edge_directions_by_kind": {
                kind: direction.value for kind, direction in self.edge_directions_by_kind.items()
            },
            "sink_node_ids": sorted(self.sink_node_ids),
        }


class BarrierElement(BaseModel):
    """A row performing one seal function, seen across all edges it costs."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    row_id: str
    function_key: str
    equipment_types: list[str] = Field(default_factory=list)
    edge_ids: list[str] = Field(default_factory=list)
    appears_on_primary_path: bool = False
    appears_on_secondary_path: bool = False


class EnvelopePath(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_failure_cost_to_surface: int | None = None
    path_edge_ids: list[str] = Field(default_factory=list)
    element_ids: list[str] = Field(default_factory=list)
    element_count: int = 0


class EnvelopeOverlap(BaseModel):
    model_config = ConfigDict(frozen=True)

    element_ids: list[str] = Field(default_factory=list)
    element_count: int = 0
    has_overlap: bool = False


class EnvelopeSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    barrier_element_count: int = 0
    barrier_edge_count: int = 0
    independence_heuristic: IndependenceHeuristic
    overlap_ratio_primary: float | None = None
    overlap_ratio_secondary: float | None = None


class BarrierEnvelope(BaseModel):
    """Primary vs. secondary failure route, compared by barrier elements."""

    model_config = ConfigDict(frozen=True)

    mode: str = ENVELOPE_MODE
    primary: EnvelopePath
    secondary: EnvelopePath
    overlap: EnvelopeOverlap
    summary: EnvelopeSummary
    barrier_elements: list[BarrierElement] = Field(default_factory=list)


class TopologyResult(BaseModel):
    """Read-only product of one topology build.

    Sequence fields are stored as tuples so a shared result cannot be
    edited in place. The two mapping fields stay plain dicts; callers
    treat them as read-only and use ``model_copy(update=...)`` to derive
    a changed result.
    """

    model_config = ConfigDict(frozen=True)

    request_id: int | None = None
    well_id: str | None = None
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    active_flow_node_ids: tuple[str, ...] = ()
    min_failure_cost_to_surface: int | None = None
    min_cost_path_edge_ids: tuple[str, ...] = ()
    spof_edge_ids: tuple[str, ...] = ()
    barrier_envelope: BarrierEnvelope
    traversal_contracts: dict[str, dict[str, Any]] = Field(default_factory=dict)
    source_entities: tuple[SourceEntity, ...] = ()
    source_policy: SourcePolicy
    edge_reasons: dict[str, EdgeReason] = Field(default_factory=dict)
    validation_warnings: tuple[ValidationWarning, ...] = ()

    @property
    def source_node_ids(self) -> list[str]:
        node_ids = []
        seen = set()
        for entity in self.source_entities:
            for node_id in entity.node_ids:
                if node_id not in seen:
                    seen.add(node_id)
                    node_ids.append(node_id)
        return node_ids

    def node_by_id(self) -> dict[str, Node]:
        return {node.node_id: node for node in self.nodes}

    def edge_by_id(self) -> dict[str, Edge]:
        return {edge.edge_id: edge for edge in self.edges}
