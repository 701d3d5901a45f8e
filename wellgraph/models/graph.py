"""Nodes, edges and edge reasons of the well topology graph."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from wellgraph.models.topology_types import EdgeKind, InnerChannel, NodeKind

ALLOWED_EDGE_COSTS = {0, 1}


class NodeMeta(BaseModel):
    """what the interval content says about a volume node."""

    model_config = ConfigDict(frozen=True)

    is_blocked: bool = False
    material: str | None = None
    material_row_id: str | None = None  # row that placed cement/plug, when known
    annulus_index: int | None = None
    inner_channel: InnerChannel | None = None  # bore nodes only


class Node(BaseModel):
    """a modeled volume at one depth interval, or the SURFACE sink."""

    model_config = ConfigDict(frozen=True)

    node_id: str
    kind: NodeKind
    depth_top: float | None = None
    depth_bottom: float | None = None
    volume_key: str
    meta: NodeMeta = Field(default_factory=NodeMeta)

    @model_validator(mode="after")
    def validate_depths(self) -> Self:
        """Volume nodes need a positive-height interval; SURFACE has none."""
        if self.kind == NodeKind.SURFACE:
            if self.depth_top is not None or self.depth_bottom is not None:
                raise ValueError("SURFACE node must not carry depths")
            return self
        if self.depth_top is None or self.depth_bottom is None:
            raise ValueError(f"{self.kind.value} node requires depth_top and depth_bottom")
        if self.depth_bottom <= self.depth_top:
            raise ValueError("depth_bottom must be greater than depth_top")
        return self

    @property
    def is_blocked(self) -> bool:
        return self.meta.is_blocked


class EquipmentContributor(BaseModel):
    """one row consulted when costing an edge."""

    model_config = ConfigDict(frozen=True)

    row_id: str | None = None
    equipment_type: str | None = None
    state: str
    cost: int
    function_key: str | None = None


class EdgeReason(BaseModel):
    """machine-checkable explanation of an edge's cost."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    summary: str
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def equipment_contributors(self) -> list[EquipmentContributor]:
        """Contributors listed in details, accepting plain dicts."""
        contributors = []
        for contributor in self.details.get("equipment_contributors") or []:
            if isinstance(contributor, EquipmentContributor):
                contributors.append(contributor)
            elif isinstance(contributor, dict):
                contributors.append(EquipmentContributor.model_validate(contributor))
        return contributors


class Edge(BaseModel):
    """a connection between two volume nodes (or a volume and SURFACE).

    Edges are stored undirected except for their from/to labels; how a
    traversal walks them is decided by its traversal policy.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    edge_id: str
    kind: EdgeKind
    source: str = Field(alias="from")
    target: str = Field(alias="to")
    cost: int | None = None  # None = impassable, never traversed
    state: str
    meta: dict[str, Any] = Field(default_factory=dict)
    reason: EdgeReason | None = None

    @field_validator("cost")
    @classmethod
    def validate_cost(cls, value: int | None) -> int | None:
        if value is not None and value not in ALLOWED_EDGE_COSTS:
            raise ValueError(f"edge cost must be 0, 1 or None, got {value}")
        return value

    @model_validator(mode="after")
    def validate_reason(self) -> Self:
        """Traversable edges must explain their cost."""
        if self.cost is not None and self.reason is None:
            raise ValueError(f"edge {self.edge_id} has cost {self.cost} but no reason")
        return self


def create_node_id(kind: NodeKind, top: float, bottom: float) -> str:
    """Deterministic id for a volume node."""
    return f"node:{kind.value}:{top:.6f}:{bottom:.6f}"


def create_edge_id(kind: EdgeKind, from_node_id: str, to_node_id: str, suffix: str = "") -> str:
    """Deterministic id for an edge; the suffix disambiguates parallel edges."""
    suffix = str(suffix or "").strip()
    base = f"edge:{kind.value}:{from_node_id}->{to_node_id}"
    return f"{base}:{suffix}" if suffix else base
