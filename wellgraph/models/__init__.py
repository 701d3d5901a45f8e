"""Data models for the well topology graph."""

from wellgraph.models.graph import (
    Edge,
    EdgeReason,
    EquipmentContributor,
    Node,
    NodeMeta,
    create_edge_id,
    create_node_id,
)
from wellgraph.models.lineage import (
    MAX_LINEAGE_RECORDS,
    LineageExport,
    LineageRecord,
    LineageResultSummary,
    LineageStatus,
    TopologyEntry,
)
from wellgraph.models.result import (
    BarrierElement,
    BarrierEnvelope,
    EnvelopeOverlap,
    EnvelopePath,
    EnvelopeSummary,
    SourceEntity,
    SourcePolicy,
    TopologyResult,
    TraversalPolicy,
)
from wellgraph.models.rows import (
    AnnulusFluidRow,
    DepthRange,
    EquipmentRow,
    MarkerRow,
    PipeRow,
    ScenarioBreakoutRow,
    ScenarioSourceRow,
)
from wellgraph.models.snapshot import Layer, PhysicsInterval, PhysicsSnapshot, StateSnapshot
from wellgraph.models.topology_types import (
    SURFACE_NODE_ID,
    TOPOLOGY_EPSILON,
    EdgeDirection,
    EdgeKind,
    IndependenceHeuristic,
    InnerChannel,
    InspectorScope,
    NodeKind,
    SealState,
    SourceKind,
    SourcePolicyMode,
)
from wellgraph.models.warning import ValidationWarning
from wellgraph.models.worker_message import (
    BUILD_TOPOLOGY_TASK,
    WorkerPayload,
    WorkerRequest,
    WorkerResponse,
    WorkerStatus,
)

__all__ = [
    # graph
    "Edge",
    "EdgeReason",
    "EquipmentContributor",
    "Node",
    "NodeMeta",
    "create_edge_id",
    "create_node_id",
    # result
    "BarrierElement",
    "BarrierEnvelope",
    "EnvelopeOverlap",
    "EnvelopePath",
    "EnvelopeSummary",
    "SourceEntity",
    "SourcePolicy",
    "TopologyResult",
    "TraversalPolicy",
    # store entries
    "MAX_LINEAGE_RECORDS",
    "LineageExport",
    "LineageRecord",
    "LineageResultSummary",
    "LineageStatus",
    "TopologyEntry",
    # input rows and snapshot
    "AnnulusFluidRow",
    "DepthRange",
    "EquipmentRow",
    "MarkerRow",
    "PipeRow",
    "ScenarioBreakoutRow",
    "ScenarioSourceRow",
    "Layer",
    "PhysicsInterval",
    "PhysicsSnapshot",
    "StateSnapshot",
    # kinds
    "SURFACE_NODE_ID",
    "TOPOLOGY_EPSILON",
    "EdgeDirection",
    "EdgeKind",
    "IndependenceHeuristic",
    "InnerChannel",
    "InspectorScope",
    "NodeKind",
    "SealState",
    "SourceKind",
    "SourcePolicyMode",
    # warnings
    "ValidationWarning",
    # worker envelopes
    "BUILD_TOPOLOGY_TASK",
    "WorkerPayload",
    "WorkerRequest",
    "WorkerResponse",
    "WorkerStatus",
]
