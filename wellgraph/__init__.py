"""wellgraph - barrier topology of a well as a cost-weighted graph."""

__version__ = "0.1.0"

from wellgraph.models.graph import Edge, EdgeReason, Node
from wellgraph.models.result import BarrierEnvelope, SourceEntity, TopologyResult
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import EdgeKind, InspectorScope, NodeKind
from wellgraph.models.warning import ValidationWarning
from wellgraph.topology.topology_core import build_topology_model
from wellgraph.analysis.topology_summary import TopologySummary, summarize_topology
from wellgraph.sdk.result_store import TopologyResultStore
from wellgraph.sdk.worker_client import WorkerClient

__all__ = [
    "__version__",
    # graph
    "Edge",
    "EdgeReason",
    "Node",
    "EdgeKind",
    "NodeKind",
    "InspectorScope",
    # input and output
    "StateSnapshot",
    "BarrierEnvelope",
    "SourceEntity",
    "TopologyResult",
    "ValidationWarning",
    # high-level APIs
    "build_topology_model",
    "summarize_topology",
    "TopologySummary",
    "TopologyResultStore",
    "WorkerClient",
]
