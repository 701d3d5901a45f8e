"""Topology pipeline: nodes, edges, sources, traversals and envelopes."""

from wellgraph.topology.topology_core import build_topology_model, normalize_state_snapshot
from wellgraph.topology.node_builder import (
    NodeBuildResult,
    TopologyInterval,
    build_topology_nodes,
)
from wellgraph.topology.edge_builder import (
    EdgeBuildResult,
    RadialEdgeBuildResult,
    build_radial_edges,
    build_scenario_radial_edges,
    build_termination_edges,
    build_vertical_edges,
)
from wellgraph.topology.source_resolver import (
    SourceResolution,
    build_explicit_scenario_source_nodes,
    build_fluid_source_nodes,
    resolve_source_channels,
    should_use_illustrative_fluid_source,
)
from wellgraph.topology.path_algorithms import (
    ACTIVE_FLOW_TRAVERSAL_POLICY,
    MINIMUM_FAILURE_TRAVERSAL_POLICY,
    MinimumFailurePath,
    compute_active_flow_node_ids,
    compute_minimum_failure_path,
    compute_spof_edge_ids,
)
from wellgraph.topology.envelope_evaluator import evaluate_barrier_envelopes
from wellgraph.topology.physics import DepthInterval, PhysicsProvider, SnapshotPhysics
from wellgraph.topology.warning_catalog import (
    WarningCategory,
    WarningCode,
    create_validation_warning,
)

__all__ = [
    # orchestration
    "build_topology_model",
    "normalize_state_snapshot",
    # nodes
    "NodeBuildResult",
    "TopologyInterval",
    "build_topology_nodes",
    # edges
    "EdgeBuildResult",
    "RadialEdgeBuildResult",
    "build_radial_edges",
    "build_scenario_radial_edges",
    "build_termination_edges",
    "build_vertical_edges",
    # sources
    "SourceResolution",
    "build_explicit_scenario_source_nodes",
    "build_fluid_source_nodes",
    "resolve_source_channels",
    "should_use_illustrative_fluid_source",
    # traversals
    "ACTIVE_FLOW_TRAVERSAL_POLICY",
    "MINIMUM_FAILURE_TRAVERSAL_POLICY",
    "MinimumFailurePath",
    "compute_active_flow_node_ids",
    "compute_minimum_failure_path",
    "compute_spof_edge_ids",
    "evaluate_barrier_envelopes",
    # physics provider
    "DepthInterval",
    "PhysicsProvider",
    "SnapshotPhysics",
    # warnings
    "WarningCategory",
    "WarningCode",
    "create_validation_warning",
]
