"""
Topology model orchestration.

``build_topology_model`` runs the whole pipeline for one snapshot:
nodes, edges, sources, both traversals and the envelope comparison.
It keeps nothing between calls; the same snapshot always produces the
same result.
"""

import logging
from typing import Any

from wellgraph.models.result import TopologyResult
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import SURFACE_NODE_ID
from wellgraph.topology.edge_builder import (
    build_radial_edges,
    build_scenario_radial_edges,
    build_termination_edges,
    build_vertical_edges,
)
from wellgraph.topology.envelope_evaluator import evaluate_barrier_envelopes
from wellgraph.topology.node_builder import build_topology_nodes
from wellgraph.topology.path_algorithms import (
    ACTIVE_FLOW_TRAVERSAL_POLICY,
    MINIMUM_FAILURE_TRAVERSAL_POLICY,
    compute_active_flow_node_ids,
    compute_minimum_failure_path,
    compute_spof_edge_ids,
)
from wellgraph.topology.physics import PhysicsProvider, SnapshotPhysics
from wellgraph.topology.pipe_reference import PipeReferenceMap
from wellgraph.topology.source_resolver import (
    SourceBuildResult,
    build_explicit_scenario_source_nodes,
    build_fluid_source_nodes,
    resolve_source_channels,
    should_use_illustrative_fluid_source,
)
from wellgraph.topology.warning_builder import (
    build_source_policy_warnings,
    build_topology_validation_warnings,
)
from wellgraph.utils.identifiers import normalize_well_id, safe_request_id

logger = logging.getLogger(__name__)


def normalize_state_snapshot(state_snapshot: Any) -> StateSnapshot:
    if isinstance(state_snapshot, StateSnapshot):
        return state_snapshot
    if not isinstance(state_snapshot, dict):
        return StateSnapshot()
    return StateSnapshot.model_validate(state_snapshot)


def build_topology_model(
    state_snapshot: StateSnapshot | dict[str, Any],
    request_id: int | None = None,
    well_id: str | None = None,
    physics: PhysicsProvider | None = None,
) -> TopologyResult:
    """Build the topology result for one snapshot.

    Args:
        state_snapshot: StateSnapshot or the equivalent editor payload
        request_id: echoed back when it is a positive integer
        well_id: echoed back, normalized
        physics: interval/stack provider; defaults to the snapshot's
            precomputed ``physics`` section
    """
    snapshot = normalize_state_snapshot(state_snapshot)
    physics = physics or SnapshotPhysics.from_payload(snapshot.physics)
    pipe_reference_map = PipeReferenceMap.build(snapshot.casing_data, snapshot.tubing_data)
    use_fluid_sources = should_use_illustrative_fluid_source(snapshot)

    node_result = build_topology_nodes(physics)
    vertical = build_vertical_edges(node_result, snapshot.equipment_data, pipe_reference_map)
    radial = build_radial_edges(snapshot, node_result, pipe_reference_map)
    scenario_radial = build_scenario_radial_edges(snapshot, node_result)
    explicit = build_explicit_scenario_source_nodes(snapshot, node_result)
    fluid = build_fluid_source_nodes(snapshot, node_result) if use_fluid_sources else SourceBuildResult()

    marker = SourceBuildResult(
        source_node_ids=radial.source_node_ids,
        source_entities=radial.source_entities,
    )
    resolution = resolve_source_channels(use_fluid_sources, marker, fluid, explicit)
    policy_warnings = build_source_policy_warnings(
        use_illustrative_fluid_source=use_fluid_sources,
        has_visible_fluid_rows=snapshot.has_visible_fluid_rows,
        has_explicit_scenario_rows=explicit.has_scenario_rows,
    )
    termination = build_termination_edges(node_result)

    edges = vertical.edges + radial.edges + scenario_radial.edges + termination.edges
    edge_reasons = {
        **vertical.edge_reasons,
        **radial.edge_reasons,
        **scenario_radial.edge_reasons,
        **termination.edge_reasons,
    }
    edge_by_id = {edge.edge_id: edge for edge in edges}
    source_node_ids = resolution.source_node_ids

    active_flow_node_ids = compute_active_flow_node_ids(
        source_node_ids, edges, policy=ACTIVE_FLOW_TRAVERSAL_POLICY
    )
    minimum_path = compute_minimum_failure_path(
        source_node_ids, SURFACE_NODE_ID, edges, policy=MINIMUM_FAILURE_TRAVERSAL_POLICY
    )
    spof_edge_ids = compute_spof_edge_ids(
        minimum_path.min_failure_cost_to_surface,
        minimum_path.min_cost_path_edge_ids,
        edge_by_id,
    )
    envelope = evaluate_barrier_envelopes(
        edges=edges,
        edge_reasons=edge_reasons,
        source_node_ids=source_node_ids,
        primary_path_edge_ids=minimum_path.min_cost_path_edge_ids,
        primary_min_failure_cost=minimum_path.min_failure_cost_to_surface,
    )

    warnings = build_topology_validation_warnings(
        vertical=vertical.validation_warnings,
        radial=radial.validation_warnings + scenario_radial.validation_warnings,
        explicit=explicit.validation_warnings,
        fluid=fluid.validation_warnings,
        source_resolution=resolution.validation_warnings,
        policy=policy_warnings,
    )

    logger.debug(
        "Built topology: %d nodes, %d edges, %d sources (%s), min cost %s, %d warnings",
        len(node_result.nodes),
        len(edges),
        len(source_node_ids),
        resolution.source_policy.mode.value,
        minimum_path.min_failure_cost_to_surface,
        len(warnings),
    )

    return TopologyResult(
        request_id=safe_request_id(request_id),
        well_id=normalize_well_id(well_id),
        nodes=node_result.nodes,
        edges=edges,
        active_flow_node_ids=active_flow_node_ids,
        min_failure_cost_to_surface=minimum_path.min_failure_cost_to_surface,
        min_cost_path_edge_ids=minimum_path.min_cost_path_edge_ids,
        spof_edge_ids=spof_edge_ids,
        barrier_envelope=envelope,
        traversal_contracts={
            "active_flow": ACTIVE_FLOW_TRAVERSAL_POLICY.to_contract(),
            "minimum_failure": MINIMUM_FAILURE_TRAVERSAL_POLICY.to_contract(),
        },
        source_entities=resolution.source_entities,
        source_policy=resolution.source_policy,
        edge_reasons=edge_reasons,
        validation_warnings=warnings,
    )
