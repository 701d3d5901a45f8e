"""Tests for node creation and the vertical, radial and termination edge builders."""

from wellgraph.models.graph import create_node_id
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import SURFACE_NODE_ID, EdgeKind, InnerChannel, NodeKind
from wellgraph.tests.conftest import annulus, layer_stack, snapshot_with_intervals
from wellgraph.topology.edge_builder import (
    build_radial_edges,
    build_scenario_radial_edges,
    build_termination_edges,
    build_vertical_edges,
)
from wellgraph.topology.node_builder import build_topology_nodes, create_volume_nodes
from wellgraph.topology.physics import SnapshotPhysics
from wellgraph.topology.topology_core import build_topology_model


def build_nodes(snapshot: dict):
    state = StateSnapshot.model_validate(snapshot)
    return state, build_topology_nodes(SnapshotPhysics.from_payload(state.physics))


def tubing_pipe() -> dict:
    return {
        "role": "pipe",
        "material": "steel",
        "innerRadius": 2.0,
        "outerRadius": 2.4,
        "source": {"pipeType": "tubing", "rowId": "tbg-1"},
    }


def codes(warnings) -> list[str]:
    return [warning.code for warning in warnings]


class TestNodeBuilder:
    """Interval sampling and per-interval volume nodes."""

    def test_surface_node_is_always_first(self):
        _, nodes = build_nodes(snapshot_with_intervals())
        assert [node.node_id for node in nodes.nodes] == [SURFACE_NODE_ID]
        assert nodes.intervals == []

    def test_volume_nodes_in_radial_order(self):
        stack = layer_stack(annulus(0), annulus(1, material="cement", row_id="cmt-1"))
        _, nodes = build_nodes(snapshot_with_intervals((0, 100, stack)))
        kinds = [node.kind for node in nodes.nodes]
        assert kinds == [NodeKind.SURFACE, NodeKind.TUBING_INNER, NodeKind.ANNULUS_A, NodeKind.ANNULUS_B]

        b_node = nodes.node_for(0, NodeKind.ANNULUS_B)
        assert b_node.node_id == create_node_id(NodeKind.ANNULUS_B, 0, 100)
        assert b_node.is_blocked
        assert b_node.meta.material == "cement"
        assert b_node.meta.material_row_id == "cmt-1"
        assert b_node.meta.annulus_index == 1
        assert not nodes.node_for(0, NodeKind.ANNULUS_A).is_blocked

    def test_invalid_intervals_are_skipped_but_keep_indices(self):
        stack = layer_stack()
        _, nodes = build_nodes(
            snapshot_with_intervals((50, 50, stack), (None, 10, stack), (10, 60, stack))
        )
        assert [interval.interval_index for interval in nodes.intervals] == [2]
        assert nodes.node_for(2, NodeKind.TUBING_INNER) is not None

    def test_intervals_are_ordered_by_top(self):
        stack = layer_stack()
        _, nodes = build_nodes(snapshot_with_intervals((100, 200, stack), (0, 100, stack)))
        assert [interval.top for interval in nodes.intervals] == [0, 100]
        assert [interval.interval_index for interval in nodes.intervals] == [1, 0]

    def test_plug_blocks_the_bore(self):
        plug = {
            "role": "core",
            "material": "plug",
            "innerRadius": 0,
            "outerRadius": 2,
            "source": {"rowId": "plug-1"},
        }
        state = StateSnapshot.model_validate(snapshot_with_intervals((0, 10, [plug])))
        bore = create_volume_nodes(0, 10, state.physics.intervals[0].stack)[0]
        assert bore.kind == NodeKind.TUBING_INNER
        assert bore.is_blocked
        assert bore.meta.material_row_id == "plug-1"

    def test_tubing_pipe_sets_inner_channel(self):
        _, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, [*layer_stack(), tubing_pipe(), annulus(0)]),
                (50, 100, layer_stack(annulus(0))),
            )
        )
        assert nodes.node_for(0, NodeKind.TUBING_INNER).meta.inner_channel == InnerChannel.tubing_inner
        assert nodes.node_for(1, NodeKind.TUBING_INNER).meta.inner_channel == InnerChannel.wellbore_inner

    def test_formation_layer_beyond_modeled_slots(self):
        outer = annulus(4, is_formation=True)
        _, nodes = build_nodes(snapshot_with_intervals((0, 10, layer_stack(annulus(0), outer))))
        assert nodes.node_for(0, NodeKind.FORMATION_ANNULUS) is not None

    def test_formation_layer_in_modeled_slot_is_not_duplicated(self):
        formation = annulus(0, is_formation=True)
        _, nodes = build_nodes(snapshot_with_intervals((0, 10, layer_stack(formation))))
        assert nodes.node_for(0, NodeKind.ANNULUS_A) is not None
        assert nodes.node_for(0, NodeKind.FORMATION_ANNULUS) is None


class TestVerticalEdges:
    """Same-kind continuity, equipment effects and structural transitions."""

    def test_open_and_blocked_continuity(self, cemented_snapshot):
        state, nodes = build_nodes(cemented_snapshot)
        result = build_vertical_edges(nodes, state.equipment_data)
        by_volume = {edge.meta["volume_key"]: edge for edge in result.edges}

        bore = by_volume["TUBING_INNER"]
        assert bore.cost == 0
        assert bore.state == "open"
        assert bore.edge_id.endswith(":TUBING_INNER")

        annulus_edge = by_volume["ANNULUS_A"]
        assert annulus_edge.cost == 1
        assert annulus_edge.state == "closed_failable"
        details = annulus_edge.reason.details
        assert details["blocked_by_material"] is True
        assert details["blocked_by_equipment"] is False
        assert details["boundary_depth"] == 50
        contributor = annulus_edge.reason.equipment_contributors[0]
        assert contributor.row_id == "cement-1"
        assert contributor.equipment_type == "cement"
        assert contributor.function_key == "annulus_a_seal"
        assert result.edge_reasons[annulus_edge.edge_id] == annulus_edge.reason

    def test_equipment_blocks_continuity(self, dual_barrier_snapshot):
        state, nodes = build_nodes(dual_barrier_snapshot)
        result = build_vertical_edges(nodes, state.equipment_data)
        by_volume = {edge.meta["volume_key"]: edge for edge in result.edges}
        assert by_volume["TUBING_INNER"].cost == 1
        assert by_volume["TUBING_INNER"].reason.details["blocked_by_equipment"] is True
        assert by_volume["ANNULUS_A"].cost == 1
        assert [c.row_id for c in by_volume["ANNULUS_A"].reason.equipment_contributors] == ["pk-1"]
        assert result.validation_warnings == []

    def test_casing_end_transition(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, layer_stack(annulus(0), annulus(1))),
                (50, 100, layer_stack(annulus(0))),
            )
        )
        result = build_vertical_edges(nodes, state.equipment_data)
        transitions = [edge for edge in result.edges if "transition_type" in edge.meta]
        assert len(transitions) == 1
        edge = transitions[0]
        assert edge.source == nodes.node_for(0, NodeKind.ANNULUS_B).node_id
        assert edge.target == nodes.node_for(1, NodeKind.ANNULUS_A).node_id
        assert edge.meta["transition_type"] == "annulus_family_shift_exit"
        assert edge.reason.rule_id == "annulus-family-transition"
        assert edge.cost == 0
        assert edge.edge_id.endswith("annulus-family-transition:ANNULUS_A|ANNULUS_B:annulus_family_shift_exit")

    def test_casing_start_transition(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, layer_stack(annulus(0))),
                (50, 100, layer_stack(annulus(0), annulus(1))),
            )
        )
        result = build_vertical_edges(nodes, state.equipment_data)
        transitions = [edge for edge in result.edges if "transition_type" in edge.meta]
        assert [edge.meta["transition_type"] for edge in transitions] == ["annulus_family_shift_entry"]
        assert transitions[0].source == nodes.node_for(0, NodeKind.ANNULUS_A).node_id
        assert transitions[0].target == nodes.node_for(1, NodeKind.ANNULUS_B).node_id

    def test_non_adjacent_shift_is_reported_not_modeled(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, layer_stack(annulus(0), annulus(2))),
                (50, 100, layer_stack(annulus(0))),
            )
        )
        result = build_vertical_edges(nodes, state.equipment_data)
        assert not any("transition_type" in edge.meta for edge in result.edges)
        assert codes(result.validation_warnings) == ["structural_transition_not_modeled"]
        assert result.validation_warnings[0].depth == 50

    def test_tubing_end_transfer(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, [*layer_stack(), tubing_pipe(), annulus(0)]),
                (50, 100, layer_stack(annulus(0))),
            )
        )
        result = build_vertical_edges(nodes, state.equipment_data)
        transfers = [edge for edge in result.edges if edge.meta.get("transition_rule_id") == "tubing-end-transfer"]
        assert len(transfers) == 1
        assert transfers[0].source == nodes.node_for(0, NodeKind.ANNULUS_A).node_id
        assert transfers[0].target == nodes.node_for(1, NodeKind.TUBING_INNER).node_id
        assert transfers[0].meta["transition_type"] == "tubing_end_transfer_exit"

    def test_tubing_end_without_annulus_warns(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, [*layer_stack(), tubing_pipe()]),
                (50, 100, layer_stack()),
            )
        )
        result = build_vertical_edges(nodes, state.equipment_data)
        assert codes(result.validation_warnings) == ["tubing_end_transfer_unresolved"]


class TestRadialEdges:
    """Perforation and leak markers."""

    def test_default_pair_perforation(self, dual_barrier_snapshot):
        state, nodes = build_nodes(dual_barrier_snapshot)
        result = build_radial_edges(state, nodes)
        assert len(result.edges) == 1
        edge = result.edges[0]
        assert edge.kind == EdgeKind.radial
        assert edge.source == nodes.node_for(1, NodeKind.TUBING_INNER).node_id
        assert edge.target == nodes.node_for(1, NodeKind.ANNULUS_A).node_id
        assert edge.cost == 0
        assert edge.meta["radial_pair_source"] == "default_bore_annulus_a"
        assert edge.reason.rule_id == "marker-perforation"
        assert result.source_node_ids == [edge.source, edge.target]

        entity = result.source_entities[0]
        assert entity.source_id == "source:marker:perf-1"
        assert entity.kind == "perforation"
        assert entity.origin == "marker"
        assert entity.volume_key == "TUBING_INNER+ANNULUS_A"

    def test_open_hole_perforation_sources_the_bore(self, open_hole_snapshot):
        state, nodes = build_nodes(open_hole_snapshot)
        result = build_radial_edges(state, nodes)
        assert result.edges == []
        bore_id = nodes.node_for(0, NodeKind.TUBING_INNER).node_id
        assert result.source_node_ids == [bore_id]
        assert result.source_entities[0].volume_key == "TUBING_INNER"
        assert result.validation_warnings == []

    def test_leak_marker_creates_edge_without_source(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                markers=[{"rowId": "leak-1", "type": "Leak", "top": 10, "bottom": 20}],
            )
        )
        result = build_radial_edges(state, nodes)
        assert len(result.edges) == 1
        assert result.edges[0].reason.rule_id == "marker-leak"
        assert result.source_node_ids == []
        assert result.source_entities == []

    def test_blocked_endpoint_costs_one_and_is_not_a_source(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0, material="cement", row_id="cmt-1"))),
                markers=[{"rowId": "perf-1", "type": "perforation", "top": 10, "bottom": 20}],
            )
        )
        result = build_radial_edges(state, nodes)
        edge = result.edges[0]
        assert edge.cost == 1
        assert "blocked" in edge.reason.summary
        assert result.source_node_ids == [nodes.node_for(0, NodeKind.TUBING_INNER).node_id]

    def test_casing_host_selects_adjacent_annuli(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0), annulus(1))),
                casingData=[
                    {"rowId": "csg-prod", "top": 0, "bottom": 100, "od": 7},
                    {"rowId": "csg-int", "top": 0, "bottom": 100, "od": 9.625},
                ],
                markers=[
                    {
                        "rowId": "perf-1",
                        "type": "Perforation",
                        "top": 30,
                        "bottom": 40,
                        "attachToHostType": "casing",
                        "attachToId": "csg-int",
                    }
                ],
            )
        )
        result = build_radial_edges(state, nodes)
        edge = result.edges[0]
        assert edge.meta["radial_pair_source"] == "casing_host_adjacent_annuli"
        assert edge.meta["marker_host_casing_index"] == 1
        assert edge.source == nodes.node_for(0, NodeKind.ANNULUS_A).node_id
        assert edge.target == nodes.node_for(0, NodeKind.ANNULUS_B).node_id

    def test_marker_warnings(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                markers=[
                    {"rowId": "bad-range", "type": "Perforation", "top": 50, "bottom": 10},
                    {"rowId": "bad-host", "type": "Perforation", "top": 10, "bottom": 20, "attachToId": "nope"},
                    {"rowId": "too-deep", "type": "Perforation", "top": 500, "bottom": 600},
                    {"rowId": "ignored", "type": "Gauge", "top": 10, "bottom": 20},
                    {"rowId": "hidden", "type": "Perforation", "top": 10, "bottom": 20, "show": False},
                ],
            )
        )
        result = build_radial_edges(state, nodes)
        assert result.edges == []
        assert [(w.code, w.row_id) for w in result.validation_warnings] == [
            ("marker_invalid_depth_range", "bad-range"),
            ("marker_unresolved_host_reference", "bad-host"),
            ("marker_no_resolvable_interval_overlap", "too-deep"),
        ]

    def test_tubing_leak_outside_tubing_warns(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                tubingData=[{"rowId": "tbg-1", "top": 0, "bottom": 50}],
                markers=[
                    {
                        "rowId": "leak-1",
                        "type": "Leak",
                        "top": 70,
                        "bottom": 80,
                        "attachToHostType": "tubing",
                        "attachToId": "tbg-1",
                    }
                ],
            )
        )
        result = build_radial_edges(state, nodes)
        assert codes(result.validation_warnings) == ["marker_invalid_tubing_host_at_depth"]

    def test_tubing_host_leak_joins_bore_and_annulus_a(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                tubingData=[{"rowId": "tbg-1", "top": 0, "bottom": 100}],
                markers=[
                    {
                        "rowId": "leak-1",
                        "type": "Leak",
                        "top": 40,
                        "bottom": 60,
                        "attachToHostType": "tubing",
                        "attachToId": "tbg-1",
                    }
                ],
            )
        )
        result = build_radial_edges(state, nodes)
        assert result.validation_warnings == []
        assert len(result.edges) == 1
        edge = result.edges[0]
        assert edge.source == nodes.node_for(0, NodeKind.TUBING_INNER).node_id
        assert edge.target == nodes.node_for(0, NodeKind.ANNULUS_A).node_id
        assert edge.cost == 0
        assert edge.meta["marker_host_type"] == "tubing"
        assert edge.meta["marker_host_row_id"] == "tbg-1"
        assert edge.reason.summary.startswith("Tubing-host leak marker")
        assert result.source_node_ids == []


class TestScenarioBreakouts:
    def test_breakout_creates_open_radial_edge(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0), annulus(1))),
                topologySources=[
                    {"rowId": "brk-1", "fromVolume": "ANNULUS_A", "toVolume": "ANNULUS_B", "depth": 40}
                ],
            )
        )
        result = build_scenario_radial_edges(state, nodes)
        edge = result.edges[0]
        assert edge.cost == 0
        assert edge.reason.rule_id == "scenario-cross-annulus-failure"
        assert edge.meta["scenario_breakout_row_id"] == "brk-1"
        assert edge.meta["scenario_breakout_source_type"] == "scenario"
        assert edge.source == nodes.node_for(0, NodeKind.ANNULUS_A).node_id

    def test_breakout_warnings(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                topologySources=[
                    {"rowId": "half", "fromVolume": "ANNULUS_A", "depth": 10},
                    {"rowId": "same", "fromVolume": "ANNULUS_A", "toVolume": "A", "depth": 10},
                    {"rowId": "nodepth", "fromVolume": "ANNULUS_A", "toVolume": "ANNULUS_B"},
                    {"rowId": "missing", "fromVolume": "ANNULUS_A", "toVolume": "ANNULUS_B", "depth": 10},
                ],
            )
        )
        result = build_scenario_radial_edges(state, nodes)
        assert result.edges == []
        assert codes(result.validation_warnings) == [
            "scenario_breakout_missing_volume_pair",
            "scenario_breakout_unsupported_volume_pair",
            "scenario_breakout_missing_depth_range",
            "scenario_breakout_no_resolvable_interval",
        ]


class TestTerminationEdges:
    def test_only_shallowest_interval_terminates(self, dual_barrier_snapshot):
        _, nodes = build_nodes(dual_barrier_snapshot)
        result = build_termination_edges(nodes)
        assert {edge.source for edge in result.edges} == {
            nodes.node_for(0, NodeKind.TUBING_INNER).node_id,
            nodes.node_for(0, NodeKind.ANNULUS_A).node_id,
        }
        for edge in result.edges:
            assert edge.target == SURFACE_NODE_ID
            assert edge.cost == 0
            assert edge.kind == EdgeKind.termination

    def test_no_intervals_no_termination(self):
        _, nodes = build_nodes(snapshot_with_intervals())
        assert build_termination_edges(nodes).edges == []


class TestGraphShape:
    """Every edge of a built model joins nodes that exist."""

    def test_edge_endpoints_exist(self, dual_barrier_result, cemented_result):
        for result in (dual_barrier_result, cemented_result):
            node_ids = set(result.node_by_id())
            for edge in result.edges:
                assert edge.source in node_ids
                assert edge.target in node_ids
                assert result.edge_reasons[edge.edge_id] == edge.reason

    def test_edge_ids_are_unique(self):
        result = build_topology_model(
            snapshot_with_intervals(
                (0, 50, layer_stack(annulus(0), annulus(1))),
                (50, 100, layer_stack(annulus(0))),
                markers=[{"type": "Perforation", "top": 10, "bottom": 80}],
            )
        )
        edge_ids = [edge.edge_id for edge in result.edges]
        assert len(edge_ids) == len(set(edge_ids))
