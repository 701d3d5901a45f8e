"""Tests for source channels and their precedence."""

from wellgraph.models.result import SourceEntity
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import NodeKind, SourcePolicyMode
from wellgraph.tests.conftest import annulus, layer_stack, snapshot_with_intervals
from wellgraph.topology.edge_builder import RadialEdgeBuildResult
from wellgraph.topology.node_builder import build_topology_nodes
from wellgraph.topology.physics import SnapshotPhysics
from wellgraph.topology.source_resolver import (
    ExplicitSourceBuildResult,
    SourceBuildResult,
    build_explicit_scenario_source_nodes,
    build_fluid_source_nodes,
    resolve_source_channels,
    should_use_illustrative_fluid_source,
)
from wellgraph.topology.topology_core import build_topology_model

FLUID_OPT_IN = {"topologyUseIllustrativeFluidSource": True}
VISIBLE_FLUID_ROW = [{"rowId": "fl-1", "top": 0, "bottom": 100, "fluid": "brine"}]


def build_nodes(snapshot: dict):
    state = StateSnapshot.model_validate(snapshot)
    return state, build_topology_nodes(SnapshotPhysics.from_payload(state.physics))


def codes(warnings) -> list[str]:
    return [warning.code for warning in warnings]


class TestFluidSources:
    """Illustrative sources from fluid-filled annuli."""

    def test_opt_in_flag_must_be_true(self):
        assert should_use_illustrative_fluid_source(StateSnapshot.model_validate({"config": FLUID_OPT_IN}))
        assert not should_use_illustrative_fluid_source(
            StateSnapshot.model_validate({"config": {"topologyUseIllustrativeFluidSource": "yes"}})
        )
        assert not should_use_illustrative_fluid_source(StateSnapshot())

    def test_fluid_annuli_become_sources(self):
        state, nodes = build_nodes(
            snapshot_with_intervals((0, 100, layer_stack(annulus(0), annulus(1, material="cement"))))
        )
        result = build_fluid_source_nodes(state, nodes)
        a_node = nodes.node_for(0, NodeKind.ANNULUS_A)
        assert result.source_node_ids == [a_node.node_id]
        entity = result.source_entities[0]
        assert entity.origin == "illustrative-fluid"
        assert entity.kind == "scenario"
        assert entity.volume_key == "ANNULUS_A"
        assert entity.policy_mode == SourcePolicyMode.fluid_opt_in
        assert result.validation_warnings == []

    def test_fluid_rows_without_sources_warn(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0, material="cement"))),
                annulusFluids=VISIBLE_FLUID_ROW,
            )
        )
        result = build_fluid_source_nodes(state, nodes)
        assert result.source_node_ids == []
        assert codes(result.validation_warnings) == ["fluid_rows_without_modeled_source_nodes"]

    def test_fluid_beyond_modeled_annuli_warns(self):
        state, nodes = build_nodes(snapshot_with_intervals((0, 100, layer_stack(annulus(0), annulus(5)))))
        result = build_fluid_source_nodes(state, nodes)
        assert codes(result.validation_warnings) == ["fluid_in_unmodeled_outer_annulus"]

    def test_formation_fluid_sources_formation_node(self):
        state, nodes = build_nodes(
            snapshot_with_intervals((0, 100, layer_stack(annulus(0, material="cement"), annulus(5, is_formation=True))))
        )
        result = build_fluid_source_nodes(state, nodes)
        formation = nodes.node_for(0, NodeKind.FORMATION_ANNULUS)
        assert result.source_node_ids == [formation.node_id]
        assert result.source_entities[0].volume_key == "FORMATION_ANNULUS"


class TestExplicitSources:
    """Scenario source rows resolve to nodes over their depth range."""

    def test_range_spanning_intervals(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, layer_stack(annulus(0))),
                (50, 100, layer_stack(annulus(0))),
                topologySources=[{"rowId": "s1", "volume": "a-annulus", "top": 40, "bottom": 60}],
            )
        )
        result = build_explicit_scenario_source_nodes(state, nodes)
        assert result.has_scenario_rows
        expected = [nodes.node_for(0, NodeKind.ANNULUS_A).node_id, nodes.node_for(1, NodeKind.ANNULUS_A).node_id]
        assert result.source_node_ids == expected
        entity = result.source_entities[0]
        assert entity.source_id == "source:scenario:s1"
        assert entity.node_ids == expected
        assert entity.kind == "scenario"
        assert entity.origin == "scenario"

    def test_point_depth_on_boundary_matches_both_intervals(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 50, layer_stack()),
                (50, 100, layer_stack()),
                topologySources=[{"rowId": "s1", "volume": "BORE", "depth": 50}],
            )
        )
        result = build_explicit_scenario_source_nodes(state, nodes)
        assert len(result.source_node_ids) == 2

    def test_formation_source_uses_modeled_slot(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0, is_formation=True))),
                topologySources=[{"rowId": "s1", "volume": "open hole", "depth": 10, "type": "inflow"}],
            )
        )
        result = build_explicit_scenario_source_nodes(state, nodes)
        assert result.source_node_ids == [nodes.node_for(0, NodeKind.ANNULUS_A).node_id]
        assert result.source_entities[0].kind == "formation_inflow"

    def test_row_warnings(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                topologySources=[
                    {"rowId": "bad-volume", "volume": "SURFACE", "depth": 10},
                    {"rowId": "no-depth", "volume": "ANNULUS_A"},
                    {"rowId": "no-node", "volume": "ANNULUS_B", "depth": 10},
                    {"rowId": "disabled", "volume": "ANNULUS_A", "depth": 10, "enabled": False},
                ],
            )
        )
        result = build_explicit_scenario_source_nodes(state, nodes)
        assert result.source_node_ids == []
        assert [(w.code, w.row_id) for w in result.validation_warnings] == [
            ("scenario_source_unsupported_volume", "bad-volume"),
            ("scenario_source_missing_depth_range", "no-depth"),
            ("scenario_source_no_resolvable_interval", "no-node"),
        ]

    def test_only_hidden_rows_is_not_a_scenario(self):
        state, nodes = build_nodes(
            snapshot_with_intervals(
                (0, 100, layer_stack()),
                topologySources=[{"volume": "BORE", "depth": 10, "show": False}],
            )
        )
        assert not build_explicit_scenario_source_nodes(state, nodes).has_scenario_rows


class TestSourceBuildResult:
    def test_add_source_node_keeps_first_seen_order(self):
        result = SourceBuildResult()
        for node_id in ["b", "a", "b", "c", "a"]:
            result.add_source_node(node_id)
        assert result.source_node_ids == ["b", "a", "c"]

    def test_seeded_ids_are_not_repeated(self):
        result = ExplicitSourceBuildResult(source_node_ids=["a", "b"])
        result.add_source_node("b")
        result.add_source_node("c")
        assert result.source_node_ids == ["a", "b", "c"]

    def test_radial_result_dedupes_many_sources(self):
        result = RadialEdgeBuildResult()
        for index in range(20000):
            result.add_source_node(f"node-{index % 250}")
        assert result.source_node_ids == [f"node-{index}" for index in range(250)]


class TestSourcePrecedence:
    """Explicit rows win; otherwise markers, joined by fluid when opted in."""

    def marker(self) -> SourceBuildResult:
        return SourceBuildResult(
            source_node_ids=["m1"],
            source_entities=[
                SourceEntity(
                    source_id="source:marker:p",
                    kind="perforation",
                    node_ids=["m1"],
                    origin="marker",
                    policy_mode=SourcePolicyMode.marker_default,
                )
            ],
        )

    def fluid(self) -> SourceBuildResult:
        return SourceBuildResult(source_node_ids=["m1", "f1"])

    def test_marker_default(self):
        resolution = resolve_source_channels(False, self.marker(), self.fluid(), ExplicitSourceBuildResult())
        assert resolution.source_node_ids == ["m1"]
        assert resolution.source_policy.mode == SourcePolicyMode.marker_default
        assert resolution.source_policy.marker_derived
        assert not resolution.source_policy.illustrative_fluid_derived

    def test_fluid_opt_in_appends_without_duplicates(self):
        resolution = resolve_source_channels(True, self.marker(), self.fluid(), ExplicitSourceBuildResult())
        assert resolution.source_node_ids == ["m1", "f1"]
        assert resolution.source_policy.mode == SourcePolicyMode.fluid_opt_in
        assert resolution.source_policy.illustrative_fluid_derived

    def test_explicit_rows_win_even_when_unresolved(self):
        explicit = ExplicitSourceBuildResult(has_scenario_rows=True)
        resolution = resolve_source_channels(True, self.marker(), self.fluid(), explicit)
        assert resolution.source_node_ids == []
        assert resolution.source_entities == []
        assert resolution.source_policy.mode == SourcePolicyMode.scenario_explicit
        assert not resolution.source_policy.marker_derived
        assert resolution.source_policy.explicit_scenario_derived
        assert codes(resolution.validation_warnings) == ["scenario_rows_with_no_resolved_nodes"]


class TestSourcePolicyInModel:
    def test_explicit_scenario_overrides_markers_and_fluid(self, explicit_snapshot):
        result = build_topology_model(explicit_snapshot)
        bore = next(node for node in result.nodes if node.kind == NodeKind.TUBING_INNER)
        assert result.source_node_ids == [bore.node_id]
        assert result.source_policy.mode == SourcePolicyMode.scenario_explicit
        warning_codes = codes(result.validation_warnings)
        assert "explicit_scenario_source_mode_active" in warning_codes
        assert "illustrative_fluid_source_mode_enabled" not in warning_codes
        entity = result.source_entities[0]
        assert entity.kind == "leak"
        assert entity.origin == "scenario"

    def test_fluid_opt_in_warns(self):
        result = build_topology_model(
            snapshot_with_intervals(
                (0, 100, layer_stack(annulus(0))),
                annulusFluids=VISIBLE_FLUID_ROW,
                config=FLUID_OPT_IN,
            )
        )
        assert result.source_policy.mode == SourcePolicyMode.fluid_opt_in
        assert codes(result.validation_warnings) == ["illustrative_fluid_source_mode_enabled"]
        assert result.source_node_ids == [
            next(node.node_id for node in result.nodes if node.kind == NodeKind.ANNULUS_A)
        ]

    def test_no_sources_means_no_paths(self):
        result = build_topology_model(snapshot_with_intervals((0, 100, layer_stack(annulus(0)))))
        assert result.source_node_ids == []
        assert result.active_flow_node_ids == ()
        assert result.min_failure_cost_to_surface is None
        assert result.min_cost_path_edge_ids == ()
        assert result.source_policy.mode == SourcePolicyMode.marker_default
