"""Tests for row parsing, graph model validation and worker envelopes."""

import pytest
from pydantic import ValidationError

from wellgraph.models.graph import Edge, EdgeReason, Node, create_edge_id, create_node_id
from wellgraph.models.rows import EquipmentRow, PipeRow, ScenarioBreakoutRow, ScenarioSourceRow
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import (
    EdgeKind,
    NodeKind,
    normalize_volume_kind,
)
from wellgraph.models.worker_message import WorkerRequest, WorkerResponse, WorkerStatus
from wellgraph.topology.topology_core import build_topology_model
from wellgraph.topology.warning_catalog import WarningCode, create_validation_warning


class TestEditorRows:
    """Rows accept editor-style keys and lenient values."""

    def test_pipe_row_parses_numbers_with_separators(self):
        row = PipeRow.model_validate({"rowId": " csg-1 ", "top": "1,250.5", "bottom": 3000, "od": ""})
        assert row.row_id == "csg-1"
        assert row.top == 1250.5
        assert row.bottom == 3000.0
        assert row.od is None

    def test_only_explicit_false_hides_a_row(self):
        assert PipeRow.model_validate({"show": False}).show is False
        assert PipeRow.model_validate({"show": "false"}).show is True
        assert PipeRow.model_validate({}).show is True

    def test_equipment_depth_aliases(self):
        assert EquipmentRow.model_validate({"md": "100"}).depth == 100.0
        assert EquipmentRow.model_validate({"measuredDepth": 42}).depth == 42.0

    def test_scenario_row_depth_range_resolution(self):
        assert ScenarioSourceRow.model_validate({"top": 10, "bottom": 20}).depth_range().bottom == 20
        point = ScenarioSourceRow.model_validate({"depth": 15}).depth_range()
        assert point.top == point.bottom == 15
        assert point.is_point
        assert ScenarioSourceRow.model_validate({"top": 20, "bottom": 10}).depth_range() is None
        assert ScenarioSourceRow.model_validate({}).depth_range() is None

    def test_disabled_scenario_row_is_not_visible(self):
        assert ScenarioSourceRow.model_validate({"enabled": False}).is_visible is False


class TestStateSnapshot:
    """The snapshot boundary drops junk and tags scenario rows."""

    def test_non_dict_rows_are_dropped(self):
        snapshot = StateSnapshot.model_validate(
            {"casingData": [{"rowId": "c1"}, "junk", None, 5], "markers": "not a list"}
        )
        assert [row.row_id for row in snapshot.casing_data] == ["c1"]
        assert snapshot.markers == []

    def test_topology_sources_are_tagged(self):
        snapshot = StateSnapshot.model_validate(
            {
                "topologySources": [
                    {"rowId": "s1", "volume": "ANNULUS_A", "depth": 10},
                    {"rowId": "b1", "fromVolume": "ANNULUS_A", "toVolume": "ANNULUS_B", "depth": 10},
                ]
            }
        )
        assert [row.row_id for row in snapshot.scenario_source_rows] == ["s1"]
        assert [row.row_id for row in snapshot.scenario_breakout_rows] == ["b1"]
        assert isinstance(snapshot.scenario_breakout_rows[0], ScenarioBreakoutRow)

    def test_snapshot_dump_round_trips_through_the_builder(self, dual_barrier_snapshot):
        snapshot = StateSnapshot.model_validate(dual_barrier_snapshot)
        from_model = build_topology_model(snapshot)
        from_dump = build_topology_model(snapshot.model_dump(mode="json"))
        assert from_model == from_dump


class TestVolumeKinds:
    def test_legacy_spellings(self):
        assert normalize_volume_kind("BORE") == NodeKind.TUBING_INNER
        assert normalize_volume_kind("tubing inner") == NodeKind.TUBING_INNER
        assert normalize_volume_kind("open hole") == NodeKind.FORMATION_ANNULUS
        assert normalize_volume_kind("ANNULUS_B") == NodeKind.ANNULUS_B

    def test_surface_and_unknown_are_rejected(self):
        assert normalize_volume_kind("SURFACE") is None
        assert normalize_volume_kind(NodeKind.SURFACE) is None
        assert normalize_volume_kind("") is None


class TestGraphModels:
    """Nodes and edges enforce the graph's structural rules."""

    def test_node_requires_positive_height(self):
        with pytest.raises(ValidationError):
            Node(node_id="n", kind=NodeKind.ANNULUS_A, depth_top=10, depth_bottom=10, volume_key="ANNULUS_A")

    def test_surface_node_has_no_depths(self):
        with pytest.raises(ValidationError):
            Node(node_id="node:SURFACE", kind=NodeKind.SURFACE, depth_top=0, volume_key="SURFACE")

    def test_edge_cost_is_restricted(self):
        reason = EdgeReason(rule_id="r", summary="s")
        with pytest.raises(ValidationError):
            Edge(edge_id="e", kind=EdgeKind.vertical, source="a", target="b", cost=2, state="open", reason=reason)

    def test_traversable_edge_needs_reason(self):
        with pytest.raises(ValidationError):
            Edge(edge_id="e", kind=EdgeKind.vertical, source="a", target="b", cost=0, state="open")

    def test_impassable_edge_may_omit_reason(self):
        edge = Edge(edge_id="e", kind=EdgeKind.vertical, source="a", target="b", cost=None, state="open")
        assert edge.cost is None

    def test_edge_accepts_from_and_to_keys(self):
        edge = Edge.model_validate(
            {
                "edge_id": "e",
                "kind": "radial",
                "from": "a",
                "to": "b",
                "cost": 0,
                "state": "open",
                "reason": {"rule_id": "r", "summary": "s"},
            }
        )
        assert (edge.source, edge.target) == ("a", "b")
        assert edge.model_dump(by_alias=True)["from"] == "a"

    def test_ids_are_deterministic(self):
        node_id = create_node_id(NodeKind.ANNULUS_A, 0, 50)
        assert node_id == "node:ANNULUS_A:0.000000:50.000000"
        assert create_edge_id(EdgeKind.vertical, "a", "b", "ANNULUS_A") == "edge:vertical:a->b:ANNULUS_A"
        assert create_edge_id(EdgeKind.vertical, "a", "b") == "edge:vertical:a->b"


class TestWarnings:
    def test_catalog_fills_metadata(self):
        warning = create_validation_warning(WarningCode.unknown_type, "msg", depth="100", row_id=" r1 ")
        assert warning.level == "warning"
        assert warning.code == "unknown_type"
        assert warning.category == "equipment"
        assert warning.fields == ["type"]
        assert warning.recommendation
        assert warning.depth == 100.0
        assert warning.row_id == "r1"

    def test_explicit_values_win(self):
        warning = create_validation_warning(
            WarningCode.unknown_type, "msg", category="custom", recommendation="do this"
        )
        assert warning.category == "custom"
        assert warning.recommendation == "do this"


class TestWorkerEnvelopes:
    def test_request_accepts_camel_case(self):
        request = WorkerRequest.model_validate(
            {"requestId": 4, "payload": {"stateSnapshot": {"markers": []}, "wellId": "w"}}
        )
        assert request.request_id == 4
        assert request.payload.well_id == "w"

    def test_request_id_must_be_positive(self):
        with pytest.raises(ValidationError):
            WorkerRequest.model_validate({"request_id": 0})

    def test_error_response_omits_result(self):
        response = WorkerResponse(request_id=2, status=WorkerStatus.error, error="boom")
        message = response.to_message()
        assert message == {"request_id": 2, "status": "error", "error": "boom"}

    def test_success_response_requires_result(self):
        with pytest.raises(ValidationError):
            WorkerResponse(request_id=2, status=WorkerStatus.success)

    def test_success_response_omits_error(self, dual_barrier_result):
        response = WorkerResponse(request_id=7, status=WorkerStatus.success, result=dual_barrier_result)
        message = response.to_message()
        assert "error" not in message
        assert message["result"]["request_id"] == 7
        assert WorkerResponse.model_validate(message).result == dual_barrier_result
