"""Tests for equipment seal rules and boundary effects."""

from wellgraph.models.rows import EquipmentRow, PipeRow
from wellgraph.models.topology_types import NodeKind, SealState
from wellgraph.topology.equipment_definitions import (
    ActuationState,
    IntegrityStatus,
    RuleContext,
    normalize_equipment_type_key,
    resolve_equipment_definition,
)
from wellgraph.topology.equipment_rules import (
    resolve_boundary_equipment_effects,
    resolve_row_rule,
    resolve_seal_state,
)
from wellgraph.topology.pipe_reference import PipeHostType, PipeReferenceMap, normalize_pipe_host_type


def equipment(**fields) -> EquipmentRow:
    return EquipmentRow.model_validate(fields)


def codes(warnings) -> list[str]:
    return [warning.code for warning in warnings]


class TestEquipmentRegistry:
    def test_type_matching(self):
        assert normalize_equipment_type_key("Safety Valve") == "safety-valve"
        assert normalize_equipment_type_key("Production Packer") == "packer"
        assert normalize_equipment_type_key("Bridge Plug") == "bridge-plug"
        assert normalize_equipment_type_key("Gauge Mandrel") == "gauge mandrel"
        assert normalize_equipment_type_key("  ") is None

    def test_unknown_type_has_no_definition(self):
        assert resolve_equipment_definition("gauge") is None
        assert resolve_equipment_definition("packer").key == "packer"


class TestRowRule:
    """Seal maps, states and row warnings for single equipment rows."""

    def test_safety_valve_seals_bore_only(self):
        rule = resolve_row_rule(equipment(rowId="sv", type="Safety Valve", depth=100))
        assert rule.type == "safety-valve"
        assert rule.seal_by_volume[NodeKind.TUBING_INNER] is True
        assert rule.seal_by_volume[NodeKind.ANNULUS_A] is False
        assert rule.actuation_state == ActuationState.closed
        assert rule.integrity_status == IntegrityStatus.intact
        assert rule.validation_warnings == []

    def test_packer_defaults_to_annulus_a(self):
        rule = resolve_row_rule(equipment(rowId="pk", type="Packer", depth=100))
        assert rule.seal_by_volume[NodeKind.ANNULUS_A] is True
        assert rule.seal_by_volume[NodeKind.ANNULUS_B] is False
        assert rule.seal_by_volume[NodeKind.TUBING_INNER] is False
        assert rule.validation_warnings == []

    def test_packer_seal_node_kind(self):
        rule = resolve_row_rule(equipment(type="Packer", sealNodeKind="ANNULUS_B"))
        assert rule.seal_by_volume[NodeKind.ANNULUS_B] is True
        assert rule.seal_by_volume[NodeKind.ANNULUS_A] is False

    def test_unknown_type_warns_and_seals_nothing(self):
        rule = resolve_row_rule(equipment(rowId="g1", type="Gauge"))
        assert codes(rule.validation_warnings) == ["unknown_type"]
        assert not rule.has_any_seal_path

    def test_unknown_type_with_overrides(self):
        rule = resolve_row_rule(equipment(type="Gauge", boreSeal="yes", annularSeal="true"))
        assert rule.seal_by_volume[NodeKind.TUBING_INNER] is True
        assert rule.seal_by_volume[NodeKind.ANNULUS_C] is True

    def test_invalid_overrides_warn(self):
        rule = resolve_row_rule(
            equipment(type="Safety Valve", boreSeal="maybe", annularSeal="perhaps")
        )
        assert "invalid_bore_seal_override" in codes(rule.validation_warnings)
        assert "invalid_annular_seal_override" in codes(rule.validation_warnings)
        assert rule.seal_by_volume[NodeKind.TUBING_INNER] is True

    def test_volume_overrides(self):
        rule = resolve_row_rule(
            equipment(
                type="Safety Valve",
                sealByVolume={"ANNULUS_B": "yes", "NOWHERE": True, "ANNULUS_C": "sure"},
            )
        )
        assert rule.seal_by_volume[NodeKind.ANNULUS_B] is True
        assert rule.seal_by_volume[NodeKind.ANNULUS_C] is False
        warning_codes = codes(rule.validation_warnings)
        assert "invalid_volume_seal_override_key" in warning_codes
        assert "invalid_volume_seal_override_value" in warning_codes

    def test_state_conflicts(self):
        closed_leaking = resolve_row_rule(
            equipment(type="Safety Valve", actuationState="closed", integrityStatus="leaking")
        )
        assert codes(closed_leaking.validation_warnings) == ["conflict_closed_with_open_integrity"]

        open_failed_closed = resolve_row_rule(
            equipment(type="Safety Valve", actuationState="open", integrityStatus="failed closed")
        )
        assert codes(open_failed_closed.validation_warnings) == ["conflict_open_with_failed_closed"]

    def test_unrecognized_states_warn(self):
        rule = resolve_row_rule(
            equipment(type="Safety Valve", actuationState="wobbly", integrityStatus="unclear")
        )
        assert "unknown_actuation_state" in codes(rule.validation_warnings)
        assert "unknown_integrity_status" in codes(rule.validation_warnings)
        assert rule.actuation_state == ActuationState.closed


class TestPackerAttachment:
    """Packers validate their attach host when attach input is given."""

    def context(self) -> RuleContext:
        tubing = [PipeRow.model_validate({"rowId": "tbg-1", "label": "Tubing", "top": 0, "bottom": 150})]
        return RuleContext(pipe_reference_map=PipeReferenceMap.build([], tubing))

    def test_missing_host_type(self):
        rule = resolve_row_rule(equipment(type="Packer", attachToId="tbg-1"), self.context())
        assert codes(rule.validation_warnings) == ["equipment_missing_attach_target"]

    def test_unresolved_host(self):
        rule = resolve_row_rule(
            equipment(type="Packer", attachToHostType="tubing", attachToId="tbg-9"), self.context()
        )
        assert codes(rule.validation_warnings) == ["equipment_unresolved_attach_target"]

    def test_depth_outside_host(self):
        rule = resolve_row_rule(
            equipment(type="Packer", depth=500, attachToHostType="tubing", attachToId="tbg-1"),
            self.context(),
        )
        assert codes(rule.validation_warnings) == ["equipment_invalid_host_depth"]

    def test_valid_attachment(self):
        rule = resolve_row_rule(
            equipment(type="Packer", depth=100, attachToHostType="tubing", attachToId="tbg-1"),
            self.context(),
        )
        assert rule.validation_warnings == []


class TestPipeReferenceMap:
    def test_host_type_normalization(self):
        assert normalize_pipe_host_type(PipeHostType.tubing, fallback=None) is PipeHostType.tubing
        assert normalize_pipe_host_type(" Tubing ", fallback=None) is PipeHostType.tubing
        assert normalize_pipe_host_type("riser", fallback=None) is None
        assert normalize_pipe_host_type(None) is PipeHostType.casing

    def test_enum_host_type_resolves_tubing_rows(self):
        tubing = [PipeRow.model_validate({"rowId": "tbg-1", "top": 0, "bottom": 150})]
        reference_map = PipeReferenceMap.build([], tubing)
        resolved = reference_map.resolve("", host_type=PipeHostType.tubing, preferred_id="tbg-1")
        assert resolved is not None
        assert resolved.host_type is PipeHostType.tubing
        assert resolved.row.row_id == "tbg-1"
        assert reference_map.resolve("#1", host_type=PipeHostType.casing) is None


class TestSealState:
    def test_state_table(self):
        assert resolve_seal_state(False, ActuationState.closed, IntegrityStatus.intact).cost == 0
        leaking = resolve_seal_state(True, ActuationState.closed, IntegrityStatus.leaking)
        assert (leaking.blocked, leaking.cost, leaking.state) == (False, 0, "leaking")
        failed_closed = resolve_seal_state(True, ActuationState.open, IntegrityStatus.failed_closed)
        assert (failed_closed.blocked, failed_closed.cost) == (True, 1)
        assert failed_closed.state == SealState.failed_closed.value
        opened = resolve_seal_state(True, ActuationState.open, IntegrityStatus.intact)
        assert (opened.blocked, opened.cost, opened.state) == (False, 0, "open")
        static = resolve_seal_state(True, ActuationState.static, IntegrityStatus.intact)
        assert (static.blocked, static.cost, static.state) == (True, 1, "closed_failable")


class TestBoundaryEffects:
    """Rows at a boundary fold into per-volume effects."""

    def test_only_rows_at_the_boundary_count(self):
        rows = [
            equipment(rowId="sv", type="Safety Valve", depth=100),
            equipment(rowId="deep", type="Safety Valve", depth=150),
            equipment(rowId="hidden", type="Safety Valve", depth=100, show=False),
        ]
        effects = resolve_boundary_equipment_effects(100, rows)
        bore = effects.effect(NodeKind.TUBING_INNER)
        assert bore.blocked is True
        assert bore.cost == 1
        assert [c.row_id for c in bore.contributors] == ["sv"]
        assert bore.contributors[0].function_key == "bore_seal"
        assert effects.effect(NodeKind.ANNULUS_A).blocked is False

    def test_open_seal_still_contributes(self):
        rows = [equipment(rowId="sv", type="Safety Valve", depth=100, actuationState="open")]
        bore = resolve_boundary_equipment_effects(100, rows).effect(NodeKind.TUBING_INNER)
        assert bore.blocked is False
        assert bore.cost == 0
        assert bore.contributors[0].state == "open"

    def test_no_seal_row_warns_at_boundary_depth(self):
        rows = [equipment(rowId="g1", type="Gauge", depth=100)]
        effects = resolve_boundary_equipment_effects(100, rows)
        assert codes(effects.validation_warnings) == ["unknown_type", "no_seal_behavior_at_boundary"]
        assert all(warning.depth == 100 for warning in effects.validation_warnings)

    def test_attach_warning_suppresses_no_seal_warning(self):
        rows = [
            equipment(
                rowId="pk",
                type="Packer",
                depth=100,
                sealByVolume={"ANNULUS_A": False},
                attachToId="missing",
            )
        ]
        effects = resolve_boundary_equipment_effects(100, rows)
        assert codes(effects.validation_warnings) == ["equipment_missing_attach_target"]

    def test_no_boundary_depth(self):
        effects = resolve_boundary_equipment_effects(None, [equipment(type="Packer", depth=1)])
        assert effects.validation_warnings == []
        assert effects.effect(NodeKind.ANNULUS_A).contributors == []
