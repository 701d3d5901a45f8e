"""
Closed catalog of topology warning codes.

Each code carries a category, the editor fields it concerns and a
recommendation shown to the user. ``create_validation_warning`` fills
any of those the caller leaves out from the catalog.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from wellgraph.models.warning import ValidationWarning
from wellgraph.utils.identifiers import normalize_row_id
from wellgraph.utils.numbers import parse_optional_number

SUPPORTED_VOLUME_KEYS_TEXT = (
    "TUBING_INNER (legacy BORE), ANNULUS_A, ANNULUS_B, ANNULUS_C, ANNULUS_D, FORMATION_ANNULUS"
)


class WarningCategory(str, Enum):
    equipment = "equipment"
    marker = "marker"
    source = "source"
    structure = "structure"
    policy = "policy"


class WarningCode(str, Enum):
    """All warning codes the topology pipeline can emit."""

    # equipment
    unknown_type = "unknown_type"
    invalid_annular_seal_override = "invalid_annular_seal_override"
    invalid_bore_seal_override = "invalid_bore_seal_override"
    invalid_volume_seal_override_key = "invalid_volume_seal_override_key"
    invalid_volume_seal_override_value = "invalid_volume_seal_override_value"
    unknown_actuation_state = "unknown_actuation_state"
    unknown_integrity_status = "unknown_integrity_status"
    conflict_closed_with_open_integrity = "conflict_closed_with_open_integrity"
    conflict_open_with_failed_closed = "conflict_open_with_failed_closed"
    no_seal_behavior_at_boundary = "no_seal_behavior_at_boundary"
    equipment_missing_attach_target = "equipment_missing_attach_target"
    equipment_unresolved_attach_target = "equipment_unresolved_attach_target"
    equipment_invalid_host_depth = "equipment_invalid_host_depth"

    # markers
    marker_invalid_depth_range = "marker_invalid_depth_range"
    marker_unresolved_host_reference = "marker_unresolved_host_reference"
    marker_invalid_tubing_host_at_depth = "marker_invalid_tubing_host_at_depth"
    marker_no_resolvable_interval_overlap = "marker_no_resolvable_interval_overlap"

    # sources
    fluid_rows_without_modeled_source_nodes = "fluid_rows_without_modeled_source_nodes"
    fluid_in_unmodeled_outer_annulus = "fluid_in_unmodeled_outer_annulus"
    unmapped_formation_annulus_fluid = "unmapped_formation_annulus_fluid"
    scenario_source_unsupported_volume = "scenario_source_unsupported_volume"
    scenario_source_missing_depth_range = "scenario_source_missing_depth_range"
    scenario_source_no_resolvable_interval = "scenario_source_no_resolvable_interval"
    scenario_rows_with_no_resolved_nodes = "scenario_rows_with_no_resolved_nodes"
    scenario_breakout_missing_volume_pair = "scenario_breakout_missing_volume_pair"
    scenario_breakout_unsupported_volume_pair = "scenario_breakout_unsupported_volume_pair"
    scenario_breakout_missing_depth_range = "scenario_breakout_missing_depth_range"
    scenario_breakout_no_resolvable_interval = "scenario_breakout_no_resolvable_interval"

    # structure
    structural_transition_not_modeled = "structural_transition_not_modeled"
    tubing_end_transfer_unresolved = "tubing_end_transfer_unresolved"

    # policy
    illustrative_fluid_source_mode_enabled = "illustrative_fluid_source_mode_enabled"
    explicit_scenario_source_mode_active = "explicit_scenario_source_mode_active"


@dataclass(frozen=True)
class WarningMetadata:
    category: WarningCategory
    recommendation: str
    fields: tuple[str, ...] = ()


_ATTACH_FIELDS = ("attach_to_display", "attach_to_host_type", "attach_to_id")
_BREAKOUT_PAIR_FIELDS = ("from_volume_key", "to_volume_key")

WARNING_METADATA: dict[WarningCode, WarningMetadata] = {
    WarningCode.unknown_type: WarningMetadata(
        WarningCategory.equipment,
        "Use a recognized equipment type (Packer, Bridge Plug or Safety Valve), "
        "or set explicit bore/annular seal overrides.",
        ("type",),
    ),
    WarningCode.invalid_annular_seal_override: WarningMetadata(
        WarningCategory.equipment,
        "Set annular seal override to true, false, or leave it blank to inherit type defaults.",
        ("annular_seal",),
    ),
    WarningCode.invalid_bore_seal_override: WarningMetadata(
        WarningCategory.equipment,
        "Set bore seal override to true, false, or leave it blank to inherit type defaults.",
        ("bore_seal",),
    ),
    WarningCode.invalid_volume_seal_override_key: WarningMetadata(
        WarningCategory.equipment,
        f"Use supported volume keys only: {SUPPORTED_VOLUME_KEYS_TEXT}.",
        ("seal_by_volume",),
    ),
    WarningCode.invalid_volume_seal_override_value: WarningMetadata(
        WarningCategory.equipment,
        "Use true/false values for per-volume seal overrides.",
        ("seal_by_volume",),
    ),
    WarningCode.unknown_actuation_state: WarningMetadata(
        WarningCategory.equipment,
        "Use static, open, closed, or leave blank to inherit the equipment type default.",
        ("actuation_state",),
    ),
    WarningCode.unknown_integrity_status: WarningMetadata(
        WarningCategory.equipment,
        "Use intact, failed_open, failed_closed, leaking, or leave blank to inherit "
        "the equipment type default.",
        ("integrity_status",),
    ),
    WarningCode.conflict_closed_with_open_integrity: WarningMetadata(
        WarningCategory.equipment,
        "If the barrier should block flow, use integrity intact/failed_closed. "
        "If communication is expected, use actuation open.",
        ("actuation_state", "integrity_status"),
    ),
    WarningCode.conflict_open_with_failed_closed: WarningMetadata(
        WarningCategory.equipment,
        "If communication is expected, avoid failed_closed integrity. "
        "If the barrier should block flow, use closed actuation.",
        ("actuation_state", "integrity_status"),
    ),
    WarningCode.no_seal_behavior_at_boundary: WarningMetadata(
        WarningCategory.equipment,
        "Define at least one seal path for this equipment at the boundary "
        "(bore/annular/per-volume), or move/remove the row if it is non-sealing.",
        ("bore_seal", "annular_seal", "seal_by_volume"),
    ),
    WarningCode.equipment_missing_attach_target: WarningMetadata(
        WarningCategory.equipment,
        "Select a valid Attach To target (Tubing or Casing) for this equipment row.",
        _ATTACH_FIELDS,
    ),
    WarningCode.equipment_unresolved_attach_target: WarningMetadata(
        WarningCategory.equipment,
        "Re-select Attach To so this equipment references an existing host row.",
        _ATTACH_FIELDS,
    ),
    WarningCode.equipment_invalid_host_depth: WarningMetadata(
        WarningCategory.equipment,
        "Move the equipment depth into the selected host interval, "
        "or choose a host that overlaps this depth.",
        ("depth", "attach_to_display"),
    ),
    WarningCode.marker_invalid_depth_range: WarningMetadata(
        WarningCategory.marker,
        "Set marker Top/Bottom so both values are numeric and Bottom is not shallower than Top.",
    ),
    WarningCode.marker_unresolved_host_reference: WarningMetadata(
        WarningCategory.marker,
        "Re-select Attach To so the marker references a valid host row.",
    ),
    WarningCode.marker_invalid_tubing_host_at_depth: WarningMetadata(
        WarningCategory.marker,
        "Set host type to tubing and keep the leak marker depth range inside "
        "the selected tubing interval.",
    ),
    WarningCode.marker_no_resolvable_interval_overlap: WarningMetadata(
        WarningCategory.marker,
        "Adjust marker depth range and host selection so it intersects a modeled radial volume pair.",
    ),
    WarningCode.fluid_rows_without_modeled_source_nodes: WarningMetadata(
        WarningCategory.source,
        "Use marker/default sources, explicit topology sources, "
        "or enable illustrative fluid-source mode intentionally.",
    ),
    WarningCode.fluid_in_unmodeled_outer_annulus: WarningMetadata(
        WarningCategory.source,
        "Move sources to modeled volumes; outer annulus slots beyond ANNULUS_D are not modeled.",
    ),
    WarningCode.unmapped_formation_annulus_fluid: WarningMetadata(
        WarningCategory.source,
        "Check open-hole/formation annulus setup so FORMATION_ANNULUS nodes can be resolved "
        "for fluid intervals.",
    ),
    WarningCode.scenario_source_unsupported_volume: WarningMetadata(
        WarningCategory.source,
        f"Use supported volume keys: {SUPPORTED_VOLUME_KEYS_TEXT}.",
    ),
    WarningCode.scenario_source_missing_depth_range: WarningMetadata(
        WarningCategory.source,
        "Provide depth, or valid top/bottom values for the scenario source row.",
    ),
    WarningCode.scenario_source_no_resolvable_interval: WarningMetadata(
        WarningCategory.source,
        "Adjust scenario source depth range so it intersects at least one modeled topology interval.",
    ),
    WarningCode.scenario_rows_with_no_resolved_nodes: WarningMetadata(
        WarningCategory.source,
        "Review scenario source rows for valid depth ranges and volume keys "
        "so they resolve to source nodes.",
    ),
    WarningCode.scenario_breakout_missing_volume_pair: WarningMetadata(
        WarningCategory.source,
        "Set both From Volume and To Volume for cross-annulus breakout scenario rows.",
        _BREAKOUT_PAIR_FIELDS,
    ),
    WarningCode.scenario_breakout_unsupported_volume_pair: WarningMetadata(
        WarningCategory.source,
        f"Use supported volume keys for breakout pairs: {SUPPORTED_VOLUME_KEYS_TEXT}.",
        _BREAKOUT_PAIR_FIELDS,
    ),
    WarningCode.scenario_breakout_missing_depth_range: WarningMetadata(
        WarningCategory.source,
        "Provide depth, or valid top/bottom values for breakout scenario rows.",
        ("top", "bottom"),
    ),
    WarningCode.scenario_breakout_no_resolvable_interval: WarningMetadata(
        WarningCategory.source,
        "Adjust breakout row depth range and volume pair so both volumes resolve "
        "in at least one interval.",
        ("top", "bottom", *_BREAKOUT_PAIR_FIELDS),
    ),
    WarningCode.structural_transition_not_modeled: WarningMetadata(
        WarningCategory.structure,
        "Review the casing/tubing layout at this depth; flow across this structural "
        "change is not represented in the graph.",
    ),
    WarningCode.tubing_end_transfer_unresolved: WarningMetadata(
        WarningCategory.structure,
        "Check that an annulus exists around the tubing where it ends so bore flow "
        "can transfer at the tubing shoe.",
    ),
    WarningCode.illustrative_fluid_source_mode_enabled: WarningMetadata(
        WarningCategory.policy,
        "Use this mode for exploratory analysis only; rely on explicit scenario/marker-driven "
        "sources for engineering decisions.",
    ),
    WarningCode.explicit_scenario_source_mode_active: WarningMetadata(
        WarningCategory.policy,
        "When explicit scenario rows are active, marker/fluid fallback is disabled for this run.",
    ),
}


def resolve_warning_metadata(code: WarningCode | str | None) -> WarningMetadata | None:
    """Catalog entry for a code, or None for unknown codes."""
    try:
        return WARNING_METADATA.get(WarningCode(str(getattr(code, "value", code)).strip()))
    except ValueError:
        return None


def create_validation_warning(
    code: WarningCode | str,
    message: str,
    depth: Any = None,
    row_id: Any = None,
    fields: list[str] | None = None,
    category: str | None = None,
    recommendation: str | None = None,
) -> ValidationWarning:
    """Build a warning, falling back to catalog metadata for anything omitted."""
    code_value = str(getattr(code, "value", code)).strip()
    metadata = resolve_warning_metadata(code_value)

    if not fields and metadata and metadata.fields:
        fields = list(metadata.fields)
    category = (category or "").strip().lower() or None
    if category is None and metadata:
        category = metadata.category.value
    recommendation = (recommendation or "").strip() or None
    if recommendation is None and metadata:
        recommendation = metadata.recommendation

    return ValidationWarning(
        code=code_value,
        message=str(message or "").strip(),
        depth=parse_optional_number(depth),
        row_id=normalize_row_id(row_id),
        fields=fields or None,
        category=category,
        recommendation=recommendation,
    )
