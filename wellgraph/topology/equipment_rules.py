"""
Equipment seal rules at topology boundaries.

For each visible equipment row sitting at a boundary depth, the rule
resolves which volumes the row seals and in what state, then folds the
result into per-volume boundary effects consumed by the edge builder.
"""

from dataclasses import dataclass, field
from typing import Any

from wellgraph.models.graph import EquipmentContributor
from wellgraph.models.rows import EquipmentRow
from wellgraph.models.topology_types import (
    TOPOLOGY_EPSILON,
    VOLUME_KINDS,
    NodeKind,
    SealState,
    function_key_for_volume,
    normalize_volume_kind,
)
from wellgraph.models.warning import ValidationWarning
from wellgraph.topology.equipment_definitions import (
    ActuationState,
    EquipmentDefaults,
    IntegrityStatus,
    RuleContext,
    normalize_equipment_type_key,
    resolve_equipment_definition,
)
from wellgraph.topology.warning_catalog import WarningCode, create_validation_warning
from wellgraph.utils.numbers import has_raw_value, parse_optional_boolean

FALLBACK_DEFAULTS = EquipmentDefaults()


@dataclass(frozen=True)
class ParsedValue:
    value: Any
    is_recognized: bool


def parse_actuation_state(value: Any, fallback: ActuationState) -> ParsedValue:
    token = str(value if value is not None else "").strip().lower()
    if not token:
        return ParsedValue(fallback, True)
    if "open" in token:
        return ParsedValue(ActuationState.open, True)
    if "close" in token:
        return ParsedValue(ActuationState.closed, True)
    if "static" in token:
        return ParsedValue(ActuationState.static, True)
    return ParsedValue(fallback, False)


def parse_integrity_status(value: Any, fallback: IntegrityStatus) -> ParsedValue:
    token = str(value if value is not None else "").strip().lower()
    if not token:
        return ParsedValue(fallback, True)
    if "leak" in token:
        return ParsedValue(IntegrityStatus.leaking, True)
    if "fail" in token and "open" in token:
        return ParsedValue(IntegrityStatus.failed_open, True)
    if "fail" in token and "close" in token:
        return ParsedValue(IntegrityStatus.failed_closed, True)
    if "intact" in token:
        return ParsedValue(IntegrityStatus.intact, True)
    return ParsedValue(fallback, False)


@dataclass
class VolumeOverrides:
    overrides: dict[NodeKind, bool] = field(default_factory=dict)
    invalid_keys: list[str] = field(default_factory=list)
    invalid_values: list[tuple[NodeKind, Any]] = field(default_factory=list)


def parse_volume_overrides(raw: dict[str, Any] | None) -> VolumeOverrides:
    result = VolumeOverrides()
    for key, value in (raw or {}).items():
        kind = normalize_volume_kind(key)
        if kind is None:
            result.invalid_keys.append(str(key))
            continue
        if not has_raw_value(value):
            continue
        parsed = parse_optional_boolean(value)
        if parsed is None:
            result.invalid_values.append((kind, value))
            continue
        result.overrides[kind] = parsed
    return result


@dataclass
class RowRule:
    """Resolved seal behavior of one equipment row."""

    type: str | None
    seal_by_volume: dict[NodeKind, bool]
    actuation_state: ActuationState
    integrity_status: IntegrityStatus
    validation_warnings: list[ValidationWarning] = field(default_factory=list)
    suppress_no_seal_warning_codes: frozenset[str] = frozenset()

    @property
    def has_any_seal_path(self) -> bool:
        return any(self.seal_by_volume.values())

    @property
    def suppresses_no_seal_warning(self) -> bool:
        return any(
            warning.code in self.suppress_no_seal_warning_codes
            for warning in self.validation_warnings
        )


def resolve_row_rule(row: EquipmentRow, context: RuleContext | None = None) -> RowRule:
    context = context or RuleContext()
    type_key = normalize_equipment_type_key(row.type)
    definition = resolve_equipment_definition(row.type)
    defaults = definition.defaults if definition else FALLBACK_DEFAULTS
    warnings: list[ValidationWarning] = []

    def warn(code: WarningCode, message: str) -> None:
        warnings.append(create_validation_warning(code, message, row_id=row.row_id))

    annular_override = parse_optional_boolean(row.annular_seal)
    bore_override = parse_optional_boolean(row.bore_seal)
    annular_seal = defaults.annular_seal if annular_override is None else annular_override
    bore_seal = defaults.bore_seal if bore_override is None else bore_override
    actuation = parse_actuation_state(row.actuation_state, defaults.actuation_state)
    integrity = parse_integrity_status(row.integrity_status, defaults.integrity_status)
    volume_overrides = parse_volume_overrides(row.seal_by_volume)

    if definition is None:
        warn(
            WarningCode.unknown_type,
            "Equipment type is not recognized by topology rules; default no-seal behavior is applied.",
        )
    if has_raw_value(row.annular_seal) and annular_override is None:
        warn(
            WarningCode.invalid_annular_seal_override,
            "Annular seal override value is invalid. Expected true/false or blank.",
        )
    if has_raw_value(row.bore_seal) and bore_override is None:
        warn(
            WarningCode.invalid_bore_seal_override,
            "Bore seal override value is invalid. Expected true/false or blank.",
        )
    if not actuation.is_recognized and has_raw_value(row.actuation_state):
        warn(
            WarningCode.unknown_actuation_state,
            "Actuation state is not recognized. Expected static/open/closed or blank.",
        )
    if not integrity.is_recognized and has_raw_value(row.integrity_status):
        warn(
            WarningCode.unknown_integrity_status,
            "Integrity status is not recognized. "
            "Expected intact/failed_open/failed_closed/leaking or blank.",
        )
    if volume_overrides.invalid_keys:
        warn(
            WarningCode.invalid_volume_seal_override_key,
            "Per-volume seal override contains unsupported keys: "
            f"{', '.join(volume_overrides.invalid_keys)}.",
        )
    if volume_overrides.invalid_values:
        warn(
            WarningCode.invalid_volume_seal_override_value,
            "Per-volume seal override values must be true/false (or 1/0/yes/no).",
        )
    if actuation.value == ActuationState.closed and integrity.value in (
        IntegrityStatus.failed_open,
        IntegrityStatus.leaking,
    ):
        warn(
            WarningCode.conflict_closed_with_open_integrity,
            "Integrity status implies open/leaking behavior and overrides a closed actuation state.",
        )
    if actuation.value == ActuationState.open and integrity.value == IntegrityStatus.failed_closed:
        warn(
            WarningCode.conflict_open_with_failed_closed,
            "Integrity status implies failed-closed behavior and overrides an open actuation state.",
        )

    seal_context = None
    if definition is not None:
        warnings.extend(definition.validate(row, context))
        seal_context = definition.resolve_seal_context(row)

    if seal_context is not None:
        default_seal_by_volume = seal_context.default_seal_by_volume
        resolved_bore = seal_context.resolved_bore_seal
        resolved_annular = seal_context.resolved_annular_seal
        apply_annular_override = seal_context.apply_annular_override
    else:
        default_seal_by_volume = defaults.seal_by_volume
        resolved_bore = bore_seal
        resolved_annular = annular_seal
        apply_annular_override = annular_override is not None

    seal_by_volume = {}
    for kind in VOLUME_KINDS:
        if kind == NodeKind.TUBING_INNER:
            seal_by_volume[kind] = resolved_bore
        elif apply_annular_override:
            seal_by_volume[kind] = resolved_annular
        else:
            seal_by_volume[kind] = default_seal_by_volume.get(kind, False)
    seal_by_volume.update(volume_overrides.overrides)

    return RowRule(
        type=type_key,
        seal_by_volume=seal_by_volume,
        actuation_state=actuation.value,
        integrity_status=integrity.value,
        validation_warnings=warnings,
        suppress_no_seal_warning_codes=(
            definition.suppress_no_seal_warning_codes if definition else frozenset()
        ),
    )


@dataclass(frozen=True)
class SealResult:
    blocked: bool
    cost: int
    state: str


def resolve_seal_state(
    has_seal: bool, actuation: ActuationState, integrity: IntegrityStatus
) -> SealResult:
    if not has_seal:
        return SealResult(False, 0, SealState.open.value)
    if integrity in (IntegrityStatus.failed_open, IntegrityStatus.leaking):
        return SealResult(False, 0, integrity.value)
    if integrity == IntegrityStatus.failed_closed:
        return SealResult(True, 1, SealState.failed_closed.value)
    if actuation == ActuationState.open:
        return SealResult(False, 0, SealState.open.value)
    return SealResult(True, 1, SealState.closed_failable.value)


@dataclass
class VolumeEffect:
    """Combined effect of all boundary equipment on one volume."""

    blocked: bool = False
    cost: int = 0
    state: str = SealState.open.value
    contributors: list[EquipmentContributor] = field(default_factory=list)


@dataclass
class BoundaryEffects:
    by_volume: dict[NodeKind, VolumeEffect] = field(
        default_factory=lambda: {kind: VolumeEffect() for kind in VOLUME_KINDS}
    )
    validation_warnings: list[ValidationWarning] = field(default_factory=list)

    def effect(self, kind: NodeKind) -> VolumeEffect:
        return self.by_volume.get(kind) or VolumeEffect()


def resolve_boundary_equipment_effects(
    boundary_depth: float | None,
    equipment_rows: list[EquipmentRow],
    context: RuleContext | None = None,
) -> BoundaryEffects:
    """Fold every visible row at ``boundary_depth`` into per-volume effects.

    Row warnings are reported at the boundary depth. A row with no seal
    path warns unless one of its definition's attach warnings already
    explains why.
    """
    effects = BoundaryEffects()
    if boundary_depth is None:
        return effects

    for row in equipment_rows:
        if not row.show or row.depth is None:
            continue
        if abs(row.depth - boundary_depth) > TOPOLOGY_EPSILON:
            continue

        rule = resolve_row_rule(row, context)
        effects.validation_warnings.extend(
            warning.model_copy(update={"depth": boundary_depth})
            for warning in rule.validation_warnings
        )

        for kind in VOLUME_KINDS:
            if not rule.seal_by_volume.get(kind):
                continue
            seal = resolve_seal_state(True, rule.actuation_state, rule.integrity_status)
            target = effects.by_volume[kind]
            if seal.blocked:
                target.blocked = True
                target.cost = max(target.cost, seal.cost)
                target.state = seal.state
            target.contributors.append(
                EquipmentContributor(
                    row_id=row.row_id,
                    equipment_type=rule.type or row.type,
                    state=seal.state,
                    cost=seal.cost,
                    function_key=function_key_for_volume(kind),
                )
            )

        if not rule.has_any_seal_path and not rule.suppresses_no_seal_warning:
            effects.validation_warnings.append(
                create_validation_warning(
                    WarningCode.no_seal_behavior_at_boundary,
                    "Equipment row is present at a topology boundary but does not define "
                    "bore/annulus seal behavior.",
                    depth=boundary_depth,
                    row_id=row.row_id,
                )
            )

    return effects
