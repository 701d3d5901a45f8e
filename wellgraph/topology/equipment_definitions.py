"""
Registry of equipment types known to the topology rules.

A definition names its match tokens and seal defaults. Types that need
more than defaults (packers and bridge plugs resolve their sealed volume
from the row and validate their attach host) override the hooks.
"""

from dataclasses import dataclass, field
from enum import Enum

from wellgraph.models.rows import EquipmentRow
from wellgraph.models.topology_types import (
    TOPOLOGY_EPSILON,
    VOLUME_KINDS,
    NodeKind,
    normalize_volume_kind,
)
from wellgraph.models.warning import ValidationWarning
from wellgraph.topology.pipe_reference import PipeReferenceMap, normalize_pipe_host_type
from wellgraph.topology.warning_catalog import WarningCode, create_validation_warning


class ActuationState(str, Enum):
    static = "static"
    open = "open"
    closed = "closed"


class IntegrityStatus(str, Enum):
    intact = "intact"
    failed_open = "failed_open"
    failed_closed = "failed_closed"
    leaking = "leaking"


def seal_by_volume_defaults(bore: bool = False, annulus: bool = False) -> dict[NodeKind, bool]:
    """Seal map over every volume kind: bore gets one flag, annuli the other."""
    return {
        kind: (bore if kind == NodeKind.TUBING_INNER else annulus) for kind in VOLUME_KINDS
    }


@dataclass(frozen=True)
class EquipmentDefaults:
    bore_seal: bool = False
    annular_seal: bool = False
    actuation_state: ActuationState = ActuationState.static
    integrity_status: IntegrityStatus = IntegrityStatus.intact

    @property
    def seal_by_volume(self) -> dict[NodeKind, bool]:
        return seal_by_volume_defaults(bore=self.bore_seal, annulus=self.annular_seal)


@dataclass(frozen=True)
class SealContext:
    """Seal resolution supplied by a definition; replaces the generic one."""

    default_seal_by_volume: dict[NodeKind, bool]
    resolved_bore_seal: bool
    resolved_annular_seal: bool
    apply_annular_override: bool


@dataclass
class RuleContext:
    """What definition hooks may consult beyond the row itself."""

    pipe_reference_map: PipeReferenceMap = field(
        default_factory=lambda: PipeReferenceMap.build([], [])
    )


class EquipmentDefinition:
    key: str = ""
    label: str = ""
    match_tokens: tuple[str, ...] = ()
    defaults: EquipmentDefaults = EquipmentDefaults()
    suppress_no_seal_warning_codes: frozenset[str] = frozenset()

    def matches(self, token: str) -> bool:
        return any(match_token in token for match_token in self.match_tokens)

    def validate(self, row: EquipmentRow, context: RuleContext) -> list[ValidationWarning]:
        return []

    def resolve_seal_context(self, row: EquipmentRow) -> SealContext | None:
        return None


ATTACH_WARNING_CODES = frozenset(
    {
        WarningCode.equipment_missing_attach_target.value,
        WarningCode.equipment_unresolved_attach_target.value,
        WarningCode.equipment_invalid_host_depth.value,
    }
)


def _is_depth_inside_host_range(depth: float, top: float | None, bottom: float | None) -> bool:
    if top is None or bottom is None:
        return False
    low = min(top, bottom) - TOPOLOGY_EPSILON
    high = max(top, bottom) + TOPOLOGY_EPSILON
    return low <= depth <= high


class PackerDefinition(EquipmentDefinition):
    """Annular seal on the volume named by ``seal_node_kind``.

    A packer must be attached to a tubing or casing host whose depth
    range covers the packer depth.
    """

    key = "packer"
    label = "Packer"
    match_tokens = ("packer",)
    defaults = EquipmentDefaults(annular_seal=True)
    suppress_no_seal_warning_codes = ATTACH_WARNING_CODES
    subject = "Packer"

    def _warning(self, code: WarningCode, message: str, row: EquipmentRow) -> ValidationWarning:
        return create_validation_warning(code, message, row_id=row.row_id)

    def validate(self, row: EquipmentRow, context: RuleContext) -> list[ValidationWarning]:
        if not row.has_attach_input:
            return []

        host_type = normalize_pipe_host_type(row.attach_to_host_type, fallback=None)
        if host_type is None or not row.attach_to_id:
            return [
                self._warning(
                    WarningCode.equipment_missing_attach_target,
                    f"{self.subject} attach target is required. Select a tubing or casing host row.",
                    row,
                )
            ]

        resolved = context.pipe_reference_map.resolve(
            row.attach_to_row or row.attach_to_display,
            host_type=host_type,
            preferred_id=row.attach_to_id,
        )
        if resolved is None:
            return [
                self._warning(
                    WarningCode.equipment_unresolved_attach_target,
                    f"{self.subject} attach target does not resolve to an existing host row.",
                    row,
                )
            ]

        if row.depth is None:
            return []
        if _is_depth_inside_host_range(row.depth, resolved.row.top, resolved.row.bottom):
            return []
        return [
            self._warning(
                WarningCode.equipment_invalid_host_depth,
                f"{self.subject} depth does not overlap the selected attach host depth range.",
                row,
            )
        ]

    def resolve_seal_context(self, row: EquipmentRow) -> SealContext:
        seal_by_volume = seal_by_volume_defaults()
        if row.seal_node_kind is None:
            sealed_kind = NodeKind.ANNULUS_A
        else:
            sealed_kind = normalize_volume_kind(row.seal_node_kind)
        if sealed_kind is not None and sealed_kind != NodeKind.TUBING_INNER:
            seal_by_volume[sealed_kind] = True
        return SealContext(
            default_seal_by_volume=seal_by_volume,
            resolved_bore_seal=False,
            resolved_annular_seal=False,
            apply_annular_override=False,
        )


class BridgePlugDefinition(PackerDefinition):
    """Bore seal set against a host pipe; attach rules follow the packer's."""

    key = "bridge-plug"
    label = "Bridge Plug"
    match_tokens = ("bridge plug", "bridge_plug", "bridge-plug")
    defaults = EquipmentDefaults(bore_seal=True)
    subject = "Bridge plug"

    def resolve_seal_context(self, row: EquipmentRow) -> SealContext:
        return SealContext(
            default_seal_by_volume=seal_by_volume_defaults(),
            resolved_bore_seal=normalize_volume_kind(row.seal_node_kind) is not None,
            resolved_annular_seal=False,
            apply_annular_override=False,
        )


class SafetyValveDefinition(EquipmentDefinition):
    key = "safety-valve"
    label = "Safety Valve"
    match_tokens = ("safety valve", "safety_valve", "safety-valve")
    defaults = EquipmentDefaults(bore_seal=True, actuation_state=ActuationState.closed)


# bridge plug goes before packer so "bridge plug packer" style labels stay plugs
EQUIPMENT_DEFINITIONS: tuple[EquipmentDefinition, ...] = (
    BridgePlugDefinition(),
    PackerDefinition(),
    SafetyValveDefinition(),
)

EQUIPMENT_DEFINITION_BY_KEY = {definition.key: definition for definition in EQUIPMENT_DEFINITIONS}


def normalize_equipment_type_key(value: object) -> str | None:
    """Definition key whose tokens the type contains, else the lowered type."""
    token = str(value if value is not None else "").strip().lower()
    if not token:
        return None
    for definition in EQUIPMENT_DEFINITIONS:
        if definition.matches(token):
            return definition.key
    return token


def resolve_equipment_definition(value: object) -> EquipmentDefinition | None:
    key = normalize_equipment_type_key(value)
    if key is None:
        return None
    return EQUIPMENT_DEFINITION_BY_KEY.get(key)
