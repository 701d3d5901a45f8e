"""
Structural transitions between adjacent intervals.

Vertical continuity only joins a volume kind to the same kind below it.
When the annulus family shifts at a boundary (a casing ends, or the
tubing ends inside the wellbore) the fluid path changes kind; the
definitions here name those cross-kind vertical edges, or a warning
when the shift cannot be modeled.
"""

from dataclasses import dataclass, field

from wellgraph.models.graph import EquipmentContributor, Node
from wellgraph.models.topology_types import (
    MODELED_ANNULUS_KINDS,
    InnerChannel,
    NodeKind,
)
from wellgraph.topology.equipment_rules import BoundaryEffects
from wellgraph.topology.node_builder import NodeBuildResult, TopologyInterval
from wellgraph.topology.warning_catalog import WarningCode

ANNULUS_FAMILY_RULE_ID = "annulus-family-transition"
TUBING_END_RULE_ID = "tubing-end-transfer"

ANNULUS_FAMILY_ENTRY = "annulus_family_shift_entry"
ANNULUS_FAMILY_EXIT = "annulus_family_shift_exit"
TUBING_END_ENTRY = "tubing_end_transfer_entry"
TUBING_END_EXIT = "tubing_end_transfer_exit"

# with no separate tubing-annulus kind, slot A is the annulus around the tubing
TUBING_ANNULUS_KIND = NodeKind.ANNULUS_A

ANNULUS_FAMILY_SEQUENCE = (*MODELED_ANNULUS_KINDS, NodeKind.FORMATION_ANNULUS)


def _adjacent_pair_keys(sequence: tuple[NodeKind, ...]) -> set[tuple[NodeKind, NodeKind]]:
    return {(sequence[index], sequence[index + 1]) for index in range(len(sequence) - 1)}


def _formation_pair_keys(sequence: tuple[NodeKind, ...]) -> set[tuple[NodeKind, NodeKind]]:
    formation = sequence[-1]
    return {(kind, formation) for kind in sequence[:-1]}


EDGE_ENABLED_PAIR_KEYS = frozenset(
    _adjacent_pair_keys(ANNULUS_FAMILY_SEQUENCE) | _formation_pair_keys(ANNULUS_FAMILY_SEQUENCE)
)


@dataclass
class TransitionDefinition:
    """One cross-kind transition at a boundary.

    ``emits_edge`` False means the shift was detected but is reported as
    ``warning_code`` instead of becoming an edge.
    """

    rule_id: str
    transition_type: str
    from_node: Node
    to_node: Node
    emits_edge: bool = True
    edge_suffix: str = ""
    primary_volume_kind: NodeKind | None = None
    equipment_volume_kinds: tuple[NodeKind, ...] = ()
    summary_when_blocked: str = ""
    summary_when_open: str = ""
    warning_code: WarningCode | None = None
    warning_summary: str = ""


@dataclass
class TransitionState:
    blocked_by_material: bool
    blocked_by_equipment: bool
    cost: int
    equipment_contributors: list[EquipmentContributor] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return self.blocked_by_material or self.blocked_by_equipment


def _inner_channel(node: Node | None) -> InnerChannel:
    if node is not None and node.meta.inner_channel == InnerChannel.tubing_inner:
        return InnerChannel.tubing_inner
    return InnerChannel.wellbore_inner


def _tubing_end_transfer(from_node: Node, to_node: Node, transition_type: str) -> TransitionDefinition:
    label = "tubing-entry" if transition_type == TUBING_END_ENTRY else "tubing-end"
    route = f"{from_node.kind.value} -> {to_node.kind.value}"
    return TransitionDefinition(
        rule_id=TUBING_END_RULE_ID,
        transition_type=transition_type,
        from_node=from_node,
        to_node=to_node,
        edge_suffix=f"{TUBING_END_RULE_ID}:{transition_type}",
        primary_volume_kind=NodeKind.TUBING_INNER,
        equipment_volume_kinds=(NodeKind.TUBING_INNER, TUBING_ANNULUS_KIND),
        summary_when_blocked=(
            f"Tubing-end transfer {route} at {label} boundary is blocked by interval content "
            "or equipment seal behavior."
        ),
        summary_when_open=f"Tubing-end transfer {route} is open across {label} boundary.",
    )


def _tubing_end_unresolved(from_node: Node, to_node: Node, transition_type: str) -> TransitionDefinition:
    return TransitionDefinition(
        rule_id=TUBING_END_RULE_ID,
        transition_type=transition_type,
        from_node=from_node,
        to_node=to_node,
        emits_edge=False,
        warning_code=WarningCode.tubing_end_transfer_unresolved,
        warning_summary=(
            f"Tubing-end transfer {transition_type} is detected at boundary depth, but required "
            f"{TUBING_ANNULUS_KIND.value} endpoint is not resolved for explicit transfer edge modeling."
        ),
    )


def _annulus_family_transition(from_node: Node, to_node: Node, transition_type: str) -> TransitionDefinition:
    is_entry = transition_type == ANNULUS_FAMILY_ENTRY
    inner_kind = from_node.kind if is_entry else to_node.kind
    outer_kind = to_node.kind if is_entry else from_node.kind
    route = f"{from_node.kind.value} -> {to_node.kind.value}"

    if (inner_kind, outer_kind) not in EDGE_ENABLED_PAIR_KEYS:
        return TransitionDefinition(
            rule_id=ANNULUS_FAMILY_RULE_ID,
            transition_type=transition_type,
            from_node=from_node,
            to_node=to_node,
            emits_edge=False,
            warning_code=WarningCode.structural_transition_not_modeled,
            warning_summary=(
                f"Annulus-family structural transition {route} is detected at boundary depth "
                "but is not yet modeled as an explicit topology edge."
            ),
        )

    pair_key = f"{inner_kind.value}|{outer_kind.value}"
    return TransitionDefinition(
        rule_id=ANNULUS_FAMILY_RULE_ID,
        transition_type=transition_type,
        from_node=from_node,
        to_node=to_node,
        edge_suffix=f"{ANNULUS_FAMILY_RULE_ID}:{pair_key}:{transition_type}",
        primary_volume_kind=outer_kind if is_entry else inner_kind,
        equipment_volume_kinds=(inner_kind, outer_kind),
        summary_when_blocked=(
            f"Annulus-family transition {route} is blocked by interval content "
            "or equipment seal behavior."
        ),
        summary_when_open=f"Annulus-family transition {route} is open across structural boundary.",
    )


def _annulus_family_transitions(
    current: dict[NodeKind, Node], following: dict[NodeKind, Node]
) -> list[TransitionDefinition]:
    definitions = []
    seen = set()

    def append(definition: TransitionDefinition) -> None:
        key = (definition.from_node.kind, definition.to_node.kind, definition.transition_type)
        if key in seen:
            return
        seen.add(key)
        definitions.append(definition)

    def intermediates_absent(inner_index: int, outer_index: int) -> bool:
        for kind in ANNULUS_FAMILY_SEQUENCE[inner_index + 1 : outer_index]:
            if kind in current or kind in following:
                return False
        return True

    for inner_index, inner_kind in enumerate(ANNULUS_FAMILY_SEQUENCE[:-1]):
        current_inner = current.get(inner_kind)
        next_inner = following.get(inner_kind)
        if current_inner is None or next_inner is None:
            continue

        for outer_index in range(inner_index + 1, len(ANNULUS_FAMILY_SEQUENCE)):
            if not intermediates_absent(inner_index, outer_index):
                continue
            outer_kind = ANNULUS_FAMILY_SEQUENCE[outer_index]
            current_outer = current.get(outer_kind)
            next_outer = following.get(outer_kind)
            if current_outer is None and next_outer is not None:
                append(_annulus_family_transition(current_inner, next_outer, ANNULUS_FAMILY_ENTRY))
            if current_outer is not None and next_outer is None:
                append(_annulus_family_transition(current_outer, next_inner, ANNULUS_FAMILY_EXIT))

    return definitions


def _tubing_end_transitions(
    nodes: NodeBuildResult, current: TopologyInterval, following: TopologyInterval
) -> list[TransitionDefinition]:
    current_bore = nodes.node_for(current.interval_index, NodeKind.TUBING_INNER)
    next_bore = nodes.node_for(following.interval_index, NodeKind.TUBING_INNER)
    if current_bore is None or next_bore is None:
        return []

    current_channel = _inner_channel(current_bore)
    next_channel = _inner_channel(next_bore)
    if current_channel == next_channel:
        return []

    if next_channel == InnerChannel.tubing_inner:
        # wellbore above, tubing below: the wellbore feeds the annulus around the tubing
        next_annulus = nodes.node_for(following.interval_index, TUBING_ANNULUS_KIND)
        if next_annulus is None:
            return [_tubing_end_unresolved(current_bore, next_bore, TUBING_END_ENTRY)]
        return [_tubing_end_transfer(current_bore, next_annulus, TUBING_END_ENTRY)]

    # tubing above, wellbore below: the tubing annulus opens into the wellbore
    current_annulus = nodes.node_for(current.interval_index, TUBING_ANNULUS_KIND)
    if current_annulus is None:
        return [_tubing_end_unresolved(current_bore, next_bore, TUBING_END_EXIT)]
    return [_tubing_end_transfer(current_annulus, next_bore, TUBING_END_EXIT)]


def resolve_boundary_transitions(
    nodes: NodeBuildResult, current: TopologyInterval, following: TopologyInterval
) -> list[TransitionDefinition]:
    """Tubing-end transfers first, then annulus-family shifts."""

    def annulus_nodes(interval: TopologyInterval) -> dict[NodeKind, Node]:
        by_kind = {}
        for kind in ANNULUS_FAMILY_SEQUENCE:
            node = nodes.node_for(interval.interval_index, kind)
            if node is not None:
                by_kind[kind] = node
        return by_kind

    definitions = _tubing_end_transitions(nodes, current, following)
    definitions.extend(_annulus_family_transitions(annulus_nodes(current), annulus_nodes(following)))
    return definitions


def resolve_transition_state(definition: TransitionDefinition, effects: BoundaryEffects) -> TransitionState:
    blocked_by_material = definition.from_node.is_blocked or definition.to_node.is_blocked
    volume_effects = [effects.effect(kind) for kind in definition.equipment_volume_kinds]
    blocked_by_equipment = any(effect.blocked for effect in volume_effects)
    contributors = [
        contributor for effect in volume_effects for contributor in effect.contributors
    ]
    blocked = blocked_by_material or blocked_by_equipment
    return TransitionState(
        blocked_by_material=blocked_by_material,
        blocked_by_equipment=blocked_by_equipment,
        cost=1 if blocked else 0,
        equipment_contributors=contributors,
    )
