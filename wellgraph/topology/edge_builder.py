"""
Edge builders for the topology graph.

Four builders, each returning its edges, the reason behind every edge
and the warnings raised along the way:

- vertical: same-kind continuity across each interval boundary, plus
  structural transitions where the annulus family shifts
- radial: perforation and leak markers joining a volume pair
- scenario radial: user-declared cross-annulus breakouts
- termination: the shallowest interval's volumes to SURFACE

Warnings never stop a build; a row that cannot be resolved simply
contributes no edge.
"""

from dataclasses import dataclass, field
from typing import Any

from wellgraph.models.graph import (
    Edge,
    EdgeReason,
    EquipmentContributor,
    Node,
    create_edge_id,
)
from wellgraph.models.rows import DepthRange, EquipmentRow, MarkerRow, PipeRow
from wellgraph.models.result import SourceEntity
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import (
    MODELED_ANNULUS_SLOTS,
    SURFACE_NODE_ID,
    VOLUME_KINDS,
    EdgeKind,
    NodeKind,
    SealState,
    SourceKind,
    SourcePolicyMode,
    annulus_kind_for_slot,
    function_key_for_volume,
    normalize_marker_type,
    normalize_source_type,
)
from wellgraph.models.warning import ValidationWarning
from wellgraph.topology.equipment_definitions import RuleContext
from wellgraph.topology.equipment_rules import BoundaryEffects, resolve_boundary_equipment_effects
from wellgraph.topology.node_builder import NodeBuildResult, TopologyInterval
from wellgraph.topology.pipe_reference import (
    PipeHostType,
    PipeReferenceMap,
    ResolvedHost,
    normalize_pipe_host_type,
)
from wellgraph.topology.structural_transitions import (
    TransitionDefinition,
    resolve_boundary_transitions,
    resolve_transition_state,
)
from wellgraph.topology.warning_catalog import WarningCode, create_validation_warning

VERTICAL_RULE_ID = "vertical-continuity"
SCENARIO_BREAKOUT_RULE_ID = "scenario-cross-annulus-failure"
TERMINATION_RULE_ID = "surface-termination"

PAIR_SOURCE_DEFAULT = "default_bore_annulus_a"
PAIR_SOURCE_CASING_HOST = "casing_host_adjacent_annuli"
PAIR_SOURCE_SCENARIO = "scenario_cross_annulus_failure"


@dataclass
class EdgeBuildResult:
    edges: list[Edge] = field(default_factory=list)
    edge_reasons: dict[str, EdgeReason] = field(default_factory=dict)
    validation_warnings: list[ValidationWarning] = field(default_factory=list)

    def append(self, edge: Edge) -> None:
        self.edges.append(edge)
        self.edge_reasons[edge.edge_id] = edge.reason


@dataclass
class RadialEdgeBuildResult(EdgeBuildResult):
    """Radial edges plus the marker-derived sources they imply."""

    source_node_ids: list[str] = field(default_factory=list)
    source_entities: list[SourceEntity] = field(default_factory=list)
    _seen_source_ids: set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._seen_source_ids.update(self.source_node_ids)

    def add_source_node(self, node_id: str) -> None:
        if node_id not in self._seen_source_ids:
            self._seen_source_ids.add(node_id)
            self.source_node_ids.append(node_id)


def _edge_state(blocked: bool) -> str:
    return SealState.closed_failable.value if blocked else SealState.open.value


def material_contributors(*nodes: Node) -> list[EquipmentContributor]:
    """Contributors for blocked nodes whose cement/plug row is known."""
    contributors = []
    for node in nodes:
        if not node.is_blocked or not node.meta.material_row_id:
            continue
        contributors.append(
            EquipmentContributor(
                row_id=node.meta.material_row_id,
                equipment_type=node.meta.material or "material",
                state=SealState.closed_failable.value,
                cost=1,
                function_key=function_key_for_volume(node.kind),
            )
        )
    return contributors


def _dump_contributors(contributors: list[EquipmentContributor]) -> list[dict[str, Any]]:
    return [contributor.model_dump(mode="json") for contributor in contributors]


# vertical


def _transition_edge(
    definition: TransitionDefinition,
    current: TopologyInterval,
    following: TopologyInterval,
    boundary_depth: float,
    effects: BoundaryEffects,
) -> Edge:
    state = resolve_transition_state(definition, effects)
    contributors = state.equipment_contributors + material_contributors(
        definition.from_node, definition.to_node
    )
    from_key = definition.from_node.kind.value
    to_key = definition.to_node.kind.value
    primary = definition.primary_volume_kind.value if definition.primary_volume_kind else None
    return Edge(
        edge_id=create_edge_id(
            EdgeKind.vertical,
            definition.from_node.node_id,
            definition.to_node.node_id,
            definition.edge_suffix,
        ),
        kind=EdgeKind.vertical,
        source=definition.from_node.node_id,
        target=definition.to_node.node_id,
        cost=state.cost,
        state=_edge_state(state.blocked),
        meta={
            "volume_key": primary,
            "from_volume_key": from_key,
            "to_volume_key": to_key,
            "transition_type": definition.transition_type,
            "transition_rule_id": definition.rule_id,
        },
        reason=EdgeReason(
            rule_id=definition.rule_id,
            summary=definition.summary_when_blocked if state.blocked else definition.summary_when_open,
            details={
                "from_interval": current.interval_index,
                "to_interval": following.interval_index,
                "boundary_depth": boundary_depth,
                "from_volume_key": from_key,
                "to_volume_key": to_key,
                "transition_type": definition.transition_type,
                "blocked_by_material": state.blocked_by_material,
                "blocked_by_equipment": state.blocked_by_equipment,
                "equipment_contributors": _dump_contributors(contributors),
            },
        ),
    )


def build_vertical_edges(
    nodes: NodeBuildResult,
    equipment_rows: list[EquipmentRow],
    pipe_reference_map: PipeReferenceMap | None = None,
) -> EdgeBuildResult:
    """Continuity edges across every boundary between adjacent intervals."""
    result = EdgeBuildResult()
    context = RuleContext(pipe_reference_map=pipe_reference_map or PipeReferenceMap.build([], []))

    for current, following in zip(nodes.intervals, nodes.intervals[1:]):
        boundary_depth = following.top
        effects = resolve_boundary_equipment_effects(boundary_depth, equipment_rows, context)
        result.validation_warnings.extend(effects.validation_warnings)

        for kind in VOLUME_KINDS:
            from_node = nodes.node_for(current.interval_index, kind)
            to_node = nodes.node_for(following.interval_index, kind)
            if from_node is None or to_node is None:
                continue

            effect = effects.effect(kind)
            blocked_by_material = from_node.is_blocked or to_node.is_blocked
            blocked = blocked_by_material or effect.blocked
            summary = (
                f"Vertical continuity for {kind.value} is blocked by interval content "
                "or equipment seal behavior."
                if blocked
                else f"Vertical continuity for {kind.value} is open."
            )
            contributors = effect.contributors + material_contributors(from_node, to_node)
            result.append(
                Edge(
                    edge_id=create_edge_id(
                        EdgeKind.vertical, from_node.node_id, to_node.node_id, kind.value
                    ),
                    kind=EdgeKind.vertical,
                    source=from_node.node_id,
                    target=to_node.node_id,
                    cost=1 if blocked else 0,
                    state=_edge_state(blocked),
                    meta={"volume_key": kind.value},
                    reason=EdgeReason(
                        rule_id=VERTICAL_RULE_ID,
                        summary=summary,
                        details={
                            "from_interval": current.interval_index,
                            "to_interval": following.interval_index,
                            "volume_key": kind.value,
                            "boundary_depth": boundary_depth,
                            "blocked_by_material": blocked_by_material,
                            "blocked_by_equipment": effect.blocked,
                            "equipment_contributors": _dump_contributors(contributors),
                        },
                    ),
                )
            )

        for definition in resolve_boundary_transitions(nodes, current, following):
            if not definition.emits_edge:
                result.validation_warnings.append(
                    create_validation_warning(
                        definition.warning_code or WarningCode.structural_transition_not_modeled,
                        definition.warning_summary,
                        depth=boundary_depth,
                    )
                )
                continue
            result.append(_transition_edge(definition, current, following, boundary_depth, effects))

    return result


# radial


@dataclass(frozen=True)
class RadialVolumePair:
    inner_kind: NodeKind
    outer_kind: NodeKind
    pair_source: str
    host_casing_index: int | None = None

    @property
    def key(self) -> str:
        return f"{self.inner_kind.value}+{self.outer_kind.value}"


DEFAULT_RADIAL_PAIR = RadialVolumePair(
    inner_kind=NodeKind.TUBING_INNER,
    outer_kind=NodeKind.ANNULUS_A,
    pair_source=PAIR_SOURCE_DEFAULT,
)


def _range_overlaps_host(marker_range: DepthRange, host: PipeRow) -> bool:
    if host.top is None or host.bottom is None or host.bottom < host.top:
        return False
    return marker_range.intersects(host.top, host.bottom)


def _volume_kind_for_casing_slot(slot_index: int) -> NodeKind | None:
    kind = annulus_kind_for_slot(slot_index)
    if kind is not None:
        return kind
    if slot_index >= len(MODELED_ANNULUS_SLOTS):
        return NodeKind.FORMATION_ANNULUS
    return None


def _casing_sort_key(row: PipeRow) -> tuple:
    # inner to outer: smaller od first, then shallower top, then longer string
    return (
        row.od if row.od is not None else float("inf"),
        row.top if row.top is not None else float("inf"),
        -(row.bottom if row.bottom is not None else float("-inf")),
        row.row_id or "",
    )


def resolve_casing_host_pair(
    interval: TopologyInterval, host: ResolvedHost | None, pipe_reference_map: PipeReferenceMap
) -> RadialVolumePair | None:
    """Annuli on either side of the host casing at this interval."""
    if host is None or host.host_type != PipeHostType.casing:
        return None
    active = sorted(
        (
            row
            for row in pipe_reference_map.rows(PipeHostType.casing)
            if row.overlaps(interval.top, interval.bottom)
        ),
        key=_casing_sort_key,
    )

    host_index = None
    if host.row.row_id:
        host_index = next(
            (index for index, row in enumerate(active) if row.row_id == host.row.row_id), None
        )
    if host_index is None:
        host_index = next((index for index, row in enumerate(active) if row is host.row), None)
    if host_index is None:
        return None

    inner_kind = (
        NodeKind.TUBING_INNER if host_index == 0 else _volume_kind_for_casing_slot(host_index - 1)
    )
    outer_kind = _volume_kind_for_casing_slot(host_index)
    if inner_kind is None or outer_kind is None or inner_kind == outer_kind:
        return None
    return RadialVolumePair(
        inner_kind=inner_kind,
        outer_kind=outer_kind,
        pair_source=PAIR_SOURCE_CASING_HOST,
        host_casing_index=host_index,
    )


def resolve_marker_host(marker: MarkerRow, host_type: PipeHostType, pipe_reference_map: PipeReferenceMap) -> ResolvedHost | None:
    """Resolve by row reference first, then by host id."""
    if marker.attach_to_row:
        resolved = pipe_reference_map.resolve(marker.attach_to_row, host_type=host_type)
        if resolved is not None:
            return resolved
    if not marker.attach_to_id:
        return None
    return pipe_reference_map.resolve("", host_type=host_type, preferred_id=marker.attach_to_id)


def _radial_summary(marker_type: SourceKind, pair: RadialVolumePair, tubing_host_leak: bool, blocked: bool) -> str:
    if tubing_host_leak:
        summary = "Tubing-host leak marker creates a radial communication path where tubing exists."
    elif pair.pair_source == PAIR_SOURCE_CASING_HOST:
        summary = "Casing-host marker creates a radial communication path across adjacent annulus volumes."
    else:
        summary = f"{marker_type.value} marker creates a radial communication path."
    if blocked:
        summary = f"{summary} The path is currently blocked by interval material content."
    return summary


def build_radial_edges(
    snapshot: StateSnapshot,
    nodes: NodeBuildResult,
    pipe_reference_map: PipeReferenceMap | None = None,
) -> RadialEdgeBuildResult:
    """Radial edges for visible perforation and leak markers.

    Perforations also become marker sources on their unblocked
    endpoints. An open-hole perforation (bore present, no outer volume)
    sources the bore directly.
    """
    result = RadialEdgeBuildResult()
    if pipe_reference_map is None:
        pipe_reference_map = PipeReferenceMap.build(snapshot.casing_data, snapshot.tubing_data)

    for marker_index, marker in enumerate(snapshot.markers):
        if not marker.show:
            continue
        marker_type = normalize_marker_type(marker.type)
        if marker_type is None:
            continue
        creates_source = marker_type == SourceKind.perforation

        if marker.top is None or marker.bottom is None or marker.bottom < marker.top:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.marker_invalid_depth_range,
                    "Marker depth range is invalid for topology radial edge generation.",
                    depth=marker.top,
                    row_id=marker.row_id,
                )
            )
            continue

        host_type = normalize_pipe_host_type(marker.attach_to_host_type, PipeHostType.casing)
        host = None
        if marker.attach_to_id or marker.attach_to_row:
            host = resolve_marker_host(marker, host_type, pipe_reference_map)
            if host is None:
                result.validation_warnings.append(
                    create_validation_warning(
                        WarningCode.marker_unresolved_host_reference,
                        "Marker host reference could not be resolved.",
                        depth=marker.top,
                        row_id=marker.row_id,
                    )
                )
                continue

        marker_range = DepthRange(top=marker.top, bottom=marker.bottom)
        tubing_host_leak = marker_type == SourceKind.leak and host_type == PipeHostType.tubing
        if tubing_host_leak and (host is None or not _range_overlaps_host(marker_range, host.row)):
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.marker_invalid_tubing_host_at_depth,
                    "Tubing-host leak marker does not overlap the selected tubing row at marker depth.",
                    depth=marker.top,
                    row_id=marker.row_id,
                )
            )
            continue

        host_row_id = host.row.row_id if host else None
        connected_count = 0
        marker_node_ids: list[str] = []
        volume_pairs: set[str] = set()

        for interval in nodes.intervals:
            if not marker_range.intersects(interval.top, interval.bottom):
                continue
            if tubing_host_leak and not host.row.overlaps(interval.top, interval.bottom):
                continue

            if tubing_host_leak:
                pair = DEFAULT_RADIAL_PAIR
            else:
                pair = resolve_casing_host_pair(interval, host, pipe_reference_map) or DEFAULT_RADIAL_PAIR
            inner = nodes.node_for(interval.interval_index, pair.inner_kind)
            outer = nodes.node_for(interval.interval_index, pair.outer_kind)
            if (inner is None or outer is None) and not tubing_host_leak:
                pair = DEFAULT_RADIAL_PAIR
                inner = nodes.node_for(interval.interval_index, pair.inner_kind)
                outer = nodes.node_for(interval.interval_index, pair.outer_kind)

            if inner is not None and outer is None and creates_source and not tubing_host_leak:
                # open hole: nothing outside the bore to join, the bore itself is the source
                connected_count += 1
                if not inner.is_blocked:
                    result.add_source_node(inner.node_id)
                    if inner.node_id not in marker_node_ids:
                        marker_node_ids.append(inner.node_id)
                volume_pairs.add(inner.kind.value)
                continue
            if inner is None or outer is None:
                continue

            blocked = inner.is_blocked or outer.is_blocked
            result.append(
                Edge(
                    edge_id=create_edge_id(
                        EdgeKind.radial,
                        inner.node_id,
                        outer.node_id,
                        f"{marker_index}:{interval.interval_index}:{marker_type.value}",
                    ),
                    kind=EdgeKind.radial,
                    source=inner.node_id,
                    target=outer.node_id,
                    cost=1 if blocked else 0,
                    state=_edge_state(blocked),
                    meta={
                        "marker_index": marker_index,
                        "marker_row_id": marker.row_id,
                        "marker_type": marker_type.value,
                        "marker_host_type": host_type.value,
                        "marker_host_row_id": host_row_id,
                        "from_volume_key": pair.inner_kind.value,
                        "to_volume_key": pair.outer_kind.value,
                        "radial_pair_source": pair.pair_source,
                        "marker_host_casing_index": pair.host_casing_index,
                    },
                    reason=EdgeReason(
                        rule_id=f"marker-{marker_type.value}",
                        summary=_radial_summary(marker_type, pair, tubing_host_leak, blocked),
                        details={
                            "marker_index": marker_index,
                            "interval_index": interval.interval_index,
                            "marker_host_type": host_type.value,
                            "marker_host_row_id": host_row_id,
                            "from_volume_key": pair.inner_kind.value,
                            "to_volume_key": pair.outer_kind.value,
                            "radial_pair_source": pair.pair_source,
                            "blocked_by_material": blocked,
                            "equipment_contributors": _dump_contributors(
                                material_contributors(inner, outer)
                            ),
                        },
                    ),
                )
            )

            connected_count += 1
            if creates_source:
                for node in (inner, outer):
                    if node.is_blocked:
                        continue
                    result.add_source_node(node.node_id)
                    if node.node_id not in marker_node_ids:
                        marker_node_ids.append(node.node_id)
            volume_pairs.add(pair.key)

        if connected_count == 0:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.marker_no_resolvable_interval_overlap,
                    "Marker does not intersect a resolvable topology radial volume pair.",
                    depth=marker.top,
                    row_id=marker.row_id,
                )
            )
            continue

        if not creates_source or not marker_node_ids:
            continue
        result.source_entities.append(
            SourceEntity(
                source_id=f"source:marker:{marker.row_id or marker_index}",
                kind=SourceKind.perforation.value,
                node_ids=marker_node_ids,
                volume_key="|".join(sorted(volume_pairs)),
                depth_top=marker.top,
                depth_bottom=marker.bottom,
                row_id=marker.row_id,
                origin="marker",
                policy_mode=SourcePolicyMode.marker_default,
            )
        )

    return result


# scenario breakouts


def build_scenario_radial_edges(snapshot: StateSnapshot, nodes: NodeBuildResult) -> EdgeBuildResult:
    """Cost-0 radial edges for visible breakout rows."""
    result = EdgeBuildResult()
    rows = [row for row in snapshot.scenario_breakout_rows if row.is_visible]

    for source_index, row in enumerate(rows):
        if not row.from_volume_key or not row.to_volume_key:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_breakout_missing_volume_pair,
                    "Scenario breakout row must include both fromVolume and toVolume keys.",
                    row_id=row.row_id,
                )
            )
            continue

        from_kind, to_kind = row.from_kind, row.to_kind
        if from_kind is None or to_kind is None or from_kind == to_kind:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_breakout_unsupported_volume_pair,
                    "Scenario breakout row has an unsupported volume pair for radial connectivity.",
                    row_id=row.row_id,
                )
            )
            continue

        depth_range = row.depth_range()
        if depth_range is None:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_breakout_missing_depth_range,
                    "Scenario breakout row is missing a valid depth/depth range.",
                    row_id=row.row_id,
                )
            )
            continue

        source_type = normalize_source_type(row.source_type)
        connected_count = 0
        for interval in nodes.intervals:
            if not depth_range.intersects(interval.top, interval.bottom):
                continue
            from_node = nodes.node_for(interval.interval_index, from_kind)
            to_node = nodes.node_for(interval.interval_index, to_kind)
            if from_node is None or to_node is None:
                continue

            result.append(
                Edge(
                    edge_id=create_edge_id(
                        EdgeKind.radial,
                        from_node.node_id,
                        to_node.node_id,
                        f"scenario-breakout:{source_index}:{interval.interval_index}:"
                        f"{from_kind.value}:{to_kind.value}",
                    ),
                    kind=EdgeKind.radial,
                    source=from_node.node_id,
                    target=to_node.node_id,
                    cost=0,
                    state=SealState.open.value,
                    meta={
                        "scenario_breakout_row_id": row.row_id,
                        "scenario_breakout_source_type": source_type,
                        "from_volume_key": from_kind.value,
                        "to_volume_key": to_kind.value,
                        "radial_pair_source": PAIR_SOURCE_SCENARIO,
                    },
                    reason=EdgeReason(
                        rule_id=SCENARIO_BREAKOUT_RULE_ID,
                        summary="Scenario breakout row creates explicit cross-annulus radial connectivity.",
                        details={
                            "source_index": source_index,
                            "interval_index": interval.interval_index,
                            "from_volume_key": from_kind.value,
                            "to_volume_key": to_kind.value,
                            "source_type": source_type,
                        },
                    ),
                )
            )
            connected_count += 1

        if connected_count == 0:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_breakout_no_resolvable_interval,
                    "Scenario breakout row does not intersect a resolvable interval "
                    "with both configured volumes.",
                    depth=depth_range.top,
                    row_id=row.row_id,
                )
            )

    return result


# termination


def build_termination_edges(nodes: NodeBuildResult) -> EdgeBuildResult:
    result = EdgeBuildResult()
    if not nodes.intervals:
        return result

    top_interval = nodes.intervals[0]
    for kind in VOLUME_KINDS:
        node = nodes.node_for(top_interval.interval_index, kind)
        if node is None:
            continue
        result.append(
            Edge(
                edge_id=create_edge_id(EdgeKind.termination, node.node_id, SURFACE_NODE_ID, kind.value),
                kind=EdgeKind.termination,
                source=node.node_id,
                target=SURFACE_NODE_ID,
                cost=0,
                state=SealState.open.value,
                meta={"volume_key": kind.value},
                reason=EdgeReason(
                    rule_id=TERMINATION_RULE_ID,
                    summary=f"{kind.value} top interval connects to surface sink.",
                    details={"interval_index": top_interval.interval_index},
                ),
            )
        )
    return result
