"""
Source candidates and the precedence between them.

Three channels can name where fluid enters the graph: perforation
markers (built alongside the radial edges), illustrative fluid layers
(opt-in through the snapshot config) and explicit scenario rows.
Explicit rows win outright; otherwise markers are used, joined by
fluid sources when the opt-in flag is on.
"""

from dataclasses import dataclass, field

from wellgraph.models.graph import Node
from wellgraph.models.result import SourceEntity, SourcePolicy
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.topology_types import (
    CONFIG_USE_ILLUSTRATIVE_FLUID_SOURCE,
    MAX_MODELED_ANNULUS_SLOT_INDEX,
    MODELED_ANNULUS_SLOTS,
    NodeKind,
    SourceKind,
    SourcePolicyMode,
    annulus_kind_for_slot,
    normalize_source_type,
)
from wellgraph.models.warning import ValidationWarning
from wellgraph.topology.layers import (
    resolve_annulus_layer_by_index,
    resolve_annulus_slot_index,
    resolve_formation_annulus_layer,
)
from wellgraph.topology.node_builder import NodeBuildResult, TopologyInterval
from wellgraph.topology.warning_catalog import (
    SUPPORTED_VOLUME_KEYS_TEXT,
    WarningCode,
    create_validation_warning,
)


@dataclass
class SourceBuildResult:
    source_node_ids: list[str] = field(default_factory=list)
    source_entities: list[SourceEntity] = field(default_factory=list)
    validation_warnings: list[ValidationWarning] = field(default_factory=list)
    _seen_source_ids: set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._seen_source_ids.update(self.source_node_ids)

    def add_source_node(self, node_id: str) -> None:
        if node_id not in self._seen_source_ids:
            self._seen_source_ids.add(node_id)
            self.source_node_ids.append(node_id)


@dataclass
class ExplicitSourceBuildResult(SourceBuildResult):
    has_scenario_rows: bool = False


@dataclass
class SourceResolution:
    source_node_ids: list[str]
    source_entities: list[SourceEntity]
    source_policy: SourcePolicy
    validation_warnings: list[ValidationWarning] = field(default_factory=list)


def should_use_illustrative_fluid_source(snapshot: StateSnapshot) -> bool:
    return snapshot.config.get(CONFIG_USE_ILLUSTRATIVE_FLUID_SOURCE) is True


def _formation_source_node(nodes: NodeBuildResult, interval: TopologyInterval) -> Node | None:
    """Direct formation node, else the modeled slot standing in for it."""
    direct = nodes.node_for(interval.interval_index, NodeKind.FORMATION_ANNULUS)
    if direct is not None:
        return direct
    formation_layer = resolve_formation_annulus_layer(interval.stack)
    if formation_layer is None:
        return None
    modeled_kind = annulus_kind_for_slot(resolve_annulus_slot_index(formation_layer))
    return nodes.node_for(interval.interval_index, modeled_kind)


def _source_node_for_kind(nodes: NodeBuildResult, interval: TopologyInterval, kind: NodeKind) -> Node | None:
    if kind == NodeKind.FORMATION_ANNULUS:
        return _formation_source_node(nodes, interval)
    return nodes.node_for(interval.interval_index, kind)


def _fluid_entity(interval: TopologyInterval, node: Node, volume_kind: NodeKind) -> SourceEntity:
    return SourceEntity(
        source_id=f"source:illustrative-fluid:{interval.interval_index}:{node.node_id}",
        kind=SourceKind.scenario.value,
        node_ids=[node.node_id],
        volume_key=volume_kind.value,
        depth_top=interval.top,
        depth_bottom=interval.bottom,
        origin="illustrative-fluid",
        policy_mode=SourcePolicyMode.fluid_opt_in,
    )


def build_fluid_source_nodes(snapshot: StateSnapshot, nodes: NodeBuildResult) -> SourceBuildResult:
    """Illustrative sources on every modeled annulus holding fluid."""
    result = SourceBuildResult()
    has_outer_annulus_fluid = False
    has_unmapped_formation_fluid = False

    for interval in nodes.intervals:
        for slot in MODELED_ANNULUS_SLOTS:
            layer = resolve_annulus_layer_by_index(interval.stack, slot.slot_index)
            node = nodes.node_for(interval.interval_index, slot.kind)
            if layer is None or node is None or layer.material != "fluid":
                continue
            result.add_source_node(node.node_id)
            result.source_entities.append(_fluid_entity(interval, node, slot.kind))

        formation_layer = resolve_formation_annulus_layer(interval.stack)
        if formation_layer is not None:
            modeled_kind = annulus_kind_for_slot(resolve_annulus_slot_index(formation_layer))
            modeled_node = nodes.node_for(interval.interval_index, modeled_kind)
            if modeled_node is None and formation_layer.material == "fluid":
                formation_node = _formation_source_node(nodes, interval)
                if formation_node is None:
                    has_unmapped_formation_fluid = True
                else:
                    result.add_source_node(formation_node.node_id)
                    result.source_entities.append(
                        _fluid_entity(interval, formation_node, NodeKind.FORMATION_ANNULUS)
                    )

        for layer in interval.stack:
            if layer.role != "annulus" or layer.material != "fluid" or layer.is_formation:
                continue
            slot_index = resolve_annulus_slot_index(layer)
            if slot_index is not None and slot_index > MAX_MODELED_ANNULUS_SLOT_INDEX:
                has_outer_annulus_fluid = True

    if snapshot.has_visible_fluid_rows and not result.source_node_ids:
        result.validation_warnings.append(
            create_validation_warning(
                WarningCode.fluid_rows_without_modeled_source_nodes,
                "Fluid intervals exist, but none currently map to "
                "ANNULUS_A/ANNULUS_B/ANNULUS_C/ANNULUS_D/FORMATION_ANNULUS sources in the topology model.",
            )
        )
    if has_outer_annulus_fluid:
        result.validation_warnings.append(
            create_validation_warning(
                WarningCode.fluid_in_unmodeled_outer_annulus,
                "Fluid detected in non-formation annulus volumes beyond ANNULUS_D; "
                "those outer annulus volumes are not modeled.",
            )
        )
    if has_unmapped_formation_fluid:
        result.validation_warnings.append(
            create_validation_warning(
                WarningCode.unmapped_formation_annulus_fluid,
                "Formation-annulus fluid was detected, but no resolvable FORMATION_ANNULUS node "
                "was created for at least one interval.",
            )
        )
    return result


def build_explicit_scenario_source_nodes(
    snapshot: StateSnapshot, nodes: NodeBuildResult
) -> ExplicitSourceBuildResult:
    rows = [row for row in snapshot.scenario_source_rows if row.is_visible]
    result = ExplicitSourceBuildResult(has_scenario_rows=bool(rows))

    for source_index, row in enumerate(rows):
        volume_kind = row.volume_kind
        if volume_kind is None:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_source_unsupported_volume,
                    f"Scenario source row has an unsupported volume key. Use {SUPPORTED_VOLUME_KEYS_TEXT}.",
                    row_id=row.row_id,
                )
            )
            continue

        depth_range = row.depth_range()
        if depth_range is None:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_source_missing_depth_range,
                    "Scenario source row is missing a valid depth/depth range.",
                    row_id=row.row_id,
                )
            )
            continue

        matched = []
        for interval in nodes.intervals:
            if not depth_range.intersects(interval.top, interval.bottom):
                continue
            node = _source_node_for_kind(nodes, interval, volume_kind)
            if node is None:
                continue
            result.add_source_node(node.node_id)
            if node.node_id not in matched:
                matched.append(node.node_id)

        if not matched:
            result.validation_warnings.append(
                create_validation_warning(
                    WarningCode.scenario_source_no_resolvable_interval,
                    "Scenario source row does not intersect a resolvable topology volume interval.",
                    depth=depth_range.top,
                    row_id=row.row_id,
                )
            )
            continue

        result.source_entities.append(
            SourceEntity(
                source_id=f"source:scenario:{row.row_id or source_index}",
                kind=normalize_source_type(row.source_type),
                node_ids=matched,
                volume_key=volume_kind.value,
                depth_top=depth_range.top,
                depth_bottom=depth_range.bottom,
                row_id=row.row_id,
                origin="scenario",
                policy_mode=SourcePolicyMode.scenario_explicit,
            )
        )

    return result


def resolve_source_channels(
    use_illustrative_fluid_source: bool,
    marker: SourceBuildResult,
    fluid: SourceBuildResult,
    explicit: ExplicitSourceBuildResult,
) -> SourceResolution:
    """Apply source precedence.

    Any explicit scenario row makes the run scenario-only, even when
    none of the rows resolve to a node.
    """
    if explicit.has_scenario_rows:
        warnings = []
        if not explicit.source_node_ids:
            warnings.append(
                create_validation_warning(
                    WarningCode.scenario_rows_with_no_resolved_nodes,
                    "Scenario source rows are present, but no source nodes were resolved for this run.",
                )
            )
        return SourceResolution(
            source_node_ids=list(explicit.source_node_ids),
            source_entities=list(explicit.source_entities),
            source_policy=SourcePolicy(
                mode=SourcePolicyMode.scenario_explicit,
                marker_derived=False,
                illustrative_fluid_derived=False,
                explicit_scenario_derived=True,
            ),
            validation_warnings=warnings,
        )

    source_node_ids = list(marker.source_node_ids)
    source_entities = list(marker.source_entities)
    if use_illustrative_fluid_source:
        seen = set(source_node_ids)
        for node_id in fluid.source_node_ids:
            if node_id not in seen:
                seen.add(node_id)
                source_node_ids.append(node_id)
        source_entities.extend(fluid.source_entities)

    return SourceResolution(
        source_node_ids=source_node_ids,
        source_entities=source_entities,
        source_policy=SourcePolicy(
            mode=(
                SourcePolicyMode.fluid_opt_in
                if use_illustrative_fluid_source
                else SourcePolicyMode.marker_default
            ),
            marker_derived=True,
            illustrative_fluid_derived=use_illustrative_fluid_source,
            explicit_scenario_derived=False,
        ),
    )
