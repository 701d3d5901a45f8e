"""
Volume nodes for each physics interval.

Each valid interval yields at most one node per volume kind: the bore,
the modeled annuli A..D, and a formation annulus when the open-hole
layer is not already represented by a modeled slot.
"""

import math
from dataclasses import dataclass, field

from wellgraph.models.graph import Node, NodeMeta, create_node_id
from wellgraph.models.snapshot import Layer
from wellgraph.models.topology_types import (
    MODELED_ANNULUS_SLOTS,
    SURFACE_NODE_ID,
    InnerChannel,
    NodeKind,
)
from wellgraph.topology.layers import (
    BLOCKING_MATERIALS,
    is_bore_plugged,
    resolve_annulus_layer_by_index,
    resolve_annulus_slot_index,
    resolve_bore_layer,
    resolve_formation_annulus_layer,
    resolve_innermost_pipe_host_type,
    resolve_layer_row_id,
    resolve_plug_row_id,
)
from wellgraph.topology.physics import PhysicsProvider


@dataclass
class TopologyInterval:
    """A valid physics interval and the stack sampled at its midpoint."""

    interval_index: int
    top: float
    bottom: float
    midpoint: float
    stack: list[Layer] = field(default_factory=list)


@dataclass
class NodeBuildResult:
    intervals: list[TopologyInterval] = field(default_factory=list)
    nodes: list[Node] = field(default_factory=list)
    interval_node_by_kind: dict[tuple[int, NodeKind], Node] = field(default_factory=dict)

    def node_for(self, interval_index: int, kind: NodeKind | None) -> Node | None:
        if kind is None:
            return None
        return self.interval_node_by_kind.get((interval_index, kind))


def create_surface_node() -> Node:
    return Node(node_id=SURFACE_NODE_ID, kind=NodeKind.SURFACE, volume_key=NodeKind.SURFACE.value)


def _annulus_node(kind: NodeKind, top: float, bottom: float, layer: Layer) -> Node:
    material = layer.material or ""
    is_blocked = material in BLOCKING_MATERIALS
    return Node(
        node_id=create_node_id(kind, top, bottom),
        kind=kind,
        depth_top=top,
        depth_bottom=bottom,
        volume_key=kind.value,
        meta=NodeMeta(
            is_blocked=is_blocked,
            material=material or None,
            material_row_id=resolve_layer_row_id(layer) if is_blocked else None,
            annulus_index=resolve_annulus_slot_index(layer),
        ),
    )


def _bore_node(top: float, bottom: float, stack: list[Layer]) -> Node:
    is_blocked = is_bore_plugged(stack)
    host_type = resolve_innermost_pipe_host_type(stack)
    inner_channel = (
        InnerChannel.tubing_inner if host_type == "tubing" else InnerChannel.wellbore_inner
    )
    return Node(
        node_id=create_node_id(NodeKind.TUBING_INNER, top, bottom),
        kind=NodeKind.TUBING_INNER,
        depth_top=top,
        depth_bottom=bottom,
        volume_key=NodeKind.TUBING_INNER.value,
        meta=NodeMeta(
            is_blocked=is_blocked,
            material="plug" if is_blocked else None,
            material_row_id=resolve_plug_row_id(stack) if is_blocked else None,
            inner_channel=inner_channel,
        ),
    )


def create_volume_nodes(top: float, bottom: float, stack: list[Layer]) -> list[Node]:
    """Nodes for one interval, in radial order."""
    if not math.isfinite(top) or not math.isfinite(bottom) or bottom <= top:
        return []

    nodes = []
    if resolve_bore_layer(stack) is not None:
        nodes.append(_bore_node(top, bottom, stack))

    for slot in MODELED_ANNULUS_SLOTS:
        layer = resolve_annulus_layer_by_index(stack, slot.slot_index)
        if layer is None:
            continue
        if layer.is_formation and not slot.allow_formation_representation:
            continue
        nodes.append(_annulus_node(slot.kind, top, bottom, layer))

    formation_layer = resolve_formation_annulus_layer(stack)
    if formation_layer is not None:
        formation_slot = resolve_annulus_slot_index(formation_layer)
        represented = any(
            node.meta.annulus_index is not None and node.meta.annulus_index == formation_slot
            for node in nodes
        )
        if not represented:
            nodes.append(
                _annulus_node(NodeKind.FORMATION_ANNULUS, top, bottom, formation_layer)
            )

    return nodes


def build_topology_nodes(physics: PhysicsProvider) -> NodeBuildResult:
    """Sample every valid interval and create its volume nodes.

    Intervals are ordered by top depth but keep the index they had in
    the provider's list, so ids and warnings stay stable when an earlier
    interval is invalid.
    """
    intervals = []
    for interval_index, interval in enumerate(physics.intervals()):
        top, bottom = interval.top, interval.bottom
        if not math.isfinite(top) or not math.isfinite(bottom) or bottom <= top:
            continue
        midpoint = (top + bottom) / 2
        intervals.append(
            TopologyInterval(
                interval_index=interval_index,
                top=top,
                bottom=bottom,
                midpoint=midpoint,
                stack=list(physics.stack_at_depth(midpoint)),
            )
        )
    intervals.sort(key=lambda item: item.top)

    result = NodeBuildResult(intervals=intervals, nodes=[create_surface_node()])
    for interval in intervals:
        for node in create_volume_nodes(interval.top, interval.bottom, interval.stack):
            result.nodes.append(node)
            result.interval_node_by_kind[(interval.interval_index, node.kind)] = node
    return result
