"""Lookups over a radial stack of physics layers."""

from typing import Iterable

from wellgraph.models.snapshot import Layer
from wellgraph.models.topology_types import TOPOLOGY_EPSILON

BLOCKING_MATERIALS = {"cement", "plug"}


def resolve_bore_layer(stack: Iterable[Layer]) -> Layer | None:
    """First wellbore/core layer with positive thickness."""
    for layer in stack:
        if (layer.material == "wellbore" or layer.role == "core") and layer.has_positive_thickness:
            return layer
    return None


def resolve_annulus_slot_index(layer: Layer | None) -> int | None:
    """Slot of an annulus layer, falling back to the source's annulus index."""
    if layer is None:
        return None
    if layer.slot_index is not None:
        return layer.slot_index
    source_index = layer.source.get("annulusIndex", layer.source.get("annulus_index"))
    if isinstance(source_index, int) and not isinstance(source_index, bool) and source_index >= 0:
        return source_index
    return None


def resolve_annulus_layer_by_index(stack: Iterable[Layer], annulus_index: int) -> Layer | None:
    if annulus_index < 0:
        return None
    for layer in stack:
        if (
            layer.role == "annulus"
            and resolve_annulus_slot_index(layer) == annulus_index
            and layer.has_positive_thickness
        ):
            return layer
    return None


def resolve_formation_annulus_layer(stack: Iterable[Layer]) -> Layer | None:
    for layer in stack:
        if layer.role == "annulus" and layer.is_formation and layer.has_positive_thickness:
            return layer
    return None


def is_bore_plugged(stack: Iterable[Layer]) -> bool:
    """A plug layer spanning from the axis blocks the bore."""
    return any(
        layer.material == "plug"
        and layer.inner_radius is not None
        and layer.outer_radius is not None
        and layer.inner_radius <= TOPOLOGY_EPSILON
        and layer.outer_radius > TOPOLOGY_EPSILON
        for layer in stack
    )


def resolve_innermost_pipe_host_type(stack: Iterable[Layer]) -> str | None:
    """Host type (tubing/casing) of the innermost steel layer, if any."""
    pipes = [
        layer
        for layer in stack
        if layer.role == "pipe" and layer.inner_radius is not None and layer.has_positive_thickness
    ]
    if not pipes:
        return None
    innermost = min(pipes, key=lambda layer: layer.inner_radius)
    host_type = innermost.source.get("pipeType") or innermost.source.get("hostType")
    return str(host_type).strip().lower() if host_type else None


def resolve_layer_row_id(layer: Layer | None) -> str | None:
    """Row id that placed a layer's material, when the source names one."""
    if layer is None:
        return None
    row_id = layer.source.get("rowId", layer.source.get("row_id"))
    if row_id is None:
        return None
    return str(row_id).strip() or None


def resolve_plug_row_id(stack: Iterable[Layer]) -> str | None:
    for layer in stack:
        if layer.material == "plug":
            row_id = resolve_layer_row_id(layer)
            if row_id:
                return row_id
    return None
