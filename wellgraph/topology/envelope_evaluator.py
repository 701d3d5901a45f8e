"""
Barrier envelope comparison.

Each cost-1 edge is mapped to the barrier elements (row + seal
function) that make it cost something. The primary envelope is the
set of elements along the minimum failure path; the secondary envelope
comes from the cheapest path once the primary path's edges are
removed. How much the two share is a heuristic for barrier
independence, not a max-flow proof.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from wellgraph.models.graph import Edge, EdgeReason, EquipmentContributor
from wellgraph.models.result import (
    BarrierElement,
    BarrierEnvelope,
    EnvelopeOverlap,
    EnvelopePath,
    EnvelopeSummary,
)
from wellgraph.models.topology_types import SURFACE_NODE_ID, IndependenceHeuristic
from wellgraph.topology.path_algorithms import (
    MINIMUM_FAILURE_TRAVERSAL_POLICY,
    compute_minimum_failure_path,
)

DEFAULT_FUNCTION_KEY = "boundary_seal"


def normalize_function_key(value: object, fallback: str = DEFAULT_FUNCTION_KEY) -> str:
    token = re.sub(r"[\s-]+", "_", str(value if value is not None else "").strip().lower())
    return token or fallback


def derive_function_key(contributor: EquipmentContributor, edge: Edge) -> str:
    """Explicit contributor key, else one derived from the edge's volume."""
    explicit = normalize_function_key(contributor.function_key, "")
    if explicit:
        return explicit
    volume_key = str(edge.meta.get("volume_key") or "").strip().upper()
    if not volume_key:
        return DEFAULT_FUNCTION_KEY
    if volume_key in ("BORE", "TUBING_INNER"):
        return "bore_seal"
    return normalize_function_key(f"{volume_key}_seal")


def create_barrier_element_id(row_id: str, function_key: str) -> str:
    return f"barrier:{row_id}:{function_key}"


def contributor_blocks_path(contributor: EquipmentContributor) -> bool:
    if contributor.cost >= 1:
        return True
    return "closed" in contributor.state.strip().lower()


@dataclass
class _ElementAccumulator:
    element_id: str
    row_id: str
    function_key: str
    equipment_types: set[str] = field(default_factory=set)
    edge_ids: set[str] = field(default_factory=set)


@dataclass
class BarrierElementMaps:
    edge_element_ids: dict[str, set[str]] = field(default_factory=dict)
    elements: dict[str, _ElementAccumulator] = field(default_factory=dict)

    def element_ids_for_path(self, path_edge_ids: Iterable[str]) -> set[str]:
        element_ids: set[str] = set()
        for edge_id in path_edge_ids:
            element_ids.update(self.edge_element_ids.get(edge_id, ()))
        return element_ids


def build_barrier_element_maps(
    edges: Iterable[Edge], edge_reasons: Mapping[str, EdgeReason]
) -> BarrierElementMaps:
    maps = BarrierElementMaps()
    for edge in edges:
        if edge.cost is None or edge.cost < 1:
            continue
        reason = edge_reasons.get(edge.edge_id) or edge.reason
        if reason is None:
            continue

        element_ids = set()
        for contributor in reason.equipment_contributors:
            if not contributor_blocks_path(contributor):
                continue
            row_id = str(contributor.row_id or "").strip()
            if not row_id:
                continue
            function_key = derive_function_key(contributor, edge)
            element_id = create_barrier_element_id(row_id, function_key)
            element_ids.add(element_id)

            element = maps.elements.setdefault(
                element_id, _ElementAccumulator(element_id, row_id, function_key)
            )
            equipment_type = str(contributor.equipment_type or "").strip()
            if equipment_type:
                element.equipment_types.add(equipment_type)
            element.edge_ids.add(edge.edge_id)

        if element_ids:
            maps.edge_element_ids[edge.edge_id] = element_ids
    return maps


def resolve_independence_heuristic(
    primary: set[str], secondary: set[str], overlap: set[str]
) -> IndependenceHeuristic:
    if not primary:
        return IndependenceHeuristic.no_barrier_elements
    if not secondary:
        return IndependenceHeuristic.single_path_only
    if not overlap:
        return IndependenceHeuristic.distinct_envelopes
    if len(overlap) >= min(len(primary), len(secondary)):
        return IndependenceHeuristic.fully_shared_envelopes
    return IndependenceHeuristic.partial_overlap_envelopes


def to_ratio(numerator: int, denominator: int) -> float | None:
    if denominator <= 0:
        return None
    return round(numerator / denominator, 3)


def evaluate_barrier_envelopes(
    edges: list[Edge],
    edge_reasons: Mapping[str, EdgeReason],
    source_node_ids: list[str],
    primary_path_edge_ids: list[str],
    primary_min_failure_cost: int | None,
    target_node_id: str = SURFACE_NODE_ID,
) -> BarrierEnvelope:
    maps = build_barrier_element_maps(edges, edge_reasons)
    primary_ids = maps.element_ids_for_path(primary_path_edge_ids)

    secondary_path = compute_minimum_failure_path(
        source_node_ids,
        target_node_id,
        edges,
        policy=MINIMUM_FAILURE_TRAVERSAL_POLICY,
        excluded_edge_ids=primary_path_edge_ids,
    )
    secondary_ids = maps.element_ids_for_path(secondary_path.min_cost_path_edge_ids)
    overlap_ids = primary_ids & secondary_ids

    barrier_elements = [
        BarrierElement(
            element_id=element.element_id,
            row_id=element.row_id,
            function_key=element.function_key,
            equipment_types=sorted(element.equipment_types),
            edge_ids=sorted(element.edge_ids),
            appears_on_primary_path=element.element_id in primary_ids,
            appears_on_secondary_path=element.element_id in secondary_ids,
        )
        for element in sorted(maps.elements.values(), key=lambda item: item.element_id)
    ]

    return BarrierEnvelope(
        primary=EnvelopePath(
            min_failure_cost_to_surface=primary_min_failure_cost,
            path_edge_ids=list(primary_path_edge_ids),
            element_ids=sorted(primary_ids),
            element_count=len(primary_ids),
        ),
        secondary=EnvelopePath(
            min_failure_cost_to_surface=secondary_path.min_failure_cost_to_surface,
            path_edge_ids=secondary_path.min_cost_path_edge_ids,
            element_ids=sorted(secondary_ids),
            element_count=len(secondary_ids),
        ),
        overlap=EnvelopeOverlap(
            element_ids=sorted(overlap_ids),
            element_count=len(overlap_ids),
            has_overlap=bool(overlap_ids),
        ),
        summary=EnvelopeSummary(
            barrier_element_count=len(barrier_elements),
            barrier_edge_count=len(maps.edge_element_ids),
            independence_heuristic=resolve_independence_heuristic(
                primary_ids, secondary_ids, overlap_ids
            ),
            overlap_ratio_primary=to_ratio(len(overlap_ids), len(primary_ids)),
            overlap_ratio_secondary=to_ratio(len(overlap_ids), len(secondary_ids)),
        ),
        barrier_elements=barrier_elements,
    )
