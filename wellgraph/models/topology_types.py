"""
Enumerated kinds and volume-key normalization for the well topology graph.

Every string-keyed switch in the topology pipeline (node kind, edge kind,
traversal direction, source policy, envelope heuristic, inspector scope)
goes through one of these enums.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

TOPOLOGY_EPSILON = 1e-6

SURFACE_NODE_ID = "node:SURFACE"

# editor config flag that opts into illustrative fluid-driven sources
CONFIG_USE_ILLUSTRATIVE_FLUID_SOURCE = "topologyUseIllustrativeFluidSource"


class NodeKind(str, Enum):
    """Kinds of nodes in the topology graph."""

    SURFACE = "SURFACE"
    TUBING_INNER = "TUBING_INNER"
    ANNULUS_A = "ANNULUS_A"
    ANNULUS_B = "ANNULUS_B"
    ANNULUS_C = "ANNULUS_C"
    ANNULUS_D = "ANNULUS_D"
    FORMATION_ANNULUS = "FORMATION_ANNULUS"


class EdgeKind(str, Enum):
    """Kinds of edges. Scenario breakouts are radial edges."""

    vertical = "vertical"
    radial = "radial"
    termination = "termination"


class EdgeDirection(str, Enum):
    """How a traversal policy walks an edge."""

    bidirectional = "bidirectional"
    forward = "forward"
    reverse = "reverse"


class SealState(str, Enum):
    """Edge and equipment contributor states."""

    open = "open"
    closed_failable = "closed_failable"
    failed_open = "failed_open"
    failed_closed = "failed_closed"
    leaking = "leaking"


class InnerChannel(str, Enum):
    """Which pipe forms the bore of an interval."""

    tubing_inner = "tubing_inner"
    wellbore_inner = "wellbore_inner"


class SourcePolicyMode(str, Enum):
    """Precedence tier that produced the run's sources."""

    marker_default = "marker_default"
    fluid_opt_in = "fluid_opt_in"
    scenario_explicit = "scenario_explicit"


class SourceKind(str, Enum):
    perforation = "perforation"
    leak = "leak"
    formation_inflow = "formation_inflow"
    scenario = "scenario"


class IndependenceHeuristic(str, Enum):
    """Classification of how independent two failure routes are."""

    no_barrier_elements = "no_barrier_elements"
    single_path_only = "single_path_only"
    distinct_envelopes = "distinct_envelopes"
    fully_shared_envelopes = "fully_shared_envelopes"
    partial_overlap_envelopes = "partial_overlap_envelopes"


class InspectorScope(str, Enum):
    all = "all"
    min_path = "min_path"
    spof = "spof"
    active_flow = "active_flow"
    selected_barrier = "selected_barrier"


@dataclass(frozen=True)
class AnnulusSlot:
    """A modeled annulus kind and the radial slot it occupies."""

    kind: NodeKind
    slot_index: int
    allow_formation_representation: bool


MODELED_ANNULUS_KINDS = (
    NodeKind.ANNULUS_A,
    NodeKind.ANNULUS_B,
    NodeKind.ANNULUS_C,
    NodeKind.ANNULUS_D,
)

# slots A..C may stand in for an open-hole formation annulus, D may not
MAX_FORMATION_COMPATIBLE_SLOT_INDEX = 2

MODELED_ANNULUS_SLOTS = tuple(
    AnnulusSlot(
        kind=kind,
        slot_index=slot_index,
        allow_formation_representation=slot_index <= MAX_FORMATION_COMPATIBLE_SLOT_INDEX,
    )
    for slot_index, kind in enumerate(MODELED_ANNULUS_KINDS)
)

MAX_MODELED_ANNULUS_SLOT_INDEX = MODELED_ANNULUS_SLOTS[-1].slot_index

# every non-SURFACE kind, in radial order
VOLUME_KINDS = (
    NodeKind.TUBING_INNER,
    *MODELED_ANNULUS_KINDS,
    NodeKind.FORMATION_ANNULUS,
)


def annulus_kind_for_slot(slot_index: int | None) -> NodeKind | None:
    """Map a radial slot index to its modeled annulus kind."""
    if slot_index is None:
        return None
    for slot in MODELED_ANNULUS_SLOTS:
        if slot.slot_index == slot_index:
            return slot.kind
    return None


def _normalize_kind_token(value: Any) -> str:
    return re.sub(r"[-\s]+", "_", str(value if value is not None else "").strip().upper())


def _match_annulus_kind(token: str) -> NodeKind | None:
    compact_token = token.replace("_", "")
    for kind in MODELED_ANNULUS_KINDS:
        suffix = kind.value.replace("ANNULUS_", "")
        compact_kind = kind.value.replace("_", "")
        if token in (kind.value, compact_kind, f"CASING_ANNULUS_{suffix}", f"{suffix}_ANNULUS"):
            return kind
        if kind.value in token or compact_kind in compact_token:
            return kind
    return None


def normalize_volume_kind(value: Any) -> NodeKind | None:
    """Normalize an editor volume key to a volume NodeKind.

    Accepts the canonical names plus legacy spellings such as ``BORE``,
    ``open hole`` or ``a-annulus``. Returns None for anything else,
    including ``SURFACE``.
    """
    if isinstance(value, NodeKind):
        return None if value == NodeKind.SURFACE else value

    token = _normalize_kind_token(value)
    if not token:
        return None
    if token in ("TUBINGINNER",) or "TUBING_INNER" in token or "BORE" in token:
        return NodeKind.TUBING_INNER
    if (
        token in ("FORMATION", "FORMATIONANNULUS", "OPENHOLE")
        or "OPEN_HOLE" in token
        or "OPENHOLE" in token
        or "FORMATION_ANNULUS" in token
    ):
        return NodeKind.FORMATION_ANNULUS
    return _match_annulus_kind(token)


def normalize_marker_type(value: Any) -> SourceKind | None:
    """Markers are either perforations or leaks; anything else is ignored."""
    token = str(value if value is not None else "").strip().lower()
    if "perf" in token:
        return SourceKind.perforation
    if "leak" in token:
        return SourceKind.leak
    return None


def normalize_source_type(value: Any) -> str:
    """Normalize a scenario row's declared source type.

    Unknown non-empty types are kept as snake_case tokens so they still
    round-trip to the UI.
    """
    token = str(value if value is not None else "").strip().lower()
    if not token:
        return SourceKind.scenario.value
    if "perf" in token:
        return SourceKind.perforation.value
    if "leak" in token:
        return SourceKind.leak.value
    if "formation" in token or "inflow" in token:
        return SourceKind.formation_inflow.value
    return re.sub(r"\s+", "_", token)


def function_key_for_volume(volume_kind: NodeKind | str | None) -> str:
    """Barrier function key a seal performs for a volume."""
    if volume_kind is None:
        return "boundary_seal"
    token = volume_kind.value if isinstance(volume_kind, NodeKind) else str(volume_kind)
    token = token.strip().lower()
    if not token:
        return "boundary_seal"
    if token in ("bore", "tubing_inner"):
        return "bore_seal"
    return f"{token}_seal"
