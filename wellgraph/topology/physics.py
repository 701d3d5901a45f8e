"""
Physics provider interface.

The topology core never computes the physical stack itself. It asks a
provider for depth intervals and for the radial stack of layers at a
depth. ``SnapshotPhysics`` serves both from the ``physics`` section of a
state snapshot, where the intervals and their stacks were precomputed.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from wellgraph.models.snapshot import Layer, PhysicsSnapshot
from wellgraph.models.topology_types import TOPOLOGY_EPSILON


@dataclass(frozen=True)
class DepthInterval:
    top: float
    bottom: float
    boundary_reasons: tuple[Any, ...] = ()

    @property
    def midpoint(self) -> float:
        return (self.top + self.bottom) / 2


class PhysicsProvider(Protocol):
    def intervals(self) -> list[DepthInterval]: ...

    def stack_at_depth(self, depth: float) -> list[Layer]: ...


@dataclass
class SnapshotPhysics:
    """Provider backed by precomputed intervals and stacks."""

    snapshot: PhysicsSnapshot = field(default_factory=PhysicsSnapshot)

    @classmethod
    def from_payload(cls, payload: Any) -> "SnapshotPhysics":
        if isinstance(payload, PhysicsSnapshot):
            return cls(payload)
        return cls(PhysicsSnapshot.model_validate(payload if isinstance(payload, dict) else {}))

    def intervals(self) -> list[DepthInterval]:
        # invalid intervals are passed through; the node builder skips them
        # while keeping every interval's original index
        return [
            DepthInterval(
                top=interval.top if interval.top is not None else float("nan"),
                bottom=interval.bottom if interval.bottom is not None else float("nan"),
                boundary_reasons=tuple(interval.boundary_reasons),
            )
            for interval in self.snapshot.intervals
        ]

    def stack_at_depth(self, depth: float) -> list[Layer]:
        for interval in self.snapshot.intervals:
            if interval.top is None or interval.bottom is None:
                continue
            if interval.top - TOPOLOGY_EPSILON <= depth < interval.bottom:
                return list(interval.stack)
        return []
