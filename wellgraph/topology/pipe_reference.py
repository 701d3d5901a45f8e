"""
Resolution of casing/tubing host references.

Markers and equipment point at a host pipe by row id, label, 1-based
index (``3`` or ``#3``) or the legacy display string
``#3 Production (7.000")``. Every token maps back to its row.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from wellgraph.models.rows import PipeRow
from wellgraph.utils.identifiers import normalize_row_id, normalize_token


class PipeHostType(str, Enum):
    casing = "casing"
    tubing = "tubing"


_DEFAULT_LABEL = {
    PipeHostType.casing: "Unnamed casing",
    PipeHostType.tubing: "Tubing",
}


def normalize_pipe_host_type(
    value: Any, fallback: PipeHostType | None = PipeHostType.casing
) -> PipeHostType | None:
    if isinstance(value, PipeHostType):
        return value
    token = str(getattr(value, "value", value) if value is not None else "").strip().lower()
    try:
        return PipeHostType(token)
    except ValueError:
        return fallback


def legacy_reference_token(row: PipeRow, index: int, host_type: PipeHostType) -> str:
    label = row.label or _DEFAULT_LABEL[host_type]
    od_text = f"{row.od:.3f}" if row.od is not None else "?"
    return f'#{index + 1} {label} ({od_text}")'


def _reference_tokens(row: PipeRow, index: int, host_type: PipeHostType) -> list[str]:
    tokens = [row.row_id, row.label, str(index + 1), f"#{index + 1}"]
    tokens.append(legacy_reference_token(row, index, host_type))
    return [token for token in tokens if token]


@dataclass(frozen=True)
class ResolvedHost:
    row: PipeRow
    host_type: PipeHostType


@dataclass
class PipeReferenceMap:
    """Token lookup for casing and tubing rows."""

    rows_by_host_type: dict[PipeHostType, list[PipeRow]] = field(default_factory=dict)
    maps_by_host_type: dict[PipeHostType, dict[str, PipeRow]] = field(default_factory=dict)

    @classmethod
    def build(cls, casing_rows: list[PipeRow], tubing_rows: list[PipeRow]) -> "PipeReferenceMap":
        reference_map = cls()
        for host_type, rows in ((PipeHostType.casing, casing_rows), (PipeHostType.tubing, tubing_rows)):
            reference_map.rows_by_host_type[host_type] = list(rows)
            tokens: dict[str, PipeRow] = {}
            for index, row in enumerate(rows):
                for token in _reference_tokens(row, index, host_type):
                    tokens[token] = row
            reference_map.maps_by_host_type[host_type] = tokens
        return reference_map

    def rows(self, host_type: PipeHostType) -> list[PipeRow]:
        return self.rows_by_host_type.get(host_type, [])

    def _resolve_in_host(
        self, host_type: PipeHostType, reference: Any, preferred_id: Any
    ) -> PipeRow | None:
        tokens = self.maps_by_host_type.get(host_type, {})
        preferred = normalize_row_id(preferred_id)
        if preferred and preferred in tokens:
            return tokens[preferred]
        reference = normalize_token(reference)
        if not reference:
            return None
        return tokens.get(reference)

    def resolve(
        self,
        reference: Any,
        host_type: Any = None,
        preferred_id: Any = None,
        allow_fallback_to_any_host: bool = False,
    ) -> ResolvedHost | None:
        """Resolve a host reference.

        With an explicit host type only that host is searched. Without
        one, casing is searched, then tubing when fallback is allowed.
        The preferred id wins over the reference token.
        """
        requested = normalize_pipe_host_type(host_type, fallback=None)
        if requested:
            row = self._resolve_in_host(requested, reference, preferred_id)
            return ResolvedHost(row, requested) if row else None

        order = [PipeHostType.casing]
        if allow_fallback_to_any_host:
            order.append(PipeHostType.tubing)
        for candidate in order:
            row = self._resolve_in_host(candidate, reference, preferred_id)
            if row:
                return ResolvedHost(row, candidate)
        return None
