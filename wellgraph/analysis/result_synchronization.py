"""Decide whether a stored topology result matches the newest request.

A result is only safe to draw over the editor when it answers the latest
request issued for its well. While a newer request is computing, the old
result stays in the entry but overlays should be suppressed.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel

from wellgraph.models.lineage import TopologyEntry
from wellgraph.models.result import TopologyResult
from wellgraph.utils.identifiers import safe_request_id


class SynchronizationReason(str, Enum):
    synchronized = "synchronized"
    loading_no_result = "loading_no_result"
    no_result = "no_result"
    stale_result = "stale_result"
    loading_unsynchronized = "loading_unsynchronized"
    unsynchronized = "unsynchronized"
    expected_request_pending = "expected_request_pending"
    request_mismatch = "request_mismatch"


class OverlaySynchronizationState(BaseModel):
    latest_request_id: int | None = None
    result_request_id: int | None = None
    expected_request_id: int | None = None
    require_expected_request_id: bool = False
    is_loading: bool = False
    has_result: bool = False
    topology_synchronized: bool = False
    matches_expected_request: bool = True
    is_synchronized: bool = False
    overlay_suppressed: bool = False
    reason: SynchronizationReason


def _coerce_entry(entry: TopologyEntry | dict[str, Any] | None) -> TopologyEntry | None:
    if entry is None or isinstance(entry, TopologyEntry):
        return entry
    if isinstance(entry, dict):
        return TopologyEntry.model_validate(entry)
    raise TypeError(f"unsupported topology entry: {type(entry).__name__}")


def _result_request_id(result: TopologyResult | None) -> int | None:
    return safe_request_id(result.request_id) if result is not None else None


def is_topology_result_synchronized(entry: TopologyEntry | dict[str, Any] | None) -> bool:
    entry = _coerce_entry(entry)
    if entry is None or entry.result is None:
        return False

    latest = safe_request_id(entry.latest_request_id)
    result_request_id = _result_request_id(entry.result)
    if result_request_id is not None:
        if latest is None:
            return not entry.loading
        return result_request_id == latest
    # results without a request id only count when nothing was ever requested
    return not entry.loading and latest is None


def resolve_synchronized_topology_result(
    entry: TopologyEntry | dict[str, Any] | None,
) -> TopologyResult | None:
    entry = _coerce_entry(entry)
    if not is_topology_result_synchronized(entry):
        return None
    return entry.result


def resolve_overlay_synchronization_state(
    entry: TopologyEntry | dict[str, Any] | None,
    expected_request_id: int | None = None,
    require_expected_request_id: bool = False,
) -> OverlaySynchronizationState:
    """Explain whether overlays for this entry should be drawn.

    ``expected_request_id`` pins the check to one request, e.g. the id a
    caller received when it submitted the snapshot being displayed.
    """
    entry = _coerce_entry(entry)
    latest = safe_request_id(entry.latest_request_id) if entry else None
    result = entry.result if entry else None
    result_request_id = _result_request_id(result)
    expected = safe_request_id(expected_request_id)
    is_loading = bool(entry.loading) if entry else False
    has_result = result is not None
    require = bool(require_expected_request_id)

    topology_synchronized = is_topology_result_synchronized(entry)
    if require and expected is None:
        matches_expected = False
    elif expected is not None:
        matches_expected = result_request_id == expected
    else:
        matches_expected = True
    is_synchronized = topology_synchronized and matches_expected

    if not has_result:
        reason = SynchronizationReason.loading_no_result if is_loading else SynchronizationReason.no_result
    elif not topology_synchronized:
        if result_request_id is not None and latest is not None and result_request_id < latest:
            reason = SynchronizationReason.stale_result
        elif is_loading:
            reason = SynchronizationReason.loading_unsynchronized
        else:
            reason = SynchronizationReason.unsynchronized
    elif not matches_expected:
        if require and expected is None:
            reason = SynchronizationReason.expected_request_pending
        else:
            reason = SynchronizationReason.request_mismatch
    else:
        reason = SynchronizationReason.synchronized

    return OverlaySynchronizationState(
        latest_request_id=latest,
        result_request_id=result_request_id,
        expected_request_id=expected,
        require_expected_request_id=require,
        is_loading=is_loading,
        has_result=has_result,
        topology_synchronized=topology_synchronized,
        matches_expected_request=matches_expected,
        is_synchronized=is_synchronized,
        overlay_suppressed=(not is_synchronized) if has_result else is_loading,
        reason=reason,
    )
