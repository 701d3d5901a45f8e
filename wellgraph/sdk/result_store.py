"""
In-memory per-well store of topology results and request lineage.

Requests for a well carry increasing ids. The store only moves forward:
any update naming a request older than the latest one it has seen is
rejected, so a slow response can never overwrite a newer result.
"""

import logging
import threading

from wellgraph.adapters.sinks import LineageSink
from wellgraph.models.lineage import (
    MAX_LINEAGE_RECORDS,
    LineageExport,
    LineageRecord,
    LineageResultSummary,
    LineageStatus,
    TopologyEntry,
)
from wellgraph.models.result import TopologyResult
from wellgraph.utils.identifiers import normalize_well_id, safe_request_id, utc_timestamp

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Topology request failed."


class TopologyResultStore:
    """Latest topology state per well.

    Every lineage status change is mirrored to ``sink`` when one is given.
    Methods return False when the update was rejected (blank well id or a
    request older than the latest).
    """

    def __init__(self, sink: LineageSink | None = None) -> None:
        self.sink = sink
        self._entries: dict[str, TopologyEntry] = {}
        self._lock = threading.RLock()

    def get_entry(self, well_id: str | None) -> TopologyEntry | None:
        well_id = normalize_well_id(well_id)
        if well_id is None:
            return None
        with self._lock:
            return self._entries.get(well_id)

    def well_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def _ensure_entry(self, well_id: str) -> TopologyEntry:
        entry = self._entries.get(well_id)
        if entry is None:
            entry = TopologyEntry()
            self._entries[well_id] = entry
        return entry

    def _ensure_record(self, entry: TopologyEntry, well_id: str, request_id: int) -> LineageRecord:
        record = entry.find_lineage(request_id)
        if record is None:
            record = LineageRecord(
                well_id=well_id,
                request_id=request_id,
                status=LineageStatus.started,
                started_at=utc_timestamp(),
            )
            entry.request_lineage.append(record)
            # oldest records drop off first
            if len(entry.request_lineage) > MAX_LINEAGE_RECORDS:
                del entry.request_lineage[: len(entry.request_lineage) - MAX_LINEAGE_RECORDS]
        return record

    def _mirror(self, record: LineageRecord) -> None:
        if self.sink is not None:
            self.sink.append(record.model_copy(deep=True))

    @staticmethod
    def _is_stale(entry: TopologyEntry, request_id: int) -> bool:
        return entry.latest_request_id is not None and request_id < entry.latest_request_id

    def mark_request_started(self, well_id: str | None, request_id: int | None = None) -> bool:
        """Record that a request was issued; defaults to latest + 1."""
        well_id = normalize_well_id(well_id)
        if well_id is None:
            return False
        with self._lock:
            entry = self._ensure_entry(well_id)
            request_id = safe_request_id(request_id) or (entry.latest_request_id or 0) + 1
            if self._is_stale(entry, request_id):
                logger.debug("Rejected start of stale request %d for %s", request_id, well_id)
                return False

            entry.latest_request_id = request_id
            entry.loading = True
            entry.error = None
            record = self._ensure_record(entry, well_id, request_id)
            record.status = LineageStatus.started
            record.completed_at = None
            record.error = None
            record.reason = None
            record.result_request_id = None
            record.result_summary = None
            self._mirror(record)
            return True

    def apply_result(
        self,
        well_id: str | None,
        result: TopologyResult,
        request_id: int | None = None,
    ) -> bool:
        """Store a result unless a newer request has been issued since."""
        well_id = normalize_well_id(well_id)
        if well_id is None:
            return False
        with self._lock:
            entry = self._ensure_entry(well_id)
            request_id = (
                safe_request_id(request_id)
                or safe_request_id(result.request_id)
                or entry.latest_request_id
                or 1
            )
            if self._is_stale(entry, request_id):
                logger.debug(
                    "Dropped result of request %d for %s (latest is %d)",
                    request_id,
                    well_id,
                    entry.latest_request_id,
                )
                return False

            entry.latest_request_id = request_id
            entry.loading = False
            entry.error = None
            entry.result = result
            entry.updated_at = utc_timestamp()
            record = self._ensure_record(entry, well_id, request_id)
            record.status = LineageStatus.succeeded
            record.completed_at = utc_timestamp()
            record.error = None
            record.result_request_id = safe_request_id(result.request_id) or request_id
            record.result_summary = LineageResultSummary.from_result(result)
            self._mirror(record)
            return True

    def apply_error(
        self,
        well_id: str | None,
        error: BaseException | str | None,
        request_id: int | None = None,
    ) -> bool:
        """Record a failed request. The previous result is kept."""
        well_id = normalize_well_id(well_id)
        if well_id is None:
            return False
        with self._lock:
            entry = self._ensure_entry(well_id)
            request_id = safe_request_id(request_id) or entry.latest_request_id or 1
            if self._is_stale(entry, request_id):
                return False

            message = str(error or "").strip() or DEFAULT_ERROR_MESSAGE
            entry.latest_request_id = request_id
            entry.loading = False
            entry.error = message
            record = self._ensure_record(entry, well_id, request_id)
            record.status = LineageStatus.failed
            record.completed_at = utc_timestamp()
            record.error = message
            record.result_request_id = None
            record.result_summary = None
            self._mirror(record)
            return True

    def mark_request_cancelled(
        self,
        well_id: str | None,
        request_id: int | None = None,
        reason: str | None = None,
    ) -> bool:
        well_id = normalize_well_id(well_id)
        if well_id is None:
            return False
        with self._lock:
            entry = self._ensure_entry(well_id)
            request_id = safe_request_id(request_id) or entry.latest_request_id or 1
            if self._is_stale(entry, request_id):
                return False

            entry.latest_request_id = request_id
            entry.loading = False
            record = self._ensure_record(entry, well_id, request_id)
            record.status = LineageStatus.cancelled
            record.completed_at = utc_timestamp()
            record.error = None
            record.reason = reason
            record.result_request_id = None
            record.result_summary = None
            self._mirror(record)
            return True

    def export_lineage(self, well_id: str | None) -> LineageExport:
        """Copy of a well's entry and lineage; empty when the well is unknown."""
        well_id = normalize_well_id(well_id)
        with self._lock:
            entry = self._entries.get(well_id) if well_id else None
            if entry is None:
                return LineageExport(exported_at=utc_timestamp(), well_id=well_id)

            result = entry.result
            return LineageExport(
                exported_at=utc_timestamp(),
                well_id=well_id,
                latest_request_id=entry.latest_request_id,
                loading=entry.loading,
                error=entry.error,
                updated_at=entry.updated_at,
                result_request_id=safe_request_id(result.request_id) if result else None,
                result_summary=(
                    LineageResultSummary.from_result(result) if result else LineageResultSummary()
                ),
                request_lineage=[record.model_copy(deep=True) for record in entry.request_lineage],
            )

    def clear(self, well_id: str | None) -> bool:
        well_id = normalize_well_id(well_id)
        if well_id is None:
            return False
        with self._lock:
            return self._entries.pop(well_id, None) is not None
