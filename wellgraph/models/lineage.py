"""
Per-well topology result entries and their request lineage.

An entry tracks the newest request id issued for a well, whether it is
still computing, and the last result that was applied. Lineage records
keep a short history of what happened to each request.
"""

from enum import Enum

from pydantic import BaseModel, Field

from wellgraph.models.result import TopologyResult

MAX_LINEAGE_RECORDS = 60


class LineageStatus(str, Enum):
    started = "started"
    succeeded = "succeeded"
    failed = "failed"
    cancelled = "cancelled"


class LineageResultSummary(BaseModel):
    """Counts taken from a result when it was applied."""

    node_count: int = 0
    edge_count: int = 0
    source_count: int = 0
    warning_count: int = 0
    min_failure_cost_to_surface: int | None = None

    @classmethod
    def from_result(cls, result: TopologyResult) -> "LineageResultSummary":
        return cls(
            node_count=len(result.nodes),
            edge_count=len(result.edges),
            source_count=len(result.source_entities),
            warning_count=len(result.validation_warnings),
            min_failure_cost_to_surface=result.min_failure_cost_to_surface,
        )


class LineageRecord(BaseModel):
    well_id: str
    request_id: int
    status: LineageStatus
    started_at: str | None = None
    completed_at: str | None = None
    error: str | None = None
    reason: str | None = None  # cancellation reason
    result_request_id: int | None = None
    result_summary: LineageResultSummary | None = None


class TopologyEntry(BaseModel):
    """Store state for one well."""

    latest_request_id: int | None = None
    loading: bool = False
    error: str | None = None
    result: TopologyResult | None = None
    updated_at: str | None = None
    request_lineage: list[LineageRecord] = Field(default_factory=list)

    def find_lineage(self, request_id: int) -> LineageRecord | None:
        for record in reversed(self.request_lineage):
            if record.request_id == request_id:
                return record
        return None


class LineageExport(BaseModel):
    """Snapshot of one well's entry, for download or the HTTP surface."""

    exported_at: str
    well_id: str | None = None
    latest_request_id: int | None = None
    loading: bool = False
    error: str | None = None
    updated_at: str | None = None
    result_request_id: int | None = None
    result_summary: LineageResultSummary = Field(default_factory=LineageResultSummary)
    request_lineage: list[LineageRecord] = Field(default_factory=list)
