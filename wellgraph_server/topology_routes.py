"""API routes for topology builds, results and request lineage."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException, Query

from wellgraph.analysis.result_synchronization import (
    resolve_overlay_synchronization_state,
    resolve_synchronized_topology_result,
)
from wellgraph.analysis.topology_inspector import (
    create_edge_rows,
    create_node_rows,
    create_path_edge_summary_rows,
    normalize_inspector_scope,
)
from wellgraph.analysis.topology_summary import summarize_topology
from wellgraph.sdk.result_store import TopologyResultStore
from wellgraph.sdk.worker import handle_worker_request

router = APIRouter()

# in-memory only; replaced on app startup when a lineage file is configured
_store = TopologyResultStore()


def get_store() -> TopologyResultStore:
    return _store


def set_store(store: TopologyResultStore) -> None:
    global _store
    _store = store


def _require_entry(well_id: str):
    entry = get_store().get_entry(well_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"No topology requests for well: {well_id}")
    return entry


@router.post("/topology/requests")
def submit_topology_request(message: dict[str, Any]) -> dict:
    """Build a topology from a worker request envelope.

    When the payload names a well, the outcome is recorded in the store;
    ``applied`` is False when a newer request for that well already exists.
    """
    response = handle_worker_request(message)
    if response.request_id is None:
        raise HTTPException(status_code=400, detail=response.error)

    store = get_store()
    payload = message.get("payload") if isinstance(message.get("payload"), dict) else {}
    well_id = payload.get("well_id", payload.get("wellId"))

    applied = False
    if store.mark_request_started(well_id, response.request_id):
        if response.is_success:
            applied = store.apply_result(well_id, response.result, response.request_id)
        else:
            applied = store.apply_error(well_id, response.error, response.request_id)

    return {**response.to_message(), "applied": applied}


@router.get("/topology/wells")
def list_wells() -> list[str]:
    return get_store().well_ids()


@router.get("/topology/wells/{well_id}")
def get_well_topology(
    well_id: str,
    expected_request_id: int | None = None,
    require_expected_request_id: bool = False,
) -> dict:
    """Synchronization state plus the result, when it is synchronized."""
    entry = _require_entry(well_id)
    state = resolve_overlay_synchronization_state(
        entry,
        expected_request_id=expected_request_id,
        require_expected_request_id=require_expected_request_id,
    )
    result = resolve_synchronized_topology_result(entry)
    return {
        "well_id": well_id,
        "synchronization": state.model_dump(mode="json"),
        "error": entry.error,
        "updated_at": entry.updated_at,
        "summary": asdict(summarize_topology(result)) if result is not None else None,
        "result": result.model_dump(mode="json", by_alias=True) if result is not None else None,
    }


@router.delete("/topology/wells/{well_id}")
def clear_well_topology(well_id: str) -> dict:
    if not get_store().clear(well_id):
        raise HTTPException(status_code=404, detail=f"No topology requests for well: {well_id}")
    return {"status": "cleared", "well_id": well_id}


@router.get("/topology/wells/{well_id}/lineage")
def get_well_lineage(well_id: str) -> dict:
    _require_entry(well_id)
    return get_store().export_lineage(well_id).model_dump(mode="json")


@router.get("/topology/wells/{well_id}/inspector")
def get_well_inspector(
    well_id: str,
    scope: str = "all",
    selected_barrier_edge_ids: list[str] | None = Query(default=None),
) -> dict:
    """Edge, node and path rows of the synchronized result under a scope."""
    entry = _require_entry(well_id)
    result = resolve_synchronized_topology_result(entry)
    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"No synchronized topology result for well: {well_id}",
        )

    inspector_scope = normalize_inspector_scope(scope)
    return {
        "well_id": well_id,
        "request_id": result.request_id,
        "scope": inspector_scope.value,
        "edges": [
            asdict(row) for row in create_edge_rows(result, inspector_scope, selected_barrier_edge_ids)
        ],
        "nodes": [
            asdict(row) for row in create_node_rows(result, inspector_scope, selected_barrier_edge_ids)
        ],
        "path": [asdict(row) for row in create_path_edge_summary_rows(result)],
    }
