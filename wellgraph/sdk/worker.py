"""Worker-side handler for topology build requests.

``handle_worker_request`` is the only entry point: it takes a plain
request message and always returns a response envelope, never raising.
"""

import logging
from typing import Any

from pydantic import ValidationError

from wellgraph.models.worker_message import (
    BUILD_TOPOLOGY_TASK,
    WorkerRequest,
    WorkerResponse,
    WorkerStatus,
)
from wellgraph.topology.topology_core import build_topology_model
from wellgraph.utils.identifiers import safe_request_id

logger = logging.getLogger(__name__)


def _error(request_id: int | None, message: str) -> WorkerResponse:
    return WorkerResponse(request_id=request_id, status=WorkerStatus.error, error=message)


def handle_worker_request(message: WorkerRequest | dict[str, Any] | None) -> WorkerResponse:
    """Build the topology named by one request envelope."""
    if isinstance(message, WorkerRequest):
        request = message
    else:
        raw = message if isinstance(message, dict) else {}
        raw_request_id = raw.get("request_id", raw.get("requestId"))
        if safe_request_id(raw_request_id) is None:
            return _error(None, "Worker request requires a positive integer request_id.")
        try:
            request = WorkerRequest.model_validate(raw)
        except ValidationError as e:
            return _error(safe_request_id(raw_request_id), f"Invalid worker request: {e}")

    if request.task != BUILD_TOPOLOGY_TASK:
        return _error(request.request_id, f"Unsupported worker task: {request.task}")

    try:
        result = build_topology_model(
            request.payload.state_snapshot,
            request_id=request.request_id,
            well_id=request.payload.well_id,
        )
    except Exception as e:
        logger.exception("Topology build failed for request %d", request.request_id)
        return _error(request.request_id, str(e) or "Topology worker failed.")

    return WorkerResponse(request_id=request.request_id, status=WorkerStatus.success, result=result)
