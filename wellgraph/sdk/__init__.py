"""SDK for running topology builds and tracking their results."""

from wellgraph.sdk.result_store import TopologyResultStore
from wellgraph.sdk.topology_api import TopologyApiClient, TopologyApiError
from wellgraph.sdk.worker import handle_worker_request
from wellgraph.sdk.worker_client import (
    WorkerClient,
    WorkerRequestCancelled,
    WorkerRequestError,
    WorkerTicket,
)

__all__ = [
    "TopologyResultStore",
    "TopologyApiClient",
    "TopologyApiError",
    "handle_worker_request",
    "WorkerClient",
    "WorkerRequestCancelled",
    "WorkerRequestError",
    "WorkerTicket",
]
