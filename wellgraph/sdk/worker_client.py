"""
Client that runs topology builds off the calling thread.

Each request gets the next id from the client's own sequence. By default
a new request supersedes the ones still in flight: their tickets fail
with ``WorkerRequestCancelled`` straight away, while the computation
itself runs to completion and its response is discarded.

Usage:

    with WorkerClient() as client:
        ticket = client.request_topology_model(snapshot, well_id="well-1")
        result = ticket.result(timeout=10)
"""

import copy
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from wellgraph.config import Settings
from wellgraph.models.result import TopologyResult
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.worker_message import BUILD_TOPOLOGY_TASK, WorkerResponse
from wellgraph.sdk.result_store import TopologyResultStore
from wellgraph.sdk.worker import handle_worker_request
from wellgraph.utils.identifiers import normalize_well_id

logger = logging.getLogger(__name__)


class WorkerRequestCancelled(Exception):
    """Raised by a ticket whose request was superseded or cancelled."""

    def __init__(self, request_id: int, reason: str) -> None:
        super().__init__(reason)
        self.request_id = request_id
        self.reason = reason


class WorkerRequestError(Exception):
    """Raised by a ticket whose worker answered with an error."""

    def __init__(self, request_id: int | None, message: str) -> None:
        super().__init__(message)
        self.request_id = request_id


@dataclass
class WorkerTicket:
    request_id: int
    well_id: str | None
    future: Future

    def result(self, timeout: float | None = None) -> TopologyResult:
        return self.future.result(timeout=timeout)

    @property
    def cancelled(self) -> bool:
        return self.future.done() and isinstance(self.future.exception(), WorkerRequestCancelled)


def _snapshot_payload(state_snapshot: StateSnapshot | dict[str, Any] | None) -> dict[str, Any]:
    """Detached copy of the snapshot, safe to hand to another thread or process."""
    if isinstance(state_snapshot, StateSnapshot):
        return state_snapshot.model_dump(mode="json")
    if isinstance(state_snapshot, dict):
        return copy.deepcopy(state_snapshot)
    return {}


class WorkerClient:
    """Submits build requests to an executor and tracks which are in flight.

    Args:
        executor: where builds run; a thread pool sized from settings when
            omitted. An injected executor is not shut down by ``dispose``.
        store: when given, request starts, results, errors and
            cancellations are recorded there per well.
    """

    def __init__(
        self,
        executor: Executor | None = None,
        store: TopologyResultStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings.from_env()
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.worker_threads,
            thread_name_prefix="wellgraph-topology",
        )
        self.store = store
        self._sequence = 0
        self._in_flight: dict[int, WorkerTicket] = {}
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def in_flight_request_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._in_flight)

    def request_topology_model(
        self,
        state_snapshot: StateSnapshot | dict[str, Any] | None,
        well_id: str | None = None,
        supersede_in_flight: bool = True,
        supersede_reason: str = "Topology request superseded",
    ) -> WorkerTicket:
        """Submit a build and return its ticket without waiting."""
        if self._disposed:
            raise RuntimeError("worker client has been disposed")
        if supersede_in_flight:
            self.cancel_in_flight(supersede_reason)

        well_id = normalize_well_id(well_id)
        message = {
            "request_id": 0,
            "task": BUILD_TOPOLOGY_TASK,
            "payload": {
                "state_snapshot": _snapshot_payload(state_snapshot),
                "well_id": well_id,
            },
        }
        with self._lock:
            self._sequence += 1
            request_id = self._sequence
            message["request_id"] = request_id
            ticket = WorkerTicket(request_id=request_id, well_id=well_id, future=Future())
            self._in_flight[request_id] = ticket

        if self.store is not None and well_id:
            self.store.mark_request_started(well_id, request_id)

        try:
            work = self._executor.submit(handle_worker_request, message)
        except RuntimeError as e:
            # executor already shut down
            self._settle(ticket, error=WorkerRequestError(request_id, str(e)))
            return ticket
        work.add_done_callback(lambda done: self._on_response(ticket, done))
        logger.debug("Submitted topology request %d for %s", request_id, well_id)
        return ticket

    def build_topology_model(
        self,
        state_snapshot: StateSnapshot | dict[str, Any] | None,
        well_id: str | None = None,
        timeout: float | None = None,
        supersede_in_flight: bool = True,
    ) -> TopologyResult:
        """Submit a build and block until its result (or failure)."""
        ticket = self.request_topology_model(
            state_snapshot, well_id=well_id, supersede_in_flight=supersede_in_flight
        )
        return ticket.result(timeout=timeout)

    def _on_response(self, ticket: WorkerTicket, work: Future) -> None:
        try:
            response: WorkerResponse = work.result()
        except Exception as e:
            logger.exception("Topology worker crashed on request %d", ticket.request_id)
            self._settle(ticket, error=WorkerRequestError(ticket.request_id, str(e) or "Worker request crashed."))
            return

        if response.is_success:
            self._settle(ticket, result=response.result)
        else:
            logger.error("Topology request %d failed: %s", ticket.request_id, response.error)
            self._settle(
                ticket,
                error=WorkerRequestError(response.request_id, response.error or "Worker request failed."),
            )

    def _settle(
        self,
        ticket: WorkerTicket,
        result: TopologyResult | None = None,
        error: Exception | None = None,
    ) -> None:
        with self._lock:
            # a ticket cancelled earlier stays cancelled; late responses are dropped
            if self._in_flight.pop(ticket.request_id, None) is None:
                return
        if error is not None:
            ticket.future.set_exception(error)
        else:
            ticket.future.set_result(result)

        if self.store is None or not ticket.well_id:
            return
        if isinstance(error, WorkerRequestCancelled):
            self.store.mark_request_cancelled(ticket.well_id, ticket.request_id, error.reason)
        elif error is not None:
            self.store.apply_error(ticket.well_id, error, ticket.request_id)
        else:
            self.store.apply_result(ticket.well_id, result, ticket.request_id)

    def cancel_in_flight(self, reason: str = "Topology request cancelled") -> list[int]:
        """Fail every pending ticket with WorkerRequestCancelled.

        Returns the cancelled request ids.
        """
        with self._lock:
            tickets = list(self._in_flight.values())
        for ticket in tickets:
            self._settle(ticket, error=WorkerRequestCancelled(ticket.request_id, reason))
        return [ticket.request_id for ticket in tickets]

    def dispose(self, reason: str = "Topology worker disposed") -> None:
        if self._disposed:
            return
        self.cancel_in_flight(reason)
        self._disposed = True
        if self._owns_executor:
            # running builds finish in the background
            self._executor.shutdown(wait=False)

    def __enter__(self) -> "WorkerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()
