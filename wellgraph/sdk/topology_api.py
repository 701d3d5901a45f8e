"""HTTP client for a running wellgraph server.

    client = TopologyApiClient("http://localhost:8000")
    response = client.submit_request(1, snapshot, well_id="well-1")
    result = client.get_synchronized_result("well-1")

Connection failures are reported with ``warnings.warn`` and the call
returns None, so a missing server never crashes the caller.
"""

from __future__ import annotations

import warnings
from typing import Any

import httpx

from wellgraph.config import Settings
from wellgraph.models.lineage import LineageExport
from wellgraph.models.result import TopologyResult
from wellgraph.models.snapshot import StateSnapshot
from wellgraph.models.worker_message import BUILD_TOPOLOGY_TASK, WorkerResponse


class TopologyApiError(Exception):
    """Exception raised when the server rejects a request."""
    pass


class TopologyApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: Base URL of the wellgraph server (defaults to WELLGRAPH_SERVER_URL)
            timeout: HTTP request timeout in seconds
            transport: optional httpx transport, e.g. for tests
        """
        self.base_url = (base_url or Settings.from_env().server_url).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response | None:
        try:
            with self._client() as client:
                return client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            warnings.warn(
                f"failed to reach wellgraph server at {self.base_url}: {e}",
                stacklevel=3,
            )
            return None

    @staticmethod
    def _check(response: httpx.Response, not_found: str) -> None:
        if response.status_code == 404:
            raise TopologyApiError(not_found)
        if response.status_code == 400:
            raise TopologyApiError(response.json().get("detail", "Bad request"))
        response.raise_for_status()

    def submit_request(
        self,
        request_id: int,
        state_snapshot: StateSnapshot | dict[str, Any],
        well_id: str | None = None,
    ) -> WorkerResponse | None:
        """Post a build request; the server records it for ``well_id``."""
        if isinstance(state_snapshot, StateSnapshot):
            state_snapshot = state_snapshot.model_dump(mode="json")
        message = {
            "request_id": request_id,
            "task": BUILD_TOPOLOGY_TASK,
            "payload": {"state_snapshot": state_snapshot, "well_id": well_id},
        }
        response = self._request("POST", "/api/topology/requests", json=message)
        if response is None:
            return None
        self._check(response, "Topology request endpoint not found")
        data = response.json()
        data.pop("applied", None)
        return WorkerResponse.model_validate(data)

    def get_well(
        self,
        well_id: str,
        expected_request_id: int | None = None,
        require_expected_request_id: bool = False,
    ) -> dict[str, Any] | None:
        """Synchronization state, summary and result for a well."""
        params: dict[str, Any] = {"require_expected_request_id": require_expected_request_id}
        if expected_request_id is not None:
            params["expected_request_id"] = expected_request_id
        response = self._request("GET", f"/api/topology/wells/{well_id}", params=params)
        if response is None:
            return None
        self._check(response, f"No topology requests for well: {well_id}")
        return response.json()

    def get_synchronized_result(self, well_id: str) -> TopologyResult | None:
        data = self.get_well(well_id)
        if not data or data.get("result") is None:
            return None
        return TopologyResult.model_validate(data["result"])

    def get_lineage(self, well_id: str) -> LineageExport | None:
        response = self._request("GET", f"/api/topology/wells/{well_id}/lineage")
        if response is None:
            return None
        self._check(response, f"No topology requests for well: {well_id}")
        return LineageExport.model_validate(response.json())

    def get_inspector_rows(self, well_id: str, scope: str = "all") -> dict[str, Any] | None:
        response = self._request(
            "GET", f"/api/topology/wells/{well_id}/inspector", params={"scope": scope}
        )
        if response is None:
            return None
        self._check(response, f"No synchronized topology result for well: {well_id}")
        return response.json()

    def clear_well(self, well_id: str) -> bool:
        response = self._request("DELETE", f"/api/topology/wells/{well_id}")
        if response is None:
            return False
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True
