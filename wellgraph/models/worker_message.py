"""Request/response envelopes exchanged across the worker boundary."""

from enum import Enum
from typing import Any, Self

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from wellgraph.models.result import TopologyResult

BUILD_TOPOLOGY_TASK = "build-topology-model"


class WorkerStatus(str, Enum):
    success = "success"
    error = "error"


class WorkerPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    state_snapshot: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("state_snapshot", "stateSnapshot"),
    )
    well_id: str | None = Field(default=None, validation_alias=AliasChoices("well_id", "wellId"))


class WorkerRequest(BaseModel):
    """``{request_id, task, payload}`` sent to the worker."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_id: int = Field(validation_alias=AliasChoices("request_id", "requestId"), gt=0)
    task: str = BUILD_TOPOLOGY_TASK
    payload: WorkerPayload = Field(default_factory=WorkerPayload)


class WorkerResponse(BaseModel):
    """``{request_id, status, result | error}``; ``result`` is absent on error."""

    model_config = ConfigDict(extra="forbid")

    request_id: int | None = None
    status: WorkerStatus
    result: TopologyResult | None = None
    error: str | None = None

    @model_validator(mode="after")
    def validate_status(self) -> Self:
        if self.status == WorkerStatus.success:
            if self.result is None:
                raise ValueError("success response requires a result")
            if self.error is not None:
                raise ValueError("success response must not carry an error")
        else:
            if self.result is not None:
                raise ValueError("error response must not carry a result")
            if not self.error:
                raise ValueError("error response requires an error message")
        return self

    @property
    def is_success(self) -> bool:
        return self.status == WorkerStatus.success

    def to_message(self) -> dict[str, Any]:
        """Plain envelope with the absent side left out."""
        message = self.model_dump(mode="json", by_alias=True)
        message.pop("error" if self.is_success else "result")
        return message
