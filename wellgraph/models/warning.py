"""Validation warnings emitted while building a topology model."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator


class ValidationWarning(BaseModel):
    """An advisory about an input row or a source policy.

    Warnings never block construction; the model is built with whatever
    could be resolved and the warning explains what was degraded.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: Literal["warning"] = "warning"
    code: str
    message: str
    depth: float | None = None
    row_id: str | None = None
    fields: list[str] | None = None
    category: str | None = None
    recommendation: str | None = None

    @field_validator("fields")
    @classmethod
    def dedupe_fields(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        fields = []
        for field in value:
            field = str(field).strip()
            if field and field not in fields:
                fields.append(field)
        return fields or None
