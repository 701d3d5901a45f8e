"""
State snapshot consumed by the topology builder.

The snapshot is the single boundary where loosely-typed editor payloads
become validated row variants. Anything that is not a mapping is dropped
here so the rest of the pipeline can rely on typed rows.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from wellgraph.models.rows import (
    AnnulusFluidRow,
    EquipmentRow,
    MarkerRow,
    PipeRow,
    ScenarioBreakoutRow,
    ScenarioSourceRow,
    is_breakout_payload,
)
from wellgraph.models.topology_types import TOPOLOGY_EPSILON
from wellgraph.utils.numbers import parse_optional_number


class Layer(BaseModel):
    """One radial layer of the physical stack at a depth."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    role: str | None = None
    material: str | None = None
    inner_radius: float | None = Field(
        default=None, validation_alias=AliasChoices("inner_radius", "innerRadius")
    )
    outer_radius: float | None = Field(
        default=None, validation_alias=AliasChoices("outer_radius", "outerRadius")
    )
    is_formation: bool = Field(
        default=False, validation_alias=AliasChoices("is_formation", "isFormation")
    )
    slot_index: int | None = Field(
        default=None, validation_alias=AliasChoices("slot_index", "slotIndex")
    )
    source: dict[str, Any] = Field(default_factory=dict)

    @field_validator("inner_radius", "outer_radius", mode="before")
    @classmethod
    def parse_radius(cls, value: Any) -> float | None:
        return parse_optional_number(value)

    @field_validator("role", "material", mode="before")
    @classmethod
    def parse_token(cls, value: Any) -> str | None:
        if value is None:
            return None
        return str(value).strip().lower() or None

    @field_validator("is_formation", mode="before")
    @classmethod
    def parse_is_formation(cls, value: Any) -> bool:
        return value is True

    @field_validator("slot_index", mode="before")
    @classmethod
    def parse_slot_index(cls, value: Any) -> int | None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if isinstance(value, float) and not value.is_integer():
            return None
        return int(value) if value >= 0 else None

    @field_validator("source", mode="before")
    @classmethod
    def parse_source(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    @property
    def has_positive_thickness(self) -> bool:
        if self.inner_radius is None or self.outer_radius is None:
            return False
        return self.outer_radius > self.inner_radius + TOPOLOGY_EPSILON


class PhysicsInterval(BaseModel):
    """A depth interval with the stack precomputed at its midpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    top: float | None = None
    bottom: float | None = None
    boundary_reasons: list[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("boundary_reasons", "boundaryReasons"),
    )
    stack: list[Layer] = Field(default_factory=list)

    @field_validator("top", "bottom", mode="before")
    @classmethod
    def parse_depth(cls, value: Any) -> float | None:
        return parse_optional_number(value)

    @field_validator("stack", mode="before")
    @classmethod
    def drop_invalid_layers(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [layer for layer in value if isinstance(layer, (dict, Layer))]


class PhysicsSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    intervals: list[PhysicsInterval] = Field(default_factory=list)

    @field_validator("intervals", mode="before")
    @classmethod
    def drop_invalid_intervals(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [interval for interval in value if isinstance(interval, (dict, PhysicsInterval))]


def _rows(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, (dict, BaseModel))]


class StateSnapshot(BaseModel):
    """Everything one topology build reads.

    ``topology_sources`` holds both scenario source rows and breakout
    rows; each payload is tagged by whether it names a from/to volume.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    casing_data: list[PipeRow] = Field(
        default_factory=list, validation_alias=AliasChoices("casing_data", "casingData")
    )
    tubing_data: list[PipeRow] = Field(
        default_factory=list, validation_alias=AliasChoices("tubing_data", "tubingData")
    )
    equipment_data: list[EquipmentRow] = Field(
        default_factory=list, validation_alias=AliasChoices("equipment_data", "equipmentData")
    )
    markers: list[MarkerRow] = Field(default_factory=list)
    annulus_fluids: list[AnnulusFluidRow] = Field(
        default_factory=list, validation_alias=AliasChoices("annulus_fluids", "annulusFluids")
    )
    topology_sources: list[ScenarioBreakoutRow | ScenarioSourceRow] = Field(
        default_factory=list,
        validation_alias=AliasChoices("topology_sources", "topologySources"),
    )
    config: dict[str, Any] = Field(default_factory=dict)
    physics: PhysicsSnapshot = Field(default_factory=PhysicsSnapshot)

    @field_validator(
        "casing_data", "tubing_data", "equipment_data", "markers", "annulus_fluids", mode="before"
    )
    @classmethod
    def drop_invalid_rows(cls, value: Any) -> list:
        return _rows(value)

    @field_validator("topology_sources", mode="before")
    @classmethod
    def tag_topology_sources(cls, value: Any) -> list:
        rows = []
        for row in _rows(value):
            if isinstance(row, (ScenarioBreakoutRow, ScenarioSourceRow)):
                rows.append(row)
            elif isinstance(row, dict) and is_breakout_payload(row):
                rows.append(ScenarioBreakoutRow.model_validate(row))
            elif isinstance(row, dict):
                rows.append(ScenarioSourceRow.model_validate(row))
        return rows

    @field_validator("config", mode="before")
    @classmethod
    def parse_config(cls, value: Any) -> dict:
        return value if isinstance(value, dict) else {}

    @field_validator("physics", mode="before")
    @classmethod
    def parse_physics(cls, value: Any) -> Any:
        if isinstance(value, (dict, PhysicsSnapshot)):
            return value
        return {}

    @property
    def scenario_source_rows(self) -> list[ScenarioSourceRow]:
        return [row for row in self.topology_sources if isinstance(row, ScenarioSourceRow)]

    @property
    def scenario_breakout_rows(self) -> list[ScenarioBreakoutRow]:
        return [row for row in self.topology_sources if isinstance(row, ScenarioBreakoutRow)]

    @property
    def has_visible_fluid_rows(self) -> bool:
        return any(row.show for row in self.annulus_fluids)
