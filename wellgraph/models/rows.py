"""
Editor row variants consumed by the topology pipeline.

Rows arrive from spreadsheet-style editors with camelCase keys, blank
cells and numbers typed as strings. Each domain gets one validated
variant here; conversion happens once, at the snapshot boundary.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from wellgraph.models.topology_types import (
    TOPOLOGY_EPSILON,
    NodeKind,
    normalize_volume_kind,
)
from wellgraph.utils.identifiers import normalize_row_id, normalize_token
from wellgraph.utils.numbers import parse_optional_number

BREAKOUT_KEYS = (
    "from_volume_key",
    "fromVolumeKey",
    "fromVolume",
    "to_volume_key",
    "toVolumeKey",
    "toVolume",
)


class EditorRow(BaseModel):
    """Base for editor rows: lenient, camelCase-friendly, extra keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    row_id: str | None = Field(default=None, validation_alias=AliasChoices("row_id", "rowId"))
    show: bool = True

    @field_validator("row_id", mode="before")
    @classmethod
    def parse_row_id(cls, value: Any) -> str | None:
        return normalize_row_id(value)

    @field_validator("show", mode="before")
    @classmethod
    def parse_show(cls, value: Any) -> bool:
        # only an explicit false hides a row
        return value is not False


class PipeRow(EditorRow):
    """A casing or tubing string."""

    label: str | None = None
    top: float | None = None
    bottom: float | None = None
    od: float | None = None
    id: float | None = None

    @field_validator("top", "bottom", "od", "id", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> float | None:
        return parse_optional_number(value)

    @field_validator("label", mode="before")
    @classmethod
    def parse_label(cls, value: Any) -> str | None:
        return normalize_token(value)

    @property
    def has_depth_range(self) -> bool:
        return self.top is not None and self.bottom is not None and self.bottom >= self.top

    def overlaps(self, top: float, bottom: float) -> bool:
        """Strict overlap with a [top, bottom) interval."""
        if not self.has_depth_range:
            return False
        return self.bottom > top + TOPOLOGY_EPSILON and self.top < bottom - TOPOLOGY_EPSILON

    def contains_depth(self, depth: float) -> bool:
        """Inclusive containment with tolerance, regardless of row orientation."""
        if self.top is None or self.bottom is None:
            return False
        low, high = min(self.top, self.bottom), max(self.top, self.bottom)
        return low - TOPOLOGY_EPSILON <= depth <= high + TOPOLOGY_EPSILON


class EquipmentRow(EditorRow):
    """A piece of downhole equipment sitting at a boundary depth."""

    type: str | None = None
    depth: float | None = Field(
        default=None,
        validation_alias=AliasChoices("depth", "md", "measuredDepth", "measured_depth"),
    )
    actuation_state: str | None = Field(
        default=None, validation_alias=AliasChoices("actuation_state", "actuationState")
    )
    integrity_status: str | None = Field(
        default=None, validation_alias=AliasChoices("integrity_status", "integrityStatus")
    )
    # override cells keep their raw value so invalid entries can be reported
    annular_seal: Any = Field(
        default=None,
        validation_alias=AliasChoices("annular_seal", "annularSeal", "annulusSeal"),
    )
    bore_seal: Any = Field(default=None, validation_alias=AliasChoices("bore_seal", "boreSeal"))
    seal_by_volume: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "seal_by_volume", "sealByVolume", "volumeSealOverrides", "volumeSeals"
        ),
    )
    seal_node_kind: str | None = Field(
        default=None, validation_alias=AliasChoices("seal_node_kind", "sealNodeKind")
    )
    attach_to_host_type: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_host_type", "attachToHostType")
    )
    attach_to_id: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_id", "attachToId")
    )
    attach_to_row: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_row", "attachToRow")
    )
    attach_to_display: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_display", "attachToDisplay")
    )

    @field_validator("depth", mode="before")
    @classmethod
    def parse_depth(cls, value: Any) -> float | None:
        return parse_optional_number(value)

    @field_validator(
        "type",
        "actuation_state",
        "integrity_status",
        "seal_node_kind",
        "attach_to_host_type",
        "attach_to_id",
        "attach_to_row",
        "attach_to_display",
        mode="before",
    )
    @classmethod
    def parse_text(cls, value: Any) -> str | None:
        return normalize_token(value)

    @field_validator("seal_by_volume", mode="before")
    @classmethod
    def parse_seal_by_volume(cls, value: Any) -> dict | None:
        return value if isinstance(value, dict) else None

    @property
    def has_attach_input(self) -> bool:
        return any(
            (self.attach_to_host_type, self.attach_to_id, self.attach_to_display, self.attach_to_row)
        )


class MarkerRow(EditorRow):
    """A perforation or leak marker over a depth range."""

    type: str | None = None
    top: float | None = None
    bottom: float | None = None
    attach_to_id: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_id", "attachToId")
    )
    attach_to_row: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_row", "attachToRow")
    )
    attach_to_host_type: str | None = Field(
        default=None, validation_alias=AliasChoices("attach_to_host_type", "attachToHostType")
    )

    @field_validator("top", "bottom", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> float | None:
        return parse_optional_number(value)

    @field_validator("type", "attach_to_id", "attach_to_row", "attach_to_host_type", mode="before")
    @classmethod
    def parse_text(cls, value: Any) -> str | None:
        return normalize_token(value)


class AnnulusFluidRow(EditorRow):
    top: float | None = None
    bottom: float | None = None
    fluid: str | None = None

    @field_validator("top", "bottom", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> float | None:
        return parse_optional_number(value)


class DepthRange(BaseModel):
    """Resolved depth range of a row; a point when top == bottom."""

    model_config = ConfigDict(frozen=True)

    top: float
    bottom: float

    @property
    def is_point(self) -> bool:
        return abs(self.bottom - self.top) <= TOPOLOGY_EPSILON

    def intersects(self, top: float, bottom: float) -> bool:
        """Points match inclusively, ranges must overlap strictly."""
        if self.is_point:
            return top - TOPOLOGY_EPSILON <= self.top <= bottom + TOPOLOGY_EPSILON
        return self.bottom > top + TOPOLOGY_EPSILON and self.top < bottom - TOPOLOGY_EPSILON


class ScenarioRow(EditorRow):
    """Fields shared by scenario source and breakout rows."""

    enabled: bool = True
    source_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("source_type", "sourceType", "type", "eventType"),
    )
    top: float | None = Field(
        default=None,
        validation_alias=AliasChoices("top", "depthTop", "depth_top", "startDepth"),
    )
    bottom: float | None = Field(
        default=None,
        validation_alias=AliasChoices("bottom", "depthBottom", "depth_bottom", "endDepth"),
    )
    depth: float | None = Field(default=None, validation_alias=AliasChoices("depth", "md"))

    @field_validator("top", "bottom", "depth", mode="before")
    @classmethod
    def parse_numbers(cls, value: Any) -> float | None:
        return parse_optional_number(value)

    @field_validator("source_type", mode="before")
    @classmethod
    def parse_source_type(cls, value: Any) -> str | None:
        return normalize_token(value)

    @field_validator("enabled", mode="before")
    @classmethod
    def parse_enabled(cls, value: Any) -> bool:
        return value is not False

    @property
    def is_visible(self) -> bool:
        return self.show and self.enabled

    def depth_range(self) -> DepthRange | None:
        """Resolve top/bottom, then a single end, then depth.

        A range whose bottom is shallower than its top is invalid.
        """
        if self.top is not None and self.bottom is not None:
            if self.bottom < self.top:
                return None
            return DepthRange(top=self.top, bottom=self.bottom)
        if self.top is not None:
            return DepthRange(top=self.top, bottom=self.top)
        if self.bottom is not None:
            return DepthRange(top=self.bottom, bottom=self.bottom)
        if self.depth is None:
            return None
        return DepthRange(top=self.depth, bottom=self.depth)


class ScenarioSourceRow(ScenarioRow):
    """User-declared source volume over a depth range."""

    volume_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "volume_key", "volumeKey", "volume", "targetVolume", "targetVolumeKey"
        ),
    )

    @field_validator("volume_key", mode="before")
    @classmethod
    def parse_volume_key(cls, value: Any) -> str | None:
        return normalize_token(value)

    @property
    def volume_kind(self) -> NodeKind | None:
        return normalize_volume_kind(self.volume_key)


class ScenarioBreakoutRow(ScenarioRow):
    """User-declared cross-volume communication over a depth range."""

    from_volume_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("from_volume_key", "fromVolumeKey", "fromVolume"),
    )
    to_volume_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("to_volume_key", "toVolumeKey", "toVolume"),
    )

    @field_validator("from_volume_key", "to_volume_key", mode="before")
    @classmethod
    def parse_volume_keys(cls, value: Any) -> str | None:
        return normalize_token(value)

    @property
    def from_kind(self) -> NodeKind | None:
        return normalize_volume_kind(self.from_volume_key)

    @property
    def to_kind(self) -> NodeKind | None:
        return normalize_volume_kind(self.to_volume_key)


def is_breakout_payload(row: dict) -> bool:
    """A topology source row is a breakout when it names a from or to volume."""
    return any(normalize_token(row.get(key)) for key in BREAKOUT_KEYS)
