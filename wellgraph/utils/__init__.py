"""Utility modules."""

from wellgraph.utils.identifiers import (
    normalize_row_id,
    normalize_token,
    normalize_well_id,
    safe_request_id,
    utc_timestamp,
)
from wellgraph.utils.numbers import (
    has_raw_value,
    parse_optional_boolean,
    parse_optional_number,
)

__all__ = [
    "normalize_row_id",
    "normalize_token",
    "normalize_well_id",
    "safe_request_id",
    "utc_timestamp",
    "has_raw_value",
    "parse_optional_boolean",
    "parse_optional_number",
]
