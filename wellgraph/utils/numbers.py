"""Lenient parsing helpers for editor-supplied values."""

import math
import re
from typing import Any

_TRUE_TOKENS = {"true", "yes", "y", "1"}
_FALSE_TOKENS = {"false", "no", "n", "0"}


def parse_optional_number(value: Any) -> float | None:
    """Parse a number from an editor cell.

    Accepts ints, floats and strings such as ``"1,250.5"``. Blank,
    non-finite or unparseable values return None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        normalized = re.sub(r"\s+", "", value.replace(",", ""))
        if not normalized:
            return None
        try:
            number = float(normalized)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def parse_optional_boolean(value: Any) -> bool | None:
    """Parse a boolean-ish editor value; None when blank or unrecognized."""
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    if isinstance(value, (int, float)):
        if value == 1:
            return True
        if value == 0:
            return False
        return None
    token = str(value).strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return None


def has_raw_value(value: Any) -> bool:
    """True when a cell holds something other than blank."""
    if value is None:
        return False
    return bool(str(value).strip())
