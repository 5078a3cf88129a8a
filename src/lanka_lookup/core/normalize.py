from __future__ import annotations

import math
import re
from typing import Any, Optional

# Leading numeric prefix, the way a browser's parseFloat/parseInt read form input:
# "12.5kg" -> 12.5, "  7 " -> 7, "abc" -> no match.
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def normalize_text(x: Any) -> str:
    """
    Strip and collapse non-breaking spaces. None and float NaN (a blank
    pandas cell) become ""; the literal text "null" or "NaN" is kept.
    """
    if x is None:
        return ""
    if isinstance(x, float) and math.isnan(x):
        return ""
    return str(x).replace("\u00A0", " ").strip()


def normalize_key(x: Any) -> str:
    """Lookup key form used by every keyed table: trimmed and lower-cased."""
    return normalize_text(x).lower()


def is_blank(x: Any) -> bool:
    return normalize_text(x) == ""


def parse_float(value: Any) -> Optional[float]:
    """
    Lenient float parse for user input.

    Numbers pass through (NaN becomes None). Strings are read from their
    leading numeric prefix. Anything else, including bools, gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
        return None if math.isnan(f) else f
    m = _FLOAT_PREFIX.match(str(value))
    if not m:
        return None
    f = float(m.group(1))
    return None if math.isnan(f) or math.isinf(f) else f


def parse_int(value: Any) -> Optional[int]:
    """Lenient integer parse; floats are truncated toward zero."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return int(value)
    m = _INT_PREFIX.match(str(value))
    if not m:
        return None
    return int(m.group(1))


def coerce_number(value: Any) -> Optional[float]:
    """
    Strict numeric view of a record field.

    Unlike parse_float, a string must be a whole number literal ("8000000",
    " 4.5 "); "12kg" is not numeric here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
        return None if math.isnan(f) else f
    if isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(f) else f
    return None
