"""String-to-number parsing and null-safe value helpers."""

from __future__ import annotations

import math
import re
from datetime import datetime

from ucsfe.numeric import parse_decimal_str

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

EPOCH = datetime(1970, 1, 1)
DEFAULT_LAYOUT = "%Y-%m-%d %H:%M:%S"


def string_to_int_default(s: str, default: int) -> int:
    """Parse a trimmed 64-bit integer, returning ``default`` on failure."""
    text = s.strip()
    if not _INT_PATTERN.fullmatch(text):
        return default
    value = int(text)
    if not _I64_MIN <= value <= _I64_MAX:
        return default
    return value


def string_to_float_default(s: str, default: float) -> float:
    """Parse a trimmed float, returning ``default`` on failure or NaN."""
    value = parse_decimal_str(s)
    if value is None or math.isnan(value):
        return default
    return value


def new_null_string(s: str) -> str | None:
    """Return None for an empty string, otherwise the string itself."""
    return s or None


def new_null_int(value: int) -> int | None:
    """Return None for zero, otherwise the value itself."""
    return None if value == 0 else value


def datetime_or_epoch(value: datetime | None) -> datetime:
    """Return the value, or the Unix epoch when it is None."""
    return EPOCH if value is None else value


def format_datetime(value: datetime | None, layout: str = DEFAULT_LAYOUT) -> str:
    """Format a datetime with ``layout``; an empty layout uses the default, None gives ''."""
    if value is None:
        return ""
    return value.strftime(layout or DEFAULT_LAYOUT)


def from_datetime(value: datetime | None) -> str:
    """Format as ``YYYY-MM-DD HH:MM:SS``, or '' for None."""
    return format_datetime(value, DEFAULT_LAYOUT)


def new_null_datetime(value: datetime) -> datetime | None:
    """Return None for the Unix epoch, otherwise the value itself."""
    return None if value == EPOCH else value