"""Rounding and decimal helpers."""

from __future__ import annotations

import math


def _round_half_away(value: float) -> float:
    """Round to the nearest integer, with halves rounded away from zero."""
    if not math.isfinite(value):
        return value
    magnitude = abs(value)
    whole = math.floor(magnitude)
    if magnitude - whole >= 0.5:
        whole += 1
    return math.copysign(float(whole), value)


def round2(val: float) -> float:
    """Round a float to 2 decimal places, halves away from zero."""
    return _round_half_away(val * 100.0) / 100.0


def round_to(val: float, decimals: int) -> float:
    """Round a float to ``decimals`` decimal places, halves away from zero."""
    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")
    factor = 10.0**decimals
    return _round_half_away(val * factor) / factor


def parse_decimal_str(s: str) -> float | None:
    """Parse a trimmed decimal string, returning None when it is not a number."""
    text = s.strip()
    if not text or "_" in text or not text.isascii():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def format_decimal4(val: float) -> str:
    """Format a float with exactly four decimal places."""
    if math.isnan(val):
        return "NaN"
    return f"{val:.4f}"