"""Numeric helper functions shared across the package."""

import math
from typing import Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (3.5 -> 4, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def percent_to_fraction(value: Optional[float]) -> Optional[float]:
    """Convert a 0-100 percentage to a 0-1 fraction while preserving None."""
    if value is None:
        return None
    return float(value) / 100.0


__all__ = ["round_half_up", "percent_to_fraction"]
