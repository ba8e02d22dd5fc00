"""
Shared helpers
"""

from .numbers import round_half_up, percent_to_fraction

__all__ = [
    "round_half_up",
    "percent_to_fraction",
]
