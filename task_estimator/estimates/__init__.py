"""
Estimate Sampling Module
"""

from .sampler import RandomSampler
from .bounds import BoundsCalculator, upper_bound, lower_bound, calculate_upper_bound
from .outcome import OutcomeModel

__all__ = [
    "RandomSampler",
    "BoundsCalculator",
    "OutcomeModel",
    "upper_bound",
    "lower_bound",
    "calculate_upper_bound",
]
