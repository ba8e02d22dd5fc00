"""
Outcome Model - draws one simulated outcome for one task

Three-region mixture:
    confidence             -> uniform within [min, max]
    25% of the remainder   -> underrun, uniform within [lower_bound, min]
    75% of the remainder   -> overrun, uniform within [max, upper_bound]
"""

import math
from typing import Optional

from ..utils.numbers import round_half_up
from .bounds import BoundsCalculator
from .sampler import RandomSampler

# Region selection draws from [1, REGION_SCALE]
REGION_SCALE = 1000
UNDERRUN_SHARE = 0.25


class OutcomeModel:
    """
    Stochastic single-task outcome generator

    Uses an injected RandomSampler so tests can substitute a seeded or
    scripted source.
    """

    def __init__(self, sampler: Optional[RandomSampler] = None):
        """
        Initialize Outcome Model

        Args:
            sampler: Random source (defaults to an unseeded RandomSampler)
        """
        self.sampler = sampler or RandomSampler()

    def sample_outcome(self, minimum: float, maximum: float, confidence: float) -> int:
        """
        Draw one outcome for a task

        Args:
            minimum: Task min estimate
            maximum: Task max estimate
            confidence: Estimator confidence (0-1)

        Returns:
            Outcome rounded to the nearest integer
        """
        min_value = float(minimum)
        max_value = float(maximum)
        base = self.sampler.uniform_int(1, REGION_SCALE)
        boundary = confidence * REGION_SCALE
        underrun_budget = math.floor((REGION_SCALE - boundary) * UNDERRUN_SHARE)

        if base < boundary:
            total = self.sampler.uniform(min_value, max_value)
        elif (base - boundary) < underrun_budget:
            if min_value == 0:
                total = 0.0
            else:
                floor_value = BoundsCalculator.lower_bound(min_value, confidence)
                total = self.sampler.uniform(floor_value, min_value)
        else:
            ceiling = BoundsCalculator.upper_bound(max_value, confidence)
            total = self.sampler.uniform(max_value, ceiling)

        return round_half_up(total)
