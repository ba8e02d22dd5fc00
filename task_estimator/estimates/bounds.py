"""
Bounds Calculator - worst-case overrun ceiling and underrun floor

Because developers tend to underestimate, the less confidence there is in an
estimate the further an outcome may run past it. For every 10% drop in
confidence below 90% the overrun ceiling grows by another multiple of max and
the underrun floor shrinks by the same factor:

    90% -> max * 1, min / 1
    80% -> max * 2, min / 2
    70% -> max * 3, min / 3
"""

import math
from typing import Iterable

from ..utils.numbers import round_half_up


class BoundsCalculator:
    """
    Confidence-scaled outcome bounds

    All methods are pure and expect confidence already normalized to [0, 1].
    """

    @staticmethod
    def multiplier(confidence: float) -> int:
        """
        Calculate the range multiplier for a confidence level

        Args:
            confidence: Estimator confidence (0-1)

        Returns:
            Integer multiplier, at least 1
        """
        confidence_percent = round_half_up(confidence * 100)
        return max(1, math.ceil((100 - confidence_percent) / 10))

    @staticmethod
    def upper_bound(max_estimate: float, confidence: float) -> float:
        """
        Calculate the overrun ceiling for a task

        Args:
            max_estimate: Task max estimate
            confidence: Estimator confidence (0-1)

        Returns:
            max_estimate scaled by the confidence multiplier
        """
        return max_estimate * BoundsCalculator.multiplier(confidence)

    @staticmethod
    def lower_bound(min_estimate: float, confidence: float) -> float:
        """
        Calculate the underrun floor for a task

        Args:
            min_estimate: Task min estimate
            confidence: Estimator confidence (0-1)

        Returns:
            min_estimate divided by the confidence multiplier
        """
        return min_estimate / BoundsCalculator.multiplier(confidence)

    @staticmethod
    def calculate_upper_bound(tasks: Iterable, use_cost: bool = False) -> float:
        """
        Longest total the simulator may produce for a task list

        Args:
            tasks: Tasks with max, confidence and hourly_cost attributes
            use_cost: Weight each bound by the task's hourly cost

        Returns:
            Combined worst-case upper bound across all tasks
        """
        total = 0.0
        for task in tasks:
            weight = task.hourly_cost if use_cost else 1
            total += BoundsCalculator.upper_bound(task.max, task.confidence) * weight
        return total


# Module-level convenience functions
def upper_bound(max_estimate: float, confidence: float) -> float:
    return BoundsCalculator.upper_bound(max_estimate, confidence)


def lower_bound(min_estimate: float, confidence: float) -> float:
    return BoundsCalculator.lower_bound(min_estimate, confidence)


def calculate_upper_bound(tasks: Iterable, use_cost: bool = False) -> float:
    return BoundsCalculator.calculate_upper_bound(tasks, use_cost)
