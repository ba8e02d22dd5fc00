"""
Random Sampler - the single source of randomness for the engine
"""

import math
from typing import Optional
import numpy as np
from loguru import logger


class RandomSampler:
    """
    Uniform random draws backed by a numpy Generator

    Every sampler owns its own stream. Pass a seed for reproducible runs,
    leave it as None for a fresh random stream.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize Random Sampler

        Args:
            seed: Random seed for reproducibility (None = fresh stream)
        """
        self.seed = seed
        self.rng = np.random.default_rng(seed)

        logger.debug(f"RandomSampler initialized: seed={seed}")

    def uniform_int(self, minimum: float, maximum: float) -> int:
        """
        Draw an integer uniformly from [ceil(minimum), floor(maximum)]

        Non-integer bounds narrow the interval instead of raising. If the
        narrowed interval is empty the lower bound is returned.

        Args:
            minimum: Lower bound (inclusive after ceil)
            maximum: Upper bound (inclusive after floor)

        Returns:
            Random integer
        """
        low = math.ceil(minimum)
        high = math.floor(maximum)
        if high < low:
            return low
        return int(self.rng.integers(low, high, endpoint=True))

    def uniform(self, low: float, high: float) -> float:
        """Continuous draw in [low, high)"""
        return low + self.rng.random() * (high - low)
