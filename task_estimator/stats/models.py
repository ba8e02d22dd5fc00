"""
Data models for histogram statistics
"""

from typing import Dict, List, Optional
import numpy as np
from pydantic import BaseModel, Field

from .histogram import HistogramLike, median, standard_deviation, likely_range


class ResultSummary(BaseModel):
    """Read-only statistical view over one histogram"""
    min: Optional[int] = Field(default=None, description="Smallest observed outcome")
    max: Optional[int] = Field(default=None, description="Largest observed outcome")
    median: float = Field(default=0.0, description="Median outcome")
    standard_deviation: float = Field(default=0.0, description="Sample standard deviation")
    likely_min: int = Field(default=0, description="Median minus one standard deviation, rounded")
    likely_max: int = Field(default=0, description="Median plus one standard deviation, rounded")
    histogram: List[int] = Field(
        default_factory=list,
        description="Frequency array: outcome value -> occurrence count"
    )

    @classmethod
    def from_histogram(
        cls,
        histogram: HistogramLike,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None
    ) -> "ResultSummary":
        """Build a summary from the current histogram state"""
        median_value = median(histogram)
        sd = standard_deviation(histogram)
        low, high = likely_range(median_value, sd)
        return cls(
            min=min_value,
            max=max_value,
            median=median_value,
            standard_deviation=sd,
            likely_min=low,
            likely_max=high,
            histogram=np.asarray(histogram, dtype=np.int64).tolist()
        )

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Statistics without the histogram"""
        return {
            "min": self.min,
            "max": self.max,
            "median": round(self.median, 2),
            "standard_deviation": round(self.standard_deviation, 2),
            "likely_min": self.likely_min,
            "likely_max": self.likely_max,
        }
