"""
Histogram Statistics Module
"""

from .histogram import (
    value_count,
    median,
    standard_deviation,
    likely_range,
    kernel_density_estimate,
)
from .models import ResultSummary

__all__ = [
    "value_count",
    "median",
    "standard_deviation",
    "likely_range",
    "kernel_density_estimate",
    "ResultSummary",
]
