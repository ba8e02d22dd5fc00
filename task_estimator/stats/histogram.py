"""
Histogram Statistics

Statistics computed directly from frequency-compressed histograms, where the
index is the outcome value and the cell is the number of times it occurred.
Functions accept plain sequences or numpy arrays and never mutate them.
"""

from typing import List, Sequence, Tuple, Union
import numpy as np
from scipy import stats as scipy_stats

from ..utils.numbers import round_half_up

HistogramLike = Union[Sequence[int], np.ndarray]

# Kernel density estimate limits
KDE_MAX_SAMPLES = 200
KDE_BANDWIDTH_RATIO = 0.02


def value_count(histogram: HistogramLike) -> int:
    """Total number of values represented by the histogram"""
    return int(np.sum(np.asarray(histogram, dtype=np.int64)))


def median(histogram: HistogramLike) -> float:
    """
    Median of the values represented by the histogram

    Walks the cumulative counts until they pass half of the value count.
    When the half-way point falls exactly on a bucket boundary the median is
    the midpoint to the next occupied value: (i + i+1) / 2 when the next
    bucket holds data, otherwise the middle of the run of empty buckets.

    Args:
        histogram: Frequency array

    Returns:
        Median value (0 for an empty histogram)
    """
    counts = np.asarray(histogram, dtype=np.int64)
    total = int(counts.sum())
    if total == 0:
        return 0.0

    mid_count = total / 2
    cumulative = np.cumsum(counts)
    index = int(np.searchsorted(cumulative, mid_count, side="left"))

    if cumulative[index] > mid_count:
        return float(index)

    # Exactly half the values sit at or below this index
    if index + 1 < len(counts) and counts[index + 1] > 0:
        return (index + (index + 1)) / 2

    gap = 1
    offset = 0.0
    for j in range(index + 2, len(counts)):
        if counts[j] == 0:
            gap += 1
        else:
            offset = gap / 2
            break
    return index + offset + 0.5


def standard_deviation(histogram: HistogramLike) -> float:
    """
    Frequency-weighted sample standard deviation

    Args:
        histogram: Frequency array

    Returns:
        Standard deviation (0 when fewer than two values)
    """
    counts = np.asarray(histogram, dtype=np.float64)
    total = counts.sum()
    if total <= 1:
        return 0.0

    values = np.arange(len(counts), dtype=np.float64)
    mean = float((values * counts).sum() / total)
    variance = float((counts * (values - mean) ** 2).sum() / (total - 1))
    return float(np.sqrt(variance))


def likely_range(median_value: float, sd: float) -> Tuple[int, int]:
    """Median +/- one standard deviation, rounded"""
    return round_half_up(median_value - sd), round_half_up(median_value + sd)


def kernel_density_estimate(
    histogram: HistogramLike,
    min_index: int,
    max_index: int
) -> List[float]:
    """
    Gaussian kernel density estimate over [min_index, max_index]

    The curve is rescaled so its peak equals the highest frequency in the
    range, for overlay on a frequency-scaled chart.

    Args:
        histogram: Frequency array
        min_index: First outcome value in the plotted range
        max_index: Last outcome value in the plotted range

    Returns:
        Up to 200 density samples, evenly spaced from min_index
    """
    window = np.asarray(histogram, dtype=np.float64)[min_index:max_index + 1]
    value_range = max_index - min_index
    if value_range <= 0 or window.size == 0:
        return []

    bandwidth = max(value_range * KDE_BANDWIDTH_RATIO, 1)
    sample_count = int(min(KDE_MAX_SAMPLES, value_range))
    step = value_range / sample_count
    sample_points = min_index + np.arange(sample_count) * step

    occupied = np.nonzero(window > 0)[0]
    if occupied.size == 0:
        return [0.0] * sample_count

    data_points = occupied + min_index
    weights = window[occupied]
    distances = sample_points[:, None] - data_points[None, :]
    kernel = scipy_stats.norm.pdf(distances / bandwidth)
    density = (kernel * weights[None, :]).sum(axis=1) / (window.sum() * bandwidth)

    scale = window.max() / density.max()
    return (density * scale).tolist()
