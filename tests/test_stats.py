"""
Tests for histogram statistics module
"""

import math

import pytest
import numpy as np

from task_estimator.stats.histogram import (
    value_count, median, standard_deviation, likely_range, kernel_density_estimate
)
from task_estimator.stats.models import ResultSummary
from task_estimator.utils.numbers import round_half_up, percent_to_fraction

BELL_CURVE = [0, 1, 2, 3, 4, 5, 6, 5, 4, 3, 2, 1]


class TestValueCount:
    """Test histogram value counts"""

    def test_short_list(self):
        """Test [0, 1, 3, 1] represents [1, 2, 2, 2, 3]"""
        assert value_count([0, 1, 3, 1]) == 5

    def test_larger_list(self):
        assert value_count(BELL_CURVE) == 36

    def test_numpy_array(self):
        assert value_count(np.array([0, 4, 0, 2])) == 6

    def test_empty(self):
        assert value_count([]) == 0


class TestMedian:
    """Test median from compressed histograms"""

    def test_simple(self):
        # [1, 2, 2, 2, 3]
        assert median([0, 1, 3, 1]) == 2

    def test_last_value(self):
        # [2, 2, 2, 2, 2]
        assert median([0, 0, 5]) == 2

    def test_between_adjacent_values(self):
        # [2, 2, 2, 2, 3, 4, 4, 4]
        assert median([0, 0, 4, 1, 3]) == 2.5

    def test_one_space_between_values(self):
        # [2, 2, 2, 2, 4, 4, 4, 4]
        assert median([0, 0, 4, 0, 4]) == 3

    def test_two_spaces_between_values(self):
        # [2, 2, 2, 2, 5, 5, 5, 5]
        assert median([0, 0, 4, 0, 0, 4]) == 3.5

    def test_three_spaces_between_values(self):
        # [2, 2, 2, 2, 6, 6, 6, 6]
        assert median([0, 0, 4, 0, 0, 0, 4]) == 4

    def test_gap_in_list(self):
        # [2,2,2,2,3,4,4,4,4,4,4,5,5,5,5,5,5,7,7,7,8,8,8,8]
        assert median([0, 0, 4, 1, 6, 6, 0, 3, 4]) == 5

    def test_bell_curve(self):
        assert median(BELL_CURVE) == 6

    def test_all_zeros(self):
        """Test a histogram with no data has median 0"""
        assert median([0, 0, 0]) == 0

    def test_numpy_input_not_mutated(self):
        histogram = np.array([0, 1, 3, 1])

        median(histogram)

        assert histogram.tolist() == [0, 1, 3, 1]

    def test_within_observed_range(self):
        """Test median lies between the smallest and largest occupied index"""
        rng = np.random.default_rng(9)
        for _ in range(50):
            histogram = rng.integers(0, 4, size=30)
            histogram[rng.integers(0, 30, size=10)] = 0
            if histogram.sum() == 0:
                continue
            occupied = np.nonzero(histogram)[0]

            assert occupied[0] <= median(histogram) <= occupied[-1]


class TestStandardDeviation:
    """Test weighted sample standard deviation"""

    def test_bell_curve(self):
        assert standard_deviation(BELL_CURVE) == pytest.approx(2.449489743, abs=1e-9)

    def test_single_bucket(self):
        """Test all mass in one bucket has zero spread"""
        assert standard_deviation([0, 0, 0, 12]) == 0

    def test_single_value(self):
        assert standard_deviation([0, 1]) == 0

    def test_empty(self):
        assert standard_deviation([0, 0, 0]) == 0

    def test_matches_numpy_sample_std(self):
        """Test against numpy on the expanded values"""
        histogram = [0, 2, 0, 5, 1, 0, 3]
        expanded = np.repeat(np.arange(len(histogram)), histogram)

        assert standard_deviation(histogram) == pytest.approx(np.std(expanded, ddof=1))


class TestLikelyRange:
    """Test likely range rounding"""

    def test_likely_range(self):
        assert likely_range(6, 2.449489743) == (4, 8)

    def test_half_rounds_up(self):
        assert likely_range(5, 1.5) == (4, 7)

    def test_zero_spread(self):
        assert likely_range(3, 0) == (3, 3)


class TestKernelDensityEstimate:
    """Test kernel density estimate for chart overlays"""

    def test_returns_density_values(self):
        data = [1, 2, 3, 4, 5, 6, 5, 4, 3, 2, 1]
        kde = kernel_density_estimate(data, 0, 10)

        assert isinstance(kde, list)
        assert 0 < len(kde) <= 200

    def test_peak_matches_histogram_peak(self):
        """Test the KDE peak sits at the histogram peak and is scaled to it"""
        data = [1, 2, 3, 4, 5, 6, 5, 4, 3, 2, 1]
        kde = kernel_density_estimate(data, 0, 10)

        assert int(np.argmax(kde)) == 5
        assert max(kde) == pytest.approx(6)

    def test_uniform_distribution(self):
        kde = kernel_density_estimate([5, 5, 5, 5, 5], 0, 4)

        assert len(kde) > 0
        assert all(v >= 0 for v in kde)

    def test_sparse_data(self):
        kde = kernel_density_estimate([10, 0, 0, 0, 0, 0, 0, 0, 0, 10], 0, 9)
        peak = max(kde)

        assert len(kde) > 0
        assert len([v for v in kde if v > peak * 0.7]) > 0

    def test_offset_window(self):
        """Test the window is taken from min_index of the full histogram"""
        histogram = [0, 0, 0, 5, 10, 5]
        kde = kernel_density_estimate(histogram, 3, 5)

        assert len(kde) == 2
        assert int(np.argmax(kde)) == 1

    def test_sample_points_capped(self):
        histogram = np.zeros(1001, dtype=np.int64)
        histogram[400:600] = 3
        kde = kernel_density_estimate(histogram, 0, 1000)

        assert len(kde) == 200

    def test_single_point_range(self):
        assert kernel_density_estimate([0, 5], 1, 1) == []

    def test_empty_window(self):
        kde = kernel_density_estimate([0, 0, 0, 0], 0, 3)

        assert kde == [0.0, 0.0, 0.0]


class TestResultSummary:
    """Test summaries built from histograms"""

    def test_from_histogram(self):
        summary = ResultSummary.from_histogram([0, 1, 3, 1], 1, 3)

        assert summary.min == 1
        assert summary.max == 3
        assert summary.median == 2
        assert summary.standard_deviation == pytest.approx(math.sqrt(0.5))
        assert summary.likely_min == 1
        assert summary.likely_max == 3
        assert summary.histogram == [0, 1, 3, 1]
        assert value_count(summary.histogram) == 5

    def test_histogram_is_a_copy(self):
        """Test the summary does not share memory with the live histogram"""
        live = np.array([0, 2, 2])
        summary = ResultSummary.from_histogram(live, 1, 2)

        live[1] = 100

        assert summary.histogram == [0, 2, 2]

    def test_empty_summary(self):
        summary = ResultSummary.from_histogram([0, 0, 0])

        assert summary.min is None
        assert summary.max is None
        assert summary.median == 0
        assert summary.standard_deviation == 0
        assert summary.likely_min == 0
        assert summary.likely_max == 0

    def test_to_dict(self):
        d = ResultSummary.from_histogram(BELL_CURVE, 1, 11).to_dict()

        assert d["median"] == 6
        assert d["standard_deviation"] == 2.45
        assert d["likely_min"] == 4
        assert d["likely_max"] == 8
        assert "histogram" not in d


class TestNumbers:
    """Test numeric helpers"""

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.4999) == 2
        assert round_half_up(-2.5) == -2

    def test_percent_to_fraction(self):
        assert percent_to_fraction(80) == pytest.approx(0.8)
        assert percent_to_fraction(None) is None
