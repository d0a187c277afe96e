import math
import unittest

import numpy as np
import pytest

from onlinestats.core.domain.errors import InvalidParameterError
from onlinestats.core.services.extrema import Max, Min, PeakToPeak
from onlinestats.core.services.moments import Count, Mean, Sum, Variance
from onlinestats.core.services.quantile import Quantile
from onlinestats.core.services.rolling import (
    Rolling,
    RollingIQR,
    RollingMax,
    RollingMin,
    RollingPeakToPeak,
    RollingQuantile,
)

DATA = [9, 7, 3, 2, 6, 1, 8, 5, 4]


def same(a: float, b: float) -> bool:
    return (math.isnan(a) and math.isnan(b)) or a == b


class TestRolling(unittest.TestCase):
    def test_rolling_sum(self):
        rolling_sum = Rolling(Sum(), 2)
        totals = []
        for x in DATA:
            rolling_sum.update(float(x))
            totals.append(rolling_sum.get())

        self.assertEqual(totals, [9, 16, 10, 5, 8, 7, 9, 13, 9])
        self.assertEqual(rolling_sum.get(), 9.0)

    def test_rolling_variance(self):
        rolling_var = Rolling(Variance(), 2)
        for x in DATA:
            rolling_var.update(float(x))
        self.assertEqual(rolling_var.get(), 0.5)

    def test_rolling_mean_tracks_window(self):
        rng = np.random.default_rng(5)
        data = rng.normal(size=300).tolist()
        rolling_mean = Rolling(Mean(), 25)
        rolling_var = Rolling(Variance(), 25)

        for i, x in enumerate(data):
            rolling_mean.update(x)
            rolling_var.update(x)
            window = data[max(0, i - 24): i + 1]
            self.assertAlmostEqual(rolling_mean.get(), np.mean(window), places=9)
            if len(window) > 1:
                self.assertAlmostEqual(rolling_var.get(), np.var(window, ddof=1), places=9)

    def test_rolling_variance_never_negative(self):
        rolling_var = Rolling(Variance(), 3)
        for x in [1e8 + 0.3, 1e8 + 0.7, 1e8 + 0.1] + [1e8] * 50:
            rolling_var.update(x)
            self.assertGreaterEqual(rolling_var.get(), 0.0)
        self.assertAlmostEqual(rolling_var.get(), 0.0, delta=1e-6)

        rng = np.random.default_rng(9)
        rolling_var = Rolling(Variance(), 4)
        for x in 1e6 + rng.integers(0, 3, size=2000) * 0.1:
            rolling_var.update(float(x))
            self.assertGreaterEqual(rolling_var.get(), 0.0)

    def test_rejects_zero_window(self):
        with self.assertRaises(InvalidParameterError):
            Rolling(Sum(), 0)
        with self.assertRaises(InvalidParameterError):
            Rolling(Sum(), -3)

    def test_rejects_non_revertable_statistics(self):
        for stat in (Count(), Min(), Max(), PeakToPeak(), Quantile(0.5)):
            with self.assertRaises(TypeError):
                Rolling(stat, 3)

    def test_window_of_one(self):
        rolling_mean = Rolling(Mean(), 1)
        for x in DATA:
            rolling_mean.update(x)
            self.assertEqual(rolling_mean.get(), x)

    def test_clear(self):
        rolling_sum = Rolling(Sum(), 3)
        for x in DATA:
            rolling_sum.update(x)
        rolling_sum.clear()
        self.assertEqual(rolling_sum.get(), 0.0)
        self.assertEqual(len(rolling_sum.window), 0)

        rolling_sum.update(2)
        self.assertEqual(rolling_sum.get(), 2.0)

    def test_as_array(self):
        rolling_sum = Rolling(Sum(), 3)
        for x in DATA:
            rolling_sum.update(x)
        np.testing.assert_array_equal(rolling_sum.as_array(), np.array([8.0, 5.0, 4.0]))


@pytest.mark.parametrize("make", [Sum, Mean, Variance, lambda: Variance(0)])
def test_full_length_window_equals_unbounded(make):
    rng = np.random.default_rng(9)
    data = rng.normal(size=50).tolist()
    rolling = Rolling(make(), len(data))
    plain = make()
    for x in data:
        rolling.update(x)
        plain.update(x)
        assert same(rolling.get(), plain.get())


@pytest.mark.parametrize(
    "rolling_cls, plain_cls",
    [(RollingMin, Min), (RollingMax, Max), (RollingPeakToPeak, PeakToPeak)],
)
def test_full_length_order_statistics_equal_unbounded(rolling_cls, plain_cls):
    rolling = rolling_cls(len(DATA))
    plain = plain_cls()
    for x in DATA:
        rolling.update(x)
        plain.update(x)
        assert rolling.get() == plain.get()


def test_rolling_min_max_window_three():
    lo = RollingMin(3)
    hi = RollingMax(3)
    ptp = RollingPeakToPeak(3)
    for i, x in enumerate(DATA):
        lo.update(x)
        hi.update(x)
        ptp.update(x)
        window = DATA[max(0, i - 2): i + 1]
        assert lo.get() == min(window)
        assert hi.get() == max(window)
        assert ptp.get() == max(window) - min(window)


def test_empty_order_statistics_are_nan():
    for stat in (RollingMin(3), RollingMax(3), RollingPeakToPeak(3), RollingQuantile(0.5, 3), RollingIQR(3)):
        assert math.isnan(stat.get())


def test_rolling_median_of_zero_to_hundred():
    median = RollingQuantile(0.5, 101)
    for i in range(101):
        median.update(float(i))
    assert median.get() == 50.0


@pytest.mark.parametrize("q", [0.0, 0.1, 0.5, 0.75, 1.0])
def test_rolling_quantile_matches_numpy(q):
    rng = np.random.default_rng(21)
    data = rng.integers(0, 20, size=200).tolist()
    stat = RollingQuantile(q, 10)
    for i, x in enumerate(data):
        stat.update(x)
        window = data[max(0, i - 9): i + 1]
        assert stat.get() == pytest.approx(np.quantile(window, q))


def test_rolling_iqr_matches_numpy():
    rng = np.random.default_rng(4)
    data = rng.normal(size=100).tolist()
    stat = RollingIQR(20)
    for i, x in enumerate(data):
        stat.update(x)
        window = data[max(0, i - 19): i + 1]
        expected = np.quantile(window, 0.75) - np.quantile(window, 0.25)
        assert stat.get() == pytest.approx(expected)


def test_rolling_quantile_window_of_one():
    stat = RollingQuantile(0.9, 1)
    for x in DATA:
        stat.update(x)
        assert stat.get() == x


def test_constant_stream():
    stats = [RollingMin(3), RollingMax(3), RollingQuantile(0.5, 3)]
    for _ in range(5):
        for stat in stats:
            stat.update(5)
            assert stat.get() == 5.0


def test_invalid_parameters():
    with pytest.raises(InvalidParameterError):
        RollingMin(0)
    with pytest.raises(InvalidParameterError):
        RollingQuantile(1.5, 3)
    with pytest.raises(InvalidParameterError):
        RollingQuantile(0.5, 0)
    with pytest.raises(InvalidParameterError):
        RollingIQR(5, 0.8, 0.2)


def test_window_size_property():
    assert RollingQuantile(0.5, 7).window_size == 7
