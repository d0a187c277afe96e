import math
import random
import unittest

import numpy as np

from onlinestats.core.domain.errors import InvalidParameterError, ThawError
from onlinestats.core.domain.sorted_window import SortedWindow


class TestSortedWindow(unittest.TestCase):
    def setUp(self):
        self.window = SortedWindow(3)

    def test_rejects_invalid_capacity(self):
        for capacity in (0, -1, True, 2.5):
            with self.assertRaises(InvalidParameterError):
                SortedWindow(capacity)

    def test_push_returns_evicted_value(self):
        self.assertIsNone(self.window.push(9))
        self.assertIsNone(self.window.push(7))
        self.assertIsNone(self.window.push(3))
        self.assertTrue(self.window.is_full)

        self.assertEqual(self.window.push(2), 9)
        self.assertEqual(self.window.push(6), 7)
        self.assertEqual(list(self.window), [3, 2, 6])
        self.assertEqual(self.window.sorted_values(), [2, 3, 6])
        self.assertEqual(len(self.window), 3)

    def test_rank_queries(self):
        for x in [5, 1, 4]:
            self.window.push(x)

        self.assertEqual(self.window.front(), 1)
        self.assertEqual(self.window.rank(1), 4)
        self.assertEqual(self.window.back(), 5)
        self.assertEqual(self.window.oldest(), 5)

    def test_rank_out_of_range(self):
        with self.assertRaises(IndexError):
            self.window.rank(0)
        with self.assertRaises(IndexError):
            self.window.front()
        with self.assertRaises(IndexError):
            self.window.oldest()

        self.window.push(1.0)
        with self.assertRaises(IndexError):
            self.window.rank(1)
        with self.assertRaises(IndexError):
            self.window.rank(-1)

    def test_rejects_nan(self):
        with self.assertRaises(ValueError):
            self.window.push(math.nan)
        self.assertEqual(len(self.window), 0)

    def test_clear(self):
        for x in [1, 2, 3, 4]:
            self.window.push(x)
        self.window.clear()

        self.assertEqual(len(self.window), 0)
        self.assertEqual(self.window.sorted_values(), [])
        self.assertTrue(math.isnan(self.window.quantile(0.5)))


def test_sorted_view_matches_fifo_contents():
    random.seed(3)
    window = SortedWindow(7)
    for _ in range(500):
        # Small range to force plenty of duplicates.
        window.push(random.randint(0, 5))
        assert window.sorted_values() == sorted(window)
        assert len(window) <= 7


def test_capacity_one():
    window = SortedWindow(1)
    for x in [4.0, -2.0, 8.0]:
        window.push(x)
        assert list(window) == [x]
        assert window.front() == window.back() == x
        assert window.quantile(0.0) == window.quantile(1.0) == x


def test_quantile_interpolates_between_ranks():
    window = SortedWindow(10)
    assert math.isnan(window.quantile(0.5))

    window.push(3.0)
    assert window.quantile(0.5) == 3.0

    for x in [1.0, 4.0, 2.0]:
        window.push(x)
    assert window.quantile(0.5) == 2.5
    assert window.quantile(0.0) == 1.0
    assert window.quantile(1.0) == 4.0
    assert np.isclose(window.quantile(0.3), np.quantile([1, 2, 3, 4], 0.3))


def test_as_array_keeps_arrival_order():
    window = SortedWindow(3)
    for x in [3, 1, 2, 5]:
        window.push(x)
    np.testing.assert_array_equal(window.as_array(), np.array([1.0, 2.0, 5.0]))


def test_to_from_dict_keeps_fifo_order():
    window = SortedWindow(4)
    for x in [4, 1, 3, 2, 0]:
        window.push(x)

    restored = SortedWindow.from_dict(window.to_dict())
    assert list(restored) == [1, 3, 2, 0]
    assert restored.sorted_values() == [0, 1, 2, 3]

    # The next eviction must hit the same value in both.
    assert restored.push(9) == window.push(9) == 1


def test_from_dict_rejects_malformed_state():
    bad_states = [
        {"capacity": 0, "values": []},
        {"capacity": 2, "values": [1, 2, 3]},
        {"capacity": 2, "values": ["a"]},
        {"capacity": 2},
        {"values": [1]},
        {"capacity": 2, "values": [2, 1], "sorted": [2, 1]},
        {"capacity": 3, "values": [2, 1], "sorted": [1, 3]},
    ]
    for state in bad_states:
        try:
            SortedWindow.from_dict(state)
        except ThawError:
            continue
        raise AssertionError(f"state was accepted: {state}")
