from __future__ import annotations
import bisect
import math
from collections import deque
from typing import Any, Deque, Dict, Generic, Iterator, List, Optional, Self

import numpy as np

from onlinestats.core.domain.errors import InvalidParameterError, ThawError
from onlinestats.core.domain.frozen import as_builtin, is_sorted, require, require_numbers
from onlinestats.core.ports.numeric import N


class SortedWindow(Generic[N]):
    """Last `capacity` values kept both in arrival order and in sorted order.

    The FIFO deque decides which value leaves the window; the sorted list
    answers rank queries. Both always hold the same multiset.
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise InvalidParameterError(f"Window capacity must be an integer >= 1, got {capacity!r}")
        self.capacity = capacity
        self._fifo: Deque[N] = deque()
        self._sorted: List[N] = []

    def __len__(self) -> int:
        return len(self._fifo)

    def __iter__(self) -> Iterator[N]:
        return iter(self._fifo)

    @property
    def is_full(self) -> bool:
        return len(self._fifo) == self.capacity

    def push(self, value: N) -> Optional[N]:
        """Insert `value`, evicting the oldest one if the window is full.

        Returns the evicted value, or None while the window is filling up.
        """
        if value != value:
            raise ValueError("NaN cannot be ranked inside a sorted window")

        evicted = None
        if len(self._fifo) == self.capacity:
            evicted = self._fifo.popleft()
            # Any equal entry will do: rank queries only depend on the multiset.
            pos = bisect.bisect_left(self._sorted, evicted)
            del self._sorted[pos]

        self._fifo.append(value)
        bisect.insort(self._sorted, value)
        return evicted

    def oldest(self) -> N:
        if not self._fifo:
            raise IndexError("oldest() on an empty window")
        return self._fifo[0]

    def rank(self, k: int) -> N:
        """Value at sorted position `k` (0 is the smallest)."""
        if not 0 <= k < len(self._sorted):
            raise IndexError(f"Rank {k} out of range for a window holding {len(self._sorted)} values")
        return self._sorted[k]

    def front(self) -> N:
        return self.rank(0)

    def back(self) -> N:
        return self.rank(len(self._sorted) - 1)

    def quantile(self, q: float) -> float:
        """Linearly interpolated `q`-quantile of the current contents, NaN when empty."""
        n = len(self._sorted)
        if n == 0:
            return math.nan

        idx = q * (n - 1)
        lower = min(int(math.floor(idx)), n - 1)
        higher = min(lower + 1, n - 1)
        frac = idx - lower

        low = float(self._sorted[lower])
        high = float(self._sorted[higher])
        if frac == 0 or low == high:
            return low
        return low + (high - low) * frac

    def sorted_values(self) -> List[N]:
        return list(self._sorted)

    def as_array(self) -> np.ndarray:
        """Window contents in arrival order."""
        return np.array([float(v) for v in self._fifo], dtype=float)

    def clear(self):
        self._fifo.clear()
        self._sorted.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "values": [as_builtin(v) for v in self._fifo],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        capacity = require(data, "capacity", int)
        if capacity < 1:
            raise ThawError(f"Window capacity must be >= 1, got {capacity}")

        values = require_numbers(data, "values")
        if len(values) > capacity:
            raise ThawError(
                f"Window holds {len(values)} values but its capacity is {capacity}"
            )
        if any(v != v for v in values):
            raise ThawError("Window contents cannot hold NaN")

        window = cls(capacity)
        window._fifo.extend(values)
        window._sorted = sorted(values)

        if "sorted" in data:
            sorted_values = require_numbers(data, "sorted")
            if not is_sorted(sorted_values) or sorted_values != window._sorted:
                raise ThawError("Sorted contents do not match the window contents")

        return window
