from __future__ import annotations
import math
from collections import deque
from typing import Any, Deque, Dict, Self, Type

import numpy as np

from onlinestats.core.domain.errors import InvalidParameterError, ThawError
from onlinestats.core.domain.frozen import as_builtin, require, require_numbers, require_quantile
from onlinestats.core.domain.sorted_window import SortedWindow
from onlinestats.core.ports.numeric import N
from onlinestats.core.ports.statistic import RollableUnivariate, Univariate
from onlinestats.core.services.moments import Mean, Sum, Variance
from onlinestats.core.services.quantile import validate_quantile

ROLLABLE: Dict[str, Type[RollableUnivariate]] = {
    "sum": Sum,
    "mean": Mean,
    "variance": Variance,
}


def _rollable_name(stat: RollableUnivariate) -> str:
    for name, cls in ROLLABLE.items():
        if type(stat) is cls:
            return name
    raise TypeError(f"{type(stat).__name__} has no frozen form inside a rolling window")


def _observed(stat: RollableUnivariate) -> int | None:
    if isinstance(stat, Mean):
        return stat.n
    if isinstance(stat, Variance):
        return stat.mean.n
    return None


class Rolling(Univariate[N]):
    """
    Restrict a revertable statistic to the last `window_size` observations.

    Inputs are kept in a circular buffer. Once it is full, the oldest value is
    reverted out of the wrapped statistic before the new one is folded in, so
    `get()` always equals the wrapped statistic computed over the buffer.

    Example:
        rolling_sum = Rolling(Sum(), 2)
        for x in [9, 7, 3]:
            rolling_sum.update(x)
        rolling_sum.get()  # 10.0
    """

    def __init__(self, stat: RollableUnivariate[N], window_size: int):
        if not isinstance(stat, RollableUnivariate):
            raise TypeError(f"{type(stat).__name__} cannot be reverted and therefore cannot be rolled")
        if isinstance(window_size, bool) or not isinstance(window_size, int) or window_size < 1:
            raise InvalidParameterError(f"Window size must be an integer >= 1, got {window_size!r}")
        self.stat = stat
        self.window_size = window_size
        self.window: Deque[N] = deque()

    def update(self, x: N) -> None:
        if len(self.window) == self.window_size:
            self.stat.revert(self.window.popleft())
        self.window.append(x)
        self.stat.update(x)

    def get(self) -> float:
        return self.stat.get()

    def clear(self) -> None:
        self.window.clear()
        self.stat.clear()

    def as_array(self) -> np.ndarray:
        return np.array([float(v) for v in self.window], dtype=float)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "window_size": self.window_size,
            "values": [as_builtin(v) for v in self.window],
            "stat": {"type": _rollable_name(self.stat), "state": self.stat.to_dict()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        window_size = require(data, "window_size", int)
        if window_size < 1:
            raise ThawError(f"Window size must be >= 1, got {window_size}")
        values = require_numbers(data, "values")
        if len(values) > window_size:
            raise ThawError(f"Window holds {len(values)} values but its size is {window_size}")

        frozen = require(data, "stat", dict)
        name = require(frozen, "type", str)
        if name not in ROLLABLE:
            # Only revertable statistics can sit inside a rolling window.
            raise ThawError(f"Unknown rollable statistic '{name}'")
        stat = ROLLABLE[name].from_dict(require(frozen, "state", dict))

        seen = _observed(stat)
        if seen is not None and seen != len(values):
            raise ThawError(f"Wrapped statistic saw {seen} values but the window holds {len(values)}")

        rolling = cls(stat, window_size)
        rolling.window.extend(values)
        return rolling


class _SortedWindowStatistic(Univariate[N]):
    """Order statistic served from a `SortedWindow` of the last observations."""

    def __init__(self, window_size: int):
        self.window: SortedWindow[N] = SortedWindow(window_size)

    @property
    def window_size(self) -> int:
        return self.window.capacity

    def update(self, x: N) -> None:
        self.window.push(x)

    def clear(self) -> None:
        self.window.clear()

    def _params(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def _from_params(cls, data: Dict[str, Any], window_size: int) -> Self:
        return cls(window_size)

    def to_dict(self) -> Dict[str, Any]:
        return {**self._params(), "window": self.window.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        window = SortedWindow.from_dict(require(data, "window", dict))
        stat = cls._from_params(data, window.capacity)
        stat.window = window
        return stat


class RollingMin(_SortedWindowStatistic[N]):
    def get(self) -> float:
        if len(self.window) == 0:
            return math.nan
        return float(self.window.front())


class RollingMax(_SortedWindowStatistic[N]):
    def get(self) -> float:
        if len(self.window) == 0:
            return math.nan
        return float(self.window.back())


class RollingPeakToPeak(_SortedWindowStatistic[N]):
    def get(self) -> float:
        if len(self.window) == 0:
            return math.nan
        return float(self.window.back()) - float(self.window.front())


class RollingQuantile(_SortedWindowStatistic[N]):
    """
    Exact quantile of the last `window_size` observations.

    Linearly interpolates between the two ranks around q * (len - 1), so the
    median of an even-sized window is the mean of the two middle values.
    """

    def __init__(self, q: float, window_size: int):
        self.q = validate_quantile(q)
        super().__init__(window_size)

    def get(self) -> float:
        return self.window.quantile(self.q)

    def _params(self) -> Dict[str, Any]:
        return {"q": self.q}

    @classmethod
    def _from_params(cls, data: Dict[str, Any], window_size: int) -> Self:
        return cls(require_quantile(data, "q"), window_size)


class RollingIQR(_SortedWindowStatistic[N]):
    """Gap between the q_sup and q_inf quantiles of the last `window_size` observations."""

    def __init__(self, window_size: int, q_inf: float = 0.25, q_sup: float = 0.75):
        self.q_inf = validate_quantile(q_inf)
        self.q_sup = validate_quantile(q_sup)
        if self.q_inf >= self.q_sup:
            raise InvalidParameterError(
                f"q_inf must be strictly less than q_sup, got {self.q_inf} >= {self.q_sup}"
            )
        super().__init__(window_size)

    def get(self) -> float:
        return self.window.quantile(self.q_sup) - self.window.quantile(self.q_inf)

    def _params(self) -> Dict[str, Any]:
        return {"q_inf": self.q_inf, "q_sup": self.q_sup}

    @classmethod
    def _from_params(cls, data: Dict[str, Any], window_size: int) -> Self:
        q_inf = require_quantile(data, "q_inf")
        q_sup = require_quantile(data, "q_sup")
        if q_inf >= q_sup:
            raise ThawError("q_inf must be strictly less than q_sup")
        return cls(window_size, q_inf, q_sup)
