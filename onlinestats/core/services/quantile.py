from __future__ import annotations
import bisect
import logging
import math
from typing import Any, Dict, List, Self

from onlinestats.core.domain.errors import InvalidParameterError, ThawError
from onlinestats.core.domain.frozen import (
    as_builtin,
    is_sorted,
    require,
    require_numbers,
    require_quantile,
)
from onlinestats.core.ports.numeric import N
from onlinestats.core.ports.statistic import Univariate

logger = logging.getLogger(__name__)

MARKERS = 5


def validate_quantile(q: Any) -> float:
    if isinstance(q, bool) or not isinstance(q, (int, float)):
        raise InvalidParameterError(f"q must be a number in [0, 1], got {q!r}")
    if math.isnan(q) or not 0.0 <= q <= 1.0:
        raise InvalidParameterError(f"q must lie in [0, 1], got {q}")
    return float(q)


class Quantile(Univariate[N]):
    """
    Running quantile estimate with the P² algorithm.

    Five markers track the minimum, the q/2, q and (1+q)/2 quantiles and the
    maximum. Each update nudges the three inner markers towards their desired
    ranks using a piecewise-parabolic fit, falling back to linear interpolation
    when the parabola would break the ordering of the markers. Memory stays
    constant whatever the length of the stream; the estimate is approximate.

    The first five observations are kept sorted and reported exactly.

    References:
        Jain & Chlamtac, "The P² algorithm for dynamic calculation of quantiles
        and histograms without storing observations", CACM 28(10), 1985.
    """

    def __init__(self, q: float = 0.5):
        self.q = validate_quantile(q)
        self.increments = [0.0, self.q / 2, self.q, (1 + self.q) / 2, 1.0]
        self.n = 0
        self.heights: List[N] = []
        self.positions: List[int] = []
        self.desired: List[float] = []

    def _init_markers(self):
        q = self.q
        self.positions = [1, 2, 3, 4, 5]
        self.desired = [1.0, 1 + 2 * q, 1 + 4 * q, 3 + 2 * q, 5.0]
        logger.debug("P2 markers for q=%s initialised at %s", q, self.heights)

    def _find_cell(self, x: N) -> int:
        h = self.heights
        if x < h[0]:
            h[0] = x
            return 0
        if not x < h[4]:
            if h[4] < x:
                h[4] = x
            return MARKERS - 2
        k = 1
        while not x < h[k]:
            k += 1
        return k - 1

    def _parabolic(self, i: int, d: int) -> float:
        n = self.positions
        h = self.heights
        return h[i] + d / (n[i + 1] - n[i - 1]) * (
            (n[i] - n[i - 1] + d) * (h[i + 1] - h[i]) / (n[i + 1] - n[i])
            + (n[i + 1] - n[i] - d) * (h[i] - h[i - 1]) / (n[i] - n[i - 1])
        )

    def _linear(self, i: int, d: int) -> float:
        n = self.positions
        h = self.heights
        return h[i] + d * (h[i + d] - h[i]) / (n[i + d] - n[i])

    def _adjust(self):
        n = self.positions
        h = self.heights
        for i in range(1, MARKERS - 1):
            drift = self.desired[i] - n[i]
            # The neighbour gap check keeps positions strictly increasing.
            if (drift >= 1 and n[i + 1] - n[i] > 1) or (drift <= -1 and n[i - 1] - n[i] < -1):
                d = 1 if drift > 0 else -1
                candidate = self._parabolic(i, d)
                if h[i - 1] < candidate < h[i + 1]:
                    h[i] = candidate
                else:
                    h[i] = self._linear(i, d)
                n[i] += d

    def update(self, x: N) -> None:
        if not math.isfinite(x):
            raise ValueError(f"Only finite values can be folded into a quantile estimate, got {x}")

        self.n += 1
        if len(self.heights) < MARKERS:
            bisect.insort(self.heights, x)
            if len(self.heights) == MARKERS:
                self._init_markers()
            return

        k = self._find_cell(x)
        for i in range(k + 1, MARKERS):
            self.positions[i] += 1
        for i in range(MARKERS):
            self.desired[i] += self.increments[i]
        self._adjust()

    def get(self) -> float:
        if self.n == 0:
            return math.nan
        if self.n <= MARKERS:
            idx = min(self.n - 1, int(math.floor(self.n * self.q)))
            return float(self.heights[idx])
        # The outer markers hold the exact extremes.
        if self.q == 0.0:
            return float(self.heights[0])
        if self.q == 1.0:
            return float(self.heights[-1])
        return float(self.heights[2])

    def clear(self) -> None:
        self.n = 0
        self.heights = []
        self.positions = []
        self.desired = []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "q": self.q,
            "n": self.n,
            "heights": [as_builtin(h) for h in self.heights],
            "positions": list(self.positions),
            "desired": list(self.desired),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        stat = cls(require_quantile(data, "q"))

        n = require(data, "n", int)
        if n < 0:
            raise ThawError(f"Observation count cannot be negative, got {n}")
        heights = require_numbers(data, "heights")
        positions = require(data, "positions", list)
        desired = require_numbers(data, "desired")

        if len(heights) != min(n, MARKERS):
            raise ThawError(f"Expected {min(n, MARKERS)} marker heights for n={n}, got {len(heights)}")
        if not all(math.isfinite(v) for v in heights + desired):
            raise ThawError("Marker heights and desired positions must be finite")
        if not is_sorted(heights):
            raise ThawError(f"Marker heights must be ascending, got {heights}")

        if n >= MARKERS:
            if len(positions) != MARKERS or len(desired) != MARKERS:
                raise ThawError("Expected five marker positions and five desired positions")
            if any(isinstance(p, bool) or not isinstance(p, int) for p in positions):
                raise ThawError(f"Marker positions must be integers, got {positions}")
            if not is_sorted(positions, strict=True) or positions[0] != 1 or positions[-1] != n:
                raise ThawError(f"Marker positions must increase strictly from 1 to {n}, got {positions}")
        elif positions or desired:
            raise ThawError("Marker positions cannot be set before five observations")

        stat.n = n
        stat.heights = heights
        stat.positions = list(positions)
        stat.desired = desired
        return stat


class IQR(Univariate[N]):
    """Interquartile range, the gap between two running P² quantile estimates."""

    def __init__(self, q_inf: float = 0.25, q_sup: float = 0.75):
        q_inf = validate_quantile(q_inf)
        q_sup = validate_quantile(q_sup)
        if q_inf >= q_sup:
            raise InvalidParameterError(f"q_inf must be strictly less than q_sup, got {q_inf} >= {q_sup}")
        self.q_inf: Quantile[N] = Quantile(q_inf)
        self.q_sup: Quantile[N] = Quantile(q_sup)

    def update(self, x: N) -> None:
        self.q_inf.update(x)
        self.q_sup.update(x)

    def get(self) -> float:
        return self.q_sup.get() - self.q_inf.get()

    def clear(self) -> None:
        self.q_inf.clear()
        self.q_sup.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {"q_inf": self.q_inf.to_dict(), "q_sup": self.q_sup.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        q_inf = Quantile.from_dict(require(data, "q_inf", dict))
        q_sup = Quantile.from_dict(require(data, "q_sup", dict))
        if q_inf.q >= q_sup.q:
            raise ThawError("q_inf must be strictly less than q_sup")
        if q_inf.n != q_sup.n:
            raise ThawError("Both quantile estimators must have seen the same observations")

        stat = cls(q_inf.q, q_sup.q)
        stat.q_inf = q_inf
        stat.q_sup = q_sup
        return stat
