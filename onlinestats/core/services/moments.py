from __future__ import annotations
import math
from typing import Any, Dict, Self

from onlinestats.core.domain.errors import InvalidParameterError, ThawError
from onlinestats.core.domain.frozen import as_builtin, require, require_number
from onlinestats.core.ports.numeric import N
from onlinestats.core.ports.statistic import RollableUnivariate, Univariate


class Count(Univariate[N]):
    """Number of observations seen since construction. Cannot be windowed."""

    def __init__(self):
        self.n = 0

    def update(self, x: N) -> None:
        self.n += 1

    def get(self) -> float:
        return float(self.n)

    def clear(self) -> None:
        self.n = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"n": self.n}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        n = require(data, "n", int)
        if n < 0:
            raise ThawError(f"Count cannot be negative, got {n}")
        stat = cls()
        stat.n = n
        return stat


class Sum(RollableUnivariate[N]):
    def __init__(self):
        self.sum = 0.0

    def update(self, x: N) -> None:
        self.sum += x

    def revert(self, x: N) -> None:
        self.sum -= x

    def get(self) -> float:
        return float(self.sum)

    def clear(self) -> None:
        self.sum = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"sum": as_builtin(self.sum)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        stat = cls()
        stat.sum = require_number(data, "sum")
        return stat


class Mean(RollableUnivariate[N]):
    """Running mean using the incremental update mean += (x - mean) / n."""

    def __init__(self):
        self.n = 0
        self.mean = 0.0

    def update(self, x: N) -> None:
        self.n += 1
        self.mean += (x - self.mean) / self.n

    def revert(self, x: N) -> None:
        if self.n == 0:
            raise ValueError("Cannot revert a value from an empty mean")
        self.n -= 1
        if self.n == 0:
            self.mean = 0.0
        else:
            self.mean -= (x - self.mean) / self.n

    def get(self) -> float:
        if self.n == 0:
            return math.nan
        return float(self.mean)

    def clear(self) -> None:
        self.n = 0
        self.mean = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"n": self.n, "mean": as_builtin(self.mean)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        n = require(data, "n", int)
        if n < 0:
            raise ThawError(f"Observation count cannot be negative, got {n}")
        stat = cls()
        stat.n = n
        stat.mean = require_number(data, "mean")
        return stat


class Variance(RollableUnivariate[N]):
    """
    Welford variance.

    Keeps a running mean and `m2`, the sum of squared deviations from it,
    which avoids the cancellation of the naive sum / sum-of-squares formula.

    Args:
        ddof: Delta degrees of freedom. The estimate divides `m2` by `n - ddof`
            and is 0.0 while `n <= ddof`.
    """

    def __init__(self, ddof: int = 1):
        if isinstance(ddof, bool) or not isinstance(ddof, int) or ddof < 0:
            raise InvalidParameterError(f"ddof must be a non-negative integer, got {ddof!r}")
        self.ddof = ddof
        self.mean: Mean[N] = Mean()
        self.m2 = 0.0

    def update(self, x: N) -> None:
        mean_old = self.mean.mean
        self.mean.update(x)
        self.m2 += (x - mean_old) * (x - self.mean.mean)

    def revert(self, x: N) -> None:
        mean_old = self.mean.mean
        self.mean.revert(x)
        self.m2 -= (x - mean_old) * (x - self.mean.mean)
        # Rounding can leave m2 a hair below zero once the window turns constant.
        if self.mean.n == 0 or self.m2 < 0:
            self.m2 = 0.0

    def get(self) -> float:
        n = self.mean.n
        if n == 0:
            return math.nan
        if n > self.ddof:
            return float(self.m2) / (n - self.ddof)
        return 0.0

    def clear(self) -> None:
        self.mean.clear()
        self.m2 = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ddof": self.ddof,
            "mean": self.mean.to_dict(),
            "m2": as_builtin(self.m2),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        ddof = require(data, "ddof", int)
        if ddof < 0:
            raise ThawError(f"ddof cannot be negative, got {ddof}")
        stat = cls(ddof)
        stat.mean = Mean.from_dict(require(data, "mean", dict))
        m2 = require_number(data, "m2")
        if m2 < 0:
            raise ThawError(f"Sum of squared deviations cannot be negative, got {m2}")
        if stat.mean.n == 0 and m2 != 0:
            raise ThawError(f"Empty variance must have m2 == 0, got {m2}")
        stat.m2 = m2
        return stat
