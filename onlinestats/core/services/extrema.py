from __future__ import annotations
import math
from typing import Any, Dict, Optional, Self

from onlinestats.core.domain.errors import ThawError
from onlinestats.core.domain.frozen import as_builtin, optional_number, require
from onlinestats.core.ports.numeric import N
from onlinestats.core.ports.statistic import Univariate


class Min(Univariate[N]):
    def __init__(self):
        self.min: Optional[N] = None

    def update(self, x: N) -> None:
        if self.min is None or x < self.min:
            self.min = x

    def get(self) -> float:
        return math.nan if self.min is None else float(self.min)

    def clear(self) -> None:
        self.min = None

    def to_dict(self) -> Dict[str, Any]:
        return {"min": None if self.min is None else as_builtin(self.min)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        stat = cls()
        stat.min = optional_number(data, "min")
        return stat


class Max(Univariate[N]):
    def __init__(self):
        self.max: Optional[N] = None

    def update(self, x: N) -> None:
        if self.max is None or self.max < x:
            self.max = x

    def get(self) -> float:
        return math.nan if self.max is None else float(self.max)

    def clear(self) -> None:
        self.max = None

    def to_dict(self) -> Dict[str, Any]:
        return {"max": None if self.max is None else as_builtin(self.max)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        stat = cls()
        stat.max = optional_number(data, "max")
        return stat


class AbsMax(Univariate[N]):
    """Largest absolute value seen so far."""

    def __init__(self):
        self.abs_max: Optional[N] = None

    def update(self, x: N) -> None:
        magnitude = abs(x)
        if self.abs_max is None or self.abs_max < magnitude:
            self.abs_max = magnitude

    def get(self) -> float:
        return math.nan if self.abs_max is None else float(self.abs_max)

    def clear(self) -> None:
        self.abs_max = None

    def to_dict(self) -> Dict[str, Any]:
        return {"abs_max": None if self.abs_max is None else as_builtin(self.abs_max)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        stat = cls()
        stat.abs_max = optional_number(data, "abs_max")
        return stat


class PeakToPeak(Univariate[N]):
    """max - min over everything seen so far."""

    def __init__(self):
        self.min: Min[N] = Min()
        self.max: Max[N] = Max()

    def update(self, x: N) -> None:
        self.min.update(x)
        self.max.update(x)

    def get(self) -> float:
        return self.max.get() - self.min.get()

    def clear(self) -> None:
        self.min.clear()
        self.max.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min.to_dict(), "max": self.max.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        stat = cls()
        stat.min = Min.from_dict(require(data, "min", dict))
        stat.max = Max.from_dict(require(data, "max", dict))
        if (stat.min.min is None) != (stat.max.max is None):
            raise ThawError("Peak to peak needs both extrema or neither")
        if stat.min.min is not None and stat.max.max < stat.min.min:
            raise ThawError(f"Maximum {stat.max.max} is below minimum {stat.min.min}")
        return stat
