from __future__ import annotations
from typing import Generic, Iterable, Iterator

import numpy as np

from onlinestats.core.ports.numeric import N
from onlinestats.core.ports.statistic import Univariate
from onlinestats.core.services.extrema import AbsMax, Max, Min, PeakToPeak
from onlinestats.core.services.moments import Count, Mean, Sum, Variance
from onlinestats.core.services.quantile import IQR, Quantile


class IterStat(Generic[N]):
    """Lazy stream of successive `get()` values, one per input.

    One statistic instance is threaded through the whole input, so the stream
    can only be consumed once.
    """

    def __init__(self, stat: Univariate[N], values: Iterable[N]):
        self.stat = stat
        self._values = iter(values)

    def __iter__(self) -> Iterator[float]:
        return self

    def __next__(self) -> float:
        x = next(self._values)
        self.stat.update(x)
        return self.stat.get()

    def to_array(self) -> np.ndarray:
        """Drain the remaining input into an array of estimates."""
        return np.fromiter(self, dtype=float)


def online_count(values: Iterable[N]) -> IterStat[N]:
    return IterStat(Count(), values)


def online_sum(values: Iterable[N]) -> IterStat[N]:
    return IterStat(Sum(), values)


def online_mean(values: Iterable[N]) -> IterStat[N]:
    return IterStat(Mean(), values)


def online_var(values: Iterable[N], ddof: int = 1) -> IterStat[N]:
    return IterStat(Variance(ddof), values)


def online_min(values: Iterable[N]) -> IterStat[N]:
    return IterStat(Min(), values)


def online_max(values: Iterable[N]) -> IterStat[N]:
    return IterStat(Max(), values)


def online_abs_max(values: Iterable[N]) -> IterStat[N]:
    return IterStat(AbsMax(), values)


def online_ptp(values: Iterable[N]) -> IterStat[N]:
    return IterStat(PeakToPeak(), values)


def online_quantile(values: Iterable[N], q: float = 0.5) -> IterStat[N]:
    return IterStat(Quantile(q), values)


def online_iqr(values: Iterable[N], q_inf: float = 0.25, q_sup: float = 0.75) -> IterStat[N]:
    return IterStat(IQR(q_inf, q_sup), values)
