import logging

from onlinestats.core.domain.params.stat_params import StatKind, StatParams
from onlinestats.core.ports.statistic import Univariate
from onlinestats.core.services.extrema import AbsMax, Max, Min, PeakToPeak
from onlinestats.core.services.moments import Count, Mean, Sum, Variance
from onlinestats.core.services.quantile import IQR, Quantile
from onlinestats.core.services.rolling import (
    Rolling,
    RollingIQR,
    RollingMax,
    RollingMin,
    RollingPeakToPeak,
    RollingQuantile,
)

logger = logging.getLogger(__name__)


def build_statistic(params: StatParams) -> Univariate:
    """Instantiate the statistic described by `params`."""
    kind = params.kind
    window = params.window

    if window is None:
        stat = _build_unbounded(params)
    elif kind in StatKind.revertable_list():
        stat = Rolling(_build_unbounded(params), window)
    elif kind == StatKind.MIN:
        stat = RollingMin(window)
    elif kind == StatKind.MAX:
        stat = RollingMax(window)
    elif kind == StatKind.PTP:
        stat = RollingPeakToPeak(window)
    elif kind == StatKind.QUANTILE:
        stat = RollingQuantile(params.q, window)
    elif kind == StatKind.IQR:
        stat = RollingIQR(window, params.q_inf, params.q_sup)
    else:
        raise ValueError(f"Statistic '{kind.value}' has no windowed form")

    logger.debug("Built %s as %s (window=%s)", params.name, type(stat).__name__, window)
    return stat


def _build_unbounded(params: StatParams) -> Univariate:
    kind = params.kind
    if kind == StatKind.COUNT:
        return Count()
    if kind == StatKind.SUM:
        return Sum()
    if kind == StatKind.MEAN:
        return Mean()
    if kind == StatKind.VARIANCE:
        return Variance(params.ddof)
    if kind == StatKind.MIN:
        return Min()
    if kind == StatKind.MAX:
        return Max()
    if kind == StatKind.ABS_MAX:
        return AbsMax()
    if kind == StatKind.PTP:
        return PeakToPeak()
    if kind == StatKind.QUANTILE:
        return Quantile(params.q)
    if kind == StatKind.IQR:
        return IQR(params.q_inf, params.q_sup)
    raise ValueError(f"Unknown statistic kind: {kind}")
