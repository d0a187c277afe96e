import logging
from typing import Any, Dict, Type

import yaml

from onlinestats.core.domain.errors import ThawError
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

STATISTICS: Dict[str, Type[Univariate]] = {
    "count": Count,
    "sum": Sum,
    "mean": Mean,
    "variance": Variance,
    "min": Min,
    "max": Max,
    "abs_max": AbsMax,
    "ptp": PeakToPeak,
    "quantile": Quantile,
    "iqr": IQR,
    "rolling": Rolling,
    "rolling_min": RollingMin,
    "rolling_max": RollingMax,
    "rolling_ptp": RollingPeakToPeak,
    "rolling_quantile": RollingQuantile,
    "rolling_iqr": RollingIQR,
}


def type_name(stat: Univariate) -> str:
    for name, cls in STATISTICS.items():
        if type(stat) is cls:
            return name
    raise TypeError(f"{type(stat).__name__} is not a known statistic")


def freeze(stat: Univariate) -> Dict[str, Any]:
    """Self-describing snapshot of `stat`, made of built-in types only."""
    return {"type": type_name(stat), "state": stat.to_dict()}


def thaw(data: Dict[str, Any]) -> Univariate:
    """Rebuild the statistic frozen by `freeze`. Raises ThawError on malformed input."""
    if not isinstance(data, dict):
        raise ThawError(f"Frozen statistic must be a mapping, got {type(data).__name__}")
    name = data.get("type")
    if not isinstance(name, str) or name not in STATISTICS:
        raise ThawError(f"Unknown statistic type {name!r}")
    state = data.get("state")
    if not isinstance(state, dict):
        raise ThawError(f"State of '{name}' must be a mapping")

    stat = STATISTICS[name].from_dict(state)
    logger.debug("Thawed %s statistic", name)
    return stat


def dumps(stat: Univariate) -> str:
    return yaml.safe_dump(freeze(stat), sort_keys=False)


def loads(text: str) -> Univariate:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ThawError(f"Frozen statistic is not valid YAML: {e}") from e
    return thaw(data)


def dumps_many(stats: Dict[str, Univariate]) -> str:
    """Freeze a named collection of statistics into one YAML document."""
    return yaml.safe_dump({name: freeze(stat) for name, stat in stats.items()}, sort_keys=False)


def loads_many(text: str) -> Dict[str, Univariate]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ThawError(f"Frozen statistics are not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ThawError("Frozen statistics must be a mapping of name to statistic")
    return {str(name): thaw(frozen) for name, frozen in data.items()}
