from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_QUANTILE = 0.5
DEFAULT_Q_INF = 0.25
DEFAULT_Q_SUP = 0.75
DEFAULT_DDOF = 1


class StatKind(Enum):
    COUNT = "count"
    SUM = "sum"
    MEAN = "mean"
    VARIANCE = "variance"
    MIN = "min"
    MAX = "max"
    ABS_MAX = "abs_max"
    PTP = "ptp"
    QUANTILE = "quantile"
    IQR = "iqr"

    @classmethod
    def revertable_list(cls) -> list["StatKind"]:
        """Kinds windowed by reverting the oldest value."""
        return [cls.SUM, cls.MEAN, cls.VARIANCE]

    @classmethod
    def ranked_list(cls) -> list["StatKind"]:
        """Kinds windowed through a sorted window."""
        return [cls.MIN, cls.MAX, cls.PTP, cls.QUANTILE, cls.IQR]

    def windowable(self) -> bool:
        return self in StatKind.revertable_list() or self in StatKind.ranked_list()


@dataclass
class StatParams:
    name: str
    kind: StatKind
    window: Optional[int] = None
    q: float = DEFAULT_QUANTILE
    q_inf: float = DEFAULT_Q_INF
    q_sup: float = DEFAULT_Q_SUP
    ddof: int = DEFAULT_DDOF

    @staticmethod
    def from_dict(stat_props: dict) -> "StatParams":
        if not isinstance(stat_props, dict):
            raise TypeError(f"Statistic entry must be a mapping, got {type(stat_props).__name__}")

        raw_kind = stat_props.get("kind")
        if raw_kind is None:
            raise ValueError(f"Statistic entry is missing 'kind': {stat_props}")
        try:
            kind = StatKind(str(raw_kind).lower())
        except ValueError:
            raise ValueError(f"Unknown statistic kind: {raw_kind}")

        name = str(stat_props.get("name", kind.value))

        window = stat_props.get("window")
        if window is not None:
            if isinstance(window, bool) or not isinstance(window, int):
                raise TypeError(f"window must be an integer, got {type(window).__name__}")
            if window < 1:
                raise ValueError(f"window must be >= 1, got {window}")
            if not kind.windowable():
                raise ValueError(f"Statistic '{kind.value}' has no windowed form")

        ddof = stat_props.get("ddof", DEFAULT_DDOF)
        if isinstance(ddof, bool) or not isinstance(ddof, int) or ddof < 0:
            raise ValueError(f"ddof must be a non-negative integer, got {ddof!r}")

        q = _parse_quantile(stat_props, "q", DEFAULT_QUANTILE)
        q_inf = _parse_quantile(stat_props, "q_inf", DEFAULT_Q_INF)
        q_sup = _parse_quantile(stat_props, "q_sup", DEFAULT_Q_SUP)
        if q_inf >= q_sup:
            raise ValueError(f"q_inf must be strictly less than q_sup, got {q_inf} >= {q_sup}")

        return StatParams(
            name=name, kind=kind, window=window, q=q, q_inf=q_inf, q_sup=q_sup, ddof=ddof
        )


def _parse_quantile(stat_props: dict, key: str, default: float) -> float:
    value = stat_props.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key} must be a number, got {type(value).__name__}")
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{key} must lie in [0, 1], got {value}")
    return float(value)
