from __future__ import annotations
from typing import Any, Protocol, TypeVar, runtime_checkable


@runtime_checkable
class Numeric(Protocol):
    """Minimal value contract shared by every statistic.

    Values must be ordered, support addition and subtraction between
    themselves, division by a count and conversion to a float estimate.
    int, float, numpy scalars and Fraction all qualify.
    """

    def __lt__(self, other: Any) -> bool: ...

    def __le__(self, other: Any) -> bool: ...

    def __add__(self, other: Any) -> Any: ...

    def __sub__(self, other: Any) -> Any: ...

    def __truediv__(self, other: Any) -> Any: ...

    def __float__(self) -> float: ...


N = TypeVar("N", bound=Numeric)
