from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Self

from onlinestats.core.ports.numeric import N


class Univariate(ABC, Generic[N]):
    """Single-pass statistic over a stream of values."""

    @abstractmethod
    def update(self, x: N) -> None:
        """Fold one observation into the accumulators."""
        pass

    @abstractmethod
    def get(self) -> float:
        """Return the current estimate, or the empty value when no data was seen."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Reset to the freshly constructed state."""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Freeze the state into built-in types."""
        pass

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Dict[str, Any]) -> Self:
        """Rebuild an instance from `to_dict` output."""
        pass


class Revertable(ABC, Generic[N]):
    @abstractmethod
    def revert(self, x: N) -> None:
        """Undo one prior `update(x)`."""
        pass


class RollableUnivariate(Univariate[N], Revertable[N]):
    """Statistic whose updates can be undone one at a time, so it can be windowed."""
    pass
