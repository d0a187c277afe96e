from __future__ import annotations
import logging
from typing import Callable, Dict, Iterable, List

from onlinestats.core.domain.params.stat_params import StatParams
from onlinestats.core.ports.numeric import N
from onlinestats.core.ports.statistic import Univariate
from onlinestats.core.services.factory import build_statistic
from onlinestats.core.services.freeze import dumps_many, loads_many

logger = logging.getLogger(__name__)


class Tracker:
    """Named statistics fed from the same stream, with optional observers."""

    def __init__(self, stats: Dict[str, Univariate]):
        self.stats = stats
        self.observers: List[Callable[[Dict[str, float]], None]] = []
        self.count = 0

    @classmethod
    def from_params(cls, params: Iterable[StatParams]) -> Tracker:
        return cls({p.name: build_statistic(p) for p in params})

    @classmethod
    def from_snapshot(cls, text: str) -> Tracker:
        stats = loads_many(text)
        logger.info("Resumed %d statistics from snapshot", len(stats))
        return cls(stats)

    def subscribe(self, callback: Callable[[Dict[str, float]], None]):
        self.observers.append(callback)

    def put(self, x: N):
        for stat in self.stats.values():
            stat.update(x)
        self.count += 1

        if self.observers:
            values = self.values()
            for cb in self.observers:
                cb(values)

    def extend(self, xs: Iterable[N]):
        for x in xs:
            self.put(x)

    def values(self) -> Dict[str, float]:
        return {name: stat.get() for name, stat in self.stats.items()}

    def clear(self):
        for stat in self.stats.values():
            stat.clear()
        self.count = 0

    def snapshot(self) -> str:
        return dumps_many(self.stats)
