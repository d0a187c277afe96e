import logging
import yaml
from pathlib import Path
from typing import Any, Dict, List, Optional

from onlinestats.core.domain.params.stat_params import StatKind, StatParams


DEFAULT_STATISTICS = [
    StatParams("mean", StatKind.MEAN),
    StatParams("variance", StatKind.VARIANCE),
    StatParams("median", StatKind.QUANTILE),
]
DEFAULT_INPUT_FILENAME: Optional[str] = None
DEFAULT_DELIMITER = ","
DEFAULT_SNAPSHOT_FILENAME: Optional[str] = None
DEFAULT_LOG_LEVEL = "ERROR"


class Config:
    def __init__(self, path: str):
        """
        Load YAML configuration from the given path.

        Args:
            path: Path to config.yaml, e.g. 'configs/config.yaml'.
        """
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"Config file not found: {self.path}")

        with open(self.path, "r") as f:
            self._data: Dict[str, Any] = yaml.safe_load(f) or {}

        if not isinstance(self._data, dict):
            raise ValueError(f"Config root must be a mapping: {self.path}")

    def get(self, key: str, default=None):
        """Get a config value by key."""
        return self._data.get(key, default)

    def statistics(self) -> List[StatParams]:
        raw_stats = self._data.get("statistics")
        if not raw_stats:
            return list(DEFAULT_STATISTICS)

        if not isinstance(raw_stats, list):
            raise ValueError("'statistics' must be a list")

        params = [StatParams.from_dict(props) for props in raw_stats]

        names = [p.name for p in params]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate statistic names: {sorted(duplicates)}")
        return params

    @property
    def input_filename(self) -> Optional[str]:
        input_props = self._data.get("input") or {}
        return input_props.get("filename", DEFAULT_INPUT_FILENAME)

    @property
    def input_delimiter(self) -> str:
        input_props = self._data.get("input") or {}
        return input_props.get("delimiter", DEFAULT_DELIMITER)

    @property
    def snapshot_filename(self) -> Optional[str]:
        snapshot_props = self._data.get("snapshot") or {}
        return snapshot_props.get("filename", DEFAULT_SNAPSHOT_FILENAME)

    @property
    def log_level(self) -> int:
        raw = str(self._data.get("log_level", DEFAULT_LOG_LEVEL)).upper()
        level = logging.getLevelName(raw)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {raw}")
        return level
