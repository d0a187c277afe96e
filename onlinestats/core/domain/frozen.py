from __future__ import annotations
import math
from typing import Any, Iterable, List, Tuple

from onlinestats.core.domain.errors import ThawError


def as_builtin(x: Any) -> int | float:
    """Convert a value to a YAML/JSON friendly scalar.

    int and float keep their exact value so frozen state resumes bit for bit;
    subclasses such as numpy.float64 are narrowed to the builtin type and
    anything else goes through float().
    """
    if isinstance(x, int):
        return int(x)
    if isinstance(x, float):
        return float(x)
    if hasattr(x, "item"):
        return x.item()
    return float(x)


def require(data: Any, key: str, types: type | Tuple[type, ...]) -> Any:
    if not isinstance(data, dict):
        raise ThawError(f"Expected a mapping, got {type(data).__name__}")
    if key not in data:
        raise ThawError(f"Missing key '{key}'")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, types):
        raise ThawError(f"Key '{key}' has invalid type {type(value).__name__}")
    return value


def require_number(data: Any, key: str) -> int | float:
    return require(data, key, (int, float))


def optional_number(data: Any, key: str) -> int | float | None:
    if isinstance(data, dict) and data.get(key) is None:
        return None
    return require_number(data, key)


def require_numbers(data: Any, key: str) -> List[int | float]:
    values = require(data, key, list)
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ThawError(f"Key '{key}' must only hold numbers, got {v!r}")
    return list(values)


def require_quantile(data: Any, key: str) -> float:
    q = require_number(data, key)
    if math.isnan(q) or not 0.0 <= q <= 1.0:
        raise ThawError(f"Key '{key}' must lie in [0, 1], got {q}")
    return q


def is_sorted(values: Iterable[Any], strict: bool = False) -> bool:
    items = list(values)
    if strict:
        return all(a < b for a, b in zip(items, items[1:]))
    return all(a <= b for a, b in zip(items, items[1:]))

