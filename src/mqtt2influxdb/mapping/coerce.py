from __future__ import annotations

import json
import math
from typing import Any

from mqtt2influxdb.errors import UnsupportedValue

from .types import Boolean, Float, String, TypedValue


def canonical_json(value: Any) -> str:
    """Compact, key-sorted JSON text for arrays and objects."""
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def _to_float(n: Any) -> float:
    try:
        v = float(n)
    except OverflowError:
        v = math.inf
    # 1e400 or an integer beyond double range; InfluxDB has no such field value
    if not math.isfinite(v):
        raise UnsupportedValue("number outside the double range")
    return v


def coerce(value: Any) -> TypedValue:
    """
    Convert a decoded JSON value into a TypedValue.

    Numbers always become Float, whether the literal was integral or not.
    Arrays and objects become String holding their canonical JSON text.
    JSON null and numbers outside the double range raise UnsupportedValue.
    """
    if value is None:
        raise UnsupportedValue("JSON null has no value representation")
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return Boolean(value)
    if isinstance(value, (int, float)):
        return Float(_to_float(value))
    if isinstance(value, str):
        return String(value)
    if isinstance(value, (list, dict)):
        return String(canonical_json(value))
    raise UnsupportedValue(f"Unsupported JSON value type: {type(value).__name__}")
