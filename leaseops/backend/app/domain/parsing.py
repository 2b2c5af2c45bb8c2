# app/domain/parsing.py
from __future__ import annotations

import math
import re
from typing import Any

_NUM_RE = re.compile(r"-?\d[\d,]*(?:\.\d+)?")


def to_int(x: Any) -> int | None:
    if x is None or x == "" or isinstance(x, bool):
        return None
    try:
        return int(float(x))
    except (TypeError, ValueError, OverflowError):
        return None


def to_float(x: Any) -> float | None:
    if x is None or x == "" or isinstance(x, bool):
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def number_from_text(s: Any) -> float | None:
    """'$1,300/mo' -> 1300.0, '1,024 sqft' -> 1024.0."""
    if s is None:
        return None
    if isinstance(s, (int, float)) and not isinstance(s, bool):
        return to_float(s)
    m = _NUM_RE.search(str(s))
    if not m:
        return None
    return to_float(m.group(0).replace(",", ""))


def get_first(payload: dict[str, Any], *keys: str) -> Any:
    """Return first non-empty key from payload."""
    for k in keys:
        v = payload.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def get_nested(payload: dict[str, Any], path: str) -> Any:
    """Tiny dot-path getter: 'address.city' or 'resoFacts.bedrooms'."""
    cur: Any = payload
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
        if cur is None:
            return None
    return cur


def first_nested(payload: dict[str, Any], *paths: str) -> Any:
    """First non-empty value across several dot-paths."""
    for p in paths:
        v = get_nested(payload, p)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None
