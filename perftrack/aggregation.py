# perftrack/aggregation.py
"""
Small pure helpers the report handlers use to shape sensor rows for charts.

Rows are plain dicts (``RowMixin.to_dict()`` output) or ORM objects; fields
are read with ``_get`` so both work.
"""
from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone
from numbers import Number
from typing import Any, Callable, Iterable, Optional, Union

from perftrack.errors import BadRequest

RANGES = {
    "Past Week": timedelta(days=7),
    "Past Month": timedelta(days=30),
    "Past 3 Months": timedelta(days=90),
    "Past 6 Months": timedelta(days=182),
    "Past Year": timedelta(days=365),
    "ALL": None,
}

BAT_SPEED_THRESHOLDS = {
    "youth": 60,
    "highschool": 67,
    "college": 75,
    "pro": 75,
}

HARD_HIT_VELO = 95


def _get(row: Any, field: str):
    if isinstance(row, dict):
        return row.get(field)
    return getattr(row, field, None)


def _is_number(v) -> bool:
    return isinstance(v, Number) and not isinstance(v, bool)


def day_key(value: Union[str, datetime, date, None]) -> Optional[str]:
    """Calendar day (YYYY-MM-DD) of an ISO string or datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    s = str(value).strip()
    if len(s) < 10:
        return None
    try:
        return date.fromisoformat(s[:10]).isoformat()
    except ValueError:
        return None


def mean(values: Iterable) -> float:
    vals = [v for v in values if _is_number(v)]
    return sum(vals) / len(vals) if vals else 0


def average_by_date(rows: Iterable, date_field: str, value_field: str) -> list[dict]:
    groups: dict[str, list] = {}
    for row in rows:
        day = day_key(_get(row, date_field))
        if day is None:
            continue
        bucket = groups.setdefault(day, [])
        v = _get(row, value_field)
        if _is_number(v):
            bucket.append(v)
    return [{"date": d, "average": mean(groups[d])} for d in sorted(groups)]


def overall_max(rows: Iterable, field: str):
    best = None
    for row in rows:
        v = _get(row, field)
        if _is_number(v) and (best is None or v > best):
            best = v
    return best if best is not None else 0


def group_by(rows: Iterable, key: Union[str, Callable]) -> "OrderedDict[Any, list]":
    keyfn = key if callable(key) else (lambda r: _get(r, key))
    out: "OrderedDict[Any, list]" = OrderedDict()
    for row in rows:
        out.setdefault(keyfn(row), []).append(row)
    return out


def values(rows: Iterable, field: str) -> list:
    return [v for v in (_get(r, field) for r in rows) if _is_number(v)]


def range_start(label: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    if not label:
        label = "ALL"
    if label not in RANGES:
        raise BadRequest(f"Invalid range: {label}")
    delta = RANGES[label]
    if delta is None:
        return None
    now = now or datetime.now(timezone.utc)
    return now - delta


def fast_swing_rates(bat_speeds: list) -> Optional[dict]:
    speeds = [s for s in bat_speeds if _is_number(s)]
    if not speeds:
        return None
    n = len(speeds)
    return {
        f"{level}Percent": sum(1 for s in speeds if s >= threshold) / n * 100
        for level, threshold in BAT_SPEED_THRESHOLDS.items()
    }


def hard_hit_rate(velos: list) -> float:
    vals = [v for v in velos if _is_number(v)]
    if not vals:
        return 0
    return sum(1 for v in vals if v >= HARD_HIT_VELO) / len(vals) * 100
