"""
trends.py — Chronological trend series from per-period buckets.

Buckets arrive already aggregated, e.g. {"period_label": "Term 2, 2025",
"value": 64.5, "count": 120}. This module places each label on the calendar,
orders the buckets, drops periods with no data and tags each point with its
change from the previous point of the same series.

Academic and attendance buckets may be merged into one sequence. A bucket may
name its series ({"series": "attendance", ...}); buckets without one form a
single unnamed series. Period labels may repeat across series.

A period with no data is left out rather than plotted as zero; callers that
need a continuous axis fill the gaps themselves.
"""

import datetime as dt
import math
import re
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from core.errors import InvalidGroupKey, InvalidScore


MONTH_LABEL_FORMAT = "%b %Y"
MONTH_LABEL_FORMATS = ("%b %Y", "%B %Y", "%Y-%m")

# First calendar month of each school term.
TERM_START_MONTHS = {1: 1, 2: 5, 3: 9}

# Change (in points) needed between consecutive periods to count as movement.
TREND_THRESHOLD = 1.0
SLOPE_THRESHOLD = 0.5

_TERM_FIRST = re.compile(r"^term\s*(\d+)\s*,?\s*(\d{4})$", re.IGNORECASE)
_YEAR_FIRST = re.compile(r"^(\d{4})\s*,?\s*term\s*(\d+)$", re.IGNORECASE)


def month_label(day: dt.date) -> str:
    """Label a date with its month, e.g. "Mar 2025"."""
    return day.strftime(MONTH_LABEL_FORMAT)


def period_start(
    label: str,
    term_start_months: Mapping[int, int] = TERM_START_MONTHS,
) -> dt.date:
    """
    First day of the period a label names.

    Understands month labels ("Mar 2025", "March 2025", "2025-03") and term
    labels ("Term 2, 2025", "Term 2 2025", "2025 Term 2").
    """
    text = str(label).strip()

    for fmt in MONTH_LABEL_FORMATS:
        try:
            return dt.datetime.strptime(text, fmt).date().replace(day=1)
        except ValueError:
            continue

    term = year = None
    match = _TERM_FIRST.match(text)
    if match:
        term, year = int(match.group(1)), int(match.group(2))
    else:
        match = _YEAR_FIRST.match(text)
        if match:
            year, term = int(match.group(1)), int(match.group(2))

    if term is None:
        raise InvalidGroupKey(f"Cannot place period {label!r} on the calendar.")
    if term not in term_start_months:
        raise InvalidGroupKey(f"Unknown term number in period {label!r}.")
    try:
        return dt.date(year, term_start_months[term], 1)
    except ValueError:
        raise InvalidGroupKey(f"Period {label!r} names an impossible date.") from None


def _bucket_value(bucket: Mapping[str, Any]) -> Optional[float]:
    """Value of a bucket, or None when the period has no data."""
    value = bucket.get("value")
    if value is None:
        return None
    # bool is a Real subclass but True is not a measurement.
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidScore(
            f"Period {bucket.get('period_label')!r} has a non-numeric value {value!r}."
        )
    value = float(value)
    if math.isnan(value) or bucket.get("count") == 0:
        return None
    if math.isinf(value):
        raise InvalidScore(f"Period {bucket.get('period_label')!r} has an infinite value.")
    return value


def _trend_label(delta: Optional[float]) -> str:
    if delta is None:
        return "baseline"
    if delta > TREND_THRESHOLD:
        return "improving"
    if delta < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def build_trend(
    period_buckets: Sequence[Mapping[str, Any]],
    term_start_months: Mapping[int, int] = TERM_START_MONTHS,
) -> List[Dict[str, Any]]:
    """
    Order period buckets chronologically and tag period-over-period change.

    Buckets starting on the same day keep their input order, including
    buckets from different series. A bucket whose value is None/NaN or
    whose count is 0 is omitted. `delta` compares a point with the previous
    point of its own series.
    """
    placed = []
    for bucket in period_buckets:
        label = bucket.get("period_label")
        if label is None:
            raise InvalidGroupKey(f"Bucket has no period label: {dict(bucket)!r}")
        start = period_start(label, term_start_months)
        value = _bucket_value(bucket)
        if value is not None:
            placed.append((start, value, bucket))

    placed.sort(key=lambda item: item[0])

    points = []
    previous = {}
    for start, value, bucket in placed:
        series = bucket.get("series")
        last = previous.get(series)
        delta = None if last is None else round(value - last, 2)
        point = {
            "period_label": bucket["period_label"],
            "period_start": start.isoformat(),
            "value": value,
            "delta": delta,
            "trend": _trend_label(delta),
        }
        if series is not None:
            point["series"] = series
        if "count" in bucket:
            point["count"] = bucket["count"]
        points.append(point)
        previous[series] = value
    return points


def split_series(points: Sequence[Mapping[str, Any]]) -> Dict[Optional[str], List[Mapping[str, Any]]]:
    """Group trend points by series name, in first-seen order."""
    series = {}
    for point in points:
        series.setdefault(point.get("series"), []).append(point)
    return series


def overall_trend(points: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Direction of a least-squares line through the values of a trend series."""
    values = [float(p["value"]) for p in points]
    if len(values) < 2:
        return {"direction": "insufficient_data", "slope": None}

    x = np.arange(len(values))
    slope = float(np.polyfit(x, values, 1)[0])
    direction = (
        "improving" if slope > SLOPE_THRESHOLD else
        "declining" if slope < -SLOPE_THRESHOLD else
        "stable"
    )
    return {"direction": direction, "slope": round(slope, 3)}
