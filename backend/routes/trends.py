"""
Trend routes — chronologically ordered series for charts.
"""

from fastapi import APIRouter, HTTPException

from core.attendance import monthly_rates
from core.errors import InvalidGroupKey
from core.stats import term_averages
from core.trends import build_trend, overall_trend, split_series
from routes.payload import marks_from_payload, records_from_payload, rounded

router = APIRouter()


def _series(buckets):
    """
    Points plus fitted directions. "overall" covers a single series; merged
    series get one direction each under "overall_by_series".
    """
    points = build_trend(buckets)
    groups = split_series(points)
    result = {
        "points": points,
        "overall": overall_trend(points) if len(groups) <= 1 else None,
    }
    if any(name is not None for name in groups):
        result["overall_by_series"] = {
            str(name): overall_trend(series_points) for name, series_points in groups.items()
        }
    return rounded(result)


def _check_unique_periods(buckets):
    seen = set()
    for bucket in buckets:
        key = (bucket.get("series"), bucket.get("period_label"))
        if key in seen:
            raise InvalidGroupKey(f"Period {key[1]!r} appears more than once in one series.")
        seen.add(key)


@router.post("/build")
async def build(payload: dict):
    """
    Order precomputed period buckets.
    Expects: { "buckets": [{"period_label": "Term 1, 2025", "value": 61.2, "series": "performance"}, ...] }
    """
    buckets = payload.get("buckets")
    if not buckets:
        raise HTTPException(400, "No buckets provided.")
    if not isinstance(buckets, list) or not all(isinstance(b, dict) for b in buckets):
        raise HTTPException(400, "'buckets' must be a list of objects.")
    _check_unique_periods(buckets)
    return _series(buckets)


@router.post("/terms")
async def terms(payload: dict):
    """Average score per term, oldest term first."""
    records = records_from_payload(payload)
    return _series(term_averages(records))


@router.post("/attendance")
async def attendance(payload: dict):
    """Attendance rate per month, oldest month first."""
    marks = marks_from_payload(payload)
    return _series(monthly_rates(marks))


@router.post("/combined")
async def combined(payload: dict):
    """
    Term averages and monthly attendance rates merged into one timeline.
    Expects: { "records": [...], "marks": [...] }
    """
    records = records_from_payload(payload)
    marks = marks_from_payload(payload)
    buckets = [{**b, "series": "performance"} for b in term_averages(records)]
    buckets += [{**b, "series": "attendance"} for b in monthly_rates(marks)]
    return _series(buckets)
