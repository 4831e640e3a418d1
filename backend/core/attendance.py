"""
attendance.py — Attendance aggregation over AttendanceMark collections.

Computes:
- Attendance rate (present / total * 100)
- Present / absent / late tallies
- Monthly breakdown ordered by calendar month, not by label text
"""

from typing import Any, Dict, List, Sequence

import pandas as pd

from core.errors import EmptyInput
from core.records import ATTENDANCE_STATUSES, AttendanceMark, AttendanceStatus
from core.trends import MONTH_LABEL_FORMAT


def _require(marks: Sequence[AttendanceMark], what: str) -> None:
    if len(marks) == 0:
        raise EmptyInput(f"Cannot compute {what} of an empty collection.")


def _rate(present: int, total: int) -> float:
    return present * 100 / total


def attendance_rate(marks: Sequence[AttendanceMark]) -> float:
    """Percentage of marked days with status present."""
    _require(marks, "an attendance rate")
    present = sum(1 for m in marks if m.status is AttendanceStatus.PRESENT)
    return _rate(present, len(marks))


def count_by_status(marks: Sequence[AttendanceMark]) -> Dict[str, int]:
    """Tally of marks per status; all three statuses are always present."""
    counts = {status: 0 for status in ATTENDANCE_STATUSES}
    for mark in marks:
        counts[mark.status.value] += 1
    return counts


def attendance_summary(marks: Sequence[AttendanceMark]) -> Dict[str, Any]:
    _require(marks, "an attendance summary")
    counts = count_by_status(marks)
    return {
        "total_days": len(marks),
        **counts,
        "attendance_rate": _rate(counts["present"], len(marks)),
    }


def monthly_breakdown(marks: Sequence[AttendanceMark]) -> List[Dict[str, Any]]:
    """
    One bucket per calendar month that has at least one mark.

    Buckets are ordered by the month itself, so "Dec 2024" precedes
    "Jan 2025" however the marks were supplied.
    """
    if len(marks) == 0:
        return []

    df = pd.DataFrame({
        "period": pd.to_datetime([m.date for m in marks]).to_period("M"),
        "status": [m.status.value for m in marks],
    })
    table = (
        pd.crosstab(df["period"], df["status"])
        .reindex(columns=ATTENDANCE_STATUSES, fill_value=0)
        .sort_index()
    )

    breakdown = []
    for period, row in table.iterrows():
        present, absent, late = (int(row[s]) for s in ATTENDANCE_STATUSES)
        total = present + absent + late
        breakdown.append({
            "period_label": period.strftime(MONTH_LABEL_FORMAT),
            "present": present,
            "absent": absent,
            "late": late,
            "total": total,
            "attendance_rate": _rate(present, total),
        })
    return breakdown


def monthly_rates(marks: Sequence[AttendanceMark]) -> List[Dict[str, Any]]:
    """Monthly attendance rates shaped as period buckets for trends.build_trend."""
    return [
        {
            "period_label": bucket["period_label"],
            "value": bucket["attendance_rate"],
            "count": bucket["total"],
        }
        for bucket in monthly_breakdown(marks)
    ]
