"""
export.py — CSV strings and JSON-ready reports built from aggregation results.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

import pandas as pd

from core.grading import grade_for
from core.records import ScoredRecord


GRADE_COLUMNS = [
    ("subject", "Subject"),
    ("term", "Term"),
    ("exam", "Exam"),
    ("score", "Score"),
    ("grade", "Grade"),
]

ATTENDANCE_COLUMNS = [
    ("period_label", "Month"),
    ("present", "Present"),
    ("absent", "Absent"),
    ("late", "Late"),
    ("attendance_rate", "Attendance Rate"),
]


def to_csv(rows: Sequence[Mapping[str, Any]], columns: Sequence[Tuple[str, str]]) -> str:
    """
    Render rows as CSV text with a header line.

    `columns` is a list of (key, header) pairs; missing keys become empty
    cells. Fields containing commas, quotes or newlines are quoted.
    """
    keys = [key for key, _ in columns]
    df = pd.DataFrame([{k: row.get(k) for k in keys} for row in rows], columns=keys)
    df.columns = [header for _, header in columns]
    return df.to_csv(index=False, lineterminator="\n")


def grades_csv(records: Sequence[ScoredRecord]) -> str:
    rows = [
        {
            "subject": r.subject,
            "term": r.term,
            "exam": r.exam,
            "score": r.score,
            "grade": grade_for(r.score),
        }
        for r in records
    ]
    return to_csv(rows, GRADE_COLUMNS)


def attendance_csv(breakdown: Sequence[Mapping[str, Any]]) -> str:
    rows = [{**b, "attendance_rate": round(b["attendance_rate"], 1)} for b in breakdown]
    return to_csv(rows, ATTENDANCE_COLUMNS)


def analytics_report(
    school: str,
    class_name: Optional[str] = None,
    performance: Optional[Dict[str, Any]] = None,
    attendance: Optional[Dict[str, Any]] = None,
    fees: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Bundle precomputed sections into one downloadable report."""
    return {
        "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "school": school,
        "class": class_name or "All Classes",
        "performance": performance,
        "attendance": attendance,
        "fees": fees,
    }
