"""
Attendance routes — attendance rate and monthly breakdown endpoints.
"""

from fastapi import APIRouter

from core.attendance import attendance_summary, monthly_breakdown
from routes.payload import marks_from_payload, rounded

router = APIRouter()


@router.post("/summary")
async def summary(payload: dict):
    """
    Attendance rate, status tallies and a month-by-month breakdown.
    Expects: { "marks": [{"date": "2025-03-04", "status": "present"}, ...] }
    """
    marks = marks_from_payload(payload)
    return rounded({
        "summary": attendance_summary(marks),
        "monthly": monthly_breakdown(marks),
    })
