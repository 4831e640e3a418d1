"""
Report routes — CSV downloads and the JSON analytics report.
"""

import logging
import re
from datetime import date

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from config import PASS_MARK, SCHOOL_NAME
from core.attendance import attendance_summary, monthly_breakdown
from core.errors import InvalidGroupKey
from core.export import analytics_report, attendance_csv, grades_csv
from core.fees import collection_by_month, fee_summary
from core.stats import group_averages, pass_rate, summarize, term_averages
from core.trends import build_trend
from routes.payload import (
    marks_from_payload,
    payments_from_payload,
    records_from_payload,
    rounded,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _safe_token(value: str, fallback: str = "item") -> str:
    """Create filesystem-safe token for filenames."""
    token = re.sub(r"[^A-Za-z0-9._-]+", "_", str(value)).strip("._-")
    return token or fallback


def _csv_response(content: str, name: str) -> Response:
    filename = f"{_safe_token(name)}_{date.today().isoformat()}.csv"
    logger.info("Exporting %s (%d bytes).", filename, len(content))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/grades-csv")
async def grades_export(payload: dict):
    """Export score records with their letter grades as CSV."""
    records = records_from_payload(payload)
    return _csv_response(grades_csv(records), "grades")


@router.post("/attendance-csv")
async def attendance_export(payload: dict):
    """Export the monthly attendance breakdown as CSV."""
    marks = marks_from_payload(payload)
    return _csv_response(attendance_csv(monthly_breakdown(marks)), "attendance")


@router.post("/analytics")
async def analytics(payload: dict):
    """
    Combined performance / attendance / fees report.
    Any of "records", "marks" and "payments" (with "total_fees") may be given;
    sections without data come back as null.
    """
    if not any(payload.get(k) for k in ("records", "marks", "payments")):
        raise HTTPException(400, "Provide 'records', 'marks' or 'payments'.")

    performance = attendance = fees = None

    if payload.get("records"):
        records = records_from_payload(payload)
        performance = {
            **summarize(records),
            "pass_rate": pass_rate(records, pass_mark=PASS_MARK),
            "subject_averages": group_averages(records, lambda r: r.subject),
        }
        if all(r.term for r in records):
            # Bare term numbers ("1", "2") carry no year; report without a trend.
            try:
                performance["term_trend"] = build_trend(term_averages(records))
            except InvalidGroupKey as e:
                logger.info("Omitting term trend from analytics report: %s", e)

    if payload.get("marks"):
        marks = marks_from_payload(payload)
        attendance = {
            **attendance_summary(marks),
            "monthly": monthly_breakdown(marks),
        }

    total_fees = payload.get("total_fees")
    if payload.get("payments") and total_fees is not None:
        if isinstance(total_fees, bool) or not isinstance(total_fees, (int, float)):
            raise HTTPException(400, "'total_fees' must be a number.")
        payments = payments_from_payload(payload)
        fees = {
            **fee_summary(total_fees, payments),
            "monthly": collection_by_month(payments),
        }

    report = analytics_report(
        school=payload.get("school") or SCHOOL_NAME,
        class_name=payload.get("class_name"),
        performance=performance,
        attendance=attendance,
        fees=fees,
    )
    return rounded(report)
