"""
Grade routes — letter grades and score aggregation endpoints.
"""

from fastapi import APIRouter, HTTPException

from config import PASS_MARK
from core.grading import get_all_grade_thresholds, grade_info
from core.stats import group_averages, pass_rate, rank_students, report_card, summarize
from routes.payload import records_from_payload, rounded

router = APIRouter()

GROUPABLE_FIELDS = ("subject", "term", "class_name", "student_id", "exam")


@router.get("/scale")
async def scale():
    """Return the grade legend, best grade first."""
    return {"grade_scale": get_all_grade_thresholds()}


@router.post("/grade")
async def grade(payload: dict):
    """Letter grade, points and remark for a single score."""
    if "score" not in payload:
        raise HTTPException(400, "No score provided.")
    return grade_info(payload["score"])


@router.post("/summary")
async def summary(payload: dict):
    """Average, grade distribution, most common grade and pass rate."""
    records = records_from_payload(payload)
    result = summarize(records)
    result["pass_mark"] = PASS_MARK
    result["pass_rate"] = pass_rate(records, pass_mark=PASS_MARK)
    return rounded(result)


@router.post("/group-averages")
async def averages_by_group(payload: dict):
    """
    Averages per subject, term, class, student or exam.
    Expects: { "records": [...], "group_by": "subject" }
    """
    field = payload.get("group_by", "subject")
    if field not in GROUPABLE_FIELDS:
        raise HTTPException(400, f"Cannot group by '{field}'. Use one of {list(GROUPABLE_FIELDS)}.")
    records = records_from_payload(payload)
    return {
        "group_by": field,
        "groups": rounded(group_averages(records, lambda r: getattr(r, field))),
    }


@router.post("/rankings")
async def rankings(payload: dict):
    """Class positions by average score."""
    records = records_from_payload(payload)
    return {"rankings": rounded(rank_students(records))}


@router.post("/report-card")
async def student_report_card(payload: dict):
    """Per-subject grades and overall mean grade for one student's records."""
    records = records_from_payload(payload)
    return rounded(report_card(records))
