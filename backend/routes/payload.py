"""
Payload helpers shared by the route modules.

Routes accept plain JSON objects ({"records": [...]}, {"marks": [...]}) and
turn them into validated models here.
"""

from typing import List, Type, TypeVar

from fastapi import HTTPException
from pydantic import BaseModel, TypeAdapter, ValidationError

from core.cleaner import latest_marks, latest_scores
from core.records import AttendanceMark, FeePayment, ScoredRecord

M = TypeVar("M", bound=BaseModel)


def _models_from_payload(payload: dict, key: str, model: Type[M], required: bool = True) -> List[M]:
    items = payload.get(key)
    if not items:
        if required:
            raise HTTPException(400, f"No {key} provided.")
        return []
    if not isinstance(items, list):
        raise HTTPException(400, f"'{key}' must be a list.")
    try:
        return TypeAdapter(List[model]).validate_python(items)
    except ValidationError as e:
        raise HTTPException(422, e.errors(include_url=False, include_context=False))


def _supersede(payload: dict) -> bool:
    options = payload.get("options") or {}
    return bool(options.get("supersede", False))


def records_from_payload(payload: dict) -> List[ScoredRecord]:
    """
    Validated score records.
    With { "options": { "supersede": true } } re-entered scores replace earlier ones.
    """
    records = _models_from_payload(payload, "records", ScoredRecord)
    return latest_scores(records) if _supersede(payload) else records


def marks_from_payload(payload: dict) -> List[AttendanceMark]:
    """
    Validated attendance marks.
    With { "options": { "supersede": true } } a later mark for the same day replaces the earlier one.
    """
    marks = _models_from_payload(payload, "marks", AttendanceMark)
    return latest_marks(marks) if _supersede(payload) else marks


def payments_from_payload(payload: dict) -> List[FeePayment]:
    return _models_from_payload(payload, "payments", FeePayment, required=False)


def rounded(obj, ndigits: int = 2):
    """Recursively round floats in a response body for display."""
    if isinstance(obj, dict):
        return {k: rounded(v, ndigits) for k, v in obj.items()}
    if isinstance(obj, list):
        return [rounded(v, ndigits) for v in obj]
    if isinstance(obj, float):
        return round(obj, ndigits)
    return obj
