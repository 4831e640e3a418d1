"""
records.py — Validated value types consumed by the aggregators.

Records are frozen pydantic models: a score outside 0-100 is rejected when the
record is built.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


ATTENDANCE_STATUSES = [s.value for s in AttendanceStatus]


class ScoredRecord(BaseModel):
    """One recorded score for a subject in a term."""

    model_config = ConfigDict(frozen=True)

    subject: str
    term: Optional[str] = None
    score: float = Field(ge=0, le=100, allow_inf_nan=False)
    student_id: Optional[str] = None
    class_name: Optional[str] = None
    exam: Optional[str] = None
    recorded_on: Optional[dt.date] = None

    @field_validator("subject", "term", "student_id", "class_name", "exam", mode="before")
    @classmethod
    def _strip(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class AttendanceMark(BaseModel):
    """Attendance for one individual on one calendar day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    status: AttendanceStatus
    student_id: Optional[str] = None
    note: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, v):
        # Registers and parent views spell statuses "Present", " ABSENT " etc.
        if isinstance(v, str):
            return v.strip().lower()
        return v


class FeePayment(BaseModel):
    """A single fee payment made against a term's fees."""

    model_config = ConfigDict(frozen=True)

    amount_paid: float = Field(gt=0, allow_inf_nan=False)
    payment_date: dt.date
    student_id: Optional[str] = None
    term: Optional[str] = None
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
