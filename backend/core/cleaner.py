"""
cleaner.py — Supersede re-entered records before aggregation.

A grade re-entered for the same student, subject, term and exam replaces the
earlier entry; a second attendance mark for the same student and day replaces
the first. The last entry wins, and survivors keep the position of their last
occurrence.
"""

import logging
from typing import Callable, Hashable, Iterable, List, TypeVar

from core.records import AttendanceMark, ScoredRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _keep_last(items: Iterable[T], key_fn: Callable[[T], Hashable], what: str) -> List[T]:
    latest = {}
    total = 0
    for item in items:
        total += 1
        key = key_fn(item)
        latest.pop(key, None)
        latest[key] = item

    superseded = total - len(latest)
    if superseded:
        logger.info("Superseded %d of %d %s.", superseded, total, what)
    return list(latest.values())


def score_key(record: ScoredRecord):
    return (record.student_id, record.subject, record.term, record.exam)


def mark_key(mark: AttendanceMark):
    return (mark.student_id, mark.date)


def latest_scores(records: Iterable[ScoredRecord]) -> List[ScoredRecord]:
    """Drop scores superseded by a later entry for the same assessment."""
    return _keep_last(records, score_key, "score records")


def latest_marks(marks: Iterable[AttendanceMark]) -> List[AttendanceMark]:
    """Drop attendance marks superseded by a later mark for the same day."""
    return _keep_last(marks, mark_key, "attendance marks")
