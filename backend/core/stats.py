"""
stats.py — Score aggregation over ScoredRecord collections.

Computes:
- Mean score (raises EmptyInput instead of returning 0 for no data)
- Letter-grade distribution (all twelve grades, zero-filled)
- Per-group averages in first-seen group order
- Most common grade with an explicit tie-break (better grade wins)
- Pass rate, mean grade, class positions and report cards
- Term averages shaped as trend buckets
"""

import math
from typing import Any, Callable, Dict, Hashable, Iterable, List, Sequence

import numpy as np
import pandas as pd

from core.errors import EmptyInput, InvalidGroupKey
from core.grading import LETTER_GRADES, grade_for, grade_rank, grade_remark
from core.records import ScoredRecord


# ── Helpers ─────────────────────────────────────────────────────────

def _scores(records: Iterable[ScoredRecord]) -> np.ndarray:
    return np.array([r.score for r in records], dtype=float)


def _require(records: Sequence[ScoredRecord], what: str) -> None:
    if len(records) == 0:
        raise EmptyInput(f"Cannot compute {what} of an empty collection.")


def _is_missing_key(key: Any) -> bool:
    if key is None:
        return True
    if isinstance(key, float) and math.isnan(key):
        return True
    if isinstance(key, str) and not key.strip():
        return True
    return False


# ── Core aggregation ────────────────────────────────────────────────

def average(records: Sequence[ScoredRecord]) -> float:
    """Arithmetic mean of the scores."""
    _require(records, "an average")
    return float(np.mean(_scores(records)))


def grade_distribution(records: Iterable[ScoredRecord]) -> Dict[str, int]:
    """Count records per letter grade. Every grade is present, best first."""
    labels = pd.Series([grade_for(r.score) for r in records], dtype=object)
    counts = labels.value_counts().reindex(list(LETTER_GRADES), fill_value=0)
    return {label: int(count) for label, count in counts.items()}


def group_averages(
    records: Iterable[ScoredRecord],
    key_fn: Callable[[ScoredRecord], Hashable],
) -> List[Dict[str, Any]]:
    """
    Partition records by key_fn and average each partition.

    Groups come back in the order they are first seen. A record whose key is
    None, NaN or blank raises InvalidGroupKey.
    """
    groups: Dict[Hashable, List[float]] = {}
    for record in records:
        key = key_fn(record)
        if _is_missing_key(key):
            raise InvalidGroupKey(f"No group key for record {record!r}.")
        groups.setdefault(key, []).append(record.score)

    return [
        {"group": key, "average": float(np.mean(scores)), "count": len(scores)}
        for key, scores in groups.items()
    ]


def most_common_grade(distribution: Dict[str, int]) -> str:
    """
    Grade with the highest count. On a tie the better grade wins, whatever
    order the mapping was built in.
    """
    for label in distribution:
        grade_rank(label)

    best_label = None
    best_count = 0
    for label in LETTER_GRADES:
        count = int(distribution.get(label, 0))
        if count > best_count:
            best_label, best_count = label, count

    if best_label is None:
        raise EmptyInput("Distribution has no records.")
    return best_label


def summarize(records: Sequence[ScoredRecord]) -> Dict[str, Any]:
    """Average, distribution and record count for one collection."""
    _require(records, "a summary")
    distribution = grade_distribution(records)
    mean = average(records)
    return {
        "average": mean,
        "count": len(records),
        "distribution": distribution,
        "most_common_grade": most_common_grade(distribution),
        "mean_grade": grade_for(mean),
    }


# ── Derived statistics ──────────────────────────────────────────────

def mean_grade(records: Sequence[ScoredRecord]) -> str:
    return grade_for(average(records))


def pass_rate(records: Sequence[ScoredRecord], pass_mark: float = 50) -> float:
    """Percentage of records scoring at or above the pass mark."""
    _require(records, "a pass rate")
    scores = _scores(records)
    return float((scores >= pass_mark).sum() * 100 / len(scores))


def rank_students(records: Iterable[ScoredRecord]) -> List[Dict[str, Any]]:
    """
    Class positions by average score, best first.

    Tied averages share a position and the next position is skipped
    (1, 2, 2, 4). Ties keep first-seen order.
    """
    per_student = group_averages(records, lambda r: r.student_id)
    ordered = sorted(per_student, key=lambda g: g["average"], reverse=True)

    out_of = len(ordered)
    ranking = []
    position = 0
    previous = None
    for i, row in enumerate(ordered, start=1):
        if row["average"] != previous:
            position = i
            previous = row["average"]
        ranking.append({
            "student_id": row["group"],
            "average": row["average"],
            "grade": grade_for(row["average"]),
            "subjects": row["count"],
            "position": position,
            "out_of": out_of,
        })
    return ranking


def report_card(records: Sequence[ScoredRecord]) -> Dict[str, Any]:
    """Per-subject averages with grades and remarks, plus the overall mean grade."""
    _require(records, "a report card")
    subjects = [
        {
            "subject": row["group"],
            "average": row["average"],
            "grade": grade_for(row["average"]),
            "remark": grade_remark(row["average"]),
        }
        for row in group_averages(records, lambda r: r.subject)
    ]
    # The overall average weights every subject equally, however many
    # assessments each one has.
    overall = float(np.mean([s["average"] for s in subjects]))
    return {
        "subjects": subjects,
        "total_subjects": len(subjects),
        "average": overall,
        "mean_grade": grade_for(overall),
    }


def term_averages(records: Iterable[ScoredRecord]) -> List[Dict[str, Any]]:
    """Average per term, shaped as period buckets for trends.build_trend."""
    return [
        {"period_label": row["group"], "value": row["average"], "count": row["count"]}
        for row in group_averages(records, lambda r: r.term)
    ]
