"""
grading.py — Letter-grade scale (A to E with +/- modifiers).

A score maps to the first band whose lower bound it reaches. Bounds are
lower-inclusive, so 80.0 is an A and 79.999 is an A-. Scores above 100
saturate to A and scores below 0 saturate to E; range checking belongs to
record validation, not to the scale.
"""

import math
from numbers import Real
from typing import Any, Dict, List

from core.errors import InvalidScore


# Grade bands (min_score, label, points, remark)
# Ordered high to low.
GRADE_BANDS = [
    (80.0, "A", 12, "Excellent"),
    (75.0, "A-", 11, "Very good"),
    (70.0, "B+", 10, "Good"),
    (65.0, "B", 9, "Good"),
    (60.0, "B-", 8, "Fair"),
    (55.0, "C+", 7, "Fair"),
    (50.0, "C", 6, "Average"),
    (45.0, "C-", 5, "Average"),
    (40.0, "D+", 4, "Below average"),
    (35.0, "D", 3, "Weak"),
    (30.0, "D-", 2, "Weak"),
    (float("-inf"), "E", 1, "Poor"),
]

LETTER_GRADES = tuple(label for _, label, _, _ in GRADE_BANDS)
TOP_GRADE = LETTER_GRADES[0]
BOTTOM_GRADE = LETTER_GRADES[-1]


def _checked_score(score: Any) -> float:
    # bool is a Real subclass but True is not a mark.
    if isinstance(score, bool) or not isinstance(score, Real):
        raise InvalidScore(f"Score must be a number, got {score!r}.")
    value = float(score)
    if not math.isfinite(value):
        raise InvalidScore(f"Score must be finite, got {score!r}.")
    return value


def _band(score: Any):
    value = _checked_score(score)
    for band in GRADE_BANDS:
        if value >= band[0]:
            return value, band
    # Only reachable for -inf, which _checked_score rejects.
    return value, GRADE_BANDS[-1]


def grade_for(score: Any) -> str:
    """Return the letter grade for a score."""
    return _band(score)[1][1]


def grade_points(score: Any) -> int:
    """Return 12-point scale points (A=12 ... E=1)."""
    return _band(score)[1][2]


def grade_remark(score: Any) -> str:
    return _band(score)[1][3]


def grade_info(score: Any) -> Dict[str, Any]:
    """Return grade label, points and remark for a score."""
    value, (_, label, points, remark) = _band(score)
    return {
        "score": round(value, 2),
        "label": label,
        "points": points,
        "remark": remark,
    }


def grade_rank(label: str) -> int:
    """Position of a label in the scale, 0 for the best grade."""
    try:
        return LETTER_GRADES.index(label)
    except ValueError:
        raise ValueError(f"Unknown letter grade: {label!r}") from None


def get_all_grade_thresholds() -> List[Dict[str, Any]]:
    """Return the full grade scale for legend/reference."""
    thresholds = []
    for idx, (min_score, label, points, remark) in enumerate(GRADE_BANDS):
        max_score = 100.0 if idx == 0 else GRADE_BANDS[idx - 1][0] - 0.01
        thresholds.append(
            {
                "min": 0.0 if math.isinf(min_score) else min_score,
                "max": round(max_score, 2),
                "label": label,
                "points": points,
                "remark": remark,
            }
        )
    return thresholds
