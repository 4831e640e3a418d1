"""
errors.py — Error taxonomy for the grading and aggregation engine.

Every error is a ValueError. The `code` attribute names the kind of error in
HTTP error bodies.
"""


class AnalyticsError(ValueError):
    """Base class for all aggregation errors."""

    code = "ANALYTICS_ERROR"


class InvalidScore(AnalyticsError):
    """A score is not a finite number."""

    code = "INVALID_SCORE"


class EmptyInput(AnalyticsError):
    """An average or rate was requested over an empty collection."""

    code = "EMPTY_INPUT"


class InvalidGroupKey(AnalyticsError):
    """A grouping key or period label cannot place a record in a partition."""

    code = "INVALID_GROUP_KEY"
