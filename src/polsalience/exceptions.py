"""
Error taxonomy for polsalience.

Configuration-time errors abort a run. Metric-level errors are raised by
the statistics functions and turned into explicit failure results by the
report builders in :mod:`polsalience.validation`.
"""

from __future__ import annotations


class SalienceError(Exception):
    """Base class for all polsalience errors."""


class PatternCompilationError(SalienceError):
    """A dictionary pattern is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str = ""):
        self.pattern = pattern
        self.reason = reason
        message = f"Invalid pattern {pattern!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MissingColumnError(SalienceError):
    """Required columns are absent from an ingested table."""

    def __init__(self, columns: list[str] | tuple[str, ...], available: list[str] | None = None):
        self.columns = list(columns)
        self.available = list(available) if available is not None else None
        message = f"Missing required column(s): {', '.join(self.columns)}"
        if self.available is not None:
            message += f" (available: {', '.join(map(str, self.available))})"
        super().__init__(message)


class UndefinedMetricError(SalienceError):
    """A validation metric has a zero denominator."""

    def __init__(self, metric: str, reason: str):
        self.metric = metric
        self.reason = reason
        super().__init__(f"{metric} is undefined: {reason}")


class InsufficientRatersError(SalienceError):
    """An agreement statistic was given the wrong number of raters."""

    def __init__(self, n_raters: int, required: str):
        self.n_raters = n_raters
        self.required = required
        super().__init__(f"Expected {required} raters, got {n_raters}")


class IncompleteRatingsError(SalienceError):
    """A statistic that needs a complete ratings matrix found missing cells."""

    def __init__(self, items: list):
        self.items = list(items)
        preview = ", ".join(map(str, self.items[:5]))
        if len(self.items) > 5:
            preview += ", ..."
        super().__init__(f"Missing ratings for {len(self.items)} item(s): {preview}")


class DegenerateAgreementError(SalienceError):
    """Chance agreement leaves nothing to normalize against."""

    def __init__(self, statistic: str, reason: str):
        self.statistic = statistic
        self.reason = reason
        super().__init__(f"{statistic} is undefined: {reason}")
