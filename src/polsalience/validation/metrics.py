"""
Validation of automated labels against a manual baseline.

Confusion counts are taken over the documents present in both label
sets; recall, precision and F1 follow directly from them. A zero
denominator raises UndefinedMetricError rather than returning 0.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Mapping

import pandas as pd

from polsalience.exceptions import SalienceError, UndefinedMetricError
from polsalience.validation.labels import (
    Label,
    LabelSource,
    labels_from_frame,
    labels_to_mapping,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfusionCounts:
    """True positive, false negative and false positive tallies."""

    true_positive: int = 0
    false_negative: int = 0
    false_positive: int = 0

    def __add__(self, other: ConfusionCounts) -> ConfusionCounts:
        if not isinstance(other, ConfusionCounts):
            return NotImplemented
        return ConfusionCounts(
            true_positive=self.true_positive + other.true_positive,
            false_negative=self.false_negative + other.false_negative,
            false_positive=self.false_positive + other.false_positive,
        )

    @property
    def manual_positives(self) -> int:
        return self.true_positive + self.false_negative

    @property
    def automated_positives(self) -> int:
        return self.true_positive + self.false_positive

    def to_dict(self) -> dict[str, int]:
        return {
            "true_positive": self.true_positive,
            "false_negative": self.false_negative,
            "false_positive": self.false_positive,
        }


def pair_counts(manual: int, automated: int) -> ConfusionCounts:
    """Confusion counts contributed by a single document."""
    return ConfusionCounts(
        true_positive=int(manual == 1 and automated == 1),
        false_negative=int(manual == 1 and automated == 0),
        false_positive=int(manual == 0 and automated == 1),
    )


def confusion_counts(
    manual: Iterable[Label] | Mapping[Hashable, Any],
    automated: Iterable[Label] | Mapping[Hashable, Any],
) -> ConfusionCounts:
    """Compare automated labels with manual ones.

    Only documents labelled in both sets are compared; the rest are
    excluded, not treated as 0.

    Args:
        manual: Reference labels, as Labels or ``{id: 0|1}``.
        automated: Predicted labels, as Labels or ``{id: 0|1}``.

    Returns:
        Summed ConfusionCounts.
    """
    manual_map = labels_to_mapping(manual)
    automated_map = labels_to_mapping(automated)

    shared = [doc_id for doc_id in manual_map if doc_id in automated_map]
    excluded = len(manual_map) + len(automated_map) - 2 * len(shared)
    if excluded:
        logger.warning(f"Excluded {excluded} labels without a counterpart in the other set")

    total = ConfusionCounts()
    for doc_id in shared:
        total = total + pair_counts(manual_map[doc_id], automated_map[doc_id])

    logger.debug(f"Compared {len(shared)} documents: {total.to_dict()}")
    return total


def confusion_counts_from_frame(
    frame: pd.DataFrame,
    manual_column: str = "manual",
    automated_column: str = "label",
    id_column: str = "id",
) -> ConfusionCounts:
    """Confusion counts from two label columns of one table.

    Rows with an empty cell in either column are left out.

    Raises:
        MissingColumnError: If a column is absent.
    """
    manual = labels_from_frame(frame, manual_column, LabelSource.MANUAL, id_column=id_column)
    automated = labels_from_frame(
        frame, automated_column, LabelSource.AUTOMATED, id_column=id_column
    )
    return confusion_counts(manual, automated)


def recall(counts: ConfusionCounts) -> float:
    """TP / (TP + FN).

    Raises:
        UndefinedMetricError: If there are no manual positives.
    """
    denominator = counts.true_positive + counts.false_negative
    if denominator == 0:
        raise UndefinedMetricError("recall", "no positive items in the manual labels")
    return counts.true_positive / denominator


def precision(counts: ConfusionCounts) -> float:
    """TP / (TP + FP).

    Raises:
        UndefinedMetricError: If there are no automated positives.
    """
    denominator = counts.true_positive + counts.false_positive
    if denominator == 0:
        raise UndefinedMetricError("precision", "no positive items in the automated labels")
    return counts.true_positive / denominator


def f1_score(counts: ConfusionCounts) -> float:
    """Harmonic mean of precision and recall.

    Raises:
        UndefinedMetricError: If precision or recall is undefined, or both are 0.
    """
    p = precision(counts)
    r = recall(counts)
    if p + r == 0:
        raise UndefinedMetricError("f1", "precision and recall are both 0")
    return 2 * p * r / (p + r)


@dataclass(frozen=True)
class MetricResult:
    """A statistic that is either a number or explicitly undefined."""

    name: str
    value: float | None = None
    error: str | None = None

    @property
    def is_defined(self) -> bool:
        return self.value is not None

    @classmethod
    def compute(cls, name: str, func, *args: Any) -> MetricResult:
        """Run ``func(*args)``, recording a SalienceError as an undefined result."""
        try:
            return cls(name=name, value=float(func(*args)))
        except SalienceError as e:
            logger.warning(f"{name} undefined: {e}")
            return cls(name=name, error=str(e))

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "error": self.error}


@dataclass(frozen=True)
class ValidationReport:
    """Recall, precision and F1 for one comparison."""

    counts: ConfusionCounts
    recall: MetricResult
    precision: MetricResult
    f1: MetricResult

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "counts": self.counts.to_dict(),
            "recall": self.recall.to_dict(),
            "precision": self.precision.to_dict(),
            "f1": self.f1.to_dict(),
        }


def evaluate(counts: ConfusionCounts) -> ValidationReport:
    """Compute all metrics, reporting undefined ones instead of raising.

    Args:
        counts: Confusion counts to evaluate.

    Returns:
        ValidationReport whose metrics carry either a value or an error.
    """
    return ValidationReport(
        counts=counts,
        recall=MetricResult.compute("recall", recall, counts),
        precision=MetricResult.compute("precision", precision, counts),
        f1=MetricResult.compute("f1", f1_score, counts),
    )
