"""
Inter-coder reliability for the manual baseline.

A ratings matrix is a DataFrame with one row per item and one column per
coder; ``None``/``NaN`` marks a missing rating. Categories are nominal.
Cohen's kappa needs exactly two coders and a complete matrix.
Krippendorff's alpha takes two or more coders and ignores missing ratings;
items rated by fewer than two coders contribute nothing.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Hashable, Iterable

import krippendorff
import numpy as np
import pandas as pd
from sklearn.metrics import cohen_kappa_score

from polsalience.exceptions import (
    DegenerateAgreementError,
    IncompleteRatingsError,
    InsufficientRatersError,
)
from polsalience.validation.annotation import CoderAnnotation
from polsalience.validation.labels import coerce_binary
from polsalience.validation.metrics import MetricResult

logger = logging.getLogger(__name__)

# Landis & Koch (1977) bands, checked from the top
KAPPA_BANDS = [
    (0.81, "almost perfect"),
    (0.61, "substantial"),
    (0.41, "moderate"),
    (0.21, "fair"),
    (0.0, "slight"),
]


def ratings_matrix(annotations: Iterable[CoderAnnotation]) -> pd.DataFrame:
    """Pivot coder annotations into an items x coders matrix.

    Args:
        annotations: One annotation per (item, coder).

    Returns:
        DataFrame indexed by item id with one column per coder.

    Raises:
        ValueError: If a coder rated the same item twice.
    """
    by_coder: dict[Hashable, dict[Hashable, Any]] = {}
    item_order: dict[Hashable, None] = {}
    for annotation in annotations:
        column = by_coder.setdefault(annotation.coder_id, {})
        if annotation.item_id in column:
            raise ValueError(
                f"Coder {annotation.coder_id!r} rated item {annotation.item_id!r} more than once"
            )
        column[annotation.item_id] = annotation.value
        item_order[annotation.item_id] = None

    items = list(item_order)
    matrix = pd.DataFrame(
        {coder: [values.get(item) for item in items] for coder, values in by_coder.items()},
        index=pd.Index(items, name="item_id"),
        dtype=object,
    )
    logger.debug(f"Built ratings matrix: {matrix.shape[0]} items x {matrix.shape[1]} coders")
    return matrix


def _as_frame(matrix: Any) -> pd.DataFrame:
    if isinstance(matrix, pd.DataFrame):
        return matrix
    return pd.DataFrame(matrix)


def _encode(matrix: pd.DataFrame) -> tuple[np.ndarray, list[Any]]:
    """Replace category labels with integer codes, NaN for missing."""
    values = matrix.to_numpy(dtype=object)
    missing = pd.isna(matrix).to_numpy()
    codes, categories = pd.factorize(pd.Series(values[~missing], dtype=object), sort=False)
    encoded = np.full(values.shape, np.nan)
    encoded[~missing] = codes
    return encoded, list(categories)


def cohens_kappa(matrix: pd.DataFrame) -> float:
    """Cohen's kappa for two coders.

    kappa = (p_o - p_e) / (1 - p_e), with p_e taken from each coder's
    marginal category frequencies.

    Args:
        matrix: Items x coders ratings with exactly two coder columns.

    Returns:
        Kappa in [-1, 1].

    Raises:
        InsufficientRatersError: If the matrix does not have two coders.
        IncompleteRatingsError: If any rating is missing.
        DegenerateAgreementError: If there are no items, or both coders
            used one and the same category throughout (p_e = 1).
    """
    matrix = _as_frame(matrix)
    if matrix.shape[1] != 2:
        raise InsufficientRatersError(matrix.shape[1], "exactly 2")

    incomplete = matrix.index[matrix.isna().any(axis=1)]
    if len(incomplete):
        raise IncompleteRatingsError(list(incomplete))
    if matrix.empty:
        raise DegenerateAgreementError("cohens_kappa", "no items rated")

    encoded, categories = _encode(matrix)
    if len(categories) < 2:
        raise DegenerateAgreementError(
            "cohens_kappa", f"both coders used only {categories[0]!r}, expected agreement is 1"
        )

    kappa = float(cohen_kappa_score(encoded[:, 0].astype(int), encoded[:, 1].astype(int)))
    logger.debug(f"Cohen's kappa over {matrix.shape[0]} items: {kappa:.4f}")
    return kappa


def krippendorffs_alpha(matrix: pd.DataFrame) -> float:
    """Krippendorff's alpha for nominal ratings from two or more coders.

    alpha = 1 - D_o / D_e, built from the coincidence matrix of pairable
    ratings (each item's pairs weighted by 1 / (m_u - 1)).

    Args:
        matrix: Items x coders ratings, missing values allowed.

    Returns:
        Alpha, 1.0 for perfect agreement.

    Raises:
        InsufficientRatersError: If fewer than two coder columns are given.
        DegenerateAgreementError: If no item has two ratings, or the
            pairable ratings use a single category (D_e = 0).
    """
    matrix = _as_frame(matrix)
    if matrix.shape[1] < 2:
        raise InsufficientRatersError(matrix.shape[1], "at least 2")

    pairable = matrix[matrix.notna().sum(axis=1) >= 2]
    if pairable.empty:
        raise DegenerateAgreementError(
            "krippendorffs_alpha", "no item has two or more ratings"
        )

    encoded, categories = _encode(pairable)
    if len(categories) < 2:
        raise DegenerateAgreementError(
            "krippendorffs_alpha",
            f"all pairable ratings are {categories[0]!r}, expected disagreement is 0",
        )

    alpha = float(krippendorff.alpha(
        reliability_data=encoded.T,
        level_of_measurement="nominal",
        value_domain=list(range(len(categories))),
    ))
    dropped = len(matrix) - len(pairable)
    if dropped:
        logger.info(f"Excluded {dropped} items with fewer than two ratings from alpha")
    logger.debug(f"Krippendorff's alpha over {len(pairable)} items: {alpha:.4f}")
    return alpha


def percent_agreement(matrix: pd.DataFrame) -> float:
    """Share of agreeing rating pairs, pooled over items.

    Raises:
        DegenerateAgreementError: If no item has two ratings.
    """
    matrix = _as_frame(matrix)
    agreeing = 0
    total = 0
    for _, row in matrix.iterrows():
        values = [v for v in row.tolist() if not pd.isna(v)]
        for i, first in enumerate(values):
            for second in values[i + 1:]:
                total += 1
                agreeing += int(first == second)

    if total == 0:
        raise DegenerateAgreementError("percent_agreement", "no item has two or more ratings")
    return agreeing / total


def interpret_kappa(value: float) -> str:
    """Landis & Koch label for a kappa (or alpha) value."""
    for threshold, label in KAPPA_BANDS:
        if value >= threshold:
            return label
    return "poor"


def consensus_labels(matrix: pd.DataFrame) -> dict[Hashable, int]:
    """Majority-vote binary label per item.

    Ties and items without any rating are left out.

    Raises:
        ValueError: If a rating is not 0 or 1.
    """
    matrix = _as_frame(matrix)
    labels: dict[Hashable, int] = {}
    ties = 0
    for item_id, row in matrix.iterrows():
        votes = Counter(coerce_binary(v) for v in row.tolist() if not pd.isna(v))
        if not votes:
            continue
        ranked = votes.most_common()
        if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
            ties += 1
            continue
        labels[item_id] = ranked[0][0]

    if ties:
        logger.warning(f"Left {ties} tied items out of the consensus labels")
    return labels


@dataclass(frozen=True)
class ReliabilityReport:
    """Agreement statistics for a coded batch and whether it passes the gate."""

    n_items: int
    n_coders: int
    alpha: MetricResult
    kappa: MetricResult | None
    percent_agreement: MetricResult
    min_alpha: float
    min_kappa: float

    @property
    def passed(self) -> bool:
        if not self.alpha.is_defined or self.alpha.value < self.min_alpha:
            return False
        if self.kappa is not None:
            return self.kappa.is_defined and self.kappa.value >= self.min_kappa
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "n_items": self.n_items,
            "n_coders": self.n_coders,
            "alpha": self.alpha.to_dict(),
            "kappa": self.kappa.to_dict() if self.kappa is not None else None,
            "percent_agreement": self.percent_agreement.to_dict(),
            "min_alpha": self.min_alpha,
            "min_kappa": self.min_kappa,
            "passed": self.passed,
        }
        if self.alpha.is_defined:
            result["alpha"]["interpretation"] = interpret_kappa(self.alpha.value)
        if self.kappa is not None and self.kappa.is_defined:
            result["kappa"]["interpretation"] = interpret_kappa(self.kappa.value)
        return result


def assess_reliability(
    matrix: pd.DataFrame,
    min_alpha: float = 0.8,
    min_kappa: float = 0.7,
) -> ReliabilityReport:
    """Compute agreement statistics and apply the reliability gate.

    Kappa is only computed when the matrix has exactly two coders.
    Undefined statistics are reported, never replaced by a number.

    Args:
        matrix: Items x coders ratings.
        min_alpha: Minimum alpha for the baseline to be accepted.
        min_kappa: Minimum kappa (two-coder batches only).

    Returns:
        ReliabilityReport.

    Raises:
        InsufficientRatersError: If fewer than two coders are present.
    """
    matrix = _as_frame(matrix)
    if matrix.shape[1] < 2:
        raise InsufficientRatersError(matrix.shape[1], "at least 2")

    kappa = None
    if matrix.shape[1] == 2:
        kappa = MetricResult.compute("cohens_kappa", cohens_kappa, matrix)

    report = ReliabilityReport(
        n_items=matrix.shape[0],
        n_coders=matrix.shape[1],
        alpha=MetricResult.compute("krippendorffs_alpha", krippendorffs_alpha, matrix),
        kappa=kappa,
        percent_agreement=MetricResult.compute("percent_agreement", percent_agreement, matrix),
        min_alpha=min_alpha,
        min_kappa=min_kappa,
    )
    logger.info(
        f"Reliability over {report.n_items} items / {report.n_coders} coders: "
        f"alpha={report.alpha.value}, kappa={kappa.value if kappa else None}, "
        f"passed={report.passed}"
    )
    return report
