"""
Validation of dictionary labels for polsalience.

Provides confusion counts and recall/precision/F1 against a manual
baseline, inter-coder reliability statistics, and the annotation exchange
used to collect manual codings.
"""

from polsalience.validation.annotation import (
    AnnotationProvider,
    BatchHandle,
    CoderAnnotation,
    CsvAnnotationProvider,
    InMemoryAnnotationProvider,
    coding_sheet,
)
from polsalience.validation.labels import Label, LabelSource
from polsalience.validation.metrics import (
    ConfusionCounts,
    MetricResult,
    ValidationReport,
    confusion_counts,
    evaluate,
    f1_score,
    precision,
    recall,
)
from polsalience.validation.reliability import (
    ReliabilityReport,
    assess_reliability,
    cohens_kappa,
    krippendorffs_alpha,
    ratings_matrix,
)
from polsalience.validation.sampling import sample_documents, split_reliability_and_baseline

__all__ = [
    "AnnotationProvider",
    "BatchHandle",
    "CoderAnnotation",
    "CsvAnnotationProvider",
    "InMemoryAnnotationProvider",
    "coding_sheet",
    "Label",
    "LabelSource",
    "ConfusionCounts",
    "MetricResult",
    "ValidationReport",
    "confusion_counts",
    "evaluate",
    "f1_score",
    "precision",
    "recall",
    "ReliabilityReport",
    "assess_reliability",
    "cohens_kappa",
    "krippendorffs_alpha",
    "ratings_matrix",
    "sample_documents",
    "split_reliability_and_baseline",
]
