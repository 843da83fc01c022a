"""
Group-level aggregation of keyword matches into a binary salience label.

A document is labelled 1 when any group of the dictionary matches at
least once (politician OR party), 0 otherwise.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Mapping, Sequence

import pandas as pd
from tqdm import tqdm

from polsalience.detection.keyword_matcher import (
    KeywordDictionary,
    KeywordPattern,
    count_matches,
    find_matched_terms,
)
from polsalience.preprocessing.normalizer import Document

logger = logging.getLogger(__name__)

TERM_SEPARATOR = ";"


def group_count(text: str, patterns: Iterable[str | KeywordPattern]) -> int:
    """Sum match counts over all patterns of a group.

    Args:
        text: Normalized document text.
        patterns: The group's patterns.

    Returns:
        Total number of matches.
    """
    return sum(count_matches(text, pattern) for pattern in patterns)


def classify(group_counts: Mapping[str, int | None]) -> int:
    """Combine per-group counts into a binary label.

    Absent (``None``) counts are treated as 0.

    Args:
        group_counts: Mapping of group name to match count.

    Returns:
        1 if any group has at least one match, else 0.
    """
    return int(any((count or 0) >= 1 for count in group_counts.values()))


@dataclass(frozen=True)
class MatchResult:
    """Match evidence for one (document, group) pair."""

    document_id: Hashable
    group: str
    count: int
    matched_terms: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class DocumentClassification:
    """Per-group evidence and final label for one document."""

    document_id: Hashable
    matches: dict[str, MatchResult]
    label: int

    @property
    def group_counts(self) -> dict[str, int]:
        return {group: result.count for group, result in self.matches.items()}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.document_id,
            "label": self.label,
            "groups": {
                group: {
                    "count": result.count,
                    "matched_terms": sorted(result.matched_terms),
                }
                for group, result in self.matches.items()
            },
        }


class GroupClassifier:
    """Applies a keyword dictionary to documents.

    The dictionary is fixed at construction; classifying never mutates it,
    so documents can be processed in any order or in parallel.
    """

    def __init__(self, dictionary: KeywordDictionary):
        """Initialize group classifier.

        Args:
            dictionary: Keyword dictionary to apply.
        """
        self.dictionary = dictionary

    def match_group(self, document: Document, group_name: str) -> MatchResult:
        """Match a single group against a document."""
        group = self.dictionary.get_group(group_name)
        text = document.normalized_text
        return MatchResult(
            document_id=document.id,
            group=group.name,
            count=group_count(text, group.patterns),
            matched_terms=find_matched_terms(text, group.patterns),
        )

    def classify_document(self, document: Document) -> DocumentClassification:
        """Classify one document.

        Args:
            document: Document to classify.

        Returns:
            DocumentClassification with one MatchResult per group.
        """
        matches = {
            group.name: self.match_group(document, group.name)
            for group in self.dictionary.groups
        }
        label = classify({name: result.count for name, result in matches.items()})
        return DocumentClassification(document_id=document.id, matches=matches, label=label)

    def classify_batch(
        self,
        documents: Sequence[Document],
        n_workers: int = 1,
        show_progress: bool = False,
    ) -> list[DocumentClassification]:
        """Classify many documents, optionally across worker threads.

        Args:
            documents: Documents to classify.
            n_workers: Number of worker threads. 1 runs sequentially.
            show_progress: Whether to display a progress bar.

        Returns:
            Classifications in the same order as ``documents``.
        """
        if n_workers < 1:
            raise ValueError(f"n_workers must be at least 1, got {n_workers}")

        if n_workers == 1:
            iterator = tqdm(documents, desc="Classifying", disable=not show_progress)
            results = [self.classify_document(document) for document in iterator]
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                mapped = executor.map(self.classify_document, documents)
                results = list(tqdm(
                    mapped,
                    total=len(documents),
                    desc="Classifying",
                    disable=not show_progress,
                ))

        positives = sum(result.label for result in results)
        logger.info(f"Classified {len(results)} documents ({positives} positive)")
        return results

    def to_frame(
        self,
        corpus: pd.DataFrame,
        classifications: Sequence[DocumentClassification],
        id_column: str = "id",
        label_column: str = "label",
    ) -> pd.DataFrame:
        """Augment a corpus table with counts, evidence and labels.

        The input table is left untouched; a new DataFrame is returned.
        Existing columns with the same names are replaced, with a warning.

        Args:
            corpus: Corpus table the classifications were computed from.
            classifications: Output of :meth:`classify_batch`.
            id_column: Column holding document ids.
            label_column: Name of the output label column.

        Returns:
            Copy of ``corpus`` with ``<group>_count``, ``<group>_terms`` and
            label columns added.
        """
        by_id = {c.document_id: c for c in classifications}
        output = corpus.copy()

        added = [
            f"{group}_{suffix}"
            for group in self.dictionary.group_names
            for suffix in ("count", "terms")
        ] + [label_column]
        overwritten = [column for column in added if column in corpus.columns]
        if overwritten:
            logger.warning(f"Overwriting existing corpus columns: {overwritten}")

        for group in self.dictionary.group_names:
            output[f"{group}_count"] = [
                by_id[doc_id].matches[group].count if doc_id in by_id else None
                for doc_id in output[id_column]
            ]
            output[f"{group}_terms"] = [
                TERM_SEPARATOR.join(sorted(by_id[doc_id].matches[group].matched_terms))
                if doc_id in by_id else None
                for doc_id in output[id_column]
            ]

        output[label_column] = [
            by_id[doc_id].label if doc_id in by_id else None
            for doc_id in output[id_column]
        ]
        return output

    def get_stats(self) -> dict[str, Any]:
        """Get classifier statistics.

        Returns:
            Dictionary with stats.
        """
        return {"dictionary": self.dictionary.get_stats()}


def group_totals(classifications: Iterable[DocumentClassification]) -> dict[str, int]:
    """Sum per-group counts over documents.

    Args:
        classifications: Classified documents.

    Returns:
        Mapping of group name to total match count.
    """
    totals: dict[str, int] = {}
    for classification in classifications:
        for group, result in classification.matches.items():
            totals[group] = totals.get(group, 0) + result.count
    return totals

