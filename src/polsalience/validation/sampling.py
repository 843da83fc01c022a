"""
Seeded sampling of documents for manual coding.

The intercoder batch and the validation baseline are drawn as disjoint
samples: draw the first, then pass its ids as ``exclude_ids`` when
drawing the second.
"""

from __future__ import annotations

import logging
import random
from typing import Hashable, Iterable, Sequence

from polsalience.preprocessing.normalizer import Document

logger = logging.getLogger(__name__)


def sample_documents(
    documents: Sequence[Document],
    n: int,
    seed: int = 42,
    exclude_ids: Iterable[Hashable] = (),
) -> list[Document]:
    """Draw a reproducible random sample of documents.

    Args:
        documents: Pool to sample from.
        n: Sample size.
        seed: Random seed; the same seed and pool give the same sample.
        exclude_ids: Ids that must not be drawn (e.g. an earlier batch).

    Returns:
        ``n`` documents in pool order.

    Raises:
        ValueError: If ``n`` is negative or exceeds the eligible pool.
    """
    if n < 0:
        raise ValueError(f"Sample size must be non-negative, got {n}")

    excluded = set(exclude_ids)
    eligible = [document for document in documents if document.id not in excluded]
    if n > len(eligible):
        raise ValueError(
            f"Requested {n} documents but only {len(eligible)} are eligible "
            f"({len(excluded)} excluded)"
        )

    rng = random.Random(seed)
    chosen = set(rng.sample(range(len(eligible)), n))
    sample = [document for i, document in enumerate(eligible) if i in chosen]
    logger.info(f"Sampled {len(sample)} of {len(eligible)} eligible documents (seed={seed})")
    return sample


def split_reliability_and_baseline(
    documents: Sequence[Document],
    reliability_size: int,
    baseline_size: int,
    seed: int = 42,
) -> tuple[list[Document], list[Document]]:
    """Draw disjoint intercoder and baseline samples.

    Returns:
        ``(reliability_sample, baseline_sample)``.
    """
    reliability = sample_documents(documents, reliability_size, seed=seed)
    baseline = sample_documents(
        documents,
        baseline_size,
        seed=seed + 1,
        exclude_ids=[document.id for document in reliability],
    )
    return reliability, baseline
