"""
Binary document labels from automated and manual coding.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, Iterable, Mapping

import pandas as pd

from polsalience.preprocessing.normalizer import require_columns

logger = logging.getLogger(__name__)


class LabelSource(Enum):
    """Where a label came from."""

    AUTOMATED = "automated"
    MANUAL = "manual"


def coerce_binary(value: Any) -> int:
    """Convert a 0/1 value (int, float, bool, numeric string) to int.

    Raises:
        ValueError: If the value is not 0 or 1.
    """
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Label must be 0 or 1, got {value!r}") from None
    if number not in (0.0, 1.0):
        raise ValueError(f"Label must be 0 or 1, got {value!r}")
    return int(number)


@dataclass(frozen=True)
class Label:
    """A binary salience label for one document."""

    document_id: Hashable
    source: LabelSource
    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", coerce_binary(self.value))


def labels_to_mapping(labels: Iterable[Label] | Mapping[Hashable, Any]) -> dict[Hashable, int]:
    """Normalize a label collection to ``{document_id: 0|1}``.

    Raises:
        ValueError: On non-binary values or a document labelled twice.
    """
    if isinstance(labels, Mapping):
        return {doc_id: coerce_binary(value) for doc_id, value in labels.items()}

    mapping: dict[Hashable, int] = {}
    for label in labels:
        if label.document_id in mapping:
            raise ValueError(f"Document {label.document_id!r} labelled more than once")
        mapping[label.document_id] = label.value
    return mapping


def labels_from_frame(
    frame: pd.DataFrame,
    column: str,
    source: LabelSource,
    id_column: str = "id",
) -> list[Label]:
    """Read labels from a table column, skipping empty cells.

    Args:
        frame: Table with an id column and a label column.
        column: Label column.
        source: Whether the column holds automated or manual labels.
        id_column: Column holding document ids.

    Returns:
        One Label per non-null cell.

    Raises:
        MissingColumnError: If either column is absent.
        ValueError: If a cell is not 0 or 1.
    """
    require_columns(frame, [id_column, column])

    labels = [
        Label(document_id=doc_id, source=source, value=value)
        for doc_id, value in zip(frame[id_column], frame[column])
        if not pd.isna(value)
    ]
    skipped = len(frame) - len(labels)
    if skipped:
        logger.warning(f"Skipped {skipped} rows with no {source.value} label in '{column}'")
    return labels
