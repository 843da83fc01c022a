"""
Exchange of coding batches with human coders.

The core never talks to a spreadsheet service directly. It hands items to
an AnnotationProvider and later collects the completed annotations, which
feed the reliability and validation calculators.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Hashable, Iterable, Mapping

import pandas as pd

from polsalience.exceptions import MissingColumnError
from polsalience.preprocessing.normalizer import Document, require_columns

logger = logging.getLogger(__name__)

SHEET_COLUMNS = ["id", "text", "coder_id", "value"]


@dataclass(frozen=True)
class CoderAnnotation:
    """One coder's rating of one item. ``value is None`` means missing."""

    item_id: Hashable
    coder_id: str
    value: Any = None

    @property
    def is_missing(self) -> bool:
        return self.value is None


@dataclass(frozen=True)
class BatchHandle:
    """Reference to a submitted coding batch."""

    batch_id: str
    coder_id: str
    item_ids: tuple[Hashable, ...]


def _item_pair(item: Document | Mapping[str, Any]) -> tuple[Hashable, str]:
    if isinstance(item, Document):
        return item.id, item.raw_text
    return item["id"], item.get("text", "")


def _clean_value(value: Any) -> Any:
    """Blank cells become None; numeric strings are parsed like numbers.

    Integral numbers become ints, so ``"1.0"``, ``"1"``, ``1.0`` and ``1``
    are the same category. Other strings are kept as nominal labels.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            value = float(value)
        except ValueError:
            return value
    if pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def coding_sheet(
    items: Iterable[Document | Mapping[str, Any]],
    coders: Iterable[str],
) -> pd.DataFrame:
    """Build a blank coding sheet with one row per item and coder.

    Args:
        items: Documents or ``{"id", "text"}`` mappings.
        coders: Coder ids; every coder receives every item.

    Returns:
        DataFrame with columns ``id, text, coder_id, value`` and an empty
        ``value`` column, readable by :func:`annotations_from_frame`.
    """
    pairs = [_item_pair(item) for item in items]
    return pd.DataFrame(
        [
            {"id": item_id, "text": text, "coder_id": coder_id, "value": None}
            for coder_id in coders
            for item_id, text in pairs
        ],
        columns=SHEET_COLUMNS,
    )


class AnnotationProvider(ABC):
    """Interface to a human-coding workflow."""

    @abstractmethod
    def submit_batch(
        self,
        items: Iterable[Document | Mapping[str, Any]],
        coder_id: str,
    ) -> BatchHandle:
        """Send items to a coder.

        Args:
            items: Documents or ``{"id", "text"}`` mappings.
            coder_id: Coder receiving the batch.

        Returns:
            Handle for fetching the annotations later.
        """

    @abstractmethod
    def fetch_completed(self, handle: BatchHandle) -> list[CoderAnnotation]:
        """Collect the annotations for a submitted batch.

        Args:
            handle: Handle returned by :meth:`submit_batch`.

        Returns:
            One annotation per item; unanswered items carry ``None``.
        """

    @staticmethod
    def new_batch_id(coder_id: str) -> str:
        return f"{coder_id}_{uuid.uuid4().hex[:8]}"


class InMemoryAnnotationProvider(AnnotationProvider):
    """Deterministic provider backed by a coding function.

    Useful as a test double and for replaying existing codings.
    """

    def __init__(self, coder: Callable[[Hashable, str, str], Any]):
        """Initialize provider.

        Args:
            coder: Called as ``coder(item_id, text, coder_id)``; returns the
                rating, or None for a missing rating.
        """
        self._coder = coder
        self._batches: dict[str, list[tuple[Hashable, str]]] = {}

    def submit_batch(
        self,
        items: Iterable[Document | Mapping[str, Any]],
        coder_id: str,
    ) -> BatchHandle:
        pairs = [_item_pair(item) for item in items]
        batch_id = self.new_batch_id(coder_id)
        self._batches[batch_id] = pairs
        return BatchHandle(
            batch_id=batch_id,
            coder_id=coder_id,
            item_ids=tuple(item_id for item_id, _ in pairs),
        )

    def fetch_completed(self, handle: BatchHandle) -> list[CoderAnnotation]:
        if handle.batch_id not in self._batches:
            raise KeyError(f"Unknown batch: {handle.batch_id}")
        return [
            CoderAnnotation(
                item_id=item_id,
                coder_id=handle.coder_id,
                value=_clean_value(self._coder(item_id, text, handle.coder_id)),
            )
            for item_id, text in self._batches[handle.batch_id]
        ]


class CsvAnnotationProvider(AnnotationProvider):
    """Coding sheets exchanged as CSV files in a shared directory.

    Each batch is written to ``<directory>/<batch_id>.csv`` with an empty
    ``value`` column for the coder to fill in.
    """

    def __init__(self, directory: str | Path):
        """Initialize provider.

        Args:
            directory: Directory for coding sheets. Created if missing.
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def sheet_path(self, handle: BatchHandle) -> Path:
        return self.directory / f"{handle.batch_id}.csv"

    def submit_batch(
        self,
        items: Iterable[Document | Mapping[str, Any]],
        coder_id: str,
    ) -> BatchHandle:
        items = list(items)
        sheet = coding_sheet(items, [coder_id])
        handle = BatchHandle(
            batch_id=self.new_batch_id(coder_id),
            coder_id=coder_id,
            item_ids=tuple(_item_pair(item)[0] for item in items),
        )
        path = self.sheet_path(handle)
        sheet.to_csv(path, index=False)
        logger.info(f"Wrote coding sheet with {len(sheet)} items for {coder_id}: {path}")
        return handle

    def fetch_completed(self, handle: BatchHandle) -> list[CoderAnnotation]:
        path = self.sheet_path(handle)
        if not path.exists():
            raise FileNotFoundError(f"Coding sheet not found: {path}")

        sheet = pd.read_csv(path, dtype={"value": object})
        try:
            require_columns(sheet, ["id", "value"])
        except MissingColumnError:
            logger.error(f"Coding sheet {path} is missing required columns")
            raise

        annotations = [
            CoderAnnotation(item_id=item_id, coder_id=handle.coder_id, value=_clean_value(value))
            for item_id, value in zip(sheet["id"], sheet["value"])
        ]
        missing = sum(1 for a in annotations if a.is_missing)
        logger.info(f"Read {len(annotations)} annotations from {path} ({missing} missing)")
        return annotations


def annotations_from_frame(
    frame: pd.DataFrame,
    item_column: str = "id",
    coder_column: str = "coder_id",
    value_column: str = "value",
) -> list[CoderAnnotation]:
    """Read long-format annotations (one row per item and coder).

    Raises:
        MissingColumnError: If a column is absent.
    """
    require_columns(frame, [item_column, coder_column, value_column])
    return [
        CoderAnnotation(item_id=item_id, coder_id=str(coder_id), value=_clean_value(value))
        for item_id, coder_id, value in zip(
            frame[item_column], frame[coder_column], frame[value_column]
        )
    ]
