"""
Text normalization and document construction.

Normalization is case folding only: no stemming, stop-word removal or
whitespace collapsing, so that dictionary patterns see the text as written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Hashable, Iterator

import pandas as pd

from polsalience.exceptions import MissingColumnError

logger = logging.getLogger(__name__)


def normalize(raw_text: str) -> str:
    """Lower-case text for matching.

    Args:
        raw_text: Text as it appears in the corpus.

    Returns:
        Lower-cased text. Idempotent: ``normalize(normalize(t)) == normalize(t)``.
    """
    return raw_text.lower()


@dataclass(frozen=True)
class Document:
    """A corpus row prepared for matching."""

    id: Hashable
    raw_text: str
    normalized_text: str

    @classmethod
    def from_text(cls, document_id: Hashable, raw_text: str) -> Document:
        """Build a document, deriving the normalized text."""
        return cls(id=document_id, raw_text=raw_text, normalized_text=normalize(raw_text))


def _cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value)


def require_columns(frame: pd.DataFrame, columns: list[str]) -> None:
    """Raise MissingColumnError if any of ``columns`` is absent."""
    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise MissingColumnError(missing, available=list(frame.columns))


def iter_documents(
    frame: pd.DataFrame,
    id_column: str = "id",
    text_column: str = "text",
) -> Iterator[Document]:
    """Yield documents from a corpus table without modifying it.

    Args:
        frame: Corpus table.
        id_column: Column holding the unique document id.
        text_column: Column holding the raw text.

    Yields:
        Document records in table order.

    Raises:
        MissingColumnError: If either column is absent.
        ValueError: If document ids are not unique.
    """
    require_columns(frame, [id_column, text_column])

    duplicated = frame[id_column][frame[id_column].duplicated()]
    if not duplicated.empty:
        raise ValueError(f"Duplicate document ids: {sorted(set(duplicated.astype(str)))[:5]}")

    for document_id, text in zip(frame[id_column], frame[text_column]):
        yield Document.from_text(document_id, _cell_to_text(text))


def documents_from_frame(
    frame: pd.DataFrame,
    id_column: str = "id",
    text_column: str = "text",
) -> list[Document]:
    """Convert a corpus table into a list of documents.

    See :func:`iter_documents` for arguments and errors.
    """
    documents = list(iter_documents(frame, id_column=id_column, text_column=text_column))
    logger.info(f"Prepared {len(documents)} documents from corpus")
    return documents
