"""Tests for text normalization module."""

import pandas as pd
import pytest

from polsalience.exceptions import MissingColumnError
from polsalience.preprocessing.normalizer import (
    Document,
    documents_from_frame,
    iter_documents,
    normalize,
)


class TestNormalize:
    """Tests for normalize."""

    def test_lowercases(self):
        """Test case folding."""
        assert normalize("Boris JOHNSON") == "boris johnson"

    def test_keeps_whitespace_and_punctuation(self):
        """Test that nothing but case changes."""
        assert normalize("  Labour,  Party!\n") == "  labour,  party!\n"

    def test_empty_string(self):
        """Test the empty string."""
        assert normalize("") == ""

    @pytest.mark.parametrize("text", ["Keir Starmer", "ÉCOLE Straße", "SNP 2024", "İstanbul"])
    def test_idempotent(self, text):
        """Test that normalizing twice changes nothing."""
        assert normalize(normalize(text)) == normalize(text)


class TestDocument:
    """Tests for Document."""

    def test_from_text(self):
        """Test deriving the normalized text."""
        document = Document.from_text("d1", "The Tories")

        assert document.id == "d1"
        assert document.raw_text == "The Tories"
        assert document.normalized_text == "the tories"

    def test_immutable(self):
        """Test that documents cannot be modified."""
        document = Document.from_text("d1", "text")

        with pytest.raises(AttributeError):
            document.raw_text = "other"


class TestDocumentsFromFrame:
    """Tests for corpus conversion."""

    def test_converts_rows(self, sample_corpus):
        """Test one document per row, in order."""
        documents = documents_from_frame(sample_corpus)

        assert [d.id for d in documents] == [1, 2, 3, 4, 5]
        assert documents[0].normalized_text.startswith("boris johnson")

    def test_does_not_mutate_frame(self, sample_corpus):
        """Test the source table is left untouched."""
        before = sample_corpus.copy()

        documents_from_frame(sample_corpus)

        pd.testing.assert_frame_equal(sample_corpus, before)

    def test_custom_columns(self):
        """Test non-default column names."""
        frame = pd.DataFrame({"doc": ["a"], "body": ["SNP"]})

        documents = list(iter_documents(frame, id_column="doc", text_column="body"))

        assert documents == [Document("a", "SNP", "snp")]

    def test_missing_column(self):
        """Test MissingColumnError for absent columns."""
        frame = pd.DataFrame({"id": [1], "body": ["text"]})

        with pytest.raises(MissingColumnError) as exc_info:
            documents_from_frame(frame)

        assert exc_info.value.columns == ["text"]

    def test_null_text_becomes_empty(self):
        """Test that a missing text cell yields an empty document."""
        frame = pd.DataFrame({"id": [1, 2], "text": ["Labour", None]})

        documents = documents_from_frame(frame)

        assert documents[1].raw_text == ""
        assert documents[1].normalized_text == ""

    def test_duplicate_ids(self):
        """Test that ids must be unique."""
        frame = pd.DataFrame({"id": [1, 1], "text": ["a", "b"]})

        with pytest.raises(ValueError):
            documents_from_frame(frame)
