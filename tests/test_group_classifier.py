"""Tests for group classification module."""

import logging

import pytest

from polsalience.detection.group_classifier import (
    GroupClassifier,
    classify,
    group_count,
    group_totals,
)
from polsalience.preprocessing import Document, documents_from_frame


class TestGroupCount:
    """Tests for group_count."""

    def test_sums_patterns(self):
        """Test that counts are summed across a group's patterns."""
        text = "boris johnson and keir starmer, then boris johnson again"

        assert group_count(text, ["boris johnson", "keir starmer"]) == 3

    def test_overlapping_patterns_not_deduplicated(self):
        """Test that two patterns matching the same span both count."""
        assert group_count("the labour party", ["labour party", "party"]) == 2

    def test_empty_group_text(self):
        """Test zero for text without matches."""
        assert group_count("", ["snp"]) == 0


class TestClassify:
    """Tests for classify."""

    def test_any_group_positive(self):
        """Test that one positive group makes the document positive."""
        assert classify({"politicians": 0, "parties": 3}) == 1

    def test_all_zero(self):
        """Test zero counts give a negative label."""
        assert classify({"politicians": 0, "parties": 0}) == 0

    def test_empty_mapping(self):
        """Test that no groups means a negative label."""
        assert classify({}) == 0

    def test_missing_counts_treated_as_zero(self):
        """Test that absent counts never make the label undefined."""
        assert classify({"politicians": None, "parties": 0}) == 0
        assert classify({"politicians": None, "parties": 1}) == 1


class TestGroupClassifier:
    """Tests for GroupClassifier."""

    def test_example_document(self, actor_dictionary):
        """Test politician and party mentions in one headline."""
        classifier = GroupClassifier(actor_dictionary)
        document = Document.from_text("d1", "Boris Johnson announces new Labour Party policy")

        result = classifier.classify_document(document)

        assert result.group_counts == {"politicians": 1, "parties": 1}
        assert result.label == 1
        assert result.matches["politicians"].matched_terms == frozenset({"boris johnson"})
        assert result.matches["parties"].document_id == "d1"

    def test_negative_document(self, actor_dictionary):
        """Test a document with no actors."""
        classifier = GroupClassifier(actor_dictionary)
        document = Document.from_text("d2", "The story continues")

        result = classifier.classify_document(document)

        assert result.label == 0
        assert result.group_counts == {"politicians": 0, "parties": 0}
        assert result.matches["parties"].matched_terms == frozenset()

    def test_to_dict(self, actor_dictionary):
        """Test serialization of a classification."""
        classifier = GroupClassifier(actor_dictionary)
        result = classifier.classify_document(Document.from_text(7, "the tory party"))

        data = result.to_dict()

        assert data["id"] == 7
        assert data["label"] == 1
        assert data["groups"]["parties"] == {"count": 1, "matched_terms": [r"\stor(y|ies)"]}

    def test_batch_matches_sequential(self, actor_dictionary, sample_corpus):
        """Test that threaded classification equals sequential, in order."""
        classifier = GroupClassifier(actor_dictionary)
        documents = documents_from_frame(sample_corpus)

        sequential = classifier.classify_batch(documents, n_workers=1)
        threaded = classifier.classify_batch(documents, n_workers=3)

        assert [c.document_id for c in threaded] == [1, 2, 3, 4, 5]
        assert [c.label for c in sequential] == [1, 1, 0, 1, 0]
        assert threaded == sequential

    def test_batch_rejects_zero_workers(self, actor_dictionary):
        """Test worker count validation."""
        classifier = GroupClassifier(actor_dictionary)

        with pytest.raises(ValueError):
            classifier.classify_batch([], n_workers=0)

    def test_to_frame(self, actor_dictionary, sample_corpus):
        """Test augmenting the corpus without mutating it."""
        classifier = GroupClassifier(actor_dictionary)
        original_columns = list(sample_corpus.columns)
        classifications = classifier.classify_batch(documents_from_frame(sample_corpus))

        output = classifier.to_frame(sample_corpus, classifications)

        assert list(sample_corpus.columns) == original_columns
        assert output["label"].tolist() == [1, 1, 0, 1, 0]
        assert output["politicians_count"].tolist() == [1, 0, 0, 1, 0]
        assert output["parties_count"].tolist() == [1, 1, 0, 0, 0]
        assert output.loc[0, "parties_terms"] == "labour party"
        assert output.loc[4, "politicians_terms"] == ""

    def test_group_totals(self, actor_dictionary, sample_corpus):
        """Test per-group totals over a batch."""
        classifier = GroupClassifier(actor_dictionary)
        classifications = classifier.classify_batch(documents_from_frame(sample_corpus))

        assert group_totals(classifications) == {"politicians": 2, "parties": 2}

    def test_get_stats(self, actor_dictionary):
        """Test classifier statistics."""
        stats = GroupClassifier(actor_dictionary).get_stats()

        assert stats["dictionary"]["groups"] == 2

    def test_to_frame_warns_on_overwrite(self, actor_dictionary, sample_corpus, caplog):
        """Test that existing output columns are replaced with a warning."""
        classifier = GroupClassifier(actor_dictionary)
        corpus = sample_corpus.assign(label=[9] * 5, parties_count=[9] * 5)
        classifications = classifier.classify_batch(documents_from_frame(corpus))

        with caplog.at_level(logging.WARNING, logger="polsalience.detection.group_classifier"):
            output = classifier.to_frame(corpus, classifications)

        assert "label" in caplog.text
        assert "parties_count" in caplog.text
        assert output["label"].tolist() == [1, 1, 0, 1, 0]
        assert corpus["label"].tolist() == [9] * 5

    def test_to_frame_no_warning_for_new_columns(self, actor_dictionary, sample_corpus, caplog):
        """Test that a plain corpus logs no overwrite warning."""
        classifier = GroupClassifier(actor_dictionary)
        classifications = classifier.classify_batch(documents_from_frame(sample_corpus))

        with caplog.at_level(logging.WARNING, logger="polsalience.detection.group_classifier"):
            classifier.to_frame(sample_corpus, classifications)

        assert "Overwriting" not in caplog.text
