"""Tests for table storage module."""

import json

import pandas as pd
import pytest

from polsalience.storage import infer_format, read_table, write_report, write_table


class TestInferFormat:
    """Tests for infer_format."""

    @pytest.mark.parametrize(
        "name,expected",
        [("a.json", "json"), ("a.CSV", "csv"), ("a.parquet", "parquet"), ("a.pq", "parquet")],
    )
    def test_known_extensions(self, name, expected):
        """Test supported extensions."""
        assert infer_format(name) == expected

    def test_unknown_extension(self):
        """Test an unsupported extension."""
        with pytest.raises(ValueError):
            infer_format("corpus.xlsx")


class TestReadTable:
    """Tests for read_table."""

    def test_json_list(self, tmp_path):
        """Test a bare list of records."""
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps([{"id": 1, "text": "SNP"}]))

        frame = read_table(path)

        assert frame.to_dict("records") == [{"id": 1, "text": "SNP"}]

    def test_json_items(self, tmp_path):
        """Test a document with an items list."""
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"metadata": {}, "items": [{"id": 1}, {"id": 2}]}))

        assert read_table(path)["id"].tolist() == [1, 2]

    def test_json_invalid(self, tmp_path):
        """Test JSON that is not a table."""
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({"items": "nope"}))

        with pytest.raises(ValueError):
            read_table(path)


class TestWriteTable:
    """Tests for write_table."""

    def test_json_with_metadata(self, tmp_path, sample_corpus):
        """Test JSON output wraps rows in items with metadata."""
        path = write_table(sample_corpus, tmp_path / "out" / "corpus.json", metadata={"run": "x"})

        with open(path) as f:
            data = json.load(f)

        assert data["metadata"]["run"] == "x"
        assert data["metadata"]["rows"] == 5
        assert len(data["items"]) == 5
        assert read_table(path)["id"].tolist() == [1, 2, 3, 4, 5]

    def test_csv(self, tmp_path, sample_corpus):
        """Test CSV output without the index."""
        path = write_table(sample_corpus, tmp_path / "corpus.csv")

        pd.testing.assert_frame_equal(read_table(path), sample_corpus)

    def test_parquet(self, tmp_path, sample_corpus):
        """Test Parquet output."""
        path = write_table(sample_corpus, tmp_path / "corpus.parquet")

        pd.testing.assert_frame_equal(read_table(path), sample_corpus)

    def test_parquet_flattens_lists(self, tmp_path):
        """Test that list cells are stored as JSON strings."""
        frame = pd.DataFrame({"id": [1], "terms": [["snp", "labour party"]]})

        path = write_table(frame, tmp_path / "corpus.parquet")

        assert json.loads(read_table(path).loc[0, "terms"]) == ["snp", "labour party"]

    def test_explicit_format(self, tmp_path, sample_corpus):
        """Test overriding the extension."""
        path = write_table(sample_corpus, tmp_path / "corpus.out", format="csv")

        assert pd.read_csv(path)["id"].tolist() == [1, 2, 3, 4, 5]

    def test_unknown_format(self, tmp_path, sample_corpus):
        """Test an unsupported explicit format."""
        with pytest.raises(ValueError):
            write_table(sample_corpus, tmp_path / "corpus.out", format="xml")


class TestWriteReport:
    """Tests for write_report."""

    def test_writes_json(self, tmp_path):
        """Test a report is written as JSON."""
        path = write_report({"recall": {"value": 0.5}}, tmp_path / "reports" / "metrics.json")

        with open(path) as f:
            assert json.load(f) == {"recall": {"value": 0.5}}
