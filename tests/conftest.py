"""Pytest fixtures and configuration."""

import json

import pandas as pd
import pytest

from polsalience.detection import KeywordDictionary


@pytest.fixture
def sample_corpus():
    """Sample corpus table for testing."""
    return pd.DataFrame(
        [
            {"id": 1, "text": "Boris Johnson announces new Labour Party policy"},
            {"id": 2, "text": "The Tory leadership race heats up"},
            {"id": 3, "text": "The story continues with more rain tomorrow"},
            {"id": 4, "text": "Keir Starmer visits Manchester"},
            {"id": 5, "text": "Just a regular post with no political content"},
        ]
    )


@pytest.fixture
def actor_dictionary():
    """Two-group political actor dictionary."""
    return KeywordDictionary.from_mapping({
        "politicians": ["boris johnson", "keir starmer", "theresa may"],
        "parties": ["labour party", r"\stor(y|ies)", "conservative party"],
    })


@pytest.fixture
def dictionary_dir(tmp_path):
    """Directory with one dictionary file per group."""
    directory = tmp_path / "dictionaries"
    directory.mkdir()
    with open(directory / "politicians.json", "w") as f:
        json.dump({"group": "politicians", "patterns": ["boris johnson", "keir starmer"]}, f)
    with open(directory / "parties.yaml", "w") as f:
        f.write("group: parties\npatterns:\n  - labour party\n  - '\\stor(y|ies)'\n")
    return directory


@pytest.fixture
def sample_config_file(tmp_path, dictionary_dir):
    """Create a temporary config file."""
    import yaml

    config_path = tmp_path / "config.yaml"
    config_data = {
        "dictionary": {"path": str(dictionary_dir)},
        "processing": {"n_workers": 2, "show_progress": False},
        "validation": {"reliability_sample_size": 2, "baseline_sample_size": 3, "seed": 7},
        "storage": {
            "output_path": str(tmp_path / "output"),
            "annotation_path": str(tmp_path / "annotations"),
        },
        "log_level": "WARNING",
    }
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def two_coder_matrix():
    """Two coders over four items, plus one item only coder A rated."""
    return pd.DataFrame(
        {"coder_a": [1, 1, 0, 0, 1], "coder_b": [1, 0, 0, 0, None]},
        index=["i1", "i2", "i3", "i4", "i5"],
        dtype=object,
    )
