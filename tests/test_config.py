"""Tests for configuration module."""

import os
import tempfile
from pathlib import Path

import yaml

from polsalience.config import (
    Config,
    CorpusConfig,
    DictionaryConfig,
    ProcessingConfig,
    StorageConfig,
    ValidationConfig,
    load_config,
    validate_config,
)


class TestSectionDefaults:
    """Tests for the configuration dataclasses."""

    def test_dictionary_defaults(self):
        """Test that no dictionary path means the built-in dictionary."""
        assert DictionaryConfig().path is None

    def test_corpus_defaults(self):
        """Test default corpus column names."""
        config = CorpusConfig()

        assert config.id_column == "id"
        assert config.text_column == "text"

    def test_processing_defaults(self):
        """Test default processing values."""
        config = ProcessingConfig()

        assert config.n_workers == 1
        assert config.show_progress is True

    def test_validation_defaults(self):
        """Test default validation values."""
        config = ValidationConfig()

        assert config.manual_column == "manual"
        assert config.automated_column == "label"
        assert config.min_alpha == 0.8
        assert config.min_kappa == 0.7
        assert config.seed == 42

    def test_storage_defaults(self):
        """Test default storage paths."""
        config = StorageConfig()

        assert config.output_path == Path("data/output")
        assert config.annotation_path == Path("data/annotations")

    def test_default_config(self):
        """Test default config has all components."""
        config = Config()

        assert isinstance(config.dictionary, DictionaryConfig)
        assert isinstance(config.validation, ValidationConfig)
        assert config.log_level == "INFO"


class TestLoadConfig:
    """Tests for configuration loading."""

    def test_load_config_defaults(self):
        """Test loading config with defaults."""
        config = load_config(config_path="/nonexistent/path.yaml")

        assert isinstance(config, Config)
        assert config.validation.baseline_sample_size == 500

    def test_load_config_from_yaml(self):
        """Test loading config from YAML file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"

            config_data = {
                "dictionary": {"path": "custom/dictionaries"},
                "corpus": {"text_column": "body"},
                "validation": {"min_alpha": 0.667, "reliability_sample_size": 50},
                "log_level": "DEBUG",
            }

            with open(config_path, "w") as f:
                yaml.dump(config_data, f)

            config = load_config(config_path=config_path)

            assert config.dictionary.path == Path("custom/dictionaries")
            assert config.corpus.text_column == "body"
            assert config.corpus.id_column == "id"
            assert config.validation.min_alpha == 0.667
            assert config.validation.reliability_sample_size == 50
            assert config.log_level == "DEBUG"

    def test_empty_yaml_uses_defaults(self):
        """Test that an empty file behaves like no file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            config_path.write_text("")

            config = load_config(config_path=config_path)

            assert config == Config(log_level=config.log_level)


class TestEnvironmentOverrides:
    """Tests for environment variable overrides."""

    def test_min_alpha_override(self):
        """Test alpha threshold env override."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            with open(config_path, "w") as f:
                yaml.dump({"validation": {"min_alpha": 0.8}}, f)

            try:
                os.environ["POLSALIENCE_VALIDATION_MIN_ALPHA"] = "0.667"
                config = load_config(config_path=config_path)
                assert config.validation.min_alpha == 0.667
            finally:
                del os.environ["POLSALIENCE_VALIDATION_MIN_ALPHA"]

    def test_workers_override(self):
        """Test worker count env override."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            with open(config_path, "w") as f:
                yaml.dump({}, f)

            try:
                os.environ["POLSALIENCE_PROCESSING_N_WORKERS"] = "8"
                config = load_config(config_path=config_path)
                assert config.processing.n_workers == 8
            finally:
                del os.environ["POLSALIENCE_PROCESSING_N_WORKERS"]

    def test_log_level_override(self):
        """Test log level env override."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            with open(config_path, "w") as f:
                yaml.dump({"log_level": "INFO"}, f)

            try:
                os.environ["POLSALIENCE_LOG_LEVEL"] = "DEBUG"
                config = load_config(config_path=config_path)
                assert config.log_level == "DEBUG"
            finally:
                del os.environ["POLSALIENCE_LOG_LEVEL"]


class TestValidateConfig:
    """Tests for configuration validation."""

    def test_validate_default_config(self):
        """Test that the default config has no issues."""
        assert validate_config(Config()) == []

    def test_validate_missing_dictionary(self):
        """Test validation catches a dictionary path that does not exist."""
        config = Config(dictionary=DictionaryConfig(path=Path("/nonexistent/dict.json")))

        issues = validate_config(config)

        assert any("Dictionary path" in issue for issue in issues)

    def test_validate_thresholds(self):
        """Test validation catches thresholds outside [-1, 1]."""
        config = Config(validation=ValidationConfig(min_alpha=1.5, min_kappa=-2.0))

        issues = validate_config(config)

        assert any("min_alpha" in issue for issue in issues)
        assert any("min_kappa" in issue for issue in issues)

    def test_validate_workers_and_sizes(self):
        """Test validation catches non-positive workers and sample sizes."""
        config = Config(
            processing=ProcessingConfig(n_workers=0),
            validation=ValidationConfig(reliability_sample_size=0),
        )

        issues = validate_config(config)

        assert any("n_workers" in issue for issue in issues)
        assert any("reliability_sample_size" in issue for issue in issues)

    def test_validate_same_label_columns(self):
        """Test validation catches identical manual and automated columns."""
        config = Config(validation=ValidationConfig(manual_column="label"))

        issues = validate_config(config)

        assert any("must differ" in issue for issue in issues)
