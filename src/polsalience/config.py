"""
Configuration management for polsalience.

Provides YAML-based configuration loading with environment variable
override support and validation.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Default paths
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "configs" / "config.yaml"


@dataclass
class DictionaryConfig:
    """Keyword dictionary configuration."""

    path: Path | None = None  # file or directory; None uses the built-in dictionary


@dataclass
class CorpusConfig:
    """Corpus table layout."""

    id_column: str = "id"
    text_column: str = "text"


@dataclass
class ProcessingConfig:
    """Per-document processing configuration."""

    n_workers: int = 1
    show_progress: bool = True


@dataclass
class ValidationConfig:
    """Validation and reliability configuration."""

    manual_column: str = "manual"
    automated_column: str = "label"
    reliability_sample_size: int = 100
    baseline_sample_size: int = 500
    seed: int = 42

    # Reliability gate thresholds
    min_alpha: float = 0.8
    min_kappa: float = 0.7


@dataclass
class StorageConfig:
    """Output storage configuration."""

    output_path: Path = field(default_factory=lambda: Path("data/output"))
    annotation_path: Path = field(default_factory=lambda: Path("data/annotations"))


@dataclass
class Config:
    """Main configuration container."""

    dictionary: DictionaryConfig = field(default_factory=DictionaryConfig)
    corpus: CorpusConfig = field(default_factory=CorpusConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None


def _coerce_bool(value: Any) -> bool:
    """Interpret YAML or environment values as booleans."""
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides to configuration.

    Environment variables follow the pattern: POLSALIENCE_SECTION_KEY
    For example: POLSALIENCE_VALIDATION_MIN_ALPHA
    """
    env_mappings = {
        "POLSALIENCE_DICTIONARY_PATH": ("dictionary", "path"),
        "POLSALIENCE_PROCESSING_N_WORKERS": ("processing", "n_workers"),
        "POLSALIENCE_VALIDATION_SEED": ("validation", "seed"),
        "POLSALIENCE_VALIDATION_MIN_ALPHA": ("validation", "min_alpha"),
        "POLSALIENCE_VALIDATION_MIN_KAPPA": ("validation", "min_kappa"),
        "POLSALIENCE_STORAGE_OUTPUT_PATH": ("storage", "output_path"),
        "POLSALIENCE_LOG_LEVEL": ("log_level",),
    }

    for env_var, path in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            if len(path) == 1:
                config_dict[path[0]] = value
            elif len(path) == 2:
                if path[0] not in config_dict or config_dict[path[0]] is None:
                    config_dict[path[0]] = {}
                config_dict[path[0]][path[1]] = value
            logger.debug(f"Applied environment override: {env_var}")

    return config_dict


def _dict_to_config(config_dict: dict[str, Any]) -> Config:
    """Convert a dictionary to a Config object."""
    dictionary_dict = config_dict.get("dictionary") or {}
    dictionary_path = dictionary_dict.get("path")
    dictionary = DictionaryConfig(
        path=Path(dictionary_path) if dictionary_path else None,
    )

    corpus_dict = config_dict.get("corpus") or {}
    corpus = CorpusConfig(
        id_column=corpus_dict.get("id_column", "id"),
        text_column=corpus_dict.get("text_column", "text"),
    )

    processing_dict = config_dict.get("processing") or {}
    processing = ProcessingConfig(
        n_workers=int(processing_dict.get("n_workers", 1)),
        show_progress=_coerce_bool(processing_dict.get("show_progress", True)),
    )

    validation_dict = config_dict.get("validation") or {}
    validation = ValidationConfig(
        manual_column=validation_dict.get("manual_column", "manual"),
        automated_column=validation_dict.get("automated_column", "label"),
        reliability_sample_size=int(validation_dict.get("reliability_sample_size", 100)),
        baseline_sample_size=int(validation_dict.get("baseline_sample_size", 500)),
        seed=int(validation_dict.get("seed", 42)),
        min_alpha=float(validation_dict.get("min_alpha", 0.8)),
        min_kappa=float(validation_dict.get("min_kappa", 0.7)),
    )

    storage_dict = config_dict.get("storage") or {}
    storage = StorageConfig(
        output_path=Path(storage_dict.get("output_path", "data/output")),
        annotation_path=Path(storage_dict.get("annotation_path", "data/annotations")),
    )

    log_file = config_dict.get("log_file")

    return Config(
        dictionary=dictionary,
        corpus=corpus,
        processing=processing,
        validation=validation,
        storage=storage,
        log_level=config_dict.get("log_level", "INFO"),
        log_file=Path(log_file) if log_file else None,
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file with environment variable overrides.

    Args:
        config_path: Path to config.yaml file. Defaults to configs/config.yaml.

    Returns:
        Config object with all settings loaded.

    Raises:
        yaml.YAMLError: If config file is invalid YAML.
        ValueError: If a numeric setting cannot be parsed.
    """
    config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    config_dict: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            config_dict = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    else:
        logger.warning(f"Config file not found: {config_path}, using defaults")

    config_dict = _apply_env_overrides(config_dict)
    config = _dict_to_config(config_dict)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        filename=str(config.log_file) if config.log_file else None,
    )

    return config


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of warnings/errors.

    Args:
        config: Config object to validate.

    Returns:
        List of warning/error messages. Empty list if valid.
    """
    issues: list[str] = []

    if config.dictionary.path is not None and not config.dictionary.path.exists():
        issues.append(f"Dictionary path does not exist: {config.dictionary.path}")

    if config.processing.n_workers < 1:
        issues.append(f"n_workers must be at least 1, got {config.processing.n_workers}")

    for name in ("reliability_sample_size", "baseline_sample_size"):
        size = getattr(config.validation, name)
        if size < 1:
            issues.append(f"{name} must be positive, got {size}")

    for name in ("min_alpha", "min_kappa"):
        threshold = getattr(config.validation, name)
        if not -1.0 <= threshold <= 1.0:
            issues.append(f"{name} must lie in [-1, 1], got {threshold}")

    if config.validation.manual_column == config.validation.automated_column:
        issues.append("manual_column and automated_column must differ")

    return issues
