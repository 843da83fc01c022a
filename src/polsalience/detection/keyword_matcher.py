"""
Regex keyword matching for political actor dictionaries.

Patterns are matched case-insensitively and must end at a word boundary,
so ``tor`` does not fire inside ``story`` while ``\\stor(y|ies)`` still
finds " tory" and " tories". Counts are non-overlapping within a single
pattern; different patterns are counted independently even when their
matches overlap.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml

from polsalience.exceptions import PatternCompilationError

logger = logging.getLogger(__name__)

DICTIONARY_SUFFIXES = (".json", ".yaml", ".yml")

# Inline global flags such as (?i) or (?x) must stay at the start of the expression
LEADING_FLAGS = re.compile(r"^(?:\(\?[aiLmsux]+\))+")


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a dictionary pattern with trailing word-boundary anchoring.

    Leading inline global flags, e.g. ``(?x)``, are kept in front of the
    group that the boundary is attached to.

    Args:
        pattern: Regular expression as authored in the dictionary.

    Returns:
        Compiled, case-insensitive expression.

    Raises:
        PatternCompilationError: If the pattern is not a valid regex.
    """
    try:
        flags = LEADING_FLAGS.match(pattern)
        prefix = flags.group(0) if flags else ""
        body = pattern[len(prefix):]
        return re.compile(rf"{prefix}(?:{body})\b", re.IGNORECASE)
    except re.error as e:
        raise PatternCompilationError(pattern, str(e)) from e


@dataclass(frozen=True)
class KeywordPattern:
    """A dictionary pattern and the group it belongs to.

    The expression is compiled on construction so that a bad pattern
    fails while the dictionary is being built, not per document.
    """

    pattern: str
    group: str
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", compile_pattern(self.pattern))

    def count(self, text: str) -> int:
        """Count non-overlapping matches in text."""
        return sum(1 for _ in self.compiled.finditer(text))


def _as_compiled(pattern: str | KeywordPattern) -> re.Pattern[str]:
    if isinstance(pattern, KeywordPattern):
        return pattern.compiled
    return compile_pattern(pattern)


def _pattern_string(pattern: str | KeywordPattern) -> str:
    return pattern.pattern if isinstance(pattern, KeywordPattern) else pattern


def count_matches(text: str, pattern: str | KeywordPattern) -> int:
    """Count word-boundary anchored, case-insensitive matches of a pattern.

    Args:
        text: Normalized document text.
        pattern: Pattern string or pre-compiled KeywordPattern.

    Returns:
        Number of non-overlapping matches (0 or more).
    """
    return sum(1 for _ in _as_compiled(pattern).finditer(text))


def find_matched_terms(
    text: str,
    patterns: Iterable[str | KeywordPattern],
) -> frozenset[str]:
    """Report which patterns fire at least once in text.

    Args:
        text: Normalized document text.
        patterns: Patterns to test.

    Returns:
        The pattern strings with at least one match.
    """
    return frozenset(
        _pattern_string(pattern)
        for pattern in patterns
        if _as_compiled(pattern).search(text) is not None
    )


@dataclass(frozen=True)
class KeywordGroup:
    """A named facet of the concept, e.g. politicians or parties."""

    name: str
    patterns: tuple[KeywordPattern, ...]

    @property
    def pattern_strings(self) -> tuple[str, ...]:
        return tuple(p.pattern for p in self.patterns)


@dataclass(frozen=True)
class KeywordDictionary:
    """Immutable set of keyword groups, built once per run."""

    groups: tuple[KeywordGroup, ...]

    def __post_init__(self) -> None:
        names = [group.name for group in self.groups]
        if not names:
            raise ValueError("Dictionary must define at least one group")
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate group names: {duplicates}")
        empty = [group.name for group in self.groups if not group.patterns]
        if empty:
            raise ValueError(f"Groups without patterns: {empty}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> KeywordDictionary:
        """Build a dictionary from ``{group: [pattern, ...]}``.

        Raises:
            PatternCompilationError: If any pattern is invalid.
            ValueError: If a group is empty.
        """
        groups = []
        for name, patterns in mapping.items():
            if isinstance(patterns, str):
                patterns = [patterns]
            # Keep authoring order, drop exact duplicates
            unique = list(dict.fromkeys(patterns))
            groups.append(KeywordGroup(
                name=str(name),
                patterns=tuple(KeywordPattern(pattern=p, group=str(name)) for p in unique),
            ))
        dictionary = cls(groups=tuple(groups))
        logger.debug(f"Built dictionary with groups {dictionary.group_names}")
        return dictionary

    @classmethod
    def from_file(cls, filepath: str | Path) -> KeywordDictionary:
        """Load a dictionary from a JSON or YAML file.

        Expected format, either all groups at once:
        {
            "groups": {
                "politicians": ["boris johnson", "keir starmer"],
                "parties": ["labour party", "\\\\stor(y|ies)"]
            }
        }

        or a single group per file:
        {"group": "politicians", "patterns": ["boris johnson"]}

        Args:
            filepath: Path to the dictionary file.
        """
        filepath = Path(filepath)
        data = _read_dictionary_file(filepath)
        dictionary = cls.from_mapping(_groups_from_data(data, filepath))
        logger.info(f"Loaded dictionary from {filepath}")
        return dictionary

    @classmethod
    def from_directory(cls, directory: str | Path) -> KeywordDictionary:
        """Load every dictionary file in a directory and merge the groups.

        Args:
            directory: Path to directory containing JSON/YAML files.
        """
        directory = Path(directory)
        mapping: dict[str, list[str]] = {}
        filepaths = sorted(
            p for p in directory.iterdir() if p.suffix.lower() in DICTIONARY_SUFFIXES
        )
        for filepath in filepaths:
            groups = _groups_from_data(_read_dictionary_file(filepath), filepath)
            for name, patterns in groups.items():
                mapping.setdefault(name, []).extend(patterns)

        if not mapping:
            raise ValueError(f"No dictionary files found in {directory}")

        dictionary = cls.from_mapping(mapping)
        logger.info(f"Loaded {len(filepaths)} dictionary files from {directory}")
        return dictionary

    @classmethod
    def load(cls, path: str | Path) -> KeywordDictionary:
        """Load from a file or a directory of files."""
        path = Path(path)
        if path.is_dir():
            return cls.from_directory(path)
        return cls.from_file(path)

    @property
    def group_names(self) -> list[str]:
        return [group.name for group in self.groups]

    def get_group(self, name: str) -> KeywordGroup:
        """Look up a group by name.

        Raises:
            KeyError: If no group has that name.
        """
        for group in self.groups:
            if group.name == name:
                return group
        raise KeyError(name)

    def to_mapping(self) -> dict[str, list[str]]:
        return {group.name: list(group.pattern_strings) for group in self.groups}

    def get_stats(self) -> dict[str, Any]:
        """Get dictionary statistics.

        Returns:
            Dictionary with stats.
        """
        return {
            "groups": len(self.groups),
            "total_patterns": sum(len(group.patterns) for group in self.groups),
            "group_details": {
                group.name: {"patterns": len(group.patterns)}
                for group in self.groups
            },
        }


def _read_dictionary_file(filepath: Path) -> Any:
    with open(filepath) as f:
        if filepath.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def _groups_from_data(data: Any, filepath: Path) -> dict[str, list[str]]:
    if not isinstance(data, dict):
        raise ValueError(f"Dictionary file {filepath} must contain a mapping")
    if "groups" in data:
        return {str(name): list(patterns or []) for name, patterns in data["groups"].items()}
    if "patterns" in data:
        return {str(data.get("group", filepath.stem)): list(data["patterns"] or [])}
    raise ValueError(f"Dictionary file {filepath} has neither 'groups' nor 'patterns'")


def create_default_dictionary() -> KeywordDictionary:
    """Create the built-in UK political actors dictionary.

    Returns:
        KeywordDictionary with politicians and parties groups.
    """
    return KeywordDictionary.from_mapping({
        "politicians": [
            "boris johnson", "theresa may", "david cameron", "keir starmer",
            "jeremy corbyn", "rishi sunak", "liz truss", "nicola sturgeon",
            "ed davey", "nigel farage",
        ],
        "parties": [
            "labour party", "conservative party", r"\stor(y|ies)",
            "liberal democrats?", "lib dems?", "snp", "green party",
            "reform uk", "plaid cymru",
        ],
    })
