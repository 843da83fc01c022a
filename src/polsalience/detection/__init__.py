"""
Political actor detection for polsalience.

Provides regex dictionary matching and group-level aggregation into
binary salience labels.
"""

from polsalience.detection.group_classifier import (
    DocumentClassification,
    GroupClassifier,
    MatchResult,
    classify,
    group_count,
)
from polsalience.detection.keyword_matcher import (
    KeywordDictionary,
    KeywordGroup,
    KeywordPattern,
    count_matches,
    create_default_dictionary,
    find_matched_terms,
)

__all__ = [
    "DocumentClassification",
    "GroupClassifier",
    "MatchResult",
    "classify",
    "group_count",
    "KeywordDictionary",
    "KeywordGroup",
    "KeywordPattern",
    "count_matches",
    "create_default_dictionary",
    "find_matched_terms",
]
