"""Hint candidate ranking and per-file hint sessions."""

from hintscope.hints.ranking import (
    MAX_HINTS,
    IdentifierRanking,
    PropertyRanking,
    lexicographic,
    rank_and_filter,
)
from hintscope.hints.session import HintSession
from hintscope.index.keywords import KEYWORDS, keyword_tokens

__all__ = [
    "KEYWORDS",
    "keyword_tokens",
    "MAX_HINTS",
    "IdentifierRanking",
    "PropertyRanking",
    "lexicographic",
    "rank_and_filter",
    "HintSession",
]
