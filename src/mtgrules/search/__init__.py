"""Search module for indexing and keyword retrieval of rules."""

from .engine import RulesSearchEngine, RulesStats, matches_filters
from .filters import (
    ALL_RULE_TYPES,
    COMPLEXITY_LEVELS,
    STOPWORDS,
    SearchFilters,
    complexity_for,
    is_stopword,
    rule_type_for,
    slugify,
    tokenize,
)
from .indexer import IngestResult, RuleKeys, build_index, index_tokens, ingest_rules

__all__ = [
    # Engine
    "RulesSearchEngine",
    "RulesStats",
    "matches_filters",
    # Filters
    "ALL_RULE_TYPES",
    "COMPLEXITY_LEVELS",
    "STOPWORDS",
    "SearchFilters",
    "complexity_for",
    "is_stopword",
    "rule_type_for",
    "slugify",
    "tokenize",
    # Indexer
    "IngestResult",
    "RuleKeys",
    "build_index",
    "index_tokens",
    "ingest_rules",
]
