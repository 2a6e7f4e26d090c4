"""Rules document fetching, parsing and classification."""

from .classifier import (
    KEYWORD_VOCABULARY,
    SECTION_CATEGORIES,
    SUBCATEGORIES,
    category_for_section,
    extract_keywords,
    subcategory_for,
)
from .fallback import get_fallback_rules
from .fetcher import RulesFetchError, fetch_and_parse, fetch_rules_text
from .parser import parse_rules_document, validate_rules

__all__ = [
    # Classifier
    "KEYWORD_VOCABULARY",
    "SECTION_CATEGORIES",
    "SUBCATEGORIES",
    "category_for_section",
    "extract_keywords",
    "subcategory_for",
    # Fallback
    "get_fallback_rules",
    # Fetcher
    "RulesFetchError",
    "fetch_and_parse",
    "fetch_rules_text",
    # Parser
    "parse_rules_document",
    "validate_rules",
]
