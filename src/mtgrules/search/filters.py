"""Tokenization, rule-type and complexity heuristics, and search filters."""

import re
from dataclasses import dataclass, field

from mtgrules.core.rule import rule_sort_key

# Tokens this short are never indexed or searched
MIN_TOKEN_LENGTH = 3

STOPWORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "is", "are", "was", "were", "be", "been", "being", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "may", "might", "can", "must", "shall", "this", "that", "these", "those",
    "it", "its", "they", "them", "their", "you", "your", "if", "when",
    "where", "why", "how", "what", "who", "which", "than", "then", "as", "so",
})

# Leading/trailing punctuation stripped from every token
_EDGE_PUNCTUATION = ".,;:!?()[]{}\"'"

# Checked in order; the first matching type wins, so 7xx.1x rules
# (including 702.1x and 704.1x) are Abilities
RULE_TYPE_PATTERNS = tuple(
    (rule_type, tuple(re.compile(p) for p in patterns))
    for rule_type, patterns in (
        ("Game Mechanics", (r"^1\d{2}\.\d+", r"^5\d{2}\.\d+")),
        ("Card Rules", (r"^2\d{2}\.\d+", r"^3\d{2}\.\d+")),
        ("Abilities", (r"^6\d{2}\.\d+", r"^7\d{2}\.1\d+")),
        ("State-Based Actions", (r"^704\.\d+",)),
        ("Keyword Abilities", (r"^702\.\d+",)),
        ("Zones", (r"^4\d{2}\.\d+",)),
        ("Multiplayer", (r"^8\d{2}\.\d+",)),
        ("Variants", (r"^9\d{2}\.\d+",)),
    )
)
DEFAULT_RULE_TYPE = "General"

ALL_RULE_TYPES = (
    "Game Mechanics",
    "Card Rules",
    "Abilities",
    "State-Based Actions",
    "Keyword Abilities",
    "Zones",
    "Multiplayer",
    "Variants",
    DEFAULT_RULE_TYPE,
)

COMPLEXITY_LEVELS = ("Basic", "Intermediate", "Advanced")

# Content longer than this is always Advanced
ADVANCED_LENGTH = 300

ADVANCED_TERMS = (
    "layers",
    "continuous effect",
    "replacement effect",
    "state-based action",
    "priority",
    "stack",
    "triggered ability",
    "resolution",
    "interaction",
)
QUALIFIER_TERMS = ("except", "unless", "however")
_IF_PATTERN = re.compile(r"if", re.IGNORECASE)

RULE_NUMBER_QUERY = re.compile(r"^\d+(\.\d+[a-z]?)?$")


def normalize_token(word: str) -> str:
    """Lowercase a word and strip surrounding punctuation."""
    return word.lower().strip(_EDGE_PUNCTUATION)


def is_stopword(token: str) -> bool:
    return token in STOPWORDS


def tokenize(text: str) -> list[str]:
    """Split text into index tokens, in order of first appearance.

    Tokens are whitespace-separated words, lowercased, with edge
    punctuation removed. Short tokens and stopwords are dropped;
    duplicates are kept.

    Args:
        text: Text to tokenize

    Returns:
        List of tokens
    """
    if not text:
        return []
    tokens = (normalize_token(word) for word in text.split())
    return [t for t in tokens if len(t) >= MIN_TOKEN_LENGTH and not is_stopword(t)]


def slugify(name: str) -> str:
    """Normalize a category or subcategory name for index keys."""
    return re.sub(r"\s+", "_", name.strip().lower())


def is_rule_number(query: str) -> bool:
    """Check whether a query is a bare rule number such as "704" or "702.9a"."""
    return bool(RULE_NUMBER_QUERY.match(query))


def rule_type_for(rule_number: str) -> str:
    """Classify a rule by its number into one of ALL_RULE_TYPES."""
    if not rule_number:
        return DEFAULT_RULE_TYPE
    for rule_type, patterns in RULE_TYPE_PATTERNS:
        if any(p.match(rule_number) for p in patterns):
            return rule_type
    return DEFAULT_RULE_TYPE


def complexity_for(content: str) -> str:
    """Estimate how hard a rule is to read.

    Advanced: longer than 300 characters, or mentions a technical term
    such as "priority" or "replacement effect". Intermediate: "if" appears
    more than once anywhere in the text (any case, inside words too), or a
    lowercase qualifier such as "unless" appears. Otherwise Basic.
    """
    if not content:
        return "Basic"
    if len(content) > ADVANCED_LENGTH:
        return "Advanced"

    lowered = content.lower()
    if any(term in lowered for term in ADVANCED_TERMS):
        return "Advanced"

    if len(_IF_PATTERN.findall(content)) > 1 or any(term in content for term in QUALIFIER_TERMS):
        return "Intermediate"

    return "Basic"


def sort_rule_numbers(numbers) -> list[str]:
    return sorted(numbers, key=rule_sort_key)


@dataclass
class SearchFilters:
    """Optional restrictions applied to a search."""

    category: str | None = None
    subcategory: str | None = None
    rule_type: str | None = None
    keywords: set[str] = field(default_factory=set)
    complexity: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> "SearchFilters":
        """Build filters from a dict, accepting camelCase API keys.

        Args:
            data: Dict with any of category, subcategory, ruleType/rule_type,
                keywords (list of strings) and complexity

        Returns:
            SearchFilters with blank values treated as unset
        """
        data = data or {}
        keywords = data.get("keywords") or []
        if isinstance(keywords, str):
            keywords = [keywords]
        return cls(
            category=data.get("category") or None,
            subcategory=data.get("subcategory") or None,
            rule_type=data.get("ruleType") or data.get("rule_type") or None,
            keywords={k.lower() for k in keywords if k},
            complexity=data.get("complexity") or None,
        )

    def has_post_filters(self) -> bool:
        return bool(self.rule_type or self.keywords or self.complexity)

    def as_dict(self) -> dict:
        return {
            "category": self.category,
            "subcategory": self.subcategory,
            "ruleType": self.rule_type,
            "keywords": sorted(self.keywords),
            "complexity": self.complexity,
        }
