"""Keyword search and retrieval over the indexed rules."""

import logging
import random
from dataclasses import dataclass

from mtgrules.core.kvstore import KeyValueStore
from mtgrules.core.rule import RULE_CATEGORIES, Rule, RuleCategory, rule_sort_key
from .filters import (
    ALL_RULE_TYPES,
    COMPLEXITY_LEVELS,
    SearchFilters,
    complexity_for,
    is_rule_number,
    rule_type_for,
    sort_rule_numbers,
    tokenize,
)
from .indexer import (
    COUNT_KEY,
    LAST_UPDATED_KEY,
    USED_FALLBACK_KEY,
    RuleKeys,
    current_keys,
)

logger = logging.getLogger(__name__)

# Most rule records fetched for one search or category listing
MAX_CANDIDATES = 200

# Rules sampled when collecting keyword and subcategory facets
FACET_SAMPLE_SIZE = 100


@dataclass
class RulesStats:
    """Dataset summary as recorded by the last ingest."""

    total_rules: int = 0
    last_updated: str | None = None
    used_fallback: bool = False

    def as_dict(self) -> dict:
        return {
            "totalRules": self.total_rules,
            "lastUpdated": self.last_updated,
            "usedFallback": self.used_fallback,
        }


def matches_filters(rule: Rule, filters: SearchFilters) -> bool:
    """Apply the rule-type, keyword and complexity filters to one rule."""
    if filters.rule_type and rule_type_for(rule.number) != filters.rule_type:
        return False
    if filters.keywords and not (filters.keywords & {k.lower() for k in rule.keywords}):
        return False
    if filters.complexity and complexity_for(rule.content) != filters.complexity:
        return False
    return True


class RulesSearchEngine:
    """AND keyword search with category facets over a KeyValueStore."""

    def __init__(self, store: KeyValueStore, rng: random.Random | None = None):
        """Initialize the engine.

        Args:
            store: Store populated by the indexer
            rng: Random source for get_random_rule (default: module random)
        """
        self.store = store
        self._rng = rng or random.Random()

    def _fetch_rules(self, keys: RuleKeys, numbers: list[str]) -> list[Rule]:
        """Load rule records, skipping missing or unreadable ones."""
        rules = []
        for number in numbers:
            try:
                record = self.store.get_hash(keys.rule(number))
            except Exception as e:
                logger.warning(f"Failed to fetch rule {number}: {e}")
                continue
            if record:
                rules.append(Rule.from_record(record))
        return rules

    def _candidates(self, keys: RuleKeys, query: str, filters: SearchFilters) -> set[str]:
        restriction: set[str] | None = None
        if filters.category:
            restriction = self.store.get_set(keys.category(filters.category))
        if filters.subcategory:
            subcategory_rules = self.store.get_set(keys.subcategory(filters.subcategory))
            restriction = subcategory_rules if restriction is None else restriction & subcategory_rules

        tokens = list(dict.fromkeys(tokenize(query)))
        if not tokens:
            return set(restriction) if restriction is not None else set()

        matched: set[str] | None = None
        for token in tokens:
            postings = self.store.get_set(keys.search(token))
            matched = postings if matched is None else matched & postings
            if not matched:
                break

        if restriction is not None:
            matched &= restriction
        return matched

    def search(self, query: str, filters: SearchFilters | dict | None = None) -> list[Rule]:
        """Find rules containing every query token.

        The category and subcategory filters restrict candidates through
        their postings. A query that is a bare rule number also matches that
        rule directly. Rule type, keyword and complexity filters are applied
        to the fetched records. Results come back in rule-number order with
        no relevance ranking.

        Args:
            query: Free-text query
            filters: SearchFilters, or a dict accepted by SearchFilters.from_dict

        Returns:
            Matching rules, at most MAX_CANDIDATES. Empty on any store failure.
        """
        if not isinstance(filters, SearchFilters):
            filters = SearchFilters.from_dict(filters)
        query = (query or "").strip().lower()

        try:
            keys = current_keys(self.store)
            if keys is None:
                return []

            candidates = self._candidates(keys, query, filters)
            if is_rule_number(query):
                candidates.add(query)

            numbers = sort_rule_numbers(candidates)[:MAX_CANDIDATES]
            rules = self._fetch_rules(keys, numbers)
        except Exception:
            logger.exception(f"Search failed for query {query!r}")
            return []

        if filters.has_post_filters():
            rules = [rule for rule in rules if matches_filters(rule, filters)]
        return sorted(rules, key=lambda rule: rule_sort_key(rule.number))

    def get_rule(self, number: str) -> Rule | None:
        """Look up a single rule by number."""
        try:
            keys = current_keys(self.store)
            if keys is None:
                return None
            record = self.store.get_hash(keys.rule(number.strip().lower()))
        except Exception:
            logger.exception(f"Failed to fetch rule {number}")
            return None
        return Rule.from_record(record) if record else None

    def get_random_rule(self, uniform: bool = False) -> Rule | None:
        """Pick a random stored rule.

        By default a random index token is chosen first, then a rule from its
        postings, so rules reachable through many tokens come up more often.
        With uniform=True every rule is equally likely.

        Args:
            uniform: Sample all rules evenly instead of through the index

        Returns:
            A Rule, or None if nothing is stored
        """
        try:
            keys = current_keys(self.store)
            if keys is None:
                return None

            if uniform:
                numbers = self.store.get_set(keys.all_rules)
            else:
                token_keys = self.store.keys(keys.search_pattern)
                if not token_keys:
                    return None
                numbers = self.store.get_set(self._rng.choice(token_keys))

            if not numbers:
                return None
            number = self._rng.choice(sort_rule_numbers(numbers))
            record = self.store.get_hash(keys.rule(number))
        except Exception:
            logger.exception("Failed to get random rule")
            return None
        return Rule.from_record(record) if record else None

    def get_rules_by_category(self, category: str) -> list[Rule]:
        """List the rules in a category, in rule-number order."""
        try:
            keys = current_keys(self.store)
            if keys is None:
                return []
            numbers = sort_rule_numbers(self.store.get_set(keys.category(category)))
            return self._fetch_rules(keys, numbers[:MAX_CANDIDATES])
        except Exception:
            logger.exception(f"Failed to get rules for category {category!r}")
            return []

    def get_all_keywords(self) -> list[str]:
        """Collect the keywords of up to FACET_SAMPLE_SIZE stored rules."""
        try:
            keys = current_keys(self.store)
            if keys is None:
                return []
            keywords: set[str] = set()
            for rule_key in self.store.keys(keys.rule_pattern)[:FACET_SAMPLE_SIZE]:
                record = self.store.get_hash(rule_key)
                if record:
                    keywords.update(Rule.from_record(record).keywords)
            return sorted(keywords)
        except Exception:
            logger.exception("Failed to get keywords")
            return []

    def get_subcategories_for_category(self, category: str) -> list[str]:
        """Collect the subcategories of up to FACET_SAMPLE_SIZE rules in a category."""
        try:
            keys = current_keys(self.store)
            if keys is None:
                return []
            numbers = sort_rule_numbers(self.store.get_set(keys.category(category)))
            subcategories = {
                rule.subcategory
                for rule in self._fetch_rules(keys, numbers[:FACET_SAMPLE_SIZE])
                if rule.subcategory
            }
            return sorted(subcategories)
        except Exception:
            logger.exception(f"Failed to get subcategories for category {category!r}")
            return []

    def get_rules_stats(self) -> RulesStats:
        """Read the metadata written by the last ingest."""
        try:
            count = self.store.get_scalar(COUNT_KEY)
            last_updated = self.store.get_scalar(LAST_UPDATED_KEY)
            used_fallback = self.store.get_scalar(USED_FALLBACK_KEY)
            return RulesStats(
                total_rules=int(count) if count else 0,
                last_updated=last_updated or None,
                used_fallback=used_fallback == "true",
            )
        except Exception:
            logger.exception("Failed to get rules stats")
            return RulesStats()

    @staticmethod
    def get_all_rule_types() -> list[str]:
        return list(ALL_RULE_TYPES)

    @staticmethod
    def get_complexity_levels() -> list[str]:
        return list(COMPLEXITY_LEVELS)

    @staticmethod
    def get_categories() -> list[RuleCategory]:
        return list(RULE_CATEGORIES)
