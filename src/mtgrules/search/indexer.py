"""Persist parsed rules and their inverted indexes in a key-value store.

Every ingest writes a complete dataset under a fresh version prefix and
then flips the version pointer, so readers only ever see a finished index.
Older versions are deleted after the flip.
"""

import logging
import re
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from mtgrules.core.config import get_settings
from mtgrules.core.kvstore import KeyValueStore
from mtgrules.core.rule import Rule
from mtgrules.extraction import (
    RulesFetchError,
    fetch_and_parse,
    get_fallback_rules,
    parse_rules_document,
    validate_rules,
)
from .filters import MIN_TOKEN_LENGTH, is_stopword, normalize_token, slugify

logger = logging.getLogger(__name__)

COUNT_KEY = "mtg:rules:count"
LAST_UPDATED_KEY = "mtg:rules:last_updated"
USED_FALLBACK_KEY = "mtg:rules:used_fallback"
VERSION_KEY = "mtg:rules:version"

# Bound on postings written per rule
MAX_TOKENS_PER_RULE = 20

# A store holding more rules than this is considered already loaded
SKIP_THRESHOLD = 5

# Rules written per store call during ingest
WRITE_BATCH_SIZE = 500

# Marks a claimed dataset version; one per version, inside its prefix
CLAIM_PATTERN = "mtg:v*:claim"
_CLAIM_RE = re.compile(r"^mtg:v(\d+):claim$")

# Only one ingest may run at a time in this process. Other processes
# sharing the store are kept apart by version claims instead.
_ingest_lock = threading.Lock()


class RuleKeys:
    """Key layout for one dataset version."""

    def __init__(self, version: int):
        self.version = version
        self.prefix = f"mtg:v{version}:"

    def rule(self, number: str) -> str:
        return f"{self.prefix}rule:{number}"

    def search(self, token: str) -> str:
        return f"{self.prefix}search:{token}"

    def category(self, name: str) -> str:
        return f"{self.prefix}category:{slugify(name)}"

    def subcategory(self, name: str) -> str:
        return f"{self.prefix}subcategory:{slugify(name)}"

    @property
    def all_rules(self) -> str:
        return f"{self.prefix}all"

    @property
    def claim(self) -> str:
        return f"{self.prefix}claim"

    @property
    def rule_pattern(self) -> str:
        return f"{self.prefix}rule:*"

    @property
    def search_pattern(self) -> str:
        return f"{self.prefix}search:*"

    @property
    def pattern(self) -> str:
        """Glob matching every key of this version."""
        return f"{self.prefix}*"


def current_version(store: KeyValueStore) -> int | None:
    """Return the live dataset version, or None if nothing was ingested."""
    value = store.get_scalar(VERSION_KEY)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring malformed version pointer: {value!r}")
        return None


def current_keys(store: KeyValueStore) -> RuleKeys | None:
    version = current_version(store)
    return RuleKeys(version) if version is not None else None


def stored_rule_count(store: KeyValueStore) -> int:
    value = store.get_scalar(COUNT_KEY)
    try:
        return int(value) if value else 0
    except ValueError:
        return 0


@dataclass
class IngestResult:
    """Outcome of loading rules into the store."""

    count: int
    used_fallback: bool = False
    skipped: bool = False
    last_error: str | None = None
    source_url: str | None = None
    anomalies: list[str] = field(default_factory=list)
    message: str = ""

    def as_dict(self) -> dict:
        """Return the result as a JSON-serializable dict with API field names."""
        return {
            "success": True,
            "count": self.count,
            "usedFallback": self.used_fallback,
            "skipped": self.skipped,
            "lastError": self.last_error,
            "sourceUrl": self.source_url,
            "anomalies": list(self.anomalies),
            "message": self.message,
        }


def index_tokens(rule: Rule) -> list[str]:
    """Build the search tokens for a rule, in priority order.

    Content words come first, then keywords, the rule number, the category
    and the subcategory words. Short tokens and stopwords are dropped and
    the list is capped at MAX_TOKENS_PER_RULE.

    Args:
        rule: The rule to index

    Returns:
        Unique tokens, at most MAX_TOKENS_PER_RULE
    """
    terms = [
        *rule.content.split(),
        *sorted(rule.keywords),
        rule.number,
        rule.category or "",
        *(rule.subcategory.split() if rule.subcategory else []),
    ]
    tokens = []
    seen = set()
    for term in terms:
        token = normalize_token(term)
        if len(token) < MIN_TOKEN_LENGTH or is_stopword(token) or token in seen:
            continue
        seen.add(token)
        tokens.append(token)
        if len(tokens) == MAX_TOKENS_PER_RULE:
            break
    return tokens


def _rule_writes(keys: RuleKeys, rule: Rule) -> tuple[dict[str, dict[str, str]], dict[str, set[str]]]:
    """Collect the hash record and set postings for one rule."""
    sets: dict[str, set[str]] = defaultdict(set)
    for token in index_tokens(rule):
        sets[keys.search(token)].add(rule.number)
    if rule.category:
        sets[keys.category(rule.category)].add(rule.number)
    if rule.subcategory:
        sets[keys.subcategory(rule.subcategory)].add(rule.number)
    sets[keys.all_rules].add(rule.number)
    return {keys.rule(rule.number): rule.to_record()}, sets


def _write_batch(store: KeyValueStore, batch: list[tuple[Rule, dict, dict]]) -> list[str]:
    """Write a batch of rules in one store call.

    If the combined write fails, each rule is retried on its own so one bad
    rule only loses itself.

    Returns:
        Numbers of the rules that were written
    """
    hashes: dict[str, dict[str, str]] = {}
    sets: dict[str, set[str]] = defaultdict(set)
    for _, rule_hashes, rule_sets in batch:
        hashes.update(rule_hashes)
        for key, members in rule_sets.items():
            sets[key] |= members
    try:
        store.write_many(hashes, sets)
        return [rule.number for rule, _, _ in batch]
    except Exception as e:
        logger.warning(f"Batch write of {len(batch)} rules failed ({e}), retrying one rule at a time")

    written = []
    for rule, rule_hashes, rule_sets in batch:
        try:
            store.write_many(rule_hashes, rule_sets)
        except Exception as e:
            logger.warning(f"Failed to store rule {rule.number}: {e}")
            continue
        written.append(rule.number)
    return written


def _claim_version(store: KeyValueStore, start: int) -> RuleKeys:
    """Reserve the first unclaimed dataset version at or above start.

    The claim marker lives inside the version's own keyspace, so deleting
    the version releases it.
    """
    version = start
    while not store.compare_and_set(RuleKeys(version).claim, None, datetime.now(timezone.utc).isoformat()):
        logger.info(f"Dataset version {version} is already claimed, trying {version + 1}")
        version += 1
    return RuleKeys(version)


def _publish_version(store: KeyValueStore, version: int) -> bool:
    """Point readers at version unless a newer version is already live."""
    while True:
        current = store.get_scalar(VERSION_KEY)
        try:
            live = int(current) if current is not None else None
        except ValueError:
            live = None
        if live is not None and live >= version:
            return False
        if store.compare_and_set(VERSION_KEY, current, str(version)):
            return True


def _delete_version(store: KeyValueStore, keys: RuleKeys) -> None:
    """Best-effort removal of every key in a dataset version."""
    try:
        stale = store.keys(keys.pattern)
        if stale:
            store.delete_keys(stale)
            logger.info(f"Deleted {len(stale)} keys from dataset version {keys.version}")
    except Exception as e:
        logger.warning(f"Failed to clear dataset version {keys.version}: {e}")


def _delete_older_versions(store: KeyValueStore, version: int) -> None:
    """Remove every claimed version below the live one."""
    try:
        claims = store.keys(CLAIM_PATTERN)
    except Exception as e:
        logger.warning(f"Failed to list old dataset versions: {e}")
        return
    for claim in claims:
        match = _CLAIM_RE.match(claim)
        if match and int(match.group(1)) < version:
            _delete_version(store, RuleKeys(int(match.group(1))))


def ingest_rules(
    store: KeyValueStore,
    rules: Iterable[Rule],
    used_fallback: bool = False,
    force: bool = False,
) -> IngestResult:
    """Replace the stored dataset with the given rules.

    Skipped when more than SKIP_THRESHOLD rules are already stored, unless
    force is set. Invalid rules and rules that fail to store are logged and
    skipped without aborting the batch.

    Ingests in one process are serialized by a lock. Across processes each
    ingest claims its own version in the store and the pointer only moves
    forward, so the newest finished dataset wins.

    Args:
        store: Target key-value store
        rules: Rules to store
        used_fallback: Whether the rules are the built-in fallback set
        force: Re-ingest even when rules are already loaded

    Returns:
        IngestResult with the number of rules stored
    """
    with _ingest_lock:
        existing = stored_rule_count(store)
        if existing > SKIP_THRESHOLD and not force:
            message = f"Rules already loaded ({existing} rules). Skipping initialization."
            logger.info(message)
            return IngestResult(count=existing, skipped=True, message=message)

        rules = list(rules)
        if not rules:
            return IngestResult(count=0, used_fallback=used_fallback, message="No rules to ingest")

        keys = _claim_version(store, (current_version(store) or 0) + 1)

        logger.info(f"Processing {len(rules)} rules into dataset version {keys.version}...")
        stored: set[str] = set()
        pending: list[tuple[Rule, dict, dict]] = []
        for rule in rules:
            if not rule.is_valid():
                logger.warning(f"Skipping invalid rule: {rule!r}")
                continue
            try:
                pending.append((rule, *_rule_writes(keys, rule)))
            except Exception as e:
                logger.warning(f"Failed to store rule {rule.number}: {e}")
                continue
            if len(pending) >= WRITE_BATCH_SIZE:
                stored.update(_write_batch(store, pending))
                pending = []
        if pending:
            stored.update(_write_batch(store, pending))

        if not stored:
            _delete_version(store, keys)
            return IngestResult(count=0, used_fallback=used_fallback, message="No rules could be stored")

        if not _publish_version(store, keys.version):
            _delete_version(store, keys)
            message = "A newer dataset was published by another ingest. Discarding this one."
            logger.info(message)
            return IngestResult(count=stored_rule_count(store), skipped=True, message=message)

        store.set_scalar(COUNT_KEY, str(len(stored)))
        store.set_scalar(LAST_UPDATED_KEY, datetime.now(timezone.utc).isoformat())
        store.set_scalar(USED_FALLBACK_KEY, "true" if used_fallback else "false")

        _delete_older_versions(store, keys.version)

    if used_fallback:
        message = f"Loaded {len(stored)} fallback rules (official source unavailable)"
    else:
        message = f"Successfully loaded {len(stored)} official MTG rules"
    logger.info(message)
    return IngestResult(count=len(stored), used_fallback=used_fallback, message=message)


def build_index(
    store: KeyValueStore,
    urls: Iterable[str] | None = None,
    text: str | None = None,
    force: bool = False,
    fallback_only: bool = False,
    timeout: float | None = None,
) -> IngestResult:
    """Load the rules into the store, falling back to the built-in set.

    Rules come from the given text when provided, otherwise from the first
    mirror that yields a usable document. If nothing usable is found the
    fallback rules are stored and the last error is reported.

    Args:
        store: Target key-value store
        urls: Mirror URLs to try (default: configured URLs)
        text: Raw rules text to parse instead of fetching
        force: Re-ingest even when rules are already loaded
        fallback_only: Skip fetching and store the fallback rules
        timeout: Per-request fetch timeout in seconds

    Returns:
        IngestResult describing what was stored
    """
    existing = stored_rule_count(store)
    if existing > SKIP_THRESHOLD and not force:
        message = f"Rules already loaded ({existing} rules). Skipping initialization."
        logger.info(message)
        return IngestResult(count=existing, skipped=True, message=message)

    rules: list[Rule] = []
    last_error = None
    source_url = None

    if fallback_only:
        last_error = "Fallback rules requested"
    elif text is not None:
        rules = parse_rules_document(text)
        if not rules:
            last_error = "Rules document produced no rules"
    else:
        settings = get_settings()
        try:
            rules, source_url = fetch_and_parse(
                urls if urls is not None else settings.rules_urls,
                timeout=timeout if timeout is not None else settings.fetch_timeout,
            )
        except RulesFetchError as e:
            last_error = str(e)

    used_fallback = not rules
    if used_fallback:
        logger.info("All official sources failed, using fallback rules...")
        rules = get_fallback_rules()

    anomalies = [] if used_fallback else validate_rules(rules)
    for anomaly in anomalies[:10]:
        logger.warning(f"Parser anomaly: {anomaly}")
    if len(anomalies) > 10:
        logger.warning(f"... and {len(anomalies) - 10} more parser anomalies")

    result = ingest_rules(store, rules, used_fallback=used_fallback, force=force)
    if not result.skipped:
        result.last_error = last_error if used_fallback else None
        result.source_url = source_url
        result.anomalies = anomalies
    return result
