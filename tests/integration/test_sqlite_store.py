"""End-to-end ingest and search against the SQLite store.

Run with: pytest tests/integration/test_sqlite_store.py -v
"""

from unittest.mock import patch

import pytest

from mtgrules.core import Rule, SQLiteKeyValueStore
from mtgrules.extraction import RulesFetchError
from mtgrules.search import RulesSearchEngine, build_index
from mtgrules.search.engine import MAX_CANDIDATES
from mtgrules.search.indexer import current_version, ingest_rules


@pytest.fixture
def store(tmp_path):
    return SQLiteKeyValueStore(tmp_path / "rules.db")


class TestFallbackScenario:
    """Every mirror fails, so the fallback rules are stored and searched."""

    @pytest.fixture
    def engine(self, store):
        with patch("mtgrules.search.indexer.fetch_and_parse",
                   side_effect=RulesFetchError("Failed to fetch official rules document: 503")):
            result = build_index(store)
        assert result.used_fallback
        assert result.count == 10
        return RulesSearchEngine(store)

    def test_category_search(self, engine):
        results = engine.search("stack", {"category": "Zones"})
        assert [rule.number for rule in results] == ["405.1"]

    def test_priority_search(self, engine):
        assert {"117.1", "608.1", "704.3"} <= {rule.number for rule in engine.search("priority")}

    def test_stats(self, engine):
        stats = engine.get_rules_stats()
        assert stats.total_rules == 10
        assert stats.used_fallback is True


class TestDocumentIngest:
    """Parsing a document and searching it through the SQLite store."""

    def test_ingest_and_search(self, store, sample_text, sample_numbers):
        result = build_index(store, text=sample_text)
        assert result.count == len(sample_numbers)

        engine = RulesSearchEngine(store)
        assert [rule.number for rule in engine.search("flying")] == ["702.9", "702.9a", "702.9b"]
        assert [rule.number for rule in engine.search("100.1a")] == ["100.1a"]

        rule = engine.get_rule("702.9b")
        assert rule.examples == ["A creature with flying attacks. Only creatures with flying or reach can block it."]

    def test_reingest_replaces_dataset(self, store, sample_text):
        build_index(store, text=sample_text)
        first_version = current_version(store)

        result = build_index(store, fallback_only=True, force=True)
        assert result.used_fallback
        assert current_version(store) == first_version + 1
        assert store.keys(f"mtg:v{first_version}:*") == []

        engine = RulesSearchEngine(store)
        assert engine.get_rule("100.1a") is None
        assert engine.get_rules_stats().total_rules == 10

    def test_skip_when_loaded(self, store, sample_text):
        build_index(store, text=sample_text)
        result = build_index(store, fallback_only=True)
        assert result.skipped
        assert RulesSearchEngine(store).get_rule("100.1a") is not None


class TestIngestCost:
    """Large ingests open a bounded number of SQLite connections."""

    def test_connections_do_not_scale_with_postings(self, store):
        rules = [
            Rule(number=f"{100 + i // 50}.{i % 50 + 1}",
                 content=f"Rule {i} covers priority, the stack, and state-based actions for each player.",
                 category="Game Concepts", subcategory="General", section="1")
            for i in range(1000)
        ]

        with patch.object(store, "_connect", wraps=store._connect) as mock_connect:
            result = ingest_rules(store, rules)

        assert result.count == 1000
        # claim, batch writes, pointer flip, metadata and cleanup; not one per posting
        assert mock_connect.call_count < 20

        engine = RulesSearchEngine(store)
        assert len(engine.search("priority")) == MAX_CANDIDATES
        assert engine.get_rule("119.50").content.startswith("Rule 999 ")
