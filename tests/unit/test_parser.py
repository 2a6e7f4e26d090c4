"""Unit tests for the Comprehensive Rules text parser."""

from unittest.mock import patch

from mtgrules.core import Rule
from mtgrules.extraction import parse_rules_document, validate_rules


def rules_by_number(text: str) -> dict[str, Rule]:
    return {rule.number: rule for rule in parse_rules_document(text)}


class TestParseRulesDocument:
    """Tests for parse_rules_document()."""

    def test_parses_every_rule_in_order(self, sample_text, sample_numbers):
        """All numbered rules and sub-rules are found in document order."""
        rules = parse_rules_document(sample_text)
        assert [rule.number for rule in rules] == sample_numbers

    def test_section_sets_category(self, sample_text):
        """The most recent section header supplies category and section."""
        rules = rules_by_number(sample_text)
        assert rules["100.1"].category == "Game Concepts"
        assert rules["100.1"].section == "1"
        assert rules["405.1"].category == "Zones"
        assert rules["405.1"].section == "4"
        assert rules["704.5a"].category == "Additional Rules"

    def test_subcategory_from_rule_number(self, sample_text):
        rules = rules_by_number(sample_text)
        assert rules["117.1"].subcategory == "Timing and Priority"
        assert rules["405.2"].subcategory == "Stack"
        assert rules["702.9b"].subcategory == "Keyword Abilities"

    def test_sub_rule_without_trailing_period(self, sample_text):
        """Lines like "100.1a Text" parse as rules."""
        rules = rules_by_number(sample_text)
        assert rules["100.1a"].content == "A two-player game is a game that begins with only two players."

    def test_continuation_lines_joined(self, sample_text):
        """Lines following a rule line are appended with single spaces."""
        rules = rules_by_number(sample_text)
        assert rules["405.2"].content == (
            "The stack keeps track of the order that spells and/or abilities were added to it. "
            "Each time an object is put on the stack, it's put on top of all objects already there."
        )

    def test_examples_collected(self, sample_text):
        """Example lines are kept in content and also listed as examples."""
        rule = rules_by_number(sample_text)["702.9b"]
        assert "Example: A creature with flying attacks." in rule.content
        assert rule.examples == ["A creature with flying attacks. Only creatures with flying or reach can block it."]

    def test_keywords_extracted(self, sample_text):
        rule = rules_by_number(sample_text)["702.9b"]
        assert {"flying", "reach", "block"} <= rule.keywords

    def test_glossary_not_parsed(self, sample_text):
        """Text after the Glossary heading does not leak into the last rule."""
        rule = rules_by_number(sample_text)["704.5a"]
        assert rule.content == "If a player has 0 or less life, that player loses the game."

    def test_single_blank_line_is_soft_break(self):
        """A paragraph after one blank line still belongs to the rule."""
        text = "1. Game Concepts\n100.1. First paragraph.\n\nSecond paragraph.\n100.2. Next rule."
        rules = rules_by_number(text)
        assert rules["100.1"].content == "First paragraph. Second paragraph."
        assert rules["100.2"].content == "Next rule."

    def test_two_blank_lines_end_rule(self):
        text = "1. Game Concepts\n100.1. First paragraph.\n\n\nStray text.\n100.2. Next rule."
        rules = rules_by_number(text)
        assert rules["100.1"].content == "First paragraph."

    def test_blank_line_before_header_ends_rule(self):
        text = "1. Game Concepts\n100.1. Only rule.\n\n101. Starting the Game\n101.1. Shuffle."
        rules = rules_by_number(text)
        assert rules["100.1"].content == "Only rule."
        assert rules["101.1"].subcategory == "Starting the Game"

    def test_rule_before_any_section(self):
        """Rules before the first section header get the default category."""
        rules = rules_by_number("100.1. Orphan rule text.")
        assert rules["100.1"].category == "General"
        assert rules["100.1"].section == "0"

    def test_long_numbered_line_is_not_a_section(self):
        """Lines of 100 characters or more are never treated as section headers."""
        long_line = "4. " + "x" * 120
        text = f"1. Game Concepts\n{long_line}\n100.1. Rule text."
        assert rules_by_number(text)["100.1"].category == "Game Concepts"

    def test_empty_and_invalid_input(self):
        assert parse_rules_document("") == []
        assert parse_rules_document(None) == []
        assert parse_rules_document(12345) == []

    def test_no_rules_in_text(self):
        assert parse_rules_document("Just some prose.\nNothing numbered here.") == []

    def test_unexpected_error_returns_empty(self, sample_text):
        """Failures while building rules are logged and yield no rules."""
        with patch("mtgrules.extraction.parser.extract_keywords", side_effect=RuntimeError("boom")):
            assert parse_rules_document(sample_text) == []

    def test_round_trip(self):
        """Rendering rules as text and parsing them back preserves them."""
        original = [
            Rule(number="100.1", content="Rule one text.", category="Game Concepts", section="1"),
            Rule(number="100.2", content="Rule two text.", category="Game Concepts", section="1"),
            Rule(number="405.1", content="Rule three text.", category="Zones", section="4"),
        ]
        text = "1. Game Concepts\n\n100.1. Rule one text.\n\n100.2. Rule two text.\n\n4. Zones\n\n405.1. Rule three text.\n"
        parsed = parse_rules_document(text)
        assert [(r.number, r.content, r.category, r.section) for r in parsed] == [
            (r.number, r.content, r.category, r.section) for r in original
        ]


class TestValidateRules:
    """Tests for validate_rules()."""

    def test_clean_document(self, sample_text):
        assert validate_rules(parse_rules_document(sample_text)) == []

    def test_duplicate_number(self):
        rules = [Rule("100.1", "a"), Rule("100.2", "b"), Rule("100.2", "c")]
        assert validate_rules(rules) == ["Duplicate rule number 100.2"]

    def test_out_of_order(self):
        rules = [Rule("100.10", "a"), Rule("100.2", "b")]
        assert validate_rules(rules) == ["Rule 100.2 appears after 100.10"]

    def test_numeric_ordering_not_lexical(self):
        """100.9 followed by 100.10 is in order."""
        rules = [Rule("100.9", "a"), Rule("100.10", "b"), Rule("100.10a", "c")]
        assert validate_rules(rules) == []
