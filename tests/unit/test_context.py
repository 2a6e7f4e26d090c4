"""Unit tests for prompt context formatting and result printing."""

import io
import sys
from unittest.mock import patch

from mtgrules.core import Rule
from mtgrules.rag import format_context, print_search_results


def make_rule(number: str, content: str = "Rule text.") -> Rule:
    return Rule(number=number, content=content, category="Zones", subcategory="Stack", section="4",
                keywords={"stack"})


class TestFormatContext:
    """Tests for format_context()."""

    def test_block_format(self):
        context = format_context([make_rule("405.1", "Spells go on the stack.")])
        assert context == "### Rule 405.1 (Zones › Stack)\n\nSpells go on the stack."

    def test_blocks_separated(self):
        context = format_context([make_rule("405.1"), make_rule("405.2")])
        assert context.count("\n\n---\n\n") == 1
        assert context.index("405.1") < context.index("405.2")

    def test_max_rules(self):
        rules = [make_rule(f"405.{i}") for i in range(1, 9)]
        context = format_context(rules, max_rules=3)
        assert "405.3" in context
        assert "405.4" not in context

    def test_missing_subcategory_uses_general(self):
        rule = Rule(number="100.1", content="Text.", category="Game Concepts")
        assert format_context([rule]).startswith("### Rule 100.1 (Game Concepts › General)")

    def test_empty(self):
        assert format_context([]) == ""


class TestPrintSearchResults:
    """Tests for print_search_results()."""

    def test_prints_to_stderr(self):
        captured = io.StringIO()
        with patch.object(sys, "stderr", captured):
            print_search_results([make_rule("405.1", "Spells go on the stack.")])

        output = captured.getvalue()
        assert "Found 1 rules" in output
        assert "405.1" in output
        assert "Spells go on the stack." in output

    def test_truncates_content(self):
        captured = io.StringIO()
        with patch.object(sys, "stderr", captured):
            print_search_results([make_rule("405.1", "x" * 500)], preview_length=50)
        assert "x" * 50 + "..." in captured.getvalue()
        assert "x" * 51 not in captured.getvalue()

    def test_verbose_shows_facets(self):
        captured = io.StringIO()
        with patch.object(sys, "stderr", captured):
            print_search_results([make_rule("405.1")], verbose=True)
        output = captured.getvalue()
        assert "Zones, Basic" in output
        assert "keywords: stack" in output
