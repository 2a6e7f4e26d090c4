"""Unit tests for fetching the rules document from mirrors."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from mtgrules.extraction import RulesFetchError, fetch_and_parse, fetch_rules_text
from mtgrules.extraction.fetcher import USER_AGENT


def make_response(text: str, status: int = 200, encoding: str | None = "utf-8") -> MagicMock:
    """Create a mock requests response."""
    response = MagicMock()
    response.text = text
    response.encoding = encoding
    response.apparent_encoding = "utf-8"
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Client Error")
    return response


class TestFetchRulesText:
    """Tests for fetch_rules_text()."""

    def test_returns_text(self, sample_text):
        with patch("mtgrules.extraction.fetcher.requests.get", return_value=make_response(sample_text)) as mock_get:
            assert fetch_rules_text("https://mirror.example/rules.txt", timeout=5) == sample_text

        _, kwargs = mock_get.call_args
        assert kwargs["headers"]["User-Agent"] == USER_AGENT
        assert kwargs["timeout"] == 5

    def test_fixes_missing_charset(self, sample_text):
        response = make_response(sample_text, encoding="ISO-8859-1")
        with patch("mtgrules.extraction.fetcher.requests.get", return_value=response):
            fetch_rules_text("https://mirror.example/rules.txt")
        assert response.encoding == "utf-8"

    def test_timeout(self):
        with patch("mtgrules.extraction.fetcher.requests.get", side_effect=requests.Timeout()):
            with pytest.raises(RulesFetchError, match="timed out"):
                fetch_rules_text("https://mirror.example/rules.txt")

    def test_http_error(self):
        with patch("mtgrules.extraction.fetcher.requests.get", return_value=make_response("", status=404)):
            with pytest.raises(RulesFetchError, match="Failed to fetch official rules document"):
                fetch_rules_text("https://mirror.example/rules.txt")

    def test_short_body_rejected(self):
        with patch("mtgrules.extraction.fetcher.requests.get", return_value=make_response("Not found")):
            with pytest.raises(RulesFetchError, match="empty or invalid"):
                fetch_rules_text("https://mirror.example/rules.txt")


class TestFetchAndParse:
    """Tests for fetch_and_parse() mirror fallback."""

    def test_first_mirror_wins(self, sample_text, sample_numbers):
        with patch("mtgrules.extraction.fetcher.requests.get", return_value=make_response(sample_text)) as mock_get:
            rules, url = fetch_and_parse(["https://a.example/rules.txt", "https://b.example/rules.txt"])

        assert url == "https://a.example/rules.txt"
        assert [rule.number for rule in rules] == sample_numbers
        assert mock_get.call_count == 1

    def test_falls_through_to_next_mirror(self, sample_text):
        responses = [requests.ConnectionError("refused"), make_response(sample_text)]
        with patch("mtgrules.extraction.fetcher.requests.get", side_effect=responses):
            _, url = fetch_and_parse(["https://a.example/rules.txt", "https://b.example/rules.txt"])
        assert url == "https://b.example/rules.txt"

    def test_too_few_rules_rejected(self):
        """A document yielding ten or fewer rules is not accepted."""
        text = "1. Game Concepts\n" + "\n".join(f"100.{i}. Rule number {i}." for i in range(1, 11))
        text += "\n" + "Padding line of prose.\n" * 60
        with patch("mtgrules.extraction.fetcher.requests.get", return_value=make_response(text)):
            with pytest.raises(RulesFetchError, match="Invalid or empty rules data"):
                fetch_and_parse(["https://a.example/rules.txt"])

    def test_all_mirrors_fail_reports_last_error(self):
        responses = [requests.ConnectionError("refused"), requests.Timeout()]
        with patch("mtgrules.extraction.fetcher.requests.get", side_effect=responses):
            with pytest.raises(RulesFetchError, match="timed out"):
                fetch_and_parse(["https://a.example/rules.txt", "https://b.example/rules.txt"])

    def test_no_urls(self):
        with pytest.raises(RulesFetchError, match="No rules URLs configured"):
            fetch_and_parse([])
