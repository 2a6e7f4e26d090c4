"""Download the Comprehensive Rules text from official mirrors."""

import logging
from typing import Iterable

import requests

from mtgrules.core.config import DEFAULT_FETCH_TIMEOUT
from mtgrules.core.rule import Rule
from .parser import parse_rules_document

logger = logging.getLogger(__name__)

USER_AGENT = "MTG-Rulebook-App/1.0"

# Anything shorter is an error page, not the rules document
MIN_DOCUMENT_LENGTH = 1000

# A mirror must yield more rules than this to be accepted
MIN_PARSED_RULES = 10


class RulesFetchError(Exception):
    """Raised when the rules document cannot be retrieved or parsed."""


def fetch_rules_text(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> str:
    """Fetch the raw rules document from a single URL.

    Args:
        url: Location of the plain-text rules
        timeout: Request timeout in seconds

    Returns:
        The document text

    Raises:
        RulesFetchError: On timeout, HTTP error, or an implausibly short body
    """
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "text/plain, text/*, */*",
    }
    try:
        response = requests.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.Timeout as e:
        raise RulesFetchError("Request timed out while fetching rules document") from e
    except requests.RequestException as e:
        raise RulesFetchError(f"Failed to fetch official rules document: {e}") from e

    # The official file is served without a charset
    if response.encoding is None or response.encoding.lower() == "iso-8859-1":
        response.encoding = response.apparent_encoding or "utf-8"

    text = response.text
    if not text or len(text) < MIN_DOCUMENT_LENGTH:
        raise RulesFetchError("Received empty or invalid rules document")

    logger.info(f"Fetched rules document ({len(text):,} characters) from {url}")
    return text


def fetch_and_parse(
    urls: Iterable[str],
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> tuple[list[Rule], str]:
    """Try each mirror in order until one yields a usable rule set.

    Args:
        urls: Candidate URLs, most preferred first
        timeout: Per-request timeout in seconds

    Returns:
        Tuple of (parsed rules, URL they came from)

    Raises:
        RulesFetchError: If every mirror fails; the message is the last error
    """
    last_error = "No rules URLs configured"
    for url in urls:
        logger.info(f"Attempting to fetch rules from: {url}")
        try:
            text = fetch_rules_text(url, timeout=timeout)
        except RulesFetchError as e:
            logger.warning(f"Failed to fetch from {url}: {e}")
            last_error = str(e)
            continue

        rules = parse_rules_document(text)
        if len(rules) > MIN_PARSED_RULES:
            logger.info(f"Successfully fetched {len(rules)} rules from official source")
            return rules, url

        last_error = f"Invalid or empty rules data received from {url}"
        logger.warning(last_error)

    raise RulesFetchError(last_error)
