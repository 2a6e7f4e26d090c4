"""Parse the plain-text Comprehensive Rules into Rule records."""

import logging
import re

from mtgrules.core.rule import Rule, rule_sort_key
from .classifier import category_for_section, extract_keywords, subcategory_for

logger = logging.getLogger(__name__)

# Header lines at or over this length are prose, not headers
MAX_HEADER_LENGTH = 100

SECTION_HEADER = re.compile(r"^(\d)\.\s+(.+)$")
SUBSECTION_HEADER = re.compile(r"^(\d{3})\.\s+(.+)$")
# "100.1. Text" for numbered rules, "100.1a Text" for sub-rules
RULE_LINE = re.compile(r"^(\d{3}\.\d+[a-z]?)\.?\s+(.+)$")

# Any of these at the start of a line ends the rule being collected
RULE_BOUNDARIES = (
    re.compile(r"^\d{3}\.\d+[a-z]?\.?(\s|$)"),
    re.compile(r"^\d+\.\s+"),
    re.compile(r"^\d{3}\.\s+"),
)

# Trailing document parts that follow the last rule
TERMINAL_HEADINGS = frozenset({"Glossary", "Credits"})

EXAMPLE_PREFIX = "Example:"


def _is_boundary(line: str) -> bool:
    """Check whether a stripped line starts a new rule, section or subsection."""
    if line in TERMINAL_HEADINGS:
        return True
    return any(pattern.match(line) for pattern in RULE_BOUNDARIES)


def _collect_rule_lines(lines: list[str], start: int) -> tuple[list[str], int]:
    """Collect continuation lines for a rule.

    A single blank line is a soft paragraph break when more rule text
    follows it; two blank lines, a blank line before a header, or a header
    end the rule.

    Args:
        lines: All document lines
        start: Index of the first line after the rule's own line

    Returns:
        Tuple of (continuation lines, index of the first unconsumed line)
    """
    collected = []
    j = start
    while j < len(lines):
        next_line = lines[j].strip()
        if next_line and _is_boundary(next_line):
            break
        if not next_line:
            following = lines[j + 1].strip() if j + 1 < len(lines) else ""
            if following and not _is_boundary(following):
                j += 1
                continue
            break
        collected.append(next_line)
        j += 1
    return collected, j


def _build_rule(number: str, parts: list[str], section: str, category: str) -> Rule:
    content = re.sub(r"\s+", " ", " ".join(parts)).strip()
    examples = [
        part[len(EXAMPLE_PREFIX):].strip()
        for part in parts
        if part.startswith(EXAMPLE_PREFIX) and part[len(EXAMPLE_PREFIX):].strip()
    ]
    return Rule(
        number=number,
        content=content,
        category=category or "General",
        subcategory=subcategory_for(number),
        section=section or "0",
        keywords=extract_keywords(content),
        examples=examples,
    )


def parse_rules_document(text: str) -> list[Rule]:
    """Parse a Comprehensive Rules text dump into rules, in document order.

    Section headers ("4. Zones") set the category for the rules that
    follow. Subsection headers ("405. Stack") are recognized but carry no
    state; subcategories come from the rule number prefix.

    Args:
        text: The full rules document

    Returns:
        List of Rule objects. Empty for empty or non-string input, or if
        parsing fails unexpectedly.
    """
    if not isinstance(text, str) or not text:
        logger.warning("No rules text provided to parser")
        return []

    rules: list[Rule] = []
    current_section = ""
    current_category = ""

    try:
        lines = text.splitlines()
        i = 0
        while i < len(lines):
            line = lines[i].strip()
            i += 1

            if not line:
                continue

            if len(line) < MAX_HEADER_LENGTH:
                section_match = SECTION_HEADER.match(line)
                if section_match:
                    current_section = section_match.group(1)
                    current_category = category_for_section(current_section, section_match.group(2).strip())
                    continue
                if SUBSECTION_HEADER.match(line):
                    continue

            rule_match = RULE_LINE.match(line)
            if not rule_match:
                continue

            number = rule_match.group(1)
            continuation, i = _collect_rule_lines(lines, i)
            rule = _build_rule(number, [rule_match.group(2).strip(), *continuation],
                               current_section, current_category)

            if rule.is_valid():
                rules.append(rule)
    except Exception:
        logger.exception("Failed to parse rules document")
        return []

    logger.info(f"Parsed {len(rules)} rules from document")
    return rules


def validate_rules(rules: list[Rule]) -> list[str]:
    """Check parsed rules for structural anomalies.

    A well-formed document lists every rule once, in ascending rule number
    order. Out-of-order or repeated numbers usually mean the source's line
    breaks changed and rules were merged or split.

    Args:
        rules: Parsed rules in document order

    Returns:
        List of human-readable anomaly descriptions (empty if none)
    """
    anomalies = []
    seen: set[str] = set()
    previous: Rule | None = None

    for rule in rules:
        if rule.number in seen:
            anomalies.append(f"Duplicate rule number {rule.number}")
        elif previous is not None and rule_sort_key(rule.number) < rule_sort_key(previous.number):
            anomalies.append(f"Rule {rule.number} appears after {previous.number}")
        seen.add(rule.number)
        previous = rule

    return anomalies
