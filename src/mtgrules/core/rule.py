"""Rule dataclass and the static category catalogue."""

import json
import re
import sys
from dataclasses import dataclass, field

RULE_NUMBER_PARTS = re.compile(r"^(\d+)(?:\.(\d+))?([a-z]*)$")


def rule_sort_key(number: str) -> tuple[int, int, str]:
    """Sort key ordering rule numbers numerically, letters as a tiebreak.

    "100.2" sorts before "100.10a", and "702.9" before "702.9a".
    Unparsable numbers sort last.
    """
    match = RULE_NUMBER_PARTS.match(number.strip().lower()) if number else None
    if not match:
        return (sys.maxsize, sys.maxsize, number or "")
    major, minor, suffix = match.groups()
    return (int(major), int(minor) if minor else -1, suffix)


@dataclass
class Rule:
    """A single numbered rule parsed from the Comprehensive Rules."""
    number: str
    content: str
    category: str = "General"
    subcategory: str | None = None
    section: str = "0"
    keywords: set[str] = field(default_factory=set)
    examples: list[str] = field(default_factory=list)

    @property
    def title(self) -> str:
        """Display title: the subcategory, or "General" when there is none."""
        return self.subcategory or "General"

    def is_valid(self) -> bool:
        """A rule needs both a number and content to be stored."""
        return bool(self.number and self.number.strip() and self.content and self.content.strip())

    def to_record(self) -> dict[str, str]:
        """Flatten the rule into a string-valued hash for the key-value store."""
        return {
            "number": self.number,
            "title": self.title,
            "content": self.content,
            "category": self.category or "General",
            "subcategory": self.subcategory or "",
            "section": self.section or "0",
            "keywords": json.dumps(sorted(self.keywords)),
            "examples": json.dumps(list(self.examples)),
        }

    @classmethod
    def from_record(cls, record: dict[str, str]) -> "Rule":
        """Rebuild a rule from a stored hash.

        Args:
            record: Hash fields as written by to_record()

        Returns:
            The Rule
        """
        keywords = record.get("keywords")
        examples = record.get("examples")
        return cls(
            number=record.get("number", ""),
            content=record.get("content", ""),
            category=record.get("category") or "General",
            subcategory=record.get("subcategory") or None,
            section=record.get("section") or "0",
            keywords=set(json.loads(keywords)) if keywords else set(),
            examples=list(json.loads(examples)) if examples else [],
        )

    def as_dict(self) -> dict:
        """Return the rule as a JSON-serializable dict."""
        return {
            "number": self.number,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "subcategory": self.subcategory,
            "section": self.section,
            "keywords": sorted(self.keywords),
            "examples": list(self.examples),
        }

    def __repr__(self) -> str:
        content_preview = self.content[:60] + "..." if len(self.content) > 60 else self.content
        return f"Rule(number={self.number!r}, category={self.category!r}, content={content_preview!r})"


@dataclass(frozen=True)
class RuleCategory:
    """A top-level section of the Comprehensive Rules."""
    id: str
    name: str
    description: str
    subcategories: tuple[str, ...] = ()

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "subcategories": list(self.subcategories),
        }


RULE_CATEGORIES: tuple[RuleCategory, ...] = (
    RuleCategory(
        "1", "Game Concepts", "Basic game concepts and terminology",
        ("General", "Players", "Starting the Game", "Ending the Game"),
    ),
    RuleCategory(
        "2", "Parts of a Card", "Card components and characteristics",
        ("Name", "Mana Cost", "Color", "Type Line", "Text Box", "Power/Toughness"),
    ),
    RuleCategory(
        "3", "Card Types", "Different types of Magic cards",
        ("Artifacts", "Creatures", "Enchantments", "Instants", "Lands", "Planeswalkers", "Sorceries"),
    ),
    RuleCategory(
        "4", "Zones", "Game zones where cards exist",
        ("Library", "Hand", "Battlefield", "Graveyard", "Stack", "Exile", "Command"),
    ),
    RuleCategory(
        "5", "Turn Structure", "How turns and phases work",
        ("Beginning Phase", "Main Phase", "Combat Phase", "Ending Phase"),
    ),
    RuleCategory(
        "6", "Spells, Abilities, and Effects", "How spells and abilities work",
        ("Casting Spells", "Activated Abilities", "Triggered Abilities", "Static Abilities"),
    ),
    RuleCategory(
        "7", "Additional Rules", "Advanced game mechanics",
        ("State-Based Actions", "Replacement Effects", "Prevention Effects"),
    ),
    RuleCategory("8", "Multiplayer Rules", "Rules for games with more than two players"),
    RuleCategory("9", "Casual Variants", "Alternative ways to play Magic"),
)
