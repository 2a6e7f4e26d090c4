"""Keyword, category and subcategory classification for parsed rules."""

import re
from types import MappingProxyType

# Top-level section digit -> category
SECTION_CATEGORIES = MappingProxyType({
    "1": "Game Concepts",
    "2": "Parts of a Card",
    "3": "Card Types",
    "4": "Zones",
    "5": "Turn Structure",
    "6": "Spells, Abilities, and Effects",
    "7": "Additional Rules",
    "8": "Multiplayer Rules",
    "9": "Casual Variants",
})

# Three-digit rule prefix -> subcategory
SUBCATEGORIES = MappingProxyType({
    # Game Concepts
    100: "General",
    101: "Starting the Game",
    102: "Players",
    103: "Ending the Game",
    104: "Numbers and Symbols",
    105: "Colors",
    106: "Mana",
    107: "Numbers and Symbols",
    108: "Cards",
    109: "Objects",
    110: "Permanents",
    111: "Tokens",
    112: "Spells",
    113: "Abilities",
    114: "Emblems",
    115: "Targets",
    116: "Special Actions",
    117: "Timing and Priority",
    118: "Life",
    119: "Damage",
    120: "Drawing a Card",
    121: "Counters",
    # Parts of a Card
    200: "General",
    201: "Name",
    202: "Mana Cost and Color",
    203: "Color Indicator",
    204: "Type Line",
    205: "Text Box",
    206: "Power/Toughness",
    207: "Loyalty",
    208: "Hand Modifier",
    209: "Life Modifier",
    # Card Types
    300: "General",
    301: "Artifacts",
    302: "Creatures",
    303: "Enchantments",
    304: "Instants",
    305: "Lands",
    306: "Planeswalkers",
    307: "Sorceries",
    308: "Tribals",
    309: "Dungeons",
    # Zones
    400: "General",
    401: "Library",
    402: "Hand",
    403: "Battlefield",
    404: "Graveyard",
    405: "Stack",
    406: "Exile",
    407: "Ante",
    408: "Command",
    # Turn Structure
    500: "General",
    501: "Beginning Phase",
    502: "Untap Step",
    503: "Upkeep Step",
    504: "Draw Step",
    505: "Main Phase",
    506: "Combat Phase",
    507: "Beginning of Combat Step",
    508: "Declare Attackers Step",
    509: "Declare Blockers Step",
    510: "Combat Damage Step",
    511: "End of Combat Step",
    512: "Ending Phase",
    513: "End Step",
    514: "Cleanup Step",
    # Spells, Abilities, and Effects
    600: "General",
    601: "Casting Spells",
    602: "Activating Activated Abilities",
    603: "Handling Triggered Abilities",
    604: "Handling Static Abilities",
    605: "Mana Abilities",
    606: "Loyalty Abilities",
    607: "Linked Abilities",
    608: "Resolving Spells and Abilities",
    609: "Effects",
    610: "One-Shot Effects",
    611: "Continuous Effects",
    612: "Text-Changing Effects",
    613: "Interaction of Continuous Effects",
    614: "Replacement Effects",
    615: "Prevention Effects",
    616: "Interaction of Replacement/Prevention Effects",
    # Additional Rules
    700: "General",
    701: "Keyword Actions",
    702: "Keyword Abilities",
    703: "Turn-Based Actions",
    704: "State-Based Actions",
    705: "Flipping a Coin",
    706: "Copying Objects",
    707: "Face-Down Spells and Permanents",
    708: "Split Cards",
    709: "Flip Cards",
    710: "Leveler Cards",
    711: "Double-Faced Cards",
    712: "Meld Cards",
    713: "Checklist Cards",
    714: "Saga Cards",
    715: "Adventures",
    716: "Modal Double-Faced Cards",
    717: "Class Cards",
})

# Zones, card types, abilities and common keyword abilities
KEYWORD_VOCABULARY = (
    "mana", "spell", "ability", "creature", "artifact", "enchantment",
    "instant", "sorcery", "land", "planeswalker", "battlefield", "graveyard",
    "library", "hand", "exile", "stack", "combat", "attack", "block",
    "damage", "life", "counter", "token", "permanent", "activated",
    "triggered", "static", "priority", "phase", "step", "turn", "player",
    "target", "choose", "control", "owner", "cast", "play", "draw",
    "discard", "flying", "trample", "first strike", "double strike",
    "deathtouch", "lifelink", "vigilance", "reach", "haste", "hexproof",
    "indestructible", "menace", "prowess",
)

QUOTED_PATTERN = re.compile(r'"([^"]+)"')

# Quoted phrases outside (2, 20) characters are not treated as keywords
MIN_QUOTED_LENGTH = 2
MAX_QUOTED_LENGTH = 20


def extract_keywords(content: str) -> set[str]:
    """Extract keywords from rule text.

    Vocabulary terms are matched as case-insensitive substrings. Quoted
    phrases are added lowercased when their length is strictly between
    2 and 20 characters.

    Args:
        content: The rule text

    Returns:
        Set of lowercase keywords (empty for non-string input)
    """
    if not isinstance(content, str) or not content:
        return set()

    content_lower = content.lower()
    keywords = {term for term in KEYWORD_VOCABULARY if term in content_lower}

    for quoted in QUOTED_PATTERN.findall(content):
        term = quoted.lower()
        if MIN_QUOTED_LENGTH < len(term) < MAX_QUOTED_LENGTH:
            keywords.add(term)

    return keywords


def subcategory_for(rule_number: str) -> str | None:
    """Look up the subcategory for a rule number by its three-digit prefix.

    Args:
        rule_number: Rule number such as "405.1" or "702.9a"

    Returns:
        The subcategory name, or None if unmapped or unparsable
    """
    if not isinstance(rule_number, str) or not rule_number:
        return None
    try:
        prefix = int(rule_number.split(".")[0])
    except ValueError:
        return None
    return SUBCATEGORIES.get(prefix)


def category_for_section(section: str, title: str = "") -> str:
    """Map a top-level section digit to its category, else use the title."""
    return SECTION_CATEGORIES.get(section) or title
