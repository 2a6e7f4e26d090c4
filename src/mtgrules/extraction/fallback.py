"""Built-in rule set used when the official document is unavailable."""

from mtgrules.core.rule import Rule

_FALLBACK_RULES = (
    {
        "number": "100.1",
        "content": "These Magic rules apply to any Magic game with two or more players, "
                   "including two-player games and multiplayer games.",
        "category": "Game Concepts",
        "subcategory": "General",
        "section": "1",
        "keywords": ("game", "players", "multiplayer"),
    },
    {
        "number": "101.1",
        "content": "At the start of a game, each player shuffles their deck so that the cards "
                   "are in a random order. Each player's deck becomes their library.",
        "category": "Game Concepts",
        "subcategory": "Starting the Game",
        "section": "1",
        "keywords": ("shuffle", "deck", "library", "random"),
    },
    {
        "number": "117.1",
        "content": "Unless a spell or ability is instructing a player to take an action, which "
                   "player can take actions at any given time is determined by a system of priority.",
        "category": "Game Concepts",
        "subcategory": "Timing and Priority",
        "section": "1",
        "keywords": ("priority", "timing", "actions"),
    },
    {
        "number": "405.1",
        "content": "When a spell is cast, the physical card is put on the stack. When an ability "
                   "is activated or triggers, it goes on top of the stack without any card "
                   "associated with it.",
        "category": "Zones",
        "subcategory": "Stack",
        "section": "4",
        "keywords": ("stack", "spells", "abilities", "lifo"),
    },
    {
        "number": "608.1",
        "content": "Each time all players pass in succession, the spell or ability on top of "
                   "the stack resolves.",
        "category": "Spells, Abilities, and Effects",
        "subcategory": "Resolving Spells and Abilities",
        "section": "6",
        "keywords": ("resolve", "stack", "priority"),
    },
    {
        "number": "704.3",
        "content": "Whenever a player would get priority, the game checks for and resolves all "
                   "applicable state-based actions simultaneously as a single event.",
        "category": "Additional Rules",
        "subcategory": "State-Based Actions",
        "section": "7",
        "keywords": ("state-based actions", "priority", "simultaneous"),
    },
    {
        "number": "702.9",
        "content": "Flying is an evasion ability. A creature with flying can't be blocked "
                   "except by creatures with flying and/or reach.",
        "category": "Additional Rules",
        "subcategory": "Keyword Abilities",
        "section": "7",
        "keywords": ("flying", "evasion", "blocked", "reach"),
    },
    {
        "number": "702.19",
        "content": "Trample is a static ability that modifies the rules for assigning an "
                   "attacking creature's combat damage.",
        "category": "Additional Rules",
        "subcategory": "Keyword Abilities",
        "section": "7",
        "keywords": ("trample", "combat damage", "excess damage"),
    },
    {
        "number": "506.1",
        "content": "The combat phase has five steps, in this order: beginning of combat, "
                   "declare attackers, declare blockers, combat damage, and end of combat.",
        "category": "Turn Structure",
        "subcategory": "Combat Phase",
        "section": "5",
        "keywords": ("combat", "attackers", "blockers", "damage"),
    },
    {
        "number": "601.1",
        "content": "Previously, the action of casting a spell, or casting a card as a spell, "
                   "was referred to on cards as 'playing' that spell or that card.",
        "category": "Spells, Abilities, and Effects",
        "subcategory": "Casting Spells",
        "section": "6",
        "keywords": ("casting", "spells", "playing"),
    },
)


def get_fallback_rules() -> list[Rule]:
    """Return a fresh copy of the built-in fallback rules."""
    return [
        Rule(
            number=entry["number"],
            content=entry["content"],
            category=entry["category"],
            subcategory=entry["subcategory"],
            section=entry["section"],
            keywords=set(entry["keywords"]),
        )
        for entry in _FALLBACK_RULES
    ]
