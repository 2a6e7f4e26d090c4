"""Shared fixtures for the rules lookup tests."""

import pytest

from mtgrules.core import MemoryKeyValueStore, SQLiteKeyValueStore

SAMPLE_RULES_TEXT = """\
Magic: The Gathering Comprehensive Rules

These rules are effective as of April 4, 2025.

Introduction

This document is the ultimate authority for Magic: The Gathering competitive game play.

1. Game Concepts

100. General

100.1. These Magic rules apply to any Magic game with two or more players, including two-player games and multiplayer games.

100.1a A two-player game is a game that begins with only two players.

100.2. To play, each player needs their own deck of traditional Magic cards, small items to represent any tokens and counters, and some way to clearly track life totals.

117. Timing and Priority

117.1. Unless a spell or ability is instructing a player to take an action, which player can take actions at any given time is determined by a system of priority.

4. Zones

405. Stack

405.1. When a spell is cast, the physical card is put on the stack.

405.2. The stack keeps track of the order that spells and/or abilities were added to it.
Each time an object is put on the stack, it's put on top of all objects already there.

7. Additional Rules

702. Keyword Abilities

702.9. Flying

702.9a Flying is an evasion ability.

702.9b A creature with flying can't be blocked except by creatures with flying and/or reach.
Example: A creature with flying attacks. Only creatures with flying or reach can block it.

704. State-Based Actions

704.3. Whenever a player would get priority, the game checks for and resolves all applicable state-based actions simultaneously as a single event.

704.5a If a player has 0 or less life, that player loses the game.


Glossary

Abandon
To turn a face-up ongoing scheme card face down and put it on the bottom of its owner's scheme deck.
"""

SAMPLE_RULE_NUMBERS = [
    "100.1", "100.1a", "100.2", "117.1", "405.1", "405.2",
    "702.9", "702.9a", "702.9b", "704.3", "704.5a",
]


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_RULES_TEXT


@pytest.fixture
def sample_numbers() -> list[str]:
    """Rule numbers in SAMPLE_RULES_TEXT, in document order."""
    return list(SAMPLE_RULE_NUMBERS)


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture(params=["memory", "sqlite"])
def any_store(request, tmp_path):
    """Each store backend in turn."""
    if request.param == "memory":
        return MemoryKeyValueStore()
    return SQLiteKeyValueStore(tmp_path / "rules.db")
