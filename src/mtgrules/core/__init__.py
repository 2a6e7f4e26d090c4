"""Core domain models, configuration and storage."""

from .config import Settings, configure_logging, get_settings
from .db import SQLiteKeyValueStore, get_store
from .kvstore import KeyValueStore, MemoryKeyValueStore
from .rule import RULE_CATEGORIES, Rule, RuleCategory

__all__ = [
    "Settings",
    "configure_logging",
    "get_settings",
    "SQLiteKeyValueStore",
    "get_store",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RULE_CATEGORIES",
    "Rule",
    "RuleCategory",
]
