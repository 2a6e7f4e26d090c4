"""Indexed lookup and retrieval over the Magic: The Gathering Comprehensive Rules."""

__version__ = "0.1.0"
