"""Helpers for presenting rules to a question-answering layer."""

from .context import Colors, format_context, print_search_results

__all__ = [
    "Colors",
    "format_context",
    "print_search_results",
]
