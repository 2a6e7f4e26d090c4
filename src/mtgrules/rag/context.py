"""Render search results as prompt context and terminal listings."""

import sys

from mtgrules.core.rule import Rule
from mtgrules.search.filters import complexity_for, rule_type_for


class Colors:
    CYAN = "\033[36m"      # Queries, context headers
    YELLOW = "\033[33m"    # Rule numbers
    DIM = "\033[2m"        # Categories, facets
    RED = "\033[31m"       # Warnings
    GREEN = "\033[32m"     # Success messages
    RESET = "\033[0m"      # Reset to default


def format_context(rules: list[Rule], max_rules: int = 5) -> str:
    """Format rules as context for a prompt.

    Args:
        rules: Rules from a search
        max_rules: Maximum number of rules to include

    Returns:
        Formatted context string
    """
    blocks = []
    for rule in rules[:max_rules]:
        blocks.append(f"### Rule {rule.number} ({rule.category} › {rule.title})\n\n{rule.content}")

    return "\n\n---\n\n".join(blocks)


def print_search_results(rules: list[Rule], verbose: bool = False, preview_length: int = 200) -> None:
    """Print search results to stderr.

    With verbose set, each rule also shows its rule type, complexity and
    keywords.
    """
    print(f"  {Colors.DIM}Found {len(rules)} rules:{Colors.RESET}", file=sys.stderr)

    for rule in rules:
        print(f"    {Colors.YELLOW}- {rule.number}{Colors.RESET} "
              f"{Colors.DIM}({rule.category} › {rule.title}){Colors.RESET}", file=sys.stderr)

        if verbose:
            facets = f"{rule_type_for(rule.number)}, {complexity_for(rule.content)}"
            if rule.keywords:
                facets += f"; keywords: {', '.join(sorted(rule.keywords))}"
            print(f"        {Colors.DIM}{facets}{Colors.RESET}", file=sys.stderr)

        content = rule.content
        if len(content) > preview_length:
            content = content[:preview_length] + "..."
        print(f"      {content}", file=sys.stderr)
