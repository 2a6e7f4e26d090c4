#!/usr/bin/env python3
"""CLI for querying the rules store."""

import argparse

from mtgrules.core import configure_logging, get_settings, get_store
from mtgrules.rag import print_search_results
from mtgrules.search import ALL_RULE_TYPES, COMPLEXITY_LEVELS, RulesSearchEngine, SearchFilters


def main():
    """Run searches and show dataset information."""
    parser = argparse.ArgumentParser(description="Search the MTG Comprehensive Rules")
    parser.add_argument("--query", "-q", type=str, help="Query to search for")
    parser.add_argument("--category", "-c", type=str, help="Restrict to a category, e.g. \"Zones\"")
    parser.add_argument("--subcategory", "-s", type=str, help="Restrict to a subcategory, e.g. \"Stack\"")
    parser.add_argument("--rule-type", choices=ALL_RULE_TYPES, help="Only rules of this type")
    parser.add_argument("--keyword", "-k", action="append", default=[], help="Only rules with this keyword (repeatable)")
    parser.add_argument("--complexity", choices=COMPLEXITY_LEVELS, help="Only rules of this complexity")
    parser.add_argument("--random", action="store_true", help="Show a random rule")
    parser.add_argument("--uniform", action="store_true", help="With --random, sample all rules evenly")
    parser.add_argument("--stats", action="store_true", help="Show dataset statistics")
    parser.add_argument("--keywords", action="store_true", help="List all known keywords")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show rule type, complexity and keywords")

    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)

    engine = RulesSearchEngine(get_store(settings))

    if args.stats:
        stats = engine.get_rules_stats()
        print("Rules store stats:")
        for key, value in stats.as_dict().items():
            print(f"  {key}: {value}")

    if args.keywords:
        print(", ".join(engine.get_all_keywords()))

    if args.random:
        rule = engine.get_random_rule(uniform=args.uniform)
        if rule is None:
            print("No rules loaded. Run: python -m cli.ingest")
        else:
            print_search_results([rule], verbose=args.verbose, preview_length=len(rule.content))

    filters = SearchFilters(
        category=args.category,
        subcategory=args.subcategory,
        rule_type=args.rule_type,
        keywords={k.lower() for k in args.keyword},
        complexity=args.complexity,
    )

    if args.query is not None:
        print(f"Query: {args.query}")
        print_search_results(engine.search(args.query, filters), verbose=args.verbose)
    elif args.category and not args.subcategory and not filters.has_post_filters():
        print(f"Category: {args.category}")
        print_search_results(engine.get_rules_by_category(args.category), verbose=args.verbose)
    elif args.category or args.subcategory or filters.has_post_filters():
        print_search_results(engine.search("", filters), verbose=args.verbose)
    elif not (args.stats or args.keywords or args.random):
        stats = engine.get_rules_stats()
        print(f"{stats.total_rules} rules loaded")
        print("\nExample queries:")
        print('  python -m cli.search -q "state-based actions"')
        print('  python -m cli.search -q "stack" --category Zones')
        print('  python -m cli.search --random')


if __name__ == "__main__":
    main()
