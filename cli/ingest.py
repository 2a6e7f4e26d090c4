#!/usr/bin/env python3
"""CLI for loading the Comprehensive Rules into the store."""

import argparse
import sys
from pathlib import Path

from mtgrules.core import configure_logging, get_settings, get_store
from mtgrules.extraction import parse_rules_document, validate_rules
from mtgrules.rag import Colors
from mtgrules.search import build_index


def main():
    """Fetch or read the rules document and index it."""
    parser = argparse.ArgumentParser(description="Load the MTG Comprehensive Rules into the rules store")
    parser.add_argument("--file", "-f", type=Path, help="Read the rules text from a local file instead of fetching")
    parser.add_argument("--url", action="append", dest="urls", help="Mirror URL to try (repeatable; default: configured URLs)")
    parser.add_argument("--fallback", action="store_true", help="Store only the built-in fallback rules")
    parser.add_argument("--force", action="store_true", help="Re-ingest even if rules are already loaded")
    parser.add_argument("--validate", action="store_true", help="Parse the --file document and report anomalies without storing")
    parser.add_argument("--timeout", type=float, help="Fetch timeout in seconds")

    args = parser.parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)

    text = None
    if args.file:
        if not args.file.exists():
            print(f"{Colors.RED}File not found: {args.file}{Colors.RESET}", file=sys.stderr)
            sys.exit(1)
        text = args.file.read_text(encoding="utf-8", errors="replace")

    if args.validate:
        if text is None:
            print(f"{Colors.RED}--validate requires --file{Colors.RESET}", file=sys.stderr)
            sys.exit(1)
        rules = parse_rules_document(text)
        anomalies = validate_rules(rules)
        print(f"Parsed {len(rules)} rules")
        if anomalies:
            print(f"{Colors.RED}{len(anomalies)} anomalies:{Colors.RESET}")
            for anomaly in anomalies:
                print(f"  - {anomaly}")
        else:
            print(f"{Colors.GREEN}No anomalies found{Colors.RESET}")
        return

    store = get_store(settings)
    result = build_index(
        store,
        urls=args.urls,
        text=text,
        force=args.force,
        fallback_only=args.fallback,
        timeout=args.timeout,
    )

    color = Colors.RED if result.used_fallback else Colors.GREEN
    print(f"{color}{result.message}{Colors.RESET}")
    if result.source_url:
        print(f"  Source: {result.source_url}")
    if result.last_error:
        print(f"  Last error: {result.last_error}")
    if result.anomalies:
        print(f"  {len(result.anomalies)} parser anomalies (see log)")


if __name__ == "__main__":
    main()
