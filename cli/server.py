#!/usr/bin/env python3
"""CLI for running the MTG rules lookup API server.

Store options are passed to the app through MTG_RULES_* environment
variables, so reload and worker processes pick them up too.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from mtgrules.core import configure_logging, get_settings, get_store
from mtgrules.rag import Colors
from mtgrules.search import build_index

logger = logging.getLogger(__name__)

APP_PATH = "mtgrules.web.app:app"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the MTG rules lookup API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("-p", "--port", type=int, default=8000, help="Port to bind to (default: 8000)")
    parser.add_argument("--store", choices=["sqlite", "memory"], help="Store backend (default: MTG_RULES_STORE or sqlite)")
    parser.add_argument("--db", type=Path, help="SQLite database file (default: MTG_RULES_DB_PATH)")
    parser.add_argument("--preload", action="store_true", help="Load the rules into the store before serving")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (single process)")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes (default: 1)")
    return parser


def apply_store_options(args: argparse.Namespace) -> None:
    """Export --store and --db so every server process uses the same store."""
    if args.store:
        os.environ["MTG_RULES_STORE"] = args.store
    if args.db:
        os.environ["MTG_RULES_DB_PATH"] = str(args.db)


def check_options(args: argparse.Namespace, backend: str) -> str | None:
    """Return an error message for option combinations that cannot work."""
    if backend != "memory":
        return None
    if args.preload:
        return "--preload needs a persistent store; the in-memory store is private to each server process"
    if args.workers > 1 and not args.reload:
        return "The in-memory store is private to each worker; use --store sqlite with --workers"
    return None


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    apply_store_options(args)
    settings = get_settings()
    configure_logging(settings.log_level)

    error = check_options(args, settings.store_backend)
    if error:
        print(f"{Colors.RED}{error}{Colors.RESET}", file=sys.stderr)
        sys.exit(2)

    if args.preload:
        result = build_index(get_store(settings))
        logger.info(f"Preload: {result.message}")

    workers = 1 if args.reload else args.workers
    logger.info(f"Serving on http://{args.host}:{args.port} ({settings.store_backend} store, {workers} worker(s))")
    try:
        import uvicorn
        uvicorn.run(APP_PATH, host=args.host, port=args.port, reload=args.reload, workers=workers)
    except KeyboardInterrupt:
        print("\nServer stopped", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
