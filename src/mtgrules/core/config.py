"""Environment-driven settings for the rules store and document fetch."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Default paths relative to project root
DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "rules.db"

# Official Comprehensive Rules text, newest first
DEFAULT_RULES_URLS = (
    "https://media.wizards.com/2025/downloads/MagicCompRules%2020250404.txt",
    "https://media.wizards.com/2024/downloads/MagicCompRules%2020241206.txt",
    "https://media.wizards.com/2024/downloads/MagicCompRules%2020241101.txt",
)

DEFAULT_FETCH_TIMEOUT = 30.0

STORE_BACKENDS = ("sqlite", "memory")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_urls(value: str | None) -> tuple[str, ...]:
    if not value:
        return DEFAULT_RULES_URLS
    urls = tuple(url.strip() for url in value.split(",") if url.strip())
    return urls or DEFAULT_RULES_URLS


@dataclass
class Settings:
    """Runtime configuration, usually built from the environment."""

    store_backend: str = "sqlite"
    db_path: Path = DEFAULT_DB_PATH
    rules_urls: tuple[str, ...] = field(default_factory=lambda: DEFAULT_RULES_URLS)
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from MTG_RULES_* environment variables.

        Raises:
            ValueError: If MTG_RULES_STORE names an unknown backend or the
                timeout is not a number
        """
        backend = os.environ.get("MTG_RULES_STORE", "sqlite").strip().lower()
        if backend not in STORE_BACKENDS:
            raise ValueError(f"Unknown store backend: {backend}. Available: {list(STORE_BACKENDS)}")

        db_path = os.environ.get("MTG_RULES_DB_PATH")
        return cls(
            store_backend=backend,
            db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
            rules_urls=_parse_urls(os.environ.get("MTG_RULES_URLS")),
            fetch_timeout=float(os.environ.get("MTG_RULES_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT)),
            log_level=os.environ.get("MTG_RULES_LOG_LEVEL", "INFO").upper(),
        )


def get_settings() -> Settings:
    """Return settings for the current environment."""
    return Settings.from_env()


def configure_logging(level: str | int = "INFO") -> None:
    """Configure root logging for CLI and server entry points."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
