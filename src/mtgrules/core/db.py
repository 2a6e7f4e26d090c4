"""SQLite-backed key-value store for the rules index."""

import sqlite3
from pathlib import Path
from typing import Iterable

from .config import Settings, get_settings
from .kvstore import KeyValueStore, MemoryKeyValueStore

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_hash (
    key TEXT NOT NULL,
    field TEXT NOT NULL,
    value TEXT NOT NULL,
    PRIMARY KEY (key, field)
);
CREATE TABLE IF NOT EXISTS kv_set (
    key TEXT NOT NULL,
    member TEXT NOT NULL,
    PRIMARY KEY (key, member)
);
CREATE TABLE IF NOT EXISTS kv_scalar (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

# SQLite caps the number of host parameters per statement
_DELETE_BATCH = 500


class SQLiteKeyValueStore:
    """Persistent key-value store on a single SQLite file.

    Each operation opens its own connection, so one instance can be shared
    across threads.
    """

    def __init__(self, db_path: str | Path):
        """Initialize the store, creating the database file and tables.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        """Create a database connection with proper text handling."""
        conn = sqlite3.connect(self.db_path)
        conn.text_factory = lambda b: b.decode("utf-8", errors="replace")
        return conn

    def get_hash(self, key: str) -> dict[str, str]:
        conn = self._connect()
        try:
            cursor = conn.execute("SELECT field, value FROM kv_hash WHERE key = ?", (key,))
            return {row[0]: row[1] for row in cursor.fetchall()}
        finally:
            conn.close()

    def set_hash(self, key: str, mapping: dict[str, str]) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO kv_hash (key, field, value) VALUES (?, ?, ?)",
                    [(key, k, str(v)) for k, v in mapping.items()],
                )
        finally:
            conn.close()

    def add_to_set(self, key: str, *members: str) -> None:
        if not members:
            return
        conn = self._connect()
        try:
            with conn:
                conn.executemany(
                    "INSERT OR IGNORE INTO kv_set (key, member) VALUES (?, ?)",
                    [(key, m) for m in members],
                )
        finally:
            conn.close()

    def get_set(self, key: str) -> set[str]:
        conn = self._connect()
        try:
            cursor = conn.execute("SELECT member FROM kv_set WHERE key = ?", (key,))
            return {row[0] for row in cursor.fetchall()}
        finally:
            conn.close()

    def delete_keys(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not keys:
            return 0
        removed: set[str] = set()
        conn = self._connect()
        try:
            with conn:
                for i in range(0, len(keys), _DELETE_BATCH):
                    batch = keys[i:i + _DELETE_BATCH]
                    placeholders = ",".join("?" * len(batch))
                    for table in ("kv_hash", "kv_set", "kv_scalar"):
                        cursor = conn.execute(
                            f"SELECT DISTINCT key FROM {table} WHERE key IN ({placeholders})", batch
                        )
                        removed.update(row[0] for row in cursor.fetchall())
                        conn.execute(f"DELETE FROM {table} WHERE key IN ({placeholders})", batch)
            return len(removed)
        finally:
            conn.close()

    def get_scalar(self, key: str) -> str | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM kv_scalar WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def set_scalar(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "INSERT OR REPLACE INTO kv_scalar (key, value) VALUES (?, ?)", (key, str(value))
                )
        finally:
            conn.close()

    def keys(self, pattern: str = "*") -> list[str]:
        conn = self._connect()
        try:
            cursor = conn.execute(
                """SELECT key FROM kv_hash WHERE key GLOB :p
                   UNION SELECT key FROM kv_set WHERE key GLOB :p
                   UNION SELECT key FROM kv_scalar WHERE key GLOB :p
                   ORDER BY key""",
                {"p": pattern},
            )
            return [row[0] for row in cursor.fetchall()]
        finally:
            conn.close()

    def write_many(self, hashes: dict[str, dict[str, str]], sets: dict[str, Iterable[str]]) -> None:
        """Write many hashes and set members in one transaction.

        Args:
            hashes: Hash key -> fields to set
            sets: Set key -> members to add
        """
        hash_rows = [(key, k, str(v)) for key, mapping in hashes.items() for k, v in mapping.items()]
        set_rows = [(key, m) for key, members in sets.items() for m in members]
        if not hash_rows and not set_rows:
            return
        conn = self._connect()
        try:
            with conn:
                conn.executemany(
                    "INSERT OR REPLACE INTO kv_hash (key, field, value) VALUES (?, ?, ?)", hash_rows
                )
                conn.executemany("INSERT OR IGNORE INTO kv_set (key, member) VALUES (?, ?)", set_rows)
        finally:
            conn.close()

    def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        conn = self._connect()
        try:
            with conn:
                if expected is None:
                    cursor = conn.execute(
                        "INSERT OR IGNORE INTO kv_scalar (key, value) VALUES (?, ?)", (key, str(value))
                    )
                else:
                    cursor = conn.execute(
                        "UPDATE kv_scalar SET value = ? WHERE key = ? AND value = ?",
                        (str(value), key, expected),
                    )
                return cursor.rowcount == 1
        finally:
            conn.close()

    def stats(self) -> dict:
        """Get row counts per table.

        Returns:
            Dictionary with counts for hashes, set_members and scalars
        """
        conn = self._connect()
        try:
            hashes = conn.execute("SELECT COUNT(DISTINCT key) FROM kv_hash").fetchone()[0]
            set_members = conn.execute("SELECT COUNT(*) FROM kv_set").fetchone()[0]
            scalars = conn.execute("SELECT COUNT(*) FROM kv_scalar").fetchone()[0]
            return {"hashes": hashes, "set_members": set_members, "scalars": scalars}
        finally:
            conn.close()


def get_store(settings: Settings | None = None) -> KeyValueStore:
    """Build the configured key-value store.

    Args:
        settings: Settings to use; read from the environment when omitted

    Returns:
        A SQLite or in-memory store
    """
    settings = settings or get_settings()
    if settings.store_backend == "memory":
        return MemoryKeyValueStore()
    return SQLiteKeyValueStore(settings.db_path)
