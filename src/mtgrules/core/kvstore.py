"""Key-value storage interface and the in-memory backend."""

import fnmatch
import threading
from typing import Iterable, Protocol


class KeyValueStore(Protocol):
    """Capabilities the rules index needs from a key-value store.

    Hashes, sets and scalars live in separate keyspaces only by convention;
    callers never reuse a key across types.
    """

    def get_hash(self, key: str) -> dict[str, str]:
        """Return all fields of a hash, or an empty dict if missing."""
        ...

    def set_hash(self, key: str, mapping: dict[str, str]) -> None:
        """Set fields on a hash, creating it if needed."""
        ...

    def add_to_set(self, key: str, *members: str) -> None:
        """Add members to a set, creating it if needed."""
        ...

    def get_set(self, key: str) -> set[str]:
        """Return the members of a set, or an empty set if missing."""
        ...

    def delete_keys(self, keys: Iterable[str]) -> int:
        """Delete keys of any type. Returns the number of keys removed."""
        ...

    def get_scalar(self, key: str) -> str | None:
        """Return a scalar value or None."""
        ...

    def set_scalar(self, key: str, value: str) -> None:
        """Set a scalar value."""
        ...

    def keys(self, pattern: str = "*") -> list[str]:
        """Return all keys matching a glob pattern."""
        ...

    def write_many(self, hashes: dict[str, dict[str, str]], sets: dict[str, Iterable[str]]) -> None:
        """Set hash fields and add set members in a single atomic write."""
        ...

    def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        """Set a scalar only if its current value equals expected.

        expected=None means the key must not exist yet. Returns whether the
        value was written.
        """
        ...


class MemoryKeyValueStore:
    """Dict-backed store for tests and single-process use."""

    def __init__(self):
        self._hashes: dict[str, dict[str, str]] = {}
        self._sets: dict[str, set[str]] = {}
        self._scalars: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_hash(self, key: str) -> dict[str, str]:
        with self._lock:
            return dict(self._hashes.get(key, {}))

    def set_hash(self, key: str, mapping: dict[str, str]) -> None:
        with self._lock:
            self._hashes.setdefault(key, {}).update({k: str(v) for k, v in mapping.items()})

    def add_to_set(self, key: str, *members: str) -> None:
        if not members:
            return
        with self._lock:
            self._sets.setdefault(key, set()).update(members)

    def get_set(self, key: str) -> set[str]:
        with self._lock:
            return set(self._sets.get(key, set()))

    def delete_keys(self, keys: Iterable[str]) -> int:
        removed = 0
        with self._lock:
            for key in keys:
                found = False
                for space in (self._hashes, self._sets, self._scalars):
                    if key in space:
                        del space[key]
                        found = True
                removed += found
        return removed

    def get_scalar(self, key: str) -> str | None:
        with self._lock:
            return self._scalars.get(key)

    def set_scalar(self, key: str, value: str) -> None:
        with self._lock:
            self._scalars[key] = str(value)

    def keys(self, pattern: str = "*") -> list[str]:
        with self._lock:
            all_keys = set(self._hashes) | set(self._sets) | set(self._scalars)
        return sorted(k for k in all_keys if fnmatch.fnmatchcase(k, pattern))

    def write_many(self, hashes: dict[str, dict[str, str]], sets: dict[str, Iterable[str]]) -> None:
        hash_updates = {key: {k: str(v) for k, v in mapping.items()} for key, mapping in hashes.items()}
        set_updates = {key: set(members) for key, members in sets.items()}
        with self._lock:
            for key, mapping in hash_updates.items():
                self._hashes.setdefault(key, {}).update(mapping)
            for key, members in set_updates.items():
                if members:
                    self._sets.setdefault(key, set()).update(members)

    def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        with self._lock:
            if self._scalars.get(key) != expected:
                return False
            self._scalars[key] = str(value)
            return True
