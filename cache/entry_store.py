"""
Keyed entry store with per-entry metadata.

Each tier of the cache manager is one of these. Entries keep insertion
order, so "oldest" always means least recently inserted (or re-inserted).
"""

import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class CacheEntry:
    """Single stored value plus access metadata."""
    value: Any
    created_at: float
    last_accessed: float
    access_count: int = 0

    def touched(self, now: float) -> "CacheEntry":
        """Copy of this entry with one more recorded access."""
        return replace(self, last_accessed=now, access_count=self.access_count + 1)


class EntryStore:
    """
    Insertion-ordered key/value store that tracks access metadata.

    Entries are immutable; every metadata change stores a new CacheEntry,
    so values handed to another store never share mutable state.
    """

    def __init__(self, name: str = 'default', clock: Callable[[], float] = time.time):
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._name = name
        self._clock = clock
        self._created_at = clock()
        self._last_updated = self._created_at

    @property
    def name(self) -> str:
        return self._name

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, key: str, value: Any) -> bool:
        """Add a new entry. Raises KeyError if the key is already present."""
        if key in self._entries:
            raise KeyError(f"Key {key} already exists in cache {self._name}")

        now = self._clock()
        self._entries[key] = CacheEntry(value=value, created_at=now, last_accessed=now)
        self._last_updated = now
        return True

    def get(self, key: str) -> Optional[Any]:
        """
        Return the value for key, recording the access. None if missing.

        A stored None is indistinguishable from a missing key here; use
        has() or peek() when None is a valid value.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        self._entries[key] = entry.touched(self._clock())
        return entry.value

    def peek(self, key: str) -> Optional[CacheEntry]:
        """Return the raw entry without recording an access."""
        return self._entries.get(key)

    def update(self, key: str, value: Any) -> bool:
        """Replace the value of an existing entry, keeping its access count."""
        entry = self._entries.get(key)
        if entry is None:
            raise KeyError(f"Key {key} does not exist in cache {self._name}")

        now = self._clock()
        self._entries[key] = replace(entry, value=value, last_accessed=now)
        self._last_updated = now
        return True

    def delete(self, key: str) -> bool:
        """Delete key if exists."""
        if key not in self._entries:
            return False

        del self._entries[key]
        self._last_updated = self._clock()
        return True

    def pop(self, key: str) -> Optional[CacheEntry]:
        """Remove and return the entry for key, or None."""
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._last_updated = self._clock()
        return entry

    def push(self, key: str, entry: CacheEntry) -> None:
        """Store an entry at the newest position, replacing any existing one."""
        self._entries.pop(key, None)
        self._entries[key] = entry
        self._last_updated = self._clock()

    def clear(self) -> bool:
        """Clear all entries."""
        self._entries.clear()
        self._last_updated = self._clock()
        return True

    # =========================================================================
    # Batched deletion
    # =========================================================================

    def mass_delete(self, start: int, end: Optional[int] = None) -> int:
        """
        Delete several entries at once, ordered oldest first.

        Args:
            start: With end, 1-based first position of the range. Without end,
                   a count: positive deletes the oldest N, negative the newest N.
            end: 1-based last position of the range (inclusive).

        Returns:
            Number of entries deleted.
        """
        keys = list(self._entries.keys())
        if not keys:
            return 0

        if end is not None:
            if start < 1 or end > len(keys) or start > end:
                raise ValueError(f"Invalid range: {start} to {end}")
            doomed = keys[start - 1:end]
        else:
            count = abs(start)
            if count > len(keys):
                raise ValueError(f"Count {count} exceeds cache size {len(keys)}")
            if count == 0:
                return 0
            doomed = keys[:count] if start > 0 else keys[-count:]

        for key in doomed:
            del self._entries[key]

        self._last_updated = self._clock()
        return len(doomed)

    def trim_oldest(self, keep: int) -> int:
        """Drop the oldest entries so at most `keep` remain. Returns count dropped."""
        excess = len(self._entries) - max(keep, 0)
        if excess <= 0:
            return 0
        return self.mass_delete(excess)

    # =========================================================================
    # Queries
    # =========================================================================

    def size(self) -> int:
        return len(self._entries)

    def has(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get_metadata(self, key: str) -> Optional[Dict[str, Any]]:
        """Metadata for a single entry, or None if missing."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return {
            'created_at': entry.created_at,
            'last_accessed': entry.last_accessed,
            'access_count': entry.access_count,
        }

    def keys(self) -> List[str]:
        """All keys, oldest first."""
        return list(self._entries.keys())

    def stats(self) -> dict:
        """Get store statistics."""
        return {
            'name': self._name,
            'size': len(self._entries),
            'created_at': self._created_at,
            'last_updated': self._last_updated,
        }
