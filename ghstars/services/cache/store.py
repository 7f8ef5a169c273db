"""
In-memory star cache keyed by "owner/repo".

Entries are only created or overwritten by a successful GitHub lookup and are
never evicted individually: an entry past the expiry window is stale but stays
available as a fallback when GitHub cannot be reached. The whole map is
persisted as part of the state blob (see ghstars.services.state).
"""

import logging
import math
import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


def current_time_ms() -> int:
    """Wall clock time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry:
    """Star count observed for one repository."""

    stars: int
    observed_at: int  # epoch ms

    def is_fresh(self, now: int, window_ms: int) -> bool:
        """True while the entry is younger than the expiry window."""
        return now - self.observed_at < window_ms

    def to_blob(self) -> dict[str, int]:
        return {"stars": self.stars, "timestamp": self.observed_at}


def _parse_entry(value: Any) -> CacheEntry | None:
    if not isinstance(value, Mapping):
        return None
    stars = value.get("stars")
    timestamp = value.get("timestamp")
    for number in (stars, timestamp):
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            return None
        if isinstance(number, float) and not math.isfinite(number):
            return None
    if stars < 0 or stars != int(stars):
        return None
    return CacheEntry(stars=int(stars), observed_at=int(timestamp))


class StarCache:
    """Mapping of cache key to CacheEntry."""

    def __init__(self, entries: Mapping[str, CacheEntry] | None = None) -> None:
        self._entries: dict[str, CacheEntry] = dict(entries or {})

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def get_fresh(self, key: str, now: int, window_ms: int) -> CacheEntry | None:
        """Return the entry for key only if it is still within the expiry window."""
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(now, window_ms):
            return entry
        return None

    def put(self, key: str, stars: int, observed_at: int) -> CacheEntry:
        entry = CacheEntry(stars=stars, observed_at=observed_at)
        self._entries[key] = entry
        return entry

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def count_fresh(self, now: int, window_ms: int) -> int:
        return sum(1 for entry in self._entries.values() if entry.is_fresh(now, window_ms))

    def to_blob(self) -> dict[str, dict[str, int]]:
        return {key: entry.to_blob() for key, entry in self._entries.items()}

    @classmethod
    def from_blob(cls, data: Any) -> "StarCache":
        """
        Build a cache from the persisted "cache" mapping.

        Entries that are not {"stars": number, "timestamp": number} are skipped.
        """
        if not isinstance(data, Mapping):
            if data is not None:
                logger.warning(f"Ignoring persisted cache of type {type(data).__name__}")
            return cls()

        entries: dict[str, CacheEntry] = {}
        for key, value in data.items():
            entry = _parse_entry(value)
            if entry is None:
                logger.warning(f"Skipping malformed cache entry for {key!r}")
                continue
            entries[str(key)] = entry
        return cls(entries)
