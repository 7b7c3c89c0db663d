from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=1)


def normalize_path(path: str) -> str:
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


@dataclass(frozen=True)
class CacheEntry:
    path: str
    data: Any
    stored_at: float

    def age_minutes(self, now: float) -> int:
        return int((now - self.stored_at) // 60)

    def to_dict(self, now: float, max_age: timedelta) -> dict:
        return {
            "cached": True,
            "projectPath": self.path,
            "cachedAt": datetime.fromtimestamp(self.stored_at, tz=timezone.utc).isoformat(),
            "ageMinutes": self.age_minutes(now),
            "isStale": now - self.stored_at > max_age.total_seconds(),
            "data": self.data,
        }


class AnalysisCache:
    """In-memory project analysis results keyed by normalized absolute path."""

    def __init__(self, max_age: timedelta = DEFAULT_MAX_AGE, clock: Callable[[], float] = time.time) -> None:
        self.max_age = max_age
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def store(self, path: str, data: Any) -> None:
        """Cache ``data`` for ``path``, dropping entries older than ``max_age``."""
        self.evict_stale()
        key = normalize_path(path)
        self._entries[key] = CacheEntry(key, data, self._clock())
        logger.debug("Cached analysis for %s", key)

    def get(self, path: str) -> CacheEntry | None:
        return self._entries.get(normalize_path(path))

    def is_stale(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.stored_at > self.max_age.total_seconds()

    def describe(self, path: str) -> dict:
        entry = self.get(path)
        if entry is None:
            return {
                "cached": False,
                "message": f"No cached analysis found for: {normalize_path(path)}",
                "hint": "Run analyze-maven-project tool first",
            }
        return entry.to_dict(self._clock(), self.max_age)

    def invalidate(self, path: str) -> bool:
        return self._entries.pop(normalize_path(path), None) is not None

    def evict_stale(self) -> int:
        stale = [k for k, e in self._entries.items() if self.is_stale(e)]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.debug("Evicted %d stale cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
