"""Session-scoped TTL cache for merged article lists."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .models import Article

logger = logging.getLogger(__name__)

DEFAULT_TTL = 5 * 60  # seconds


@dataclass(frozen=True)
class CacheEntry:
    """Unfiltered, sorted articles for one cache key."""
    data: tuple[Article, ...]
    timestamp: float
    degraded: bool = False


class ArticleCache:
    """
    Merged article lists keyed by category, source set and languages.

    An entry is served only while ``now - timestamp < ttl``. Stale entries
    are not purged; they are overwritten by the next ``put`` for the key.
    The cache lives as long as its session.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            logger.debug(f"Cache expired: {key}")
            return None
        logger.debug(f"Cache hit: {key}")
        return entry

    def put(self, key: str, data: Iterable[Article], degraded: bool = False) -> CacheEntry:
        entry = CacheEntry(data=tuple(data), timestamp=self._clock(), degraded=degraded)
        self._entries[key] = entry
        return entry

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop one key, or everything when key is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
