"""In-process TTL cache for category results."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Dict, Optional

from .config import CACHE_TTL
from .models import CacheEntry, CategoryResult

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SectionCache:
    """Per-category cache whose entries expire ``ttl`` after being stored.

    Entries are replaced lazily on the next miss and never purged. Concurrent
    misses for the same key share a single in-flight fetch; a failed fetch is
    not cached.
    """

    def __init__(self, ttl: timedelta = CACHE_TTL, clock: Clock = utcnow) -> None:
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._in_flight: Dict[str, "asyncio.Future[CategoryResult]"] = {}

    def get(self, key: str) -> Optional[CategoryResult]:
        entry = self._entries.get(key)
        if entry is None or entry.expires_at <= self.clock():
            return None
        return entry.data

    def put(self, key: str, data: CategoryResult) -> CacheEntry:
        entry = CacheEntry(data=data, expires_at=self.clock() + self.ttl)
        self._entries[key] = entry
        logger.debug("Cached category '%s' until %s", key, entry.expires_at)
        return entry

    async def get_or_fetch(
        self, key: str, fetch: Callable[[], Awaitable[CategoryResult]]
    ) -> CategoryResult:
        """Return live cached data for ``key`` or run ``fetch`` to refresh it."""
        cached = self.get(key)
        if cached is not None:
            logger.debug("Cache hit for category '%s'", key)
            return cached

        pending = self._in_flight.get(key)
        if pending is None:
            logger.debug("Cache miss for category '%s'", key)
            pending = asyncio.ensure_future(self._load(key, fetch))
            self._in_flight[key] = pending
        else:
            logger.debug("Joining in-flight fetch for category '%s'", key)
        return await asyncio.shield(pending)

    async def _load(
        self, key: str, fetch: Callable[[], Awaitable[CategoryResult]]
    ) -> CategoryResult:
        try:
            data = await fetch()
            self.put(key, data)
            return data
        finally:
            self._in_flight.pop(key, None)
