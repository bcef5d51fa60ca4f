"""
In-process cache tier.

A thin wrapper over :class:`cachetools.TTLCache`, one map per lookup kind.
Entries expire a fixed time after their last write. Nothing is persisted:
the durable tier is the source of truth across restarts.
"""

import math
import threading
from datetime import datetime, timedelta
from typing import Any, Optional

from cachetools import TTLCache

from mojangcache.core.logging import get_logger
from mojangcache.core.models import CacheEntry, Clock, LookupKind, utc_now

logger = get_logger(__name__)


class FastTier:
    """Time-expiring in-memory cache, read-through in front of the durable tier."""

    DEFAULT_TTL = timedelta(hours=6)

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        maxsize: Optional[int] = None,
        clock: Clock = utc_now,
    ):
        """Initialize the fast tier.

        Args:
            ttl: Time-to-live measured from the last write.
            maxsize: Optional entry cap per kind. Unbounded by default;
                TTL turnover keeps the maps small.
            clock: Source of "now" used as the expiry timer.
        """
        self.ttl = ttl
        self.maxsize = maxsize
        self.clock = clock
        self._locks = {kind: threading.Lock() for kind in LookupKind}
        self._maps = {kind: self._new_map() for kind in LookupKind}

    def _new_map(self) -> TTLCache:
        return TTLCache(
            maxsize=self.maxsize if self.maxsize is not None else math.inf,
            ttl=self.ttl.total_seconds(),
            timer=self._timer,
        )

    def _timer(self) -> float:
        return self.clock().timestamp()

    def get(self, kind: LookupKind, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` or None."""
        with self._locks[kind]:
            return self._maps[kind].get(key)

    def put(self, kind: LookupKind, key: str, value: Any, created_at: datetime) -> CacheEntry:
        """Store an entry, restarting its TTL.

        Returns:
            The stored entry.
        """
        entry = CacheEntry(key=key, value=value, created_at=created_at)
        with self._locks[kind]:
            self._maps[kind][key] = entry
        return entry

    def invalidate(self, kind: LookupKind, key: str) -> bool:
        """Drop one entry. Returns True if it was present."""
        with self._locks[kind]:
            return self._maps[kind].pop(key, None) is not None

    def size(self, kind: LookupKind) -> int:
        """Return the number of live entries for ``kind``."""
        with self._locks[kind]:
            cache = self._maps[kind]
            cache.expire()
            return len(cache)

    def close(self) -> None:
        """Discard all entries."""
        for kind in LookupKind:
            with self._locks[kind]:
                self._maps[kind].clear()
        logger.info("fast_tier_closed")
