"""
Fetch orchestration for cached lookups.

For each request the orchestrator walks the tiers in order:

    fast tier -> durable tier -> upstream -> resolved | failed

and writes definitive upstream answers (a value or a confirmed absence)
back through both tiers. It never raises out of :meth:`resolve`; callers
always get a :class:`Resolved` or a :class:`Failed`.
"""

import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from mojangcache.cache.memory import FastTier
from mojangcache.cache.sqlite import DurableStore
from mojangcache.core.exceptions import StorageUnavailableError
from mojangcache.core.logging import get_logger
from mojangcache.core.models import (
    CacheEntry,
    Clock,
    Failed,
    FailureReason,
    LookupKind,
    LookupMetrics,
    LookupResult,
    OutcomeKind,
    Provenance,
    Resolved,
    UpstreamOutcome,
    utc_now,
)

logger = get_logger(__name__)

FetchCapability = Callable[[str], Awaitable[UpstreamOutcome]]


class FetchOrchestrator:
    """Resolve lookups against the cache tiers and the upstream service.

    Concurrent misses for the same key share one upstream fetch. That
    fetch runs in its own task: if a waiting request is cancelled, the
    fetch still completes and populates the cache.
    """

    DEFAULT_UPSTREAM_TIMEOUT = 10.0
    DEFAULT_STORAGE_TIMEOUT = 5.0

    def __init__(
        self,
        fast: FastTier,
        store: Optional[DurableStore],
        fetchers: dict[LookupKind, FetchCapability],
        clock: Clock = utc_now,
        upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT,
        storage_timeout: float = DEFAULT_STORAGE_TIMEOUT,
        metrics: Optional[LookupMetrics] = None,
    ):
        """Initialize the orchestrator.

        Args:
            fast: In-process tier.
            store: Durable tier, or None to run memory-only.
            fetchers: Upstream fetch capability per lookup kind.
            clock: Source of "now" for newly established entries.
            upstream_timeout: Bound on a single upstream fetch in seconds.
            storage_timeout: Bound on a single durable read or write in seconds.
            metrics: Counters to update. A fresh set is created if omitted.
        """
        self.fast = fast
        self.store = store
        self.fetchers = fetchers
        self.clock = clock
        self.upstream_timeout = upstream_timeout
        self.storage_timeout = storage_timeout
        self.metrics = metrics if metrics is not None else LookupMetrics()
        self._inflight: dict[tuple[LookupKind, str], asyncio.Task] = {}

    async def resolve(self, kind: LookupKind, key: str) -> LookupResult:
        """Resolve ``key`` for ``kind``.

        Args:
            kind: Lookup kind.
            key: Validated cache key (player name or dashed UUID).

        Returns:
            Resolved with the value (None for a confirmed negative), its
            provenance and when it was established; or Failed with a reason.
        """
        counters = self.metrics[kind]
        counters.requests += 1

        try:
            entry = self.fast.get(kind, key)
            if entry is not None:
                counters.fast_hits += 1
                return _from_cache(entry)

            entry = await self._read_durable(kind, key)
            if entry is not None:
                counters.durable_hits += 1
                self.fast.put(kind, key, entry.value, entry.created_at)
                return _from_cache(entry)

            counters.misses += 1
            return await self._fetch_shared(kind, key)

        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("lookup_failed", kind=str(kind), key=key, error=str(e), exc_info=True)
            return Failed(FailureReason.INTERNAL_ERROR, details=str(e))

    async def _read_durable(self, kind: LookupKind, key: str) -> Optional[CacheEntry]:
        """Read from the durable tier, treating any storage failure as a miss."""
        if self.store is None:
            return None

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.store.get, kind, key),
                self.storage_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("durable_read_timeout", kind=str(kind), key=key)
        except StorageUnavailableError as e:
            logger.warning("durable_read_failed", kind=str(kind), key=key, error=str(e))
        return None

    async def _write_durable(
        self,
        kind: LookupKind,
        key: str,
        value: Any,
        created_at: datetime,
    ) -> bool:
        """Best-effort durable write. Returns True if it completed in time."""
        if self.store is None:
            return False

        try:
            await asyncio.wait_for(
                asyncio.to_thread(self.store.put, kind, key, value, created_at),
                self.storage_timeout,
            )
            return True
        except asyncio.TimeoutError:
            logger.warning("durable_write_timeout", kind=str(kind), key=key)
        except StorageUnavailableError as e:
            logger.warning("durable_write_failed", kind=str(kind), key=key, error=str(e))
        return False

    async def _fetch_shared(self, kind: LookupKind, key: str) -> LookupResult:
        """Join the in-flight fetch for ``key`` or start a new one."""
        flight_key = (kind, key)
        task = self._inflight.get(flight_key)

        if task is None:
            task = asyncio.get_running_loop().create_task(self._fetch_and_store(kind, key))
            self._inflight[flight_key] = task

            def _forget(done: asyncio.Task) -> None:
                if self._inflight.get(flight_key) is done:
                    del self._inflight[flight_key]

            task.add_done_callback(_forget)

        return await asyncio.shield(task)

    async def _fetch_and_store(self, kind: LookupKind, key: str) -> LookupResult:
        counters = self.metrics[kind]
        counters.upstream_requests += 1
        fetch = self.fetchers[kind]

        try:
            outcome = await asyncio.wait_for(fetch(key), self.upstream_timeout)
        except asyncio.TimeoutError:
            counters.upstream_errors += 1
            logger.warning("upstream_timeout", kind=str(kind), key=key, timeout=self.upstream_timeout)
            return Failed(
                FailureReason.TIMEOUT,
                details=f"No upstream response within {self.upstream_timeout:g} seconds",
            )
        except Exception as e:
            counters.upstream_errors += 1
            logger.error("upstream_fetch_failed", kind=str(kind), key=key, error=str(e), exc_info=True)
            return Failed(FailureReason.INTERNAL_ERROR, details=str(e))

        if not outcome.is_definitive:
            counters.upstream_errors += 1
            if outcome.kind == OutcomeKind.TIMEOUT:
                return Failed(FailureReason.TIMEOUT, details="Upstream request timed out")
            return Failed(FailureReason.UPSTREAM_ERROR, status=outcome.status)

        value = outcome.value if outcome.kind == OutcomeKind.VALUE else None
        created_at = self.clock()

        await self._write_durable(kind, key, value, created_at)
        self.fast.put(kind, key, value, created_at)

        logger.debug(
            "lookup_fetched",
            kind=str(kind),
            key=key,
            exists=value is not None,
        )
        return Resolved(value=value, provenance=Provenance.FRESH_FETCH, established_at=created_at)


def _from_cache(entry: CacheEntry) -> Resolved:
    return Resolved(
        value=entry.value,
        provenance=Provenance.CACHE_HIT,
        established_at=entry.created_at,
    )
