"""
High-level programmatic API for mojangcache.

:class:`LookupService` wires the cache tiers, the eviction scheduler, the
Mojang clients and the fetch orchestrator together. A web layer calls
:meth:`LookupService.resolve` (or the validating helpers) once per request
and turns the result into a response with :func:`to_response`.

Example:
    import asyncio
    from mojangcache import LookupService

    async def main():
        async with LookupService() as service:
            result = await service.lookup_uuid("Notch")
            print(result.value, result.provenance)

    asyncio.run(main())
"""

import asyncio
from typing import Any, Optional

import aiohttp

from mojangcache.cache.eviction import EvictionScheduler
from mojangcache.cache.memory import FastTier
from mojangcache.cache.sqlite import DurableStore
from mojangcache.collectors.mojang import MojangProfileClient, MojangUUIDClient
from mojangcache.core.config import CacheSettings
from mojangcache.core.exceptions import (
    MojangCacheError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from mojangcache.core.logging import get_logger
from mojangcache.core.models import (
    Clock,
    Failed,
    FailureReason,
    LookupKind,
    LookupResult,
    Resolved,
    utc_now,
)
from mojangcache.core.orchestrator import FetchCapability, FetchOrchestrator
from mojangcache.core.validation import parse_uuid, validate_player_name

logger = get_logger(__name__)


class LookupService:
    """Cache-aside front for the Mojang lookup APIs.

    Owns the fast tier, the durable store and the eviction scheduler.
    Call :meth:`start` before serving (or use ``async with``) and
    :meth:`close` on shutdown.
    """

    def __init__(
        self,
        settings: Optional[CacheSettings] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        fetchers: Optional[dict[LookupKind, FetchCapability]] = None,
        clock: Clock = utc_now,
        use_durable: bool = True,
    ):
        """Initialize the service.

        Args:
            settings: Runtime settings. Defaults to ``CacheSettings()``.
            session: aiohttp session for the Mojang clients. Configure
                source addresses or proxies on it.
            fetchers: Override the upstream fetch per kind (tests, custom
                clients). Kinds not given use the Mojang clients.
            clock: Source of "now".
            use_durable: Disable to run with the in-process tier only.
        """
        self.settings = settings or CacheSettings()
        self.clock = clock

        self.fast = FastTier(
            ttl=self.settings.fast_ttl,
            maxsize=self.settings.fast_maxsize,
            clock=clock,
        )
        self.store: Optional[DurableStore] = None
        self.scheduler: Optional[EvictionScheduler] = None
        if use_durable:
            self.store = DurableStore(
                self.settings.db_path,
                max_rows=self.settings.max_rows,
                clock=clock,
                connect_timeout=self.settings.storage_timeout,
            )
            self.scheduler = EvictionScheduler(
                self.store,
                interval=self.settings.eviction_interval,
                max_ages={kind: self.settings.max_age_for(kind) for kind in LookupKind},
            )

        self.uuid_client = MojangUUIDClient(session, timeout=self.settings.request_timeout)
        self.profile_client = MojangProfileClient(session, timeout=self.settings.request_timeout)

        resolved_fetchers: dict[LookupKind, FetchCapability] = {
            LookupKind.NAME_TO_UUID: self.uuid_client.fetch,
            LookupKind.UUID_TO_PROFILE: self.profile_client.fetch,
        }
        if fetchers:
            resolved_fetchers.update(fetchers)

        self.orchestrator = FetchOrchestrator(
            self.fast,
            self.store,
            resolved_fetchers,
            clock=clock,
            upstream_timeout=self.settings.upstream_timeout,
            storage_timeout=self.settings.storage_timeout,
        )

    @property
    def metrics(self):
        return self.orchestrator.metrics

    async def start(self) -> None:
        """Start background eviction."""
        if self.scheduler is not None:
            self.scheduler.start()

    async def close(self) -> None:
        """Stop eviction, drop the fast tier and close owned sessions."""
        if self.scheduler is not None:
            await self.scheduler.stop()
        self.fast.close()
        await self.uuid_client.close()
        await self.profile_client.close()
        logger.info("lookup_service_closed")

    async def __aenter__(self) -> "LookupService":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def resolve(self, kind: LookupKind, key: str) -> LookupResult:
        """Resolve an already validated key. Never raises."""
        return await self.orchestrator.resolve(kind, key)

    async def lookup_uuid(self, name: str) -> LookupResult:
        """Resolve a player name to a UUID.

        Raises:
            ValidationError: If ``name`` is not a valid player name.
        """
        return await self.resolve(LookupKind.NAME_TO_UUID, validate_player_name(name))

    async def lookup_profile(self, uuid: str) -> LookupResult:
        """Resolve a UUID (dashed or not) to its skin property.

        Raises:
            ValidationError: If ``uuid`` is not a UUID.
        """
        return await self.resolve(LookupKind.UUID_TO_PROFILE, parse_uuid(uuid))

    async def forget(self, kind: LookupKind, key: str) -> bool:
        """Drop a key from both tiers so the next lookup goes upstream.

        Args:
            kind: Lookup kind.
            key: Player name or UUID (dashed or not).

        Returns:
            True if either tier held an entry for the key.

        Raises:
            ValidationError: If ``key`` is not valid for ``kind``.
            StorageUnavailableError: If the durable row cannot be deleted.
        """
        if kind == LookupKind.NAME_TO_UUID:
            key = validate_player_name(key)
        else:
            key = parse_uuid(key)

        removed = self.fast.invalidate(kind, key)
        if self.store is not None:
            removed = await asyncio.to_thread(self.store.delete, kind, key) or removed

        logger.info("lookup_forgotten", kind=str(kind), key=key, removed=removed)
        return removed

    def to_response(self, kind: LookupKind, result: LookupResult) -> tuple[int, dict[str, str], dict]:
        """Map a result to ``(status, headers, body)`` for a web layer."""
        return to_response(kind, result, max_age=int(self.settings.response_max_age.total_seconds()))


def to_response(
    kind: LookupKind,
    result: LookupResult,
    max_age: int = 900,
) -> tuple[int, dict[str, str], dict]:
    """Map a lookup result to an HTTP status, headers and JSON body.

    Resolved results (including confirmed negatives) are 200 with a public
    ``Cache-Control``. Timeouts are 503, other failures 500.
    """
    if isinstance(result, Failed):
        return result.reason.http_status, {}, {"error": result.reason.error_code}

    headers = {
        "Cache-Control": f"public, max-age={max_age}",
        "Content-Type": "application/json",
    }
    if kind == LookupKind.NAME_TO_UUID:
        body = {"exists": result.exists, "uuid": result.value}
    else:
        body = {
            "exists": result.exists,
            "skinProperty": result.value.to_dict() if result.value is not None else None,
        }
    return 200, headers, body


def validation_response(kind: LookupKind, error: ValidationError) -> tuple[int, dict[str, str], dict]:
    """Map an invalid key to a 400 response."""
    code = "INVALID_NAME" if kind == LookupKind.NAME_TO_UUID else "INVALID_UUID"
    return 400, {}, {"error": code}


def raise_for_failure(key: str, result: LookupResult) -> Resolved:
    """Return ``result`` if resolved, otherwise raise the matching exception.

    Raises:
        UpstreamTimeoutError: For timeouts.
        UpstreamError: For non-success upstream statuses.
        MojangCacheError: For internal errors.
    """
    if isinstance(result, Resolved):
        return result
    if result.reason == FailureReason.TIMEOUT:
        raise UpstreamTimeoutError(key)
    if result.reason == FailureReason.UPSTREAM_ERROR:
        raise UpstreamError(key, result.status, details=result.details)
    raise MojangCacheError(f"Lookup failed for {key}", details=result.details)


async def get_uuid(
    name: str,
    *,
    settings: Optional[CacheSettings] = None,
) -> Resolved:
    """Resolve a player name to a UUID, raising on failure.

    Example:
        >>> import asyncio
        >>> from mojangcache import get_uuid
        >>> result = asyncio.run(get_uuid("Notch"))
        >>> print(result.value)
        069a79f4-44e9-4726-a5be-fca90e38aaf5
    """
    async with LookupService(settings) as service:
        return raise_for_failure(name, await service.lookup_uuid(name))


async def get_profile(
    uuid: str,
    *,
    settings: Optional[CacheSettings] = None,
) -> Resolved:
    """Resolve a UUID to its skin property, raising on failure."""
    async with LookupService(settings) as service:
        return raise_for_failure(uuid, await service.lookup_profile(uuid))


def get_uuid_sync(name: str, *, settings: Optional[CacheSettings] = None) -> Resolved:
    """Synchronous wrapper for get_uuid().

    For use in non-async contexts. Runs a new event loop.
    """
    return asyncio.run(get_uuid(name, settings=settings))


def get_profile_sync(uuid: str, *, settings: Optional[CacheSettings] = None) -> Resolved:
    """Synchronous wrapper for get_profile()."""
    return asyncio.run(get_profile(uuid, settings=settings))
