"""
mojangcache

A cache-aside front for the Mojang identity APIs. Player name -> UUID and
UUID -> signed skin lookups go through an in-process TTL tier and a
size-bounded SQLite tier before reaching Mojang, and confirmed negatives
are cached like any other answer.

Quick Start:
    >>> import asyncio
    >>> from mojangcache import LookupService
    >>> async def main():
    ...     async with LookupService() as service:
    ...         result = await service.lookup_uuid("Notch")
    ...         print(result.value, result.provenance)
    >>> asyncio.run(main())
    069a79f4-44e9-4726-a5be-fca90e38aaf5 fresh_fetch

    # Or use the synchronous helper:
    >>> from mojangcache import get_uuid_sync
    >>> get_uuid_sync("Notch").value
    '069a79f4-44e9-4726-a5be-fca90e38aaf5'
"""

__version__ = "0.1.0"

# High-level API (recommended for most users)
from mojangcache.api import (
    LookupService,
    get_profile,
    get_profile_sync,
    get_uuid,
    get_uuid_sync,
    to_response,
)

# Core components (for advanced usage)
from mojangcache.cache import DurableStore, EvictionScheduler, FastTier
from mojangcache.core.config import CacheSettings
from mojangcache.core.orchestrator import FetchOrchestrator

# Exceptions
from mojangcache.core.exceptions import (
    CacheError,
    CorruptRecordError,
    MojangCacheError,
    StorageUnavailableError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)

# Data models
from mojangcache.core.models import (
    CacheEntry,
    Failed,
    FailureReason,
    LookupKind,
    LookupMetrics,
    Provenance,
    Resolved,
    SkinProperty,
    UpstreamOutcome,
)

__all__ = [
    # Version
    "__version__",
    # High-level API
    "LookupService",
    "get_uuid",
    "get_uuid_sync",
    "get_profile",
    "get_profile_sync",
    "to_response",
    # Models
    "CacheEntry",
    "Failed",
    "FailureReason",
    "LookupKind",
    "LookupMetrics",
    "Provenance",
    "Resolved",
    "SkinProperty",
    "UpstreamOutcome",
    # Core
    "CacheSettings",
    "DurableStore",
    "EvictionScheduler",
    "FastTier",
    "FetchOrchestrator",
    # Exceptions
    "MojangCacheError",
    "CacheError",
    "CorruptRecordError",
    "StorageUnavailableError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ValidationError",
]
