"""
Core module for mojangcache.

Contains data models, settings, validation and exceptions. The fetch
orchestrator lives in ``mojangcache.core.orchestrator``.
"""

from mojangcache.core.config import CacheSettings
from mojangcache.core.exceptions import (
    CacheError,
    CorruptRecordError,
    MojangCacheError,
    NetworkError,
    StorageUnavailableError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from mojangcache.core.models import (
    CacheEntry,
    Failed,
    FailureReason,
    LookupKind,
    LookupMetrics,
    OutcomeKind,
    Provenance,
    Resolved,
    SkinProperty,
    UpstreamOutcome,
)

__all__ = [
    # Models
    "CacheEntry",
    "Failed",
    "FailureReason",
    "LookupKind",
    "LookupMetrics",
    "OutcomeKind",
    "Provenance",
    "Resolved",
    "SkinProperty",
    "UpstreamOutcome",
    # Settings
    "CacheSettings",
    # Exceptions
    "MojangCacheError",
    "CacheError",
    "CorruptRecordError",
    "NetworkError",
    "StorageUnavailableError",
    "UpstreamError",
    "UpstreamTimeoutError",
    "ValidationError",
]
