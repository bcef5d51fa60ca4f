"""
Core data models for mojangcache.

This module defines the data structures shared by the cache tiers, the
fetch orchestrator and the upstream clients: lookup kinds, cache entries,
upstream outcomes and the tagged results returned to callers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Generic, TypeVar, Union

V = TypeVar("V")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class LookupKind(Enum):
    """The two independent cache domains."""

    NAME_TO_UUID = "name_to_uuid"
    UUID_TO_PROFILE = "uuid_to_profile"

    def __str__(self) -> str:
        return self.value

    @property
    def table(self) -> str:
        """Return the durable table that stores this kind."""
        tables = {
            LookupKind.NAME_TO_UUID: "uuid_cache",
            LookupKind.UUID_TO_PROFILE: "skin_cache",
        }
        return tables[self]


class Provenance(Enum):
    """Where a resolved value came from."""

    CACHE_HIT = "cache_hit"
    FRESH_FETCH = "fresh_fetch"

    def __str__(self) -> str:
        return self.value


class FailureReason(Enum):
    """Why a lookup could not be resolved."""

    UPSTREAM_ERROR = "upstream_error"
    TIMEOUT = "timeout"
    INTERNAL_ERROR = "internal_error"

    def __str__(self) -> str:
        return self.value

    @property
    def is_transient(self) -> bool:
        """Return True if retrying later may succeed."""
        return self in (FailureReason.UPSTREAM_ERROR, FailureReason.TIMEOUT)

    @property
    def http_status(self) -> int:
        """Return the HTTP status a routing layer should answer with."""
        if self == FailureReason.TIMEOUT:
            return 503
        return 500

    @property
    def error_code(self) -> str:
        """Return the error code exposed in response bodies."""
        if self == FailureReason.TIMEOUT:
            return "INTERNAL_TIMEOUT"
        return "INTERNAL_ERROR"


@dataclass(frozen=True)
class SkinProperty:
    """Signed ``textures`` property of a player profile."""

    value: str
    signature: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for storage and responses."""
        return {"value": self.value, "signature": self.signature}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkinProperty":
        """Create from a stored or upstream dictionary.

        Raises:
            KeyError: If ``value`` is missing.
        """
        return cls(value=data["value"], signature=data.get("signature") or "")


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    """A cached lookup result.

    ``value`` is ``None`` for a cached negative; a missing entry is
    represented by the absence of a ``CacheEntry`` altogether.
    """

    key: str
    value: V | None
    created_at: datetime


class OutcomeKind(Enum):
    """Shape of an upstream answer."""

    VALUE = "value"
    ABSENT = "absent"
    ERROR = "error"
    TIMEOUT = "timeout"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UpstreamOutcome(Generic[V]):
    """Result of a single upstream fetch."""

    kind: OutcomeKind
    value: V | None = None
    status: int | None = None

    @classmethod
    def found(cls, value: V) -> "UpstreamOutcome[V]":
        return cls(OutcomeKind.VALUE, value=value)

    @classmethod
    def absent(cls) -> "UpstreamOutcome[V]":
        return cls(OutcomeKind.ABSENT)

    @classmethod
    def error(cls, status: int | None) -> "UpstreamOutcome[V]":
        return cls(OutcomeKind.ERROR, status=status)

    @classmethod
    def timeout(cls) -> "UpstreamOutcome[V]":
        return cls(OutcomeKind.TIMEOUT)

    @property
    def is_definitive(self) -> bool:
        """Return True if the outcome may be cached."""
        return self.kind in (OutcomeKind.VALUE, OutcomeKind.ABSENT)


@dataclass(frozen=True)
class Resolved(Generic[V]):
    """A successfully resolved lookup, possibly a confirmed negative."""

    value: V | None
    provenance: Provenance
    established_at: datetime

    @property
    def exists(self) -> bool:
        return self.value is not None

    @property
    def from_cache(self) -> bool:
        return self.provenance == Provenance.CACHE_HIT


@dataclass(frozen=True)
class Failed:
    """A lookup that could not be resolved. Nothing was cached."""

    reason: FailureReason
    status: int | None = None
    details: str | None = None

    def __str__(self) -> str:
        result = str(self.reason)
        if self.status:
            result += f" (status {self.status})"
        if self.details:
            result += f": {self.details}"
        return result


LookupResult = Union[Resolved, Failed]


@dataclass
class KindMetrics:
    """Request counters for one lookup kind."""

    requests: int = 0
    fast_hits: int = 0
    durable_hits: int = 0
    misses: int = 0
    upstream_requests: int = 0
    upstream_errors: int = 0

    @property
    def hit_rate(self) -> float:
        """Return the share of requests served from either cache tier."""
        if not self.requests:
            return 0.0
        return (self.fast_hits + self.durable_hits) / self.requests


@dataclass
class LookupMetrics:
    """In-process counters for lookups, reset on demand."""

    started_at: datetime = field(default_factory=utc_now)
    by_kind: dict[LookupKind, KindMetrics] = field(
        default_factory=lambda: {kind: KindMetrics() for kind in LookupKind}
    )

    def __getitem__(self, kind: LookupKind) -> KindMetrics:
        return self.by_kind[kind]

    def reset(self, now: datetime | None = None) -> None:
        """Zero all counters."""
        self.started_at = now or utc_now()
        self.by_kind = {kind: KindMetrics() for kind in LookupKind}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "started_at": self.started_at.isoformat(),
            "kinds": {
                kind.value: {
                    "requests": m.requests,
                    "fast_hits": m.fast_hits,
                    "durable_hits": m.durable_hits,
                    "misses": m.misses,
                    "upstream_requests": m.upstream_requests,
                    "upstream_errors": m.upstream_errors,
                    "hit_rate": round(m.hit_rate, 4),
                }
                for kind, m in self.by_kind.items()
            },
        }
