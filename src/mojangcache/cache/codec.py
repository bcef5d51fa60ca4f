"""
Mapping between cache entries and durable storage rows.

Rows are plain dicts ``{"key", "value", "created_at"}``. Timestamps are
stored as integer microseconds since the Unix epoch so that decoding an
encoded entry reproduces the original datetime exactly.
"""

import json
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Generic, Mapping, TypeVar

from mojangcache.core.exceptions import CorruptRecordError
from mojangcache.core.models import CacheEntry, LookupKind, SkinProperty

V = TypeVar("V")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MICROSECOND = timedelta(microseconds=1)


def to_micros(moment: datetime) -> int:
    """Convert an aware datetime to microseconds since the epoch."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // _MICROSECOND


def from_micros(micros: int) -> datetime:
    """Convert microseconds since the epoch to an aware UTC datetime."""
    return EPOCH + timedelta(microseconds=micros)


class EntryCodec(ABC, Generic[V]):
    """Encode and decode entries of one lookup kind."""

    kind: LookupKind

    def encode(self, entry: CacheEntry[V]) -> dict[str, Any]:
        """Encode an entry into a storage row."""
        return {
            "key": entry.key,
            "value": None if entry.value is None else self.encode_value(entry.value),
            "created_at": to_micros(entry.created_at),
        }

    def decode(self, row: Mapping[str, Any]) -> CacheEntry[V]:
        """Decode a storage row into an entry.

        Raises:
            CorruptRecordError: If the timestamp is missing or the value is
                unreadable.
        """
        key = row["key"]
        created_at = row["created_at"]
        if created_at is None:
            raise CorruptRecordError(self.kind.table, key, "missing created_at")

        try:
            created = from_micros(int(created_at))
        except (TypeError, ValueError, OverflowError) as e:
            raise CorruptRecordError(self.kind.table, key, f"bad created_at: {e}")

        raw = row["value"]
        value = None if raw is None else self.decode_value(key, raw)
        return CacheEntry(key=key, value=value, created_at=created)

    @abstractmethod
    def encode_value(self, value: V) -> str:
        """Encode a non-null value."""

    @abstractmethod
    def decode_value(self, key: str, raw: str) -> V:
        """Decode a non-null value."""


class UUIDCodec(EntryCodec[str]):
    """Player name -> dashed UUID."""

    kind = LookupKind.NAME_TO_UUID

    def encode_value(self, value: str) -> str:
        return value

    def decode_value(self, key: str, raw: str) -> str:
        if not isinstance(raw, str) or not raw:
            raise CorruptRecordError(self.kind.table, key, "empty uuid")
        return raw


class ProfileCodec(EntryCodec[SkinProperty]):
    """UUID -> signed skin property, stored as compact JSON."""

    kind = LookupKind.UUID_TO_PROFILE

    def encode_value(self, value: SkinProperty) -> str:
        return json.dumps(value.to_dict(), separators=(",", ":"), sort_keys=True)

    def decode_value(self, key: str, raw: str) -> SkinProperty:
        try:
            data = json.loads(raw)
            return SkinProperty.from_dict(data)
        except (json.JSONDecodeError, TypeError, KeyError, AttributeError) as e:
            raise CorruptRecordError(self.kind.table, key, f"bad profile payload: {e}")


_CODECS: dict[LookupKind, EntryCodec] = {
    LookupKind.NAME_TO_UUID: UUIDCodec(),
    LookupKind.UUID_TO_PROFILE: ProfileCodec(),
}


def codec_for(kind: LookupKind) -> EntryCodec:
    """Return the codec for a lookup kind."""
    return _CODECS[kind]

