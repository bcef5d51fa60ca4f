"""
Tests for the cache entry codecs.
"""

from datetime import datetime, timezone

import pytest

from mojangcache.cache.codec import (
    ProfileCodec,
    UUIDCodec,
    codec_for,
    from_micros,
    to_micros,
)
from mojangcache.core.exceptions import CorruptRecordError
from mojangcache.core.models import CacheEntry, LookupKind, SkinProperty

from conftest import NOTCH_UUID


class TestTimestamps:
    """Tests for microsecond timestamp conversion."""

    def test_exact_round_trip(self, start_time: datetime):
        """Test microseconds survive conversion."""
        assert from_micros(to_micros(start_time)) == start_time

    def test_naive_datetime_is_utc(self):
        """Test naive datetimes are treated as UTC."""
        naive = datetime(2024, 1, 1)
        assert to_micros(naive) == to_micros(naive.replace(tzinfo=timezone.utc))


class TestUUIDCodec:
    """Tests for the name -> UUID codec."""

    def test_encode(self, start_time: datetime):
        """Test row layout."""
        row = UUIDCodec().encode(CacheEntry("Notch", NOTCH_UUID, start_time))
        assert row == {
            "key": "Notch",
            "value": NOTCH_UUID,
            "created_at": to_micros(start_time),
        }

    def test_negative_entry(self, start_time: datetime):
        """Test a cached negative is stored as a null value."""
        codec = UUIDCodec()
        entry = CacheEntry("nobody", None, start_time)

        row = codec.encode(entry)
        assert row["value"] is None
        assert codec.decode(row) == entry

    def test_missing_timestamp(self):
        """Test a row without a timestamp is corrupt."""
        with pytest.raises(CorruptRecordError) as exc_info:
            UUIDCodec().decode({"key": "Notch", "value": NOTCH_UUID, "created_at": None})
        assert exc_info.value.table == "uuid_cache"

    def test_bad_timestamp(self):
        """Test an unparsable timestamp is corrupt."""
        with pytest.raises(CorruptRecordError):
            UUIDCodec().decode({"key": "Notch", "value": NOTCH_UUID, "created_at": "yesterday"})

    def test_empty_value(self):
        """Test an empty UUID is corrupt rather than a negative."""
        with pytest.raises(CorruptRecordError):
            UUIDCodec().decode({"key": "Notch", "value": "", "created_at": 0})


class TestProfileCodec:
    """Tests for the UUID -> profile codec."""

    def test_round_trip(self, sample_skin: SkinProperty, start_time: datetime):
        """Test a profile entry decodes to an equal entry."""
        codec = ProfileCodec()
        entry = CacheEntry(NOTCH_UUID, sample_skin, start_time)
        assert codec.decode(codec.encode(entry)) == entry

    def test_stored_as_compact_json(self, sample_skin: SkinProperty, start_time: datetime):
        """Test the stored value is compact, key-sorted JSON."""
        row = ProfileCodec().encode(CacheEntry(NOTCH_UUID, sample_skin, start_time))
        assert row["value"].startswith('{"signature":')
        assert " " not in row["value"]

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"signature": "x"}'])
    def test_bad_payload(self, raw: str):
        """Test unreadable payloads are corrupt."""
        with pytest.raises(CorruptRecordError):
            ProfileCodec().decode({"key": NOTCH_UUID, "value": raw, "created_at": 0})


def test_codec_for():
    """Test each kind has its own codec."""
    assert isinstance(codec_for(LookupKind.NAME_TO_UUID), UUIDCodec)
    assert isinstance(codec_for(LookupKind.UUID_TO_PROFILE), ProfileCodec)
