"""
Tests for core data models.
"""

from datetime import datetime, timezone

import pytest

from mojangcache.core.models import (
    CacheEntry,
    Failed,
    FailureReason,
    KindMetrics,
    LookupKind,
    LookupMetrics,
    OutcomeKind,
    Provenance,
    Resolved,
    SkinProperty,
    UpstreamOutcome,
)


class TestLookupKind:
    """Tests for LookupKind enum."""

    def test_tables(self):
        """Test each kind maps to its own table."""
        assert LookupKind.NAME_TO_UUID.table == "uuid_cache"
        assert LookupKind.UUID_TO_PROFILE.table == "skin_cache"

    def test_str_representation(self):
        """Test string representation."""
        assert str(LookupKind.NAME_TO_UUID) == "name_to_uuid"
        assert str(Provenance.CACHE_HIT) == "cache_hit"


class TestFailureReason:
    """Tests for FailureReason enum."""

    def test_http_status(self):
        """Test timeouts map to 503 and everything else to 500."""
        assert FailureReason.TIMEOUT.http_status == 503
        assert FailureReason.UPSTREAM_ERROR.http_status == 500
        assert FailureReason.INTERNAL_ERROR.http_status == 500

    def test_error_code(self):
        """Test error codes exposed to clients."""
        assert FailureReason.TIMEOUT.error_code == "INTERNAL_TIMEOUT"
        assert FailureReason.UPSTREAM_ERROR.error_code == "INTERNAL_ERROR"

    def test_is_transient(self):
        """Test which failures are worth retrying."""
        assert FailureReason.TIMEOUT.is_transient
        assert FailureReason.UPSTREAM_ERROR.is_transient
        assert not FailureReason.INTERNAL_ERROR.is_transient


class TestSkinProperty:
    """Tests for SkinProperty dataclass."""

    def test_to_dict(self, sample_skin: SkinProperty):
        """Test dictionary shape used in responses."""
        assert sample_skin.to_dict() == {
            "value": sample_skin.value,
            "signature": sample_skin.signature,
        }

    def test_from_dict_missing_signature(self):
        """Test an unsigned property gets an empty signature."""
        prop = SkinProperty.from_dict({"value": "abc"})
        assert prop.signature == ""

    def test_from_dict_missing_value(self):
        """Test a property without a value is rejected."""
        with pytest.raises(KeyError):
            SkinProperty.from_dict({"signature": "abc"})


class TestCacheEntry:
    """Tests for CacheEntry dataclass."""

    def test_negative_entry(self, start_time: datetime):
        """Test a cached negative is still an entry."""
        entry = CacheEntry(key="nobody", value=None, created_at=start_time)
        assert entry.value is None

    def test_frozen(self, start_time: datetime):
        """Test entries cannot be changed in place."""
        entry = CacheEntry(key="Notch", value="x", created_at=start_time)
        with pytest.raises(AttributeError):
            entry.value = "y"


class TestUpstreamOutcome:
    """Tests for UpstreamOutcome."""

    def test_constructors(self):
        """Test the four outcome shapes."""
        assert UpstreamOutcome.found("v").kind == OutcomeKind.VALUE
        assert UpstreamOutcome.absent().kind == OutcomeKind.ABSENT
        assert UpstreamOutcome.error(502).status == 502
        assert UpstreamOutcome.timeout().kind == OutcomeKind.TIMEOUT

    def test_is_definitive(self):
        """Test only values and confirmed absences may be cached."""
        assert UpstreamOutcome.found("v").is_definitive
        assert UpstreamOutcome.absent().is_definitive
        assert not UpstreamOutcome.error(500).is_definitive
        assert not UpstreamOutcome.timeout().is_definitive


class TestResults:
    """Tests for Resolved and Failed."""

    def test_resolved(self):
        """Test resolved helpers."""
        now = datetime.now(timezone.utc)
        hit = Resolved(value="x", provenance=Provenance.CACHE_HIT, established_at=now)
        miss = Resolved(value=None, provenance=Provenance.FRESH_FETCH, established_at=now)

        assert hit.exists and hit.from_cache
        assert not miss.exists and not miss.from_cache

    def test_failed_str(self):
        """Test string representation."""
        assert str(Failed(FailureReason.TIMEOUT)) == "timeout"
        assert (
            str(Failed(FailureReason.UPSTREAM_ERROR, status=429, details="rate limited"))
            == "upstream_error (status 429): rate limited"
        )


class TestMetrics:
    """Tests for lookup counters."""

    def test_hit_rate(self):
        """Test hit rate counts both cache tiers."""
        m = KindMetrics(requests=4, fast_hits=1, durable_hits=1, misses=2)
        assert m.hit_rate == 0.5

    def test_hit_rate_no_requests(self):
        """Test hit rate with no requests."""
        assert KindMetrics().hit_rate == 0.0

    def test_reset_and_to_dict(self, start_time: datetime):
        """Test counters reset and serialize per kind."""
        metrics = LookupMetrics()
        metrics[LookupKind.NAME_TO_UUID].requests = 3

        data = metrics.to_dict()
        assert data["kinds"]["name_to_uuid"]["requests"] == 3
        assert data["kinds"]["uuid_to_profile"]["requests"] == 0

        metrics.reset(start_time)
        assert metrics.started_at == start_time
        assert metrics[LookupKind.NAME_TO_UUID].requests == 0
