"""
Pytest fixtures and configuration for mojangcache tests.

Provides a controllable clock, cache tiers on temporary databases and
mock upstream fetchers.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from mojangcache.cache.memory import FastTier
from mojangcache.cache.sqlite import DurableStore
from mojangcache.core.models import LookupKind, SkinProperty, UpstreamOutcome
from mojangcache.core.orchestrator import FetchOrchestrator

NOTCH_NAME = "Notch"
NOTCH_UUID = "069a79f4-44e9-4726-a5be-fca90e38aaf5"
NOTCH_UNDASHED = "069a79f444e94726a5befca90e38aaf5"
UNKNOWN_UUID = "00000000-0000-0000-0000-000000000000"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


# =============================================================================
# Test Data Fixtures
# =============================================================================


@pytest.fixture
def start_time() -> datetime:
    """Fixed starting point for the fake clock."""
    return datetime(2024, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def clock(start_time: datetime) -> FakeClock:
    """Create a controllable clock."""
    return FakeClock(start_time)


@pytest.fixture
def sample_skin() -> SkinProperty:
    """Create a sample signed skin property."""
    return SkinProperty(
        value="ewogICJ0aW1lc3RhbXAiIDogMTcwOTI5NDQwMDAwMCwKICAicHJvZmlsZUlkIiA6ICIwNjlhNzlmNCIKfQ==",
        signature="c2lnbmF0dXJlLWJ5dGVz",
    )


@pytest.fixture
def mock_profile_response(sample_skin: SkinProperty) -> dict:
    """Create a mock session server profile response."""
    return {
        "id": NOTCH_UNDASHED,
        "name": NOTCH_NAME,
        "properties": [
            {
                "name": "textures",
                "value": sample_skin.value,
                "signature": sample_skin.signature,
            }
        ],
    }


# =============================================================================
# Cache Fixtures
# =============================================================================


@pytest.fixture
def tmp_cache_db(tmp_path: Path) -> Path:
    """Create a temporary cache database path."""
    return tmp_path / "test_cache.db"


@pytest.fixture
def store(tmp_cache_db: Path, clock: FakeClock) -> DurableStore:
    """Create a durable store on a temporary database."""
    return DurableStore(tmp_cache_db, max_rows=100, clock=clock)


@pytest.fixture
def fast(clock: FakeClock) -> FastTier:
    """Create a fast tier driven by the fake clock."""
    return FastTier(ttl=timedelta(hours=6), clock=clock)


# =============================================================================
# Mock Upstream Fixtures
# =============================================================================


@pytest.fixture
def uuid_fetch() -> AsyncMock:
    """Create a mock name -> UUID fetch that finds Notch only."""

    async def fetch(name: str) -> UpstreamOutcome:
        if name == NOTCH_NAME:
            return UpstreamOutcome.found(NOTCH_UUID)
        return UpstreamOutcome.absent()

    return AsyncMock(side_effect=fetch)


@pytest.fixture
def profile_fetch(sample_skin: SkinProperty) -> AsyncMock:
    """Create a mock UUID -> profile fetch that finds Notch only."""

    async def fetch(uuid: str) -> UpstreamOutcome:
        if uuid == NOTCH_UUID:
            return UpstreamOutcome.found(sample_skin)
        return UpstreamOutcome.absent()

    return AsyncMock(side_effect=fetch)


@pytest.fixture
def orchestrator(
    fast: FastTier,
    store: DurableStore,
    uuid_fetch: AsyncMock,
    profile_fetch: AsyncMock,
    clock: FakeClock,
) -> FetchOrchestrator:
    """Create an orchestrator over both tiers and the mock fetchers."""
    return FetchOrchestrator(
        fast,
        store,
        {
            LookupKind.NAME_TO_UUID: uuid_fetch,
            LookupKind.UUID_TO_PROFILE: profile_fetch,
        },
        clock=clock,
    )
