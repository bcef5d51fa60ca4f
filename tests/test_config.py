"""
Tests for runtime settings.
"""

from datetime import timedelta
from pathlib import Path

import pydantic
import pytest

from mojangcache.core.config import CacheSettings
from mojangcache.core.exceptions import ValidationError
from mojangcache.core.models import LookupKind


class TestCacheSettings:
    """Tests for CacheSettings."""

    def test_defaults(self):
        """Test production defaults."""
        settings = CacheSettings()
        assert settings.max_rows == 10_000
        assert settings.fast_ttl == timedelta(hours=6)
        assert settings.eviction_interval == timedelta(hours=6)
        assert settings.max_age_for(LookupKind.NAME_TO_UUID) == timedelta(hours=24)
        assert settings.max_age_for(LookupKind.UUID_TO_PROFILE) == timedelta(hours=24)
        assert settings.upstream_timeout == 10.0
        assert settings.response_max_age == timedelta(minutes=15)
        assert settings.db_path == Path.home() / ".mojangcache" / "cache.db"

    def test_from_env(self, tmp_path: Path, monkeypatch):
        """Test environment variables are read and coerced."""
        monkeypatch.setenv("MOJANGCACHE_DB_PATH", str(tmp_path / "c.db"))
        monkeypatch.setenv("MOJANGCACHE_MAX_ROWS", "500")
        monkeypatch.setenv("MOJANGCACHE_MAX_AGE_UUID", "43200")
        monkeypatch.setenv("MOJANGCACHE_UPSTREAM_TIMEOUT", "2.5")
        monkeypatch.setenv("MOJANGCACHE_FAST_MAXSIZE", "")

        settings = CacheSettings.from_env()

        assert settings.db_path == tmp_path / "c.db"
        assert settings.max_rows == 500
        assert settings.max_age_uuid == timedelta(hours=12)
        assert settings.upstream_timeout == 2.5
        assert settings.fast_maxsize is None

    def test_iso_duration(self, monkeypatch):
        """Test ISO 8601 durations are accepted too."""
        monkeypatch.setenv("MOJANGCACHE_EVICTION_INTERVAL", "PT1H")
        assert CacheSettings().eviction_interval == timedelta(hours=1)

    def test_overrides_win(self, monkeypatch):
        """Test keyword overrides beat the environment and None is ignored."""
        monkeypatch.setenv("MOJANGCACHE_MAX_ROWS", "500")

        settings = CacheSettings.from_env(max_rows=20, db_path=None)

        assert settings.max_rows == 20
        assert settings.db_path == Path.home() / ".mojangcache" / "cache.db"

    def test_bad_env_value(self, monkeypatch):
        """Test unparsable values raise ValidationError naming the variable."""
        monkeypatch.setenv("MOJANGCACHE_MAX_ROWS", "many")

        with pytest.raises(ValidationError) as exc_info:
            CacheSettings.from_env()
        assert exc_info.value.field == "MOJANGCACHE_MAX_ROWS"

    def test_settings_are_frozen(self):
        """Test settings cannot be changed after construction."""
        settings = CacheSettings()
        with pytest.raises(pydantic.ValidationError):
            settings.max_rows = 5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_rows": 0},
            {"upstream_timeout": 0},
            {"fast_ttl": timedelta(0)},
            {"eviction_interval": timedelta(seconds=-1)},
        ],
    )
    def test_invalid_values(self, kwargs: dict):
        """Test invalid settings are rejected."""
        with pytest.raises(pydantic.ValidationError):
            CacheSettings(**kwargs)

    def test_invalid_values_from_env(self):
        """Test from_env reports range errors as ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            CacheSettings.from_env(storage_timeout=-1)
        assert exc_info.value.field == "MOJANGCACHE_STORAGE_TIMEOUT"

    def test_log_level_belongs_to_cli(self, monkeypatch):
        """Test the CLI's log level variable is not a settings field."""
        monkeypatch.setenv("MOJANGCACHE_LOG_LEVEL", "debug")
        settings = CacheSettings.from_env()
        assert not hasattr(settings, "log_level")
