"""
Runtime settings for mojangcache.

Defaults mirror the production service: 6 hour in-process TTL, 24 hour
durable age bound swept every 6 hours, 10,000 rows per table.
"""

from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic import ValidationError as SettingsValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from mojangcache.core.exceptions import ValidationError
from mojangcache.core.models import LookupKind

ENV_PREFIX = "MOJANGCACHE_"


def default_db_path() -> Path:
    """Return the default SQLite database location."""
    return Path.home() / ".mojangcache" / "cache.db"


class CacheSettings(BaseSettings):
    """Tunables for the cache tiers, the sweeper and the upstream client.

    Every field can be set through a ``MOJANGCACHE_<FIELD>`` environment
    variable. Durations are given in seconds there; timeouts are seconds.

    Example:
        MOJANGCACHE_DB_PATH=/var/lib/mojangcache.db
        MOJANGCACHE_MAX_AGE_UUID=43200
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    db_path: Path = Field(default_factory=default_db_path)
    max_rows: int = Field(default=10_000, ge=1)
    fast_ttl: timedelta = timedelta(hours=6)
    fast_maxsize: Optional[int] = Field(default=None, ge=1)
    max_age_uuid: timedelta = timedelta(hours=24)
    max_age_profile: timedelta = timedelta(hours=24)
    eviction_interval: timedelta = timedelta(hours=6)
    upstream_timeout: float = Field(default=10.0, gt=0)
    request_timeout: float = Field(default=5.0, gt=0)
    storage_timeout: float = Field(default=5.0, gt=0)
    response_max_age: timedelta = timedelta(minutes=15)

    @field_validator("db_path")
    @classmethod
    def expand_db_path(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator(
        "fast_ttl",
        "max_age_uuid",
        "max_age_profile",
        "eviction_interval",
        "response_max_age",
        mode="before",
    )
    @classmethod
    def seconds_to_duration(cls, v: Any) -> Any:
        # Environment values arrive as strings of seconds
        if isinstance(v, str):
            try:
                return timedelta(seconds=float(v))
            except ValueError:
                return v
        return v

    @field_validator("fast_ttl", "max_age_uuid", "max_age_profile", "eviction_interval")
    @classmethod
    def positive_duration(cls, v: timedelta) -> timedelta:
        if v <= timedelta(0):
            raise ValueError("must be positive")
        return v

    @field_validator("fast_maxsize", mode="before")
    @classmethod
    def empty_is_unset(cls, v: Any) -> Any:
        return None if v == "" else v

    @classmethod
    def from_env(cls, **overrides: Any) -> "CacheSettings":
        """Build settings from the environment.

        Keyword overrides take precedence; overrides that are None are
        ignored so optional CLI options can be passed straight through.

        Raises:
            ValidationError: If a value cannot be parsed or is out of range.
        """
        try:
            return cls(**{k: v for k, v in overrides.items() if v is not None})
        except SettingsValidationError as e:
            error = e.errors()[0]
            name = str(error["loc"][0]) if error["loc"] else "settings"
            raise ValidationError(ENV_PREFIX + name.upper(), str(error.get("input")), error["msg"])

    def max_age_for(self, kind: LookupKind) -> timedelta:
        """Return the durable age bound for a lookup kind."""
        if kind == LookupKind.NAME_TO_UUID:
            return self.max_age_uuid
        return self.max_age_profile
