"""
Input validation utilities for mojangcache.

Provides validation for player names and UUIDs before they are used as
cache keys or interpolated into upstream URLs.
"""

import re
from urllib.parse import quote

from mojangcache.core.exceptions import ValidationError

# Early accounts may be shorter than 3 characters or contain "-"
_PLAYER_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
MAX_PLAYER_NAME_LENGTH = 16

_DASHED_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_UNDASHED_UUID_PATTERN = re.compile(r"^[0-9a-f]{32}$", re.IGNORECASE)

# Maximum response size (1 MB); profile payloads are a few kilobytes
MAX_RESPONSE_SIZE = 1024 * 1024


def validate_player_name(name: str) -> str:
    """Validate a player name.

    Names are case-sensitive cache keys and are returned unchanged.

    Args:
        name: Player name to validate.

    Returns:
        The name.

    Raises:
        ValidationError: If the name is empty, too long or has invalid characters.
    """
    if not name:
        raise ValidationError("player_name", name or "", "Player name cannot be empty")

    if len(name) > MAX_PLAYER_NAME_LENGTH:
        raise ValidationError(
            "player_name",
            name[:MAX_PLAYER_NAME_LENGTH] + "...",
            f"Player name exceeds {MAX_PLAYER_NAME_LENGTH} character limit",
        )

    if not _PLAYER_NAME_PATTERN.match(name):
        raise ValidationError(
            "player_name",
            repr(name),
            "Player name may only contain letters, digits, underscores and hyphens",
        )

    return name


def convert_to_dashed(undashed: str) -> str:
    """Insert dashes into a 32-character hex UUID.

    Raises:
        ValidationError: If the value is not 32 hex characters.
    """
    if not _UNDASHED_UUID_PATTERN.match(undashed):
        raise ValidationError("uuid", undashed, "Expected 32 hexadecimal characters")

    return "-".join(
        (
            undashed[0:8],
            undashed[8:12],
            undashed[12:16],
            undashed[16:20],
            undashed[20:],
        )
    )


def convert_to_undashed(uuid: str) -> str:
    """Remove dashes from a UUID."""
    return uuid.replace("-", "")


def parse_uuid(value: str) -> str:
    """Parse a dashed or undashed UUID into canonical form.

    Args:
        value: UUID with or without dashes, any case.

    Returns:
        Lowercase dashed UUID.

    Raises:
        ValidationError: If the value is not a UUID.
    """
    if not value:
        raise ValidationError("uuid", value or "", "UUID cannot be empty")

    if _DASHED_UUID_PATTERN.match(value):
        return value.lower()

    if _UNDASHED_UUID_PATTERN.match(value):
        return convert_to_dashed(value).lower()

    raise ValidationError("uuid", value[:40], "Not a valid UUID")


def try_parse_uuid(value: str) -> str | None:
    """Return the canonical UUID or None if ``value`` is not a UUID."""
    try:
        return parse_uuid(value)
    except ValidationError:
        return None


def encode_for_url(value: str) -> str:
    """URL-encode a path segment for use in upstream URLs."""
    return quote(value, safe="")


def validate_response_size(
    content_length: int | None,
    max_size: int = MAX_RESPONSE_SIZE,
) -> None:
    """Validate that a response size is within acceptable limits.

    Args:
        content_length: The Content-Length header value (may be None).
        max_size: Maximum allowed response size in bytes.

    Raises:
        ValidationError: If the response is too large.
    """
    if content_length is not None and content_length > max_size:
        size_kb = content_length / 1024
        max_kb = max_size / 1024
        raise ValidationError(
            "response_size",
            f"{size_kb:.1f} KB",
            f"Response exceeds maximum size of {max_kb:.0f} KB",
        )
