"""
Mojang API clients.

Resolve player names to UUIDs and UUIDs to signed skin properties. The
clients never cache; they translate HTTP answers into upstream outcomes
that the fetch orchestrator knows how to store:

- a value: the name or profile exists
- absent: Mojang confirms there is nothing to return (404 or 204), or
  answers with an id that is not a UUID
- error: any other non-success status, never cached
- timeout: the response did not arrive within the request timeout
"""

import asyncio
import json
from typing import Any, Optional

import aiohttp

from mojangcache.collectors.base import Collector
from mojangcache.core.exceptions import NetworkError
from mojangcache.core.logging import get_logger
from mojangcache.core.models import SkinProperty, UpstreamOutcome
from mojangcache.core.validation import (
    convert_to_undashed,
    encode_for_url,
    try_parse_uuid,
)

logger = get_logger(__name__)

# Statuses Mojang uses to say "no such profile"
CONFIRMED_ABSENT_STATUSES = frozenset({204, 404})


class MojangUUIDClient(Collector):
    """Async client for the Mojang name -> UUID endpoint."""

    BASE_URL = "https://api.mojang.com/users/profiles/minecraft"

    async def fetch(self, identifier: str) -> UpstreamOutcome[str]:
        """Resolve a player name to a dashed UUID.

        Args:
            identifier: Player name (case-insensitive upstream).

        Returns:
            UpstreamOutcome with the lowercase dashed UUID.

        Raises:
            NetworkError: If the request fails or the body is not JSON.
        """
        url = f"{self.BASE_URL}/{encode_for_url(identifier)}"
        status, data = await _get_json(self, url)

        if status in CONFIRMED_ABSENT_STATUSES:
            return UpstreamOutcome.absent()
        if status is None:
            return UpstreamOutcome.timeout()
        if not 200 <= status < 300:
            logger.warning("upstream_error", url=url, status=status)
            return UpstreamOutcome.error(status)

        raw_id = data.get("id") if isinstance(data, dict) else None
        uuid = try_parse_uuid(raw_id) if isinstance(raw_id, str) else None
        if uuid is None:
            # Missing or malformed ids are cached as a confirmed negative
            if raw_id:
                logger.warning("malformed_upstream_id", url=url, id=str(raw_id)[:40])
            return UpstreamOutcome.absent()

        return UpstreamOutcome.found(uuid)


class MojangProfileClient(Collector):
    """Async client for the Mojang session server profile endpoint."""

    BASE_URL = "https://sessionserver.mojang.com/session/minecraft/profile"
    TEXTURES_PROPERTY = "textures"

    async def fetch(self, identifier: str) -> UpstreamOutcome[SkinProperty]:
        """Fetch the signed ``textures`` property for a UUID.

        Args:
            identifier: Dashed or undashed UUID.

        Returns:
            UpstreamOutcome with the skin property. A profile without a
            textures property is reported as absent.

        Raises:
            NetworkError: If the request fails or the body is not JSON.
        """
        url = f"{self.BASE_URL}/{convert_to_undashed(identifier)}?unsigned=false"
        status, data = await _get_json(self, url)

        if status in CONFIRMED_ABSENT_STATUSES:
            return UpstreamOutcome.absent()
        if status is None:
            return UpstreamOutcome.timeout()
        if not 200 <= status < 300:
            logger.warning("upstream_error", url=url, status=status)
            return UpstreamOutcome.error(status)

        prop = self._find_textures(data)
        if prop is None:
            return UpstreamOutcome.absent()
        return UpstreamOutcome.found(prop)

    def _find_textures(self, data: Any) -> Optional[SkinProperty]:
        """Pick the textures property out of a profile response."""
        if not isinstance(data, dict):
            return None

        for prop in data.get("properties") or []:
            if prop.get("name") == self.TEXTURES_PROPERTY and prop.get("value"):
                return SkinProperty(
                    value=prop["value"],
                    signature=prop.get("signature") or "",
                )
        return None


async def _get_json(collector: Collector, url: str) -> tuple[Optional[int], Any]:
    """GET ``url`` and return ``(status, body)``.

    The body is only read for 2xx responses. A timeout is reported as a
    ``None`` status.
    """
    try:
        async with collector.session.get(
            url,
            headers=collector._build_headers(),
            timeout=collector.timeout,
        ) as resp:
            if resp.status == 204 or not 200 <= resp.status < 300:
                return resp.status, None

            collector._check_response_size(resp)
            return resp.status, await resp.json(content_type=None)

    except asyncio.TimeoutError:
        logger.warning("upstream_timeout", url=url, timeout=collector.timeout.total)
        return None, None
    except aiohttp.ClientError as e:
        raise NetworkError(url, details=str(e))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise NetworkError(url, details=f"Invalid JSON response: {e}")
