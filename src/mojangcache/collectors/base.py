"""
Shared plumbing for the Mojang HTTP clients.

Each client answers one kind of lookup with an :class:`UpstreamOutcome`.
This module holds what they have in common: the aiohttp session, the
identifying headers Mojang sees and the payload size guard.
"""

from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from mojangcache import __version__
from mojangcache.core.models import UpstreamOutcome
from mojangcache.core.validation import MAX_RESPONSE_SIZE, validate_response_size


class Collector(ABC):
    """One Mojang endpoint, usable as a fetch capability via :meth:`fetch`.

    A client either borrows the caller's ``aiohttp.ClientSession`` or
    opens its own on first use. Source address and proxy selection live on
    that session, so a host that needs them passes its own. Borrowed
    sessions are never closed here.
    """

    # Mojang payloads are a few kilobytes
    MAX_RESPONSE_SIZE = MAX_RESPONSE_SIZE

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 5,
    ):
        """Set up the client.

        Args:
            session: Session to borrow. When omitted, the client opens one
                on the first request and closes it in :meth:`close`.
            timeout: Whole-request budget in seconds; past it the request
                becomes a timeout outcome.
        """
        self._session = session
        self._owns_session = session is None
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session opened by this client, if any."""
        if not self._owns_session or self._session is None:
            return
        await self._session.close()
        self._session = None

    async def __aenter__(self) -> "Collector":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @abstractmethod
    async def fetch(self, identifier: str) -> UpstreamOutcome:
        """Ask Mojang about one player name or UUID.

        Returns:
            Found, absent, error(status) or timeout.

        Raises:
            NetworkError: If the connection fails or the body is unreadable.
        """

    def _build_headers(self) -> dict[str, str]:
        return {
            "User-Agent": f"mojangcache/{__version__}",
            "Accept": "application/json",
            "Accept-Language": "en-US,en",
        }

    def _check_response_size(self, response: aiohttp.ClientResponse) -> None:
        """Reject a response whose declared length exceeds the limit.

        Raises:
            ValidationError: If ``Content-Length`` is over ``MAX_RESPONSE_SIZE``.
        """
        declared = response.headers.get("Content-Length")
        if declared is None or not declared.isdigit():
            # Missing or malformed header
            return
        validate_response_size(int(declared), self.MAX_RESPONSE_SIZE)
