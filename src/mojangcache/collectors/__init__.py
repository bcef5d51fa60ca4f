"""
Upstream collectors for the Mojang APIs.

This module provides async clients that turn Mojang HTTP answers into
upstream outcomes for the fetch orchestrator.
"""

from mojangcache.collectors.base import Collector
from mojangcache.collectors.mojang import MojangProfileClient, MojangUUIDClient

__all__ = [
    "Collector",
    "MojangProfileClient",
    "MojangUUIDClient",
]
