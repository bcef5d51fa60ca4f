"""
Cache module for storing resolved lookups.

Provides the in-process TTL tier, the SQLite durable tier, the row codec
and the background age-based eviction.
"""

from mojangcache.cache.codec import EntryCodec, ProfileCodec, UUIDCodec, codec_for
from mojangcache.cache.eviction import EvictionScheduler
from mojangcache.cache.memory import FastTier
from mojangcache.cache.sqlite import DurableStore

__all__ = [
    "DurableStore",
    "EntryCodec",
    "EvictionScheduler",
    "FastTier",
    "ProfileCodec",
    "UUIDCodec",
    "codec_for",
]
