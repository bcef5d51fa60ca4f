"""
Command-line interface for mojangcache.

Provides Click-based CLI commands for cached lookups, running the
eviction sweeper and managing the durable cache.
"""

from mojangcache.cli.main import cli

__all__ = ["cli"]
