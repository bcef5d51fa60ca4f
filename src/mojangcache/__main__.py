"""
CLI entry point for running mojangcache as a module.

Usage: python -m mojangcache [OPTIONS] COMMAND [ARGS]...
"""

from mojangcache.cli.main import cli

if __name__ == "__main__":
    cli()
