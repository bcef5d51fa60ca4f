"""
Main CLI entry point for mojangcache.

Provides commands for cached lookups, running the eviction sweeper and
managing the cache.
"""

import asyncio
import json
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import click

from mojangcache import __version__
from mojangcache.cli.output import (
    console,
    print_error,
    print_info,
    print_result,
    print_stats,
    print_success,
)
from mojangcache.core.config import CacheSettings
from mojangcache.core.exceptions import MojangCacheError, ValidationError
from mojangcache.core.logging import configure_logging
from mojangcache.core.models import Failed, LookupKind, utc_now
from mojangcache.core.validation import try_parse_uuid


def run_async(coro):
    """Run an async coroutine in a fresh event loop."""
    return asyncio.run(coro)


@click.group()
@click.version_option(version=__version__, prog_name="mojangcache")
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="MOJANGCACHE_DB_PATH",
    help="SQLite cache database (default: ~/.mojangcache/cache.db).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    envvar="MOJANGCACHE_LOG_LEVEL",
    default="warning",
    show_default=True,
    help="Minimum log level.",
)
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines.")
@click.pass_context
def cli(ctx: click.Context, db_path: Optional[Path], log_level: str, json_logs: bool) -> None:
    """mojangcache - cached Mojang name and skin lookups.

    Answers are served from an in-process cache, then a SQLite cache, and
    only then from Mojang. Confirmed "no such player" answers are cached too.
    """
    configure_logging(log_level, json=json_logs)
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = CacheSettings.from_env(db_path=db_path)
    except ValidationError as e:
        print_error(str(e))
        sys.exit(2)


@cli.command()
@click.argument("name")
@click.option("--json", "as_json", is_flag=True, help="Print the HTTP response body.")
@click.pass_context
def uuid(ctx: click.Context, name: str, as_json: bool) -> None:
    """Resolve player NAME to a UUID.

    \b
    Examples:
        mojangcache uuid Notch
        mojangcache uuid Notch --json
    """
    _lookup(ctx.obj["settings"], LookupKind.NAME_TO_UUID, name, as_json)


@cli.command()
@click.argument("player_uuid", metavar="UUID")
@click.option("--json", "as_json", is_flag=True, help="Print the HTTP response body.")
@click.pass_context
def skin(ctx: click.Context, player_uuid: str, as_json: bool) -> None:
    """Fetch the signed skin property for UUID.

    \b
    Examples:
        mojangcache skin 069a79f444e94726a5befca90e38aaf5
        mojangcache skin 069a79f4-44e9-4726-a5be-fca90e38aaf5 --json
    """
    _lookup(ctx.obj["settings"], LookupKind.UUID_TO_PROFILE, player_uuid, as_json)


def _lookup(settings: CacheSettings, kind: LookupKind, key: str, as_json: bool) -> None:
    from mojangcache.api import LookupService, validation_response

    async def run():
        service = LookupService(settings)
        try:
            if kind == LookupKind.NAME_TO_UUID:
                result = await service.lookup_uuid(key)
            else:
                result = await service.lookup_profile(key)
            return result, service.to_response(kind, result)
        finally:
            await service.close()

    try:
        result, (_, _, body) = run_async(run())
    except ValidationError as e:
        if as_json:
            click.echo(json.dumps(validation_response(kind, e)[2]))
        else:
            print_error(str(e))
        sys.exit(2)
    except MojangCacheError as e:
        print_error(f"Lookup failed: {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(body))
    else:
        print_result(kind, key, result, utc_now())

    if isinstance(result, Failed):
        sys.exit(1)


@cli.command()
@click.option(
    "--interval",
    type=float,
    help="Seconds between sweeps (default from settings: 6 hours).",
)
@click.pass_context
def sweep(ctx: click.Context, interval: Optional[float]) -> None:
    """Run the age-based eviction sweeper in the foreground.

    Sweeps once immediately and then after every interval until
    interrupted.
    """
    from mojangcache.cache.eviction import EvictionScheduler
    from mojangcache.cache.sqlite import DurableStore

    settings: CacheSettings = ctx.obj["settings"]
    store = DurableStore(settings.db_path, max_rows=settings.max_rows)
    scheduler = EvictionScheduler(
        store,
        interval=timedelta(seconds=interval) if interval else settings.eviction_interval,
        max_ages={kind: settings.max_age_for(kind) for kind in LookupKind},
    )

    async def run():
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            await scheduler.stop()

    print_info(f"Sweeping {settings.db_path} every {scheduler.interval}. Press Ctrl-C to stop.")
    try:
        run_async(run())
    except KeyboardInterrupt:
        print_success(f"Sweeper stopped after {scheduler.sweeps} sweeps.")


@cli.command()
@click.option("--clear", is_flag=True, help="Clear all cached data.")
@click.option("--stats", is_flag=True, help="Show cache statistics.")
@click.option("--purge", is_flag=True, help="Remove rows older than their max age.")
@click.option(
    "--forget",
    metavar="KEY",
    help="Drop one player name or UUID so the next lookup goes to Mojang.",
)
@click.option(
    "--kind",
    type=click.Choice([kind.value for kind in LookupKind]),
    help="Restrict --clear or --forget to one lookup kind.",
)
@click.pass_context
def cache(
    ctx: click.Context,
    clear: bool,
    stats: bool,
    purge: bool,
    forget: Optional[str],
    kind: Optional[str],
) -> None:
    """Manage the durable cache.

    \b
    Retention:
      - In-process tier: 6 hours from last write
      - SQLite tier: 24 hours per row, swept every 6 hours
      - SQLite tier: at most 10,000 rows per kind, oldest evicted first

    \b
    Examples:
        mojangcache cache --stats
        mojangcache cache --purge
        mojangcache cache --clear --kind name_to_uuid
        mojangcache cache --forget Notch
    """
    from mojangcache.cache.eviction import EvictionScheduler
    from mojangcache.cache.sqlite import DurableStore

    settings: CacheSettings = ctx.obj["settings"]

    try:
        store = DurableStore(settings.db_path, max_rows=settings.max_rows)

        if clear:
            count = store.clear(LookupKind(kind) if kind else None)
            print_success(f"Cache cleared. Removed {count} entries.")
        elif purge:
            scheduler = EvictionScheduler(
                store,
                max_ages={k: settings.max_age_for(k) for k in LookupKind},
            )
            deleted = run_async(scheduler.run_once())
            total = sum(deleted.values())
            print_success(f"Purge complete. Removed {total} expired entries.")
            for k, count in deleted.items():
                console.print(f"  {k.value}: {count}")
        elif forget:
            forget_kind = LookupKind(kind) if kind else _kind_of(forget)
            if run_async(_forget(settings, forget_kind, forget)):
                print_success(f"Forgot {forget} ({forget_kind.value}).")
            else:
                print_info(f"{forget} was not cached ({forget_kind.value}).")
        elif stats:
            print_stats(store.stats())
        else:
            click.echo(ctx.get_help())

    except ValidationError as e:
        print_error(str(e))
        sys.exit(2)
    except MojangCacheError as e:
        print_error(f"Cache operation failed: {e}")
        sys.exit(1)


def _kind_of(key: str) -> LookupKind:
    # Player names are at most 16 characters, so they never parse as UUIDs
    if try_parse_uuid(key) is not None:
        return LookupKind.UUID_TO_PROFILE
    return LookupKind.NAME_TO_UUID


async def _forget(settings: CacheSettings, kind: LookupKind, key: str) -> bool:
    from mojangcache.api import LookupService

    service = LookupService(settings)
    try:
        return await service.forget(kind, key)
    finally:
        await service.close()


if __name__ == "__main__":
    cli()
