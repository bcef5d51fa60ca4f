"""
Background age-based eviction for the durable tier.
"""

import asyncio
from datetime import timedelta
from typing import Optional

from mojangcache.cache.sqlite import DurableStore
from mojangcache.core.exceptions import StorageUnavailableError
from mojangcache.core.logging import get_logger
from mojangcache.core.models import LookupKind

logger = get_logger(__name__)


class EvictionScheduler:
    """Periodically purge durable rows older than their kind's max age.

    One sweep runs immediately on :meth:`start`, then the task sleeps for
    ``interval`` after each sweep finishes, so sweeps never overlap. A
    failing sweep is logged and the schedule continues.
    """

    DEFAULT_INTERVAL = timedelta(hours=6)
    DEFAULT_MAX_AGE = timedelta(hours=24)

    def __init__(
        self,
        store: DurableStore,
        interval: timedelta = DEFAULT_INTERVAL,
        max_ages: Optional[dict[LookupKind, timedelta]] = None,
    ):
        """Initialize the scheduler.

        Args:
            store: Durable store to sweep.
            interval: Delay between the end of one sweep and the next.
            max_ages: Max age per lookup kind. Kinds not listed use 24 hours.
        """
        self.store = store
        self.interval = interval
        self.max_ages = {kind: self.DEFAULT_MAX_AGE for kind in LookupKind}
        if max_ages:
            self.max_ages.update(max_ages)

        self._task: Optional[asyncio.Task] = None
        self.sweeps = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background task. Must be called from a running loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="mojangcache-eviction"
        )
        logger.info("eviction_started", interval_seconds=self.interval.total_seconds())

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("eviction_stopped", sweeps=self.sweeps, failures=self.failures)

    async def run_once(self) -> dict[LookupKind, int]:
        """Run a single sweep over every kind.

        Each kind is purged on its own, so a kind whose table cannot be
        swept does not keep expired rows of the other kinds alive.

        Returns:
            Rows deleted per kind.

        Raises:
            StorageUnavailableError: If any kind could not be swept. The
                remaining kinds have still been purged.
        """
        deleted: dict[LookupKind, int] = {}
        failed: list[str] = []
        for kind, max_age in self.max_ages.items():
            try:
                deleted[kind] = await asyncio.to_thread(
                    self.store.purge_older_than, kind, max_age
                )
            except StorageUnavailableError as e:
                failed.append(str(kind))
                logger.error("eviction_sweep_failed", kind=str(kind), error=str(e))

        logger.info(
            "eviction_sweep_complete",
            failed=failed,
            **{f"deleted_{kind.value}": count for kind, count in deleted.items()},
        )
        if failed:
            raise StorageUnavailableError("purge", f"sweep failed for {', '.join(failed)}")

        self.sweeps += 1
        return deleted

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.failures += 1
                logger.error("eviction_tick_failed", failures=self.failures, error=str(e))

            await asyncio.sleep(self.interval.total_seconds())
