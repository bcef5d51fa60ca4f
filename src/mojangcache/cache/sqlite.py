"""
SQLite-based durable cache tier.

Stores one table per lookup kind with insert-or-update-by-key semantics,
a hard per-table row ceiling and an age-based purge used by the eviction
scheduler.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Generator, Optional

from mojangcache.cache.codec import codec_for, to_micros
from mojangcache.core.exceptions import CorruptRecordError, StorageUnavailableError
from mojangcache.core.logging import get_logger
from mojangcache.core.models import CacheEntry, Clock, LookupKind, utc_now

logger = get_logger(__name__)


class DurableStore:
    """SQLite-backed cache for resolved lookups.

    Every operation opens its own connection, so a single store may be
    shared by worker threads. SQLite's locking gives per-key atomicity:
    a row is always either fully present or fully absent.
    """

    DEFAULT_MAX_ROWS = 10_000
    DEFAULT_CONNECT_TIMEOUT = 5.0

    def __init__(
        self,
        db_path: Optional[Path] = None,
        max_rows: int = DEFAULT_MAX_ROWS,
        clock: Clock = utc_now,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        """Initialize the durable store.

        Args:
            db_path: Path to SQLite database file. Defaults to
                ~/.mojangcache/cache.db
            max_rows: Maximum number of rows kept per lookup kind.
            clock: Source of "now" for age-based purges.
            connect_timeout: Seconds to wait for a locked database.
        """
        if db_path is None:
            db_path = Path.home() / ".mojangcache" / "cache.db"
        if max_rows < 1:
            raise ValueError("max_rows must be at least 1")

        self.db_path = Path(db_path)
        self.max_rows = max_rows
        self.clock = clock
        self.connect_timeout = connect_timeout

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """Initialize the cache database schema."""
        statements = []
        for kind in LookupKind:
            statements.append(f"""
                CREATE TABLE IF NOT EXISTS {kind.table} (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    created_at INTEGER NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_{kind.table}_created
                ON {kind.table}(created_at, key);
            """)

        with self._connection("initialization") as conn:
            conn.executescript("\n".join(statements))

    @contextmanager
    def _connection(self, operation: str) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection context manager.

        Args:
            operation: Name of the calling operation, used in errors.

        Yields:
            sqlite3.Connection that commits on success.

        Raises:
            StorageUnavailableError: On any SQLite failure.
        """
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.connect_timeout)
        except sqlite3.Error as e:
            raise StorageUnavailableError(operation, str(e))

        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StorageUnavailableError(operation, str(e))
        finally:
            conn.close()

    def get(self, kind: LookupKind, key: str) -> Optional[CacheEntry]:
        """Look up the entry for ``key``.

        Args:
            kind: Lookup kind.
            key: Cache key.

        Returns:
            The entry (whose value may be None for a cached negative), or
            None if no row exists or the row is corrupt.

        Raises:
            StorageUnavailableError: If the database cannot be read.
        """
        with self._connection("get") as conn:
            row = conn.execute(
                f"SELECT key, value, created_at FROM {kind.table} WHERE key = ?",
                (key,),
            ).fetchone()

        if row is None:
            return None

        try:
            return codec_for(kind).decode(row)
        except CorruptRecordError as e:
            logger.warning("corrupt_row_skipped", kind=str(kind), key=key, error=str(e))
            return None

    def put(
        self,
        kind: LookupKind,
        key: str,
        value: Any,
        created_at: datetime,
    ) -> None:
        """Insert or overwrite the entry for ``key``.

        If the insert pushes the table past ``max_rows``, the oldest rows by
        ``created_at`` (ties broken by key) are deleted in the same
        transaction.

        Args:
            kind: Lookup kind.
            key: Cache key.
            value: Value to cache, or None for a confirmed negative.
            created_at: When the value was established.

        Raises:
            StorageUnavailableError: If the database cannot be written.
        """
        row = codec_for(kind).encode(CacheEntry(key=key, value=value, created_at=created_at))

        with self._connection("put") as conn:
            conn.execute(
                f"""
                INSERT INTO {kind.table} (key, value, created_at)
                VALUES (:key, :value, :created_at)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    created_at = excluded.created_at
                """,
                row,
            )

            count = conn.execute(f"SELECT COUNT(*) FROM {kind.table}").fetchone()[0]
            excess = count - self.max_rows
            if excess > 0:
                conn.execute(
                    f"""
                    DELETE FROM {kind.table} WHERE key IN (
                        SELECT key FROM {kind.table}
                        ORDER BY created_at ASC, key ASC
                        LIMIT ?
                    )
                    """,
                    (excess,),
                )
                logger.debug("capacity_evicted", kind=str(kind), deleted=excess)

    def purge_older_than(self, kind: LookupKind, max_age: timedelta) -> int:
        """Delete every row older than ``max_age``.

        Rows whose age equals ``max_age`` are kept.

        Args:
            kind: Lookup kind.
            max_age: Maximum age to keep.

        Returns:
            Number of rows deleted.
        """
        cutoff = to_micros(self.clock() - max_age)

        with self._connection("purge") as conn:
            cursor = conn.execute(
                f"DELETE FROM {kind.table} WHERE created_at < ?",
                (cutoff,),
            )
            return cursor.rowcount

    def delete(self, kind: LookupKind, key: str) -> bool:
        """Delete a specific cache entry.

        Returns:
            True if entry was deleted, False if not found.
        """
        with self._connection("delete") as conn:
            cursor = conn.execute(
                f"DELETE FROM {kind.table} WHERE key = ?",
                (key,),
            )
            return cursor.rowcount > 0

    def count(self, kind: LookupKind) -> int:
        """Return the number of rows stored for ``kind``."""
        with self._connection("count") as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {kind.table}").fetchone()[0]

    def clear(self, kind: Optional[LookupKind] = None) -> int:
        """Clear all entries of one kind, or of every kind.

        Returns:
            Number of entries removed.
        """
        kinds = [kind] if kind is not None else list(LookupKind)
        removed = 0
        with self._connection("clear") as conn:
            for k in kinds:
                removed += conn.execute(f"DELETE FROM {k.table}").rowcount
        return removed

    def stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dict with database size and per-kind row counts and ages.
        """
        now = to_micros(self.clock())
        tables = {}

        with self._connection("stats") as conn:
            for kind in LookupKind:
                row = conn.execute(
                    f"SELECT COUNT(*) AS total, MIN(created_at) AS oldest, "
                    f"SUM(value IS NULL) AS negatives FROM {kind.table}"
                ).fetchone()
                oldest = row["oldest"]
                tables[kind.value] = {
                    "table": kind.table,
                    "rows": row["total"],
                    "negative_rows": row["negatives"] or 0,
                    "oldest_age_seconds": (now - oldest) / 1_000_000 if oldest is not None else None,
                }

        db_size = self.db_path.stat().st_size if self.db_path.exists() else 0

        return {
            "db_path": str(self.db_path),
            "db_size_bytes": db_size,
            "max_rows": self.max_rows,
            "kinds": tables,
        }
