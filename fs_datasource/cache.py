"""
Parsed-table cache for fs-datasource.

Tables are cached by source path so repeated queries (several dashboard
panels reading the same file) fetch and parse once.

Policy:
- Keyed purely by path; a later ``put`` for the same path overwrites.
- ``max_entries``: least-recently-used entries are evicted beyond it.
- ``ttl_seconds``: entries older than this are treated as absent.
- Both default to ``None``: unbounded retention until ``invalidate()``,
  ``clear()`` or process exit.

Concurrency:
- Every operation holds a ``threading.Lock``.
- ``get_or_load()`` is single-flight per path: while one caller is
  loading a path, concurrent callers for the same path wait on the same
  ``concurrent.futures.Future`` and receive its result (or exception)
  instead of issuing a second upstream fetch. Failed loads are not
  cached.

A process-wide instance (``default_cache()``) is shared by datasources
that are not given their own cache.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from concurrent.futures import Future

from fs_datasource.table import CachedTable, Table

logger = logging.getLogger(__name__)


class TableCache:
    """Path-keyed store of parsed tables."""

    def __init__(
        self,
        max_entries: int | None = None,
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {ttl_seconds}")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CachedTable] = OrderedDict()
        self._pending: dict[str, Future] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _get_locked(self, path: str) -> CachedTable | None:
        entry = self._entries.get(path)
        if entry is None:
            return None
        if self.ttl_seconds is not None:
            age_ms = self._now_ms() - entry.timestamp
            if age_ms > self.ttl_seconds * 1000:
                logger.debug("Cache entry expired: %s (age %d ms)", path, age_ms)
                del self._entries[path]
                return None
        self._entries.move_to_end(path)
        return entry

    def get(self, path: str) -> CachedTable | None:
        """Cached entry for *path*, or None if absent or expired."""
        with self._lock:
            return self._get_locked(path)

    def put(self, path: str, table: Table) -> CachedTable:
        """Store *table* for *path*, stamped with the current time."""
        entry = CachedTable(path=path, table=table, timestamp=self._now_ms())
        with self._lock:
            self._entries[path] = entry
            self._entries.move_to_end(path)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug("Evicted cache entry: %s", evicted)
        return entry

    def invalidate(self, path: str) -> bool:
        """Drop the entry for *path*. Returns True if one was present."""
        with self._lock:
            return self._entries.pop(path, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def get_or_load(self, path: str, loader: Callable[[], Table]) -> Table:
        """Return the cached table for *path*, loading it at most once.

        Args:
            path: Cache key.
            loader: Called with no arguments to fetch and parse on a miss.

        Returns:
            The cached or freshly loaded Table.

        Raises:
            Whatever *loader* raises, in the loading caller and in every
            caller that was waiting on the same path.
        """
        with self._lock:
            entry = self._get_locked(path)
            if entry is not None:
                self.hits += 1
                logger.debug("Cache hit: %s", path)
                return entry.table
            future = self._pending.get(path)
            owner = future is None
            if owner:
                self.misses += 1
                future = Future()
                self._pending[path] = future

        if not owner:
            logger.debug("Waiting for in-flight load: %s", path)
            return future.result()

        try:
            table = loader()
            self.put(path, table)
            future.set_result(table)
            return table
        except Exception as e:
            future.set_exception(e)
            raise
        finally:
            with self._lock:
                self._pending.pop(path, None)
            if not future.done():
                future.cancel()


_default_cache: TableCache | None = None
_default_lock = threading.Lock()


def default_cache() -> TableCache:
    """The process-wide cache shared by datasources without their own."""
    global _default_cache
    with _default_lock:
        if _default_cache is None:
            _default_cache = TableCache()
        return _default_cache


def reset_default_cache() -> None:
    """Discard the process-wide cache (used by tests)."""
    global _default_cache
    with _default_lock:
        _default_cache = None
