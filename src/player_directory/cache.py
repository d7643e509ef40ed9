"""
Process-wide owner of the player directory search indexes.

DirectoryCache is the only writer of index and load-status state. Loads are
single-flight per dataset version: overlapping warm() calls share one
asyncio task, and each version loads independently of the others.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from contextlib import aclosing
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .acquirer import SOURCE_SNAPSHOT, DatasetAcquirer
from .index import SearchIndex, check_invariants
from .search import RankedResult, search
from .snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "FC26"
DEFAULT_RESULTS = 8
MAX_RESULTS = 25


@dataclass
class LoadStatus:
    version: str
    loaded: bool = False
    loading: bool = False
    loaded_count: int = 0
    last_error: Optional[str] = None

    @property
    def unavailable(self) -> bool:
        return bool(self.last_error) and not self.loaded


class DirectoryCache:
    def __init__(self, acquirer: DatasetAcquirer, snapshot_store: Optional[SnapshotStore] = None):
        self.acquirer = acquirer
        self.snapshot_store = snapshot_store
        self._indexes: Dict[str, SearchIndex] = {}
        self._statuses: Dict[str, LoadStatus] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._persist_tasks: Set[asyncio.Task] = set()
        self.load_times: Dict[str, float] = {}

    def warm(self, version: str = DEFAULT_VERSION, retry: bool = True) -> asyncio.Task:
        """
        Ensures the directory for `version` is loaded or loading.

        Returns the task driving the load. A completed load, or one already
        in flight, is returned as-is. A failed load is restarted only when
        `retry` is true; per-keystroke callers pass retry=False so the
        failure stays visible in status(version). The task never raises:
        failures land in status(version).last_error. Must be called from a
        running event loop.
        """
        task = self._tasks.get(version)
        if task is not None:
            if not task.done():
                return task
            status = self._statuses.get(version)
            if status is not None and (status.loaded or not retry):
                return task

        visible = self._indexes.get(version)
        self._statuses[version] = LoadStatus(version=version, loading=True, loaded_count=len(visible) if visible else 0)
        task = asyncio.get_running_loop().create_task(self._load(version), name=f"directory-load-{version}")
        self._tasks[version] = task
        return task

    def status(self, version: str = DEFAULT_VERSION) -> LoadStatus:
        """Returns a copy of the current load status; never blocks."""
        status = self._statuses.get(version)
        if status is None:
            return LoadStatus(version=version)
        return dataclasses.replace(status)

    def current_index(self, version: str = DEFAULT_VERSION) -> Optional[SearchIndex]:
        """Returns the index for `version`, possibly still being built."""
        return self._indexes.get(version)

    def search(self, query: str, limit: int = DEFAULT_RESULTS, version: str = DEFAULT_VERSION) -> List[RankedResult]:
        limit = max(1, min(MAX_RESULTS, limit or DEFAULT_RESULTS))
        return search(query, self._indexes.get(version), limit)

    async def _load(self, version: str) -> LoadStatus:
        status = self._statuses[version]
        index = SearchIndex(version=version)
        # A previous partial index stays visible until the new one catches up
        previous = self._indexes.get(version)
        if previous is None or not len(previous):
            self._indexes[version] = index
        source = None
        start_time = time.time()
        logger.info(f"Loading player directory {version}...")

        try:
            async with aclosing(self.acquirer.acquire(version)) as batches:
                async for batch in batches:
                    index.extend(batch.records)
                    source = batch.source
                    status.loaded_count = max(status.loaded_count, len(index))
                    if previous is not None and len(index) >= len(previous):
                        self._indexes[version] = index
                    if batch.done:
                        break
        except Exception as e:
            status.last_error = str(e) or e.__class__.__name__
            status.loading = False
            status.loaded = False
            logger.error(f"Failed to load player directory {version} after {len(index):,} players: {e}")
            return dataclasses.replace(status)

        self._indexes[version] = index
        problem = check_invariants(index)
        if problem:
            logger.error(f"Index for {version} is inconsistent: {problem}")

        status.loading = False
        status.loaded = True
        status.last_error = None
        self.load_times[version] = time.time() - start_time
        logger.info(f"Loaded {len(index):,} players for {version} in {self.load_times[version]:.3f} seconds")

        if self.snapshot_store is not None and source != SOURCE_SNAPSHOT and len(index):
            self._persist(version, index)
        return dataclasses.replace(status)

    def _persist(self, version: str, index: SearchIndex) -> None:
        task = asyncio.get_running_loop().create_task(self.snapshot_store.put(version, index.to_snapshot()))
        self._persist_tasks.add(task)
        task.add_done_callback(self._persist_tasks.discard)

    async def drain(self) -> None:
        """Waits for in-flight loads and snapshot writes (used at shutdown)."""
        pending = [t for t in self._tasks.values() if not t.done()]
        if pending:
            await asyncio.gather(*pending)
        if self._persist_tasks:
            await asyncio.gather(*list(self._persist_tasks))

    def get_stats(self) -> dict:
        """
        Get statistics about every dataset version the cache knows.

        Returns:
            Dictionary keyed by version
        """
        return {
            version: {
                "loaded": status.loaded,
                "loading": status.loading,
                "total_players": status.loaded_count,
                "buckets": len(self._indexes[version].by_first_char) if version in self._indexes else 0,
                "load_time_seconds": self.load_times.get(version),
                "last_error": status.last_error,
            }
            for version, status in self._statuses.items()
        }
