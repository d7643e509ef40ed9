"""
Tiered acquisition of the raw player directory for a dataset version.

Tiers are tried strictly in order and a later tier runs only when the
earlier one produced no records:

1. the persistent snapshot store,
2. the static bundle file,
3. the paginated directory source.

Only the last tier is allowed to fail loudly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional

from .errors import BundleMalformed, BundleNotFound, RemoteFetchFailed
from .index import records_from_snapshot
from .schemas import PlayerRecord
from .snapshot_store import SnapshotStore
from .sources import BundleSource, DirectoryClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
MAX_PAGES = 200

SOURCE_SNAPSHOT = "snapshot"
SOURCE_BUNDLE = "bundle"
SOURCE_REMOTE = "remote"


@dataclass
class RawBatch:
    records: List[PlayerRecord]
    progress_count: int
    done: bool
    source: str


class DatasetAcquirer:
    def __init__(
        self,
        snapshot_store: Optional[SnapshotStore] = None,
        bundle_source: Optional[BundleSource] = None,
        directory_client: Optional[DirectoryClient] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = MAX_PAGES,
    ):
        self.snapshot_store = snapshot_store
        self.bundle_source = bundle_source
        self.directory_client = directory_client
        self.page_size = page_size
        self.max_pages = max_pages

    async def _from_snapshot(self, version: str) -> List[PlayerRecord]:
        if self.snapshot_store is None:
            return []
        snapshot = await self.snapshot_store.get(version)
        if snapshot is None or not snapshot.names:
            return []
        try:
            return records_from_snapshot(snapshot)
        except ValueError as e:
            logger.warning(f"Discarding snapshot for {version}: {e}")
            return []

    async def _from_bundle(self, version: str) -> List[PlayerRecord]:
        if self.bundle_source is None:
            return []
        try:
            bundle = await self.bundle_source.fetch_bundle(version)
        except BundleNotFound as e:
            logger.info(f"No static bundle for {version}: {e}")
            return []
        except BundleMalformed as e:
            logger.warning(f"Skipping static bundle for {version}: {e}")
            return []
        return list(bundle.players)

    async def acquire(self, version: str) -> AsyncIterator[RawBatch]:
        """
        Yields the directory for `version` as a sequence of batches.

        The snapshot and bundle tiers yield a single batch marked done.
        The remote tier yields one batch per page with done set on the
        last page only; its failures propagate as RemoteFetchFailed.
        """
        records = await self._from_snapshot(version)
        if records:
            logger.info(f"Loaded {len(records):,} players for {version} from snapshot")
            yield RawBatch(records, len(records), True, SOURCE_SNAPSHOT)
            return

        records = await self._from_bundle(version)
        if records:
            logger.info(f"Loaded {len(records):,} players for {version} from static bundle")
            yield RawBatch(records, len(records), True, SOURCE_BUNDLE)
            return

        if self.directory_client is None:
            raise RemoteFetchFailed(f"No directory source configured for {version}")

        token = None
        total = 0
        try:
            for page_number in range(self.max_pages):
                page = await self.directory_client.fetch_page(version, self.page_size, token)
                token = page.next_token or None
                total += len(page.records)
                logger.debug(f"Fetched page {page_number + 1} for {version} ({total:,} players so far)")
                yield RawBatch(list(page.records), total, token is None, SOURCE_REMOTE)
                if token is None:
                    return

            raise RemoteFetchFailed(f"Directory for {version} still paginating after {self.max_pages} pages")
        finally:
            # Clients holding a connection pool release it once per run
            aclose = getattr(self.directory_client, "aclose", None)
            if aclose is not None:
                await aclose()
