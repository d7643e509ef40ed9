"""
Builds the application's DirectoryCache from configuration.
"""

import logging
from functools import lru_cache

from .acquirer import DatasetAcquirer
from .cache import DirectoryCache
from .config import get_config
from .logger import get_logger
from .snapshot_store import SnapshotStore, SqlKeyValueStore
from .sources import FileBundleSource, HttpDirectoryClient, SqlDirectoryClient

logger = logging.getLogger(__name__)


def build_directory_cache() -> DirectoryCache:
    # Module loggers under the package propagate to this rotating file handler
    get_logger("player_directory")

    store = SnapshotStore(SqlKeyValueStore())

    directory_url = get_config("PD_DIRECTORY_URL", None)
    if directory_url:
        logger.info(f"Using remote directory service at {directory_url}")
        client = HttpDirectoryClient(directory_url)
    else:
        client = SqlDirectoryClient()

    acquirer = DatasetAcquirer(
        snapshot_store=store,
        bundle_source=FileBundleSource(get_config("PD_BUNDLE_DIR", "data")),
        directory_client=client,
        page_size=int(get_config("PD_PAGE_SIZE", "1000")),
        max_pages=int(get_config("PD_MAX_PAGES", "200")),
    )
    return DirectoryCache(acquirer, snapshot_store=store)


@lru_cache(maxsize=1)
def get_directory_cache() -> DirectoryCache:
    """The process-wide cache instance."""
    return build_directory_cache()


def default_version() -> str:
    return get_config("PD_DEFAULT_VERSION", "FC26")
