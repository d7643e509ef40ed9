import zlib
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from player_directory.database import init_db
from player_directory.errors import StorageUnavailable
from player_directory.index import Snapshot
from player_directory.snapshot_store import (
    SnapshotStore,
    SqlKeyValueStore,
    decode_snapshot,
    encode_snapshot,
)

pytestmark = pytest.mark.anyio


class MemoryKeyValueStore:
    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def put(self, key, value):
        self.data[key] = value


class BrokenKeyValueStore:
    async def get(self, key):
        raise StorageUnavailable("storage disabled")

    async def put(self, key, value):
        raise StorageUnavailable("quota exceeded")


def _snapshot(version="FC26"):
    return Snapshot(
        version=version,
        names=["j. bellingham", "pedri"],
        meta=[
            {"id": "PM|FC26|j. bellingham", "shortName": "J. Bellingham", "nameLower": "j. bellingham"},
            {"id": "PM|FC26|pedri", "shortName": "Pedri", "nameLower": "pedri"},
        ],
    )


async def test_put_then_get_round_trips():
    store = SnapshotStore(MemoryKeyValueStore())
    await store.put("FC26", _snapshot())

    assert await store.get("FC26") == _snapshot()
    assert await store.get("FC25") is None


async def test_versions_are_compared_exactly():
    backend = MemoryKeyValueStore()
    store = SnapshotStore(backend)
    await store.put("FC26", _snapshot())

    # A payload stored under one key but tagged with another version is ignored
    backend.data[store._key("fc26")] = backend.data[store._key("FC26")]
    assert await store.get("fc26") is None


async def test_storage_failures_are_swallowed():
    store = SnapshotStore(BrokenKeyValueStore())
    await store.put("FC26", _snapshot())
    assert await store.get("FC26") is None


async def test_unexpected_backend_errors_are_swallowed():
    backend = MagicMock()
    backend.get.side_effect = RuntimeError("private browsing")
    store = SnapshotStore(backend)
    assert await store.get("FC26") is None


@pytest.mark.parametrize("raw", [
    b"not compressed",
    zlib.compress(b"not json"),
    zlib.compress(b"[1, 2]"),
    zlib.compress(b'{"version": "FC26", "names": ["a"], "meta": []}'),
    zlib.compress(b'{"version": "FC26", "names": [1], "meta": [{}]}'),
])
async def test_corrupt_payloads_are_misses(raw):
    backend = MemoryKeyValueStore()
    store = SnapshotStore(backend)
    backend.data[store._key("FC26")] = raw
    assert await store.get("FC26") is None


def test_encode_decode():
    assert decode_snapshot(encode_snapshot(_snapshot()), "FC26") == _snapshot()


async def test_sql_backend_round_trip():
    init_db()
    store = SnapshotStore(SqlKeyValueStore())
    await store.put("SNAPSHOT-SQL", _snapshot("SNAPSHOT-SQL"))
    await store.put("SNAPSHOT-SQL", _snapshot("SNAPSHOT-SQL"))

    assert await store.get("SNAPSHOT-SQL") == _snapshot("SNAPSHOT-SQL")


async def test_sql_backend_wraps_database_errors():
    def failing_session():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    backend = SqlKeyValueStore(session_factory=failing_session)
    with pytest.raises(StorageUnavailable):
        await backend.get("player_directory:FC26")
    assert await SnapshotStore(backend).get("FC26") is None
