"""
Durable, version-keyed storage for built search indexes.

Snapshots are stored as zlib-compressed JSON behind a small async
key-value interface. Every failure on this path is treated as a cache
miss or a skipped write; callers never see an exception.
"""

from __future__ import annotations

import asyncio
import json
import logging
import zlib
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from . import crud
from .database import get_db
from .errors import StorageUnavailable
from .index import Snapshot

logger = logging.getLogger(__name__)

KEY_PREFIX = "player_directory:"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[bytes]: ...

    async def put(self, key: str, value: bytes) -> None: ...


class SqlKeyValueStore:
    """Key-value backend on the 'directory_snapshots' table."""

    def __init__(self, session_factory=get_db):
        self._session_factory = session_factory

    def _get(self, key: str) -> Optional[bytes]:
        with self._session_factory() as db:
            return crud.get_snapshot_payload(db, key)

    def _put(self, key: str, value: bytes) -> None:
        with self._session_factory() as db:
            crud.save_snapshot_payload(db, key, value)
            db.commit()

    async def get(self, key: str) -> Optional[bytes]:
        try:
            return await asyncio.to_thread(self._get, key)
        except SQLAlchemyError as e:
            raise StorageUnavailable(str(e)) from e

    async def put(self, key: str, value: bytes) -> None:
        try:
            await asyncio.to_thread(self._put, key, value)
        except SQLAlchemyError as e:
            raise StorageUnavailable(str(e)) from e


def encode_snapshot(snapshot: Snapshot) -> bytes:
    payload = {"version": snapshot.version, "names": snapshot.names, "meta": snapshot.meta}
    return zlib.compress(json.dumps(payload, separators=(",", ":")).encode("utf-8"))


def decode_snapshot(raw: bytes, version: str) -> Optional[Snapshot]:
    """Parses stored bytes; returns None if they do not hold a usable snapshot for `version`."""
    try:
        payload = json.loads(zlib.decompress(raw).decode("utf-8"))
    except (zlib.error, UnicodeDecodeError, ValueError):
        return None

    if not isinstance(payload, dict) or payload.get("version") != version:
        return None
    names = payload.get("names")
    meta = payload.get("meta")
    if not isinstance(names, list) or not isinstance(meta, list) or len(names) != len(meta):
        return None
    if not all(isinstance(n, str) for n in names) or not all(isinstance(m, dict) for m in meta):
        return None
    return Snapshot(version=version, names=names, meta=meta)


class SnapshotStore:
    def __init__(self, backend: KeyValueStore, key_prefix: str = KEY_PREFIX):
        self.backend = backend
        self.key_prefix = key_prefix

    def _key(self, version: str) -> str:
        return f"{self.key_prefix}{version}"

    async def get(self, version: str) -> Optional[Snapshot]:
        """Returns the stored snapshot for `version`, or None on a miss of any kind."""
        try:
            raw = await self.backend.get(self._key(version))
        except Exception as e:
            logger.warning(f"Snapshot read failed for {version}: {e}")
            return None
        if not raw:
            return None

        snapshot = decode_snapshot(raw, version)
        if snapshot is None:
            logger.warning(f"Ignoring unreadable snapshot for {version}")
        return snapshot

    async def put(self, version: str, snapshot: Snapshot) -> None:
        """Best-effort write; failures are logged and dropped."""
        try:
            await self.backend.put(self._key(version), encode_snapshot(snapshot))
        except Exception as e:
            logger.warning(f"Snapshot write failed for {version}: {e}")
            return
        logger.info(f"Saved snapshot for {version} ({len(snapshot.names):,} players)")
