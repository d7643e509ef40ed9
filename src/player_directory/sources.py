"""
Adapters for the places directory records come from: a static bundle file,
the local player_master table, or a remote directory service over HTTP.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional, Protocol

import httpx
from sqlalchemy.exc import SQLAlchemyError

from . import crud
from .database import get_db
from .errors import BundleMalformed, BundleNotFound, RemoteFetchFailed
from .schemas import DirectoryBundle, DirectoryPage, PlayerRecord


class DirectoryClient(Protocol):
    async def fetch_page(self, version: str, page_size: int, token: Optional[str]) -> DirectoryPage: ...


class BundleSource(Protocol):
    async def fetch_bundle(self, version: str) -> DirectoryBundle: ...


def record_from_row(row) -> PlayerRecord:
    """Converts a PlayerMaster row into the wire model."""
    return PlayerRecord(
        id=row.id,
        short_name=row.short_name,
        name_lower=row.name_lower,
        surname_lower=row.surname_lower,
        player_positions=row.player_positions,
        overall=row.overall,
        potential=row.potential,
        age=row.age,
        club_position=row.club_position,
        nationality_name=row.nationality_name,
        preferred_foot=row.preferred_foot,
        version=row.version,
    )


class FileBundleSource:
    """Reads pre-packaged bundles named player_directory_<VERSION>.json."""

    def __init__(self, bundle_dir: str = "data"):
        self.bundle_dir = Path(bundle_dir)

    def path_for(self, version: str) -> Path:
        return self.bundle_dir / f"player_directory_{version}.json"

    def _read(self, version: str) -> DirectoryBundle:
        path = self.path_for(version)
        if not path.is_file():
            raise BundleNotFound(f"No bundle at {path}")
        try:
            bundle = DirectoryBundle.model_validate(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            # ValidationError and JSONDecodeError are both ValueErrors
            raise BundleMalformed(f"Unreadable bundle {path}: {e}") from e
        if bundle.version != version:
            raise BundleMalformed(f"Bundle {path} is for version {bundle.version!r}, not {version!r}")
        return bundle

    async def fetch_bundle(self, version: str) -> DirectoryBundle:
        return await asyncio.to_thread(self._read, version)


class SqlDirectoryClient:
    """Pages through the local player_master table."""

    def __init__(self, session_factory=get_db):
        self._session_factory = session_factory

    def _fetch(self, version: str, page_size: int, token: Optional[str]) -> DirectoryPage:
        with self._session_factory() as db:
            rows, next_token = crud.get_player_page(db, version, page_size, token)
            return DirectoryPage(records=[record_from_row(row) for row in rows], next_token=next_token)

    async def fetch_page(self, version: str, page_size: int, token: Optional[str]) -> DirectoryPage:
        try:
            return await asyncio.to_thread(self._fetch, version, page_size, token)
        except SQLAlchemyError as e:
            raise RemoteFetchFailed(f"Directory query failed: {e}") from e


class HttpDirectoryClient:
    """Pages through a remote directory service exposing /api/directory."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        # One connection pool is reused for every page until aclose()
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_page(self, version: str, page_size: int, token: Optional[str]) -> DirectoryPage:
        params = {"limit": page_size}
        if token:
            params["next_token"] = token
        try:
            resp = await self._get_client().get(f"/api/directory/{version}/players", params=params)
            resp.raise_for_status()
            return DirectoryPage.model_validate(resp.json())
        except httpx.HTTPError as e:
            raise RemoteFetchFailed(f"Directory request failed: {e}") from e
        except ValueError as e:
            # Covers JSON decoding errors and pydantic's ValidationError
            raise RemoteFetchFailed(f"Malformed directory page: {e}") from e
