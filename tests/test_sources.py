import json
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from player_directory.errors import BundleMalformed, BundleNotFound, RemoteFetchFailed
from player_directory.models import PlayerMaster
from player_directory.sources import FileBundleSource, HttpDirectoryClient, SqlDirectoryClient

pytestmark = pytest.mark.anyio


def _player(name, **extra):
    payload = {"id": f"PM|FC26|{name.lower()}", "shortName": name, "nameLower": name.lower(),
               "playerPositions": "CM", "version": "FC26"}
    payload.update(extra)
    return payload


async def test_file_bundle_loads_players(tmp_path):
    (tmp_path / "player_directory_FC26.json").write_text(
        json.dumps({"version": "FC26", "players": [_player("Pedri", preferredFoot="Left")]}),
        encoding="utf-8",
    )
    bundle = await FileBundleSource(str(tmp_path)).fetch_bundle("FC26")

    assert bundle.version == "FC26"
    assert bundle.players[0].short_name == "Pedri"
    assert bundle.players[0].preferred_foot == "L"


async def test_file_bundle_missing(tmp_path):
    with pytest.raises(BundleNotFound):
        await FileBundleSource(str(tmp_path)).fetch_bundle("FC26")


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps({"players": []}),
    json.dumps({"version": "FC26", "players": [{"shortName": "No Id"}]}),
    json.dumps({"version": "FC25", "players": []}),
])
async def test_file_bundle_malformed(tmp_path, content):
    (tmp_path / "player_directory_FC26.json").write_text(content, encoding="utf-8")
    with pytest.raises(BundleMalformed):
        await FileBundleSource(str(tmp_path)).fetch_bundle("FC26")


async def test_http_client_follows_protocol():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json={"records": [_player("Pedri")], "nextToken": "PM|FC26|pedri"})

    client = HttpDirectoryClient("http://directory.test/", transport=httpx.MockTransport(handler))
    page = await client.fetch_page("FC26", 500, "PM|FC26|a")

    assert page.next_token == "PM|FC26|pedri"
    assert page.records[0].short_name == "Pedri"
    assert seen[0].path == "/api/directory/FC26/players"
    assert seen[0].params["limit"] == "500"
    assert seen[0].params["next_token"] == "PM|FC26|a"


@pytest.mark.parametrize("response", [
    httpx.Response(503, text="unavailable"),
    httpx.Response(200, text="<html>"),
    httpx.Response(200, json={"records": [{"shortName": "missing id"}]}),
])
async def test_http_client_failures_raise_remote_fetch_failed(response):
    client = HttpDirectoryClient("http://directory.test", transport=httpx.MockTransport(lambda request: response))
    with pytest.raises(RemoteFetchFailed):
        await client.fetch_page("FC26", 1000, None)


async def test_http_client_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = HttpDirectoryClient("http://directory.test", transport=httpx.MockTransport(handler))
    with pytest.raises(RemoteFetchFailed, match="connection refused"):
        await client.fetch_page("FC26", 1000, None)


async def test_http_client_reuses_one_connection_pool():
    def handler(request):
        token = request.url.params.get("next_token")
        return httpx.Response(200, json={"records": [_player("Pedri")], "nextToken": None if token else "t1"})

    client = HttpDirectoryClient("http://directory.test", transport=httpx.MockTransport(handler))
    await client.fetch_page("FC26", 1, None)
    pool = client._client
    await client.fetch_page("FC26", 1, "t1")

    assert client._client is pool
    await client.aclose()
    assert pool.is_closed
    assert client._client is None


async def test_sql_client_converts_rows():
    row = PlayerMaster(id="PM|FC26|pedri", short_name="Pedri", name_lower="pedri",
                       player_positions="CM", version="FC26", preferred_foot="R")
    mock_db = MagicMock()

    @contextmanager
    def session_factory():
        yield mock_db

    with patch("player_directory.sources.crud.get_player_page", return_value=([row], "PM|FC26|pedri")) as mock_page:
        page = await SqlDirectoryClient(session_factory).fetch_page("FC26", 1000, None)

    mock_page.assert_called_once_with(mock_db, "FC26", 1000, None)
    assert page.next_token == "PM|FC26|pedri"
    assert page.records[0].id == "PM|FC26|pedri"


async def test_sql_client_wraps_database_errors():
    def session_factory():
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    with pytest.raises(RemoteFetchFailed):
        await SqlDirectoryClient(session_factory).fetch_page("FC26", 1000, None)
