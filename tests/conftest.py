import os
import tempfile

import pytest

# Point the application at a throwaway SQLite database before any module
# builds its engine from the environment.
_TEST_DIR = tempfile.mkdtemp(prefix="player-directory-test-")
os.environ["PD_DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.sqlite')}"
os.environ["PD_LOG_FILE"] = os.path.join(_TEST_DIR, "logs", "app.log")
os.environ["PD_BUNDLE_DIR"] = os.path.join(_TEST_DIR, "data")

from player_directory.schemas import PlayerRecord


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_record():
    """Factory for directory records keyed by short name."""
    def _make(short_name, version="FC26", **fields):
        name_lower = fields.pop("name_lower", short_name.lower())
        return PlayerRecord(
            id=f"PM|{version}|{name_lower}",
            short_name=short_name,
            name_lower=name_lower,
            player_positions=fields.pop("player_positions", "CM"),
            version=version,
            **fields,
        )
    return _make
