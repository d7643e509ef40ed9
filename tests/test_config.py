import pytest
from player_directory.config import get_config


def test_get_config_success(monkeypatch):
    """
    Tests that get_config successfully retrieves an existing environment variable.
    """
    monkeypatch.setenv("EXISTING_KEY", "test_value")
    assert get_config("EXISTING_KEY") == "test_value"


def test_get_config_failure_raises_value_error(monkeypatch):
    """
    Tests that get_config raises a ValueError for a missing required variable.
    """
    monkeypatch.delenv("MISSING_KEY", raising=False)
    with pytest.raises(ValueError) as excinfo:
        get_config("MISSING_KEY")
    assert "Error: Configuration key 'MISSING_KEY' not found" in str(excinfo.value)


def test_get_config_returns_default_for_missing_key(monkeypatch):
    monkeypatch.delenv("MISSING_KEY", raising=False)
    assert get_config("MISSING_KEY", "FC26") == "FC26"
    assert get_config("MISSING_KEY", None) is None


def test_get_config_prefers_environment_over_default(monkeypatch):
    monkeypatch.setenv("PD_PAGE_SIZE", "250")
    assert get_config("PD_PAGE_SIZE", "1000") == "250"
