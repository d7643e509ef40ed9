import os
from dotenv import load_dotenv

# Load environment variables from a .env file at the root of the project
load_dotenv()

_MISSING = object()


def get_config(key: str, default=_MISSING) -> str:
    """
    Retrieves a configuration value from the environment.

    Required settings (database credentials and the like) are looked up
    without a default, in which case a missing key raises a ValueError so
    the application never runs with incomplete configuration. Tunables
    pass a default that is returned when the key is absent.

    Args:
        key: The string name of the configuration variable to retrieve.
        default: Optional fallback returned when the key is not set.

    Returns:
        The configuration value as a string.

    Raises:
        ValueError: If the key is not found and no default was given.
    """
    value = os.getenv(key)
    if value is None:
        if default is not _MISSING:
            return default
        raise ValueError(f"Error: Configuration key '{key}' not found in .env file.")
    return value
