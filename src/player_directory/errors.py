"""Exceptions raised while acquiring and persisting the player directory."""


class DirectoryError(Exception):
    """Base class for player directory failures."""


class StorageUnavailable(DirectoryError):
    """The durable local store could not be read or written."""


class BundleNotFound(DirectoryError):
    """No static bundle exists for the requested dataset version."""


class BundleMalformed(DirectoryError):
    """A static bundle exists but its payload cannot be used."""


class RemoteFetchFailed(DirectoryError):
    """The paginated directory source failed; the load cannot complete."""
