"""Typed failures raised by the issue store and its backends."""


class IssueStoreError(Exception):
    """Base class for every failure reported by the issue store."""

    pass


class InvalidArgumentError(IssueStoreError, ValueError):
    """Raised when a record or identifier is missing, blank or inconsistent.

    The operation that raised it has no effect.
    """

    pass


class StorageUnavailableError(IssueStoreError):
    """Raised when the backing storage cannot be read or written.

    No retry is attempted; the in-memory state is left as it was.
    """

    pass


class ConfigError(IssueStoreError, ValueError):
    """Raised when the config file cannot be read or has the wrong shape."""

    pass
