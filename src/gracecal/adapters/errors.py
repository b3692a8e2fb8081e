"""Errors raised by data store adapters."""


class DataStoreError(Exception):
    """Raised when a store can't be read or written."""

    pass


class NotFoundError(DataStoreError):
    """Raised when a record id doesn't exist."""

    pass
