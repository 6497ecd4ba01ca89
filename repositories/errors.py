"""
Storage-level exceptions raised by repositories.
"""


class StorageUnavailableError(Exception):
    """The backing store could not be reached or failed mid-operation."""


class ConcurrencyConflictError(Exception):
    """A conditional update matched no rows because state changed since it was read."""
