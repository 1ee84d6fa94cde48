"""
Planner Errors
==============

Error taxonomy for the sync planner.

Fatal errors (SourceConnectionError, CatalogQueryError, ConfigurationError)
abort the planning run. NonNumericKeyError is only ever carried inside a
NonNumericKey probe result and degrades a single table to an unpartitioned read.
"""


class SyncPlannerError(Exception):
    """Base error for sync_planner."""


class ConfigurationError(SyncPlannerError):
    """Raised when the settings file is missing, unreadable or invalid."""


class SourceConnectionError(SyncPlannerError):
    """Raised when a pooled connection cannot be obtained or validated."""


class CatalogQueryError(SyncPlannerError):
    """Raised when a catalog query fails (permissions, malformed schema)."""


class NonNumericKeyError(SyncPlannerError):
    """The max value of a key column cannot be interpreted as an integer."""

    def __init__(self, table: str, column: str, value):
        self.table = table
        self.column = column
        self.value = value
        super().__init__(
            f"Max value of {table}.{column} is not an integer: "
            f"{value!r} ({type(value).__name__})"
        )


class CompositeKeyWarning(UserWarning):
    """A table has a composite primary key; only its first column is used."""
