"""Exception hierarchy shared by services and the CLI."""

from __future__ import annotations


class BudgetSageError(Exception):
    """Base class for application errors."""


class InputValidationError(BudgetSageError, ValueError):
    """User-supplied input was rejected before any state changed."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class PersistenceError(BudgetSageError):
    """A save or fetch against the database failed; the caller may retry."""


class SecureStorageError(BudgetSageError):
    """The local encrypted store could not read or write an entry."""


class RemoteStoreError(BudgetSageError):
    """The remote record mirror rejected or could not serve a request."""


class RecordNotFoundError(BudgetSageError, LookupError):
    """A record referenced by id does not exist for the user."""
