"""Exception hierarchy for the finance tracker."""

from __future__ import annotations


class FinanceTrackerError(Exception):
    """Base class for errors raised by the finance tracker."""


class StoreError(FinanceTrackerError):
    """A transaction or budget store operation failed."""


class RecordNotFoundError(StoreError):
    """The record targeted by an update or delete does not exist."""


class NotAuthenticatedError(FinanceTrackerError):
    """An operation that needs a user was attempted without one."""


class ValidationError(FinanceTrackerError, ValueError):
    """A transaction or budget failed basic field checks."""
