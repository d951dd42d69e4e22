"""Domain exception types."""

from __future__ import annotations


class CloudGuardError(Exception):
    """Base error for alert lifecycle operations."""


class InvalidInputError(CloudGuardError):
    """Input was missing required fields or used an unknown value.

    Parameters
    ----------
    message : str
        Error message.
    errors : list[str] | None, default=None
        Individual validation failures, in reporting order.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = list(errors) if errors else [message]
        super().__init__(message)


class NotFoundError(CloudGuardError):
    """Referenced alert does not exist."""


class DuplicateKeyError(CloudGuardError):
    """An alert with the same identifier is already stored."""


class InvalidTransitionError(CloudGuardError):
    """Requested status is not reachable from the current status.

    Parameters
    ----------
    current : str
        Status the alert currently holds.
    target : str
        Requested status.
    """

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid status transition from {current} to {target}")
