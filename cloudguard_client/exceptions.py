"""SDK exception types."""

from __future__ import annotations


class CloudGuardClientError(Exception):
    """Base SDK error."""


class CloudGuardAPIError(CloudGuardClientError):
    """API request failed.

    Parameters
    ----------
    message : str
        Error message.
    status_code : int | None, default=None
        HTTP status code if available.
    errors : list[str] | None, default=None
        Individual validation messages reported by the server.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        errors: list[str] | None = None,
    ) -> None:
        self.status_code = status_code
        self.errors = list(errors or [])
        super().__init__(message)


class CloudGuardValidationError(CloudGuardAPIError):
    """Request payload was rejected."""


class CloudGuardNotFoundError(CloudGuardAPIError):
    """Requested alert was not found."""


class CloudGuardConflictError(CloudGuardAPIError):
    """Request conflicted with the alert's current state."""


class CloudGuardRateLimitError(CloudGuardAPIError):
    """Caller hit a rate limit."""
