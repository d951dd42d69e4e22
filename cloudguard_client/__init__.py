"""Python SDK for the CloudGuard alert service."""

from cloudguard_client.client import CloudGuardClient
from cloudguard_client.exceptions import (
    CloudGuardAPIError,
    CloudGuardClientError,
    CloudGuardConflictError,
    CloudGuardNotFoundError,
    CloudGuardRateLimitError,
    CloudGuardValidationError,
)
from cloudguard_client.types import AlertInfo, AuditLogInfo

__all__ = [
    "AlertInfo",
    "AuditLogInfo",
    "CloudGuardAPIError",
    "CloudGuardClient",
    "CloudGuardClientError",
    "CloudGuardConflictError",
    "CloudGuardNotFoundError",
    "CloudGuardRateLimitError",
    "CloudGuardValidationError",
]
