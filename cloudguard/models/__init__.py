"""Domain entities and ORM models."""

from cloudguard.models.alert import (
    CATEGORIES,
    SEVERITIES,
    STATE_TRANSITIONS,
    STATUSES,
    Alert,
    AlertStatus,
    Category,
    Severity,
    can_transition,
)
from cloudguard.models.audit import AuditAction, AuditLogEntry
from cloudguard.models.tables import AlertRow

__all__ = [
    "CATEGORIES",
    "SEVERITIES",
    "STATE_TRANSITIONS",
    "STATUSES",
    "Alert",
    "AlertRow",
    "AlertStatus",
    "AuditAction",
    "AuditLogEntry",
    "Category",
    "Severity",
    "can_transition",
]
