"""SDK response types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

_AUDIT_BASE_KEYS = frozenset({"id", "action", "alertId", "timestamp"})


def _parse_datetime(value: str) -> datetime:
    """Parse an ISO datetime string.

    Parameters
    ----------
    value : str
        ISO-formatted datetime string.

    Returns
    -------
    datetime
        Parsed datetime, UTC when the string carries no offset.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class AlertInfo:
    """Alert record.

    Attributes
    ----------
    id : str
        Alert identifier.
    severity : str
        Severity level.
    category : str
        Finding category.
    status : str
        Lifecycle status.
    description : str
        Free-text description.
    metadata : dict[str, Any]
        Caller-supplied metadata.
    created_at : datetime
        Creation timestamp.
    updated_at : datetime
        Last status change timestamp.
    """

    id: str
    severity: str
    category: str
    status: str
    description: str
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> AlertInfo:
        """Build a record from an API payload.

        Parameters
        ----------
        data : dict[str, Any]
            Alert JSON object.

        Returns
        -------
        AlertInfo
            Parsed alert.
        """
        return cls(
            id=data["id"],
            severity=data["severity"],
            category=data["category"],
            status=data["status"],
            description=data["description"],
            metadata=dict(data.get("metadata") or {}),
            created_at=_parse_datetime(data["createdAt"]),
            updated_at=_parse_datetime(data["updatedAt"]),
        )

    @property
    def is_resolved(self) -> bool:
        """Return whether the alert reached its terminal state."""
        return self.status == "Resolved"


@dataclass(frozen=True, slots=True)
class AuditLogInfo:
    """Audit log entry.

    Attributes
    ----------
    id : str
        Entry identifier.
    action : str | None
        Event tag.
    timestamp : str
        Event time as reported by the server.
    alert_id : str | None
        Alert the event concerns.
    details : dict[str, Any]
        Remaining event fields such as ``oldStatus`` or ``count``.
    """

    id: str
    action: str | None
    timestamp: str
    alert_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> AuditLogInfo:
        """Build an entry from an API payload.

        Parameters
        ----------
        data : dict[str, Any]
            Audit entry JSON object.

        Returns
        -------
        AuditLogInfo
            Parsed entry.
        """
        return cls(
            id=str(data["id"]),
            action=data.get("action"),
            timestamp=data["timestamp"],
            alert_id=data.get("alertId"),
            details={
                key: value
                for key, value in data.items()
                if key not in _AUDIT_BASE_KEYS
            },
        )
