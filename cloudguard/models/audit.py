"""Audit event model."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class AuditAction(str, Enum):
    """Actions recorded by the alert manager."""

    CREATE_ALERT = "CREATE_ALERT"
    UPDATE_ALERT_STATUS = "UPDATE_ALERT_STATUS"
    GET_ALERTS = "GET_ALERTS"


@dataclass(frozen=True, slots=True)
class AuditLogEntry:
    """Append-only audit entry.

    Attributes
    ----------
    id : str
        Unique entry identifier.
    action : str | None
        Event tag, stored exactly as logged.
    timestamp : str
        ISO timestamp of the event.
    alert_id : str | None
        Alert the event concerns, if any.
    details : Mapping[str, Any]
        Additional event fields, read-only.
    """

    id: str
    action: str | None
    timestamp: str
    alert_id: str | None = None
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def to_dict(self) -> dict[str, Any]:
        """Return the flattened entry shape.

        Returns
        -------
        dict[str, Any]
            ``id``, ``action``, optional ``alertId``, the detail fields and
            ``timestamp``.
        """
        payload: dict[str, Any] = {"id": self.id, "action": self.action}
        if self.alert_id is not None:
            payload["alertId"] = self.alert_id
        for key, value in self.details.items():
            if key not in {"id", "action", "alertId", "timestamp"}:
                payload[key] = value
        payload["timestamp"] = self.timestamp
        return payload
