"""Alert entity and lifecycle vocabulary."""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from cloudguard.timestamps import utc_now_iso


class Severity(str, Enum):
    """Alert severity levels."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Category(str, Enum):
    """Alert categories."""

    IAM = "IAM"
    S3 = "S3"
    NETWORK = "Network"
    ACTIVITY = "Activity"
    CVE = "CVE"


class AlertStatus(str, Enum):
    """Alert lifecycle states."""

    NEW = "New"
    ACKNOWLEDGED = "Acknowledged"
    IN_PROGRESS = "In-Progress"
    RESOLVED = "Resolved"


SEVERITIES: tuple[str, ...] = tuple(member.value for member in Severity)
CATEGORIES: tuple[str, ...] = tuple(member.value for member in Category)
STATUSES: tuple[str, ...] = tuple(member.value for member in AlertStatus)

# Resolved is absorbing.
STATE_TRANSITIONS: Mapping[AlertStatus, frozenset[AlertStatus]] = {
    AlertStatus.NEW: frozenset({AlertStatus.ACKNOWLEDGED, AlertStatus.RESOLVED}),
    AlertStatus.ACKNOWLEDGED: frozenset(
        {AlertStatus.IN_PROGRESS, AlertStatus.RESOLVED}
    ),
    AlertStatus.IN_PROGRESS: frozenset({AlertStatus.RESOLVED}),
    AlertStatus.RESOLVED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    """Return whether ``target`` is directly reachable from ``current``.

    Parameters
    ----------
    current : str
        Present status value.
    target : str
        Requested status value.

    Returns
    -------
    bool
        ``True`` when the edge exists in :data:`STATE_TRANSITIONS`.
    """
    if current not in STATUSES or target not in STATUSES:
        return False
    return AlertStatus(target) in STATE_TRANSITIONS[AlertStatus(current)]


def _new_alert_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class Alert:
    """Tracked security finding.

    Attributes
    ----------
    severity : str
        One of :data:`SEVERITIES`.
    category : str
        One of :data:`CATEGORIES`.
    description : str
        Free-text description.
    status : str
        One of :data:`STATUSES`.
    metadata : dict[str, Any]
        Opaque caller-supplied data.
    id : str
        Unique identifier.
    created_at : str
        ISO creation timestamp.
    updated_at : str
        ISO timestamp of the last status change.
    """

    severity: str
    category: str
    description: str
    status: str = AlertStatus.NEW.value
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=_new_alert_id)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = ""

    def __post_init__(self) -> None:
        if not self.updated_at:
            self.updated_at = self.created_at

    def copy(self) -> Alert:
        """Return a detached copy of this alert.

        Returns
        -------
        Alert
            Copy whose metadata can be changed without touching the original.
        """
        return Alert(
            severity=self.severity,
            category=self.category,
            description=self.description,
            status=self.status,
            metadata=copy.deepcopy(self.metadata),
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the serialized alert shape.

        Returns
        -------
        dict[str, Any]
            The eight public alert fields with camel-cased timestamp keys.
        """
        return {
            "id": self.id,
            "severity": self.severity,
            "category": self.category,
            "status": self.status,
            "description": self.description,
            "metadata": self.metadata,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
