"""Alert lifecycle orchestration."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from cloudguard.exceptions import InvalidInputError, InvalidTransitionError, NotFoundError
from cloudguard.models.alert import (
    CATEGORIES,
    SEVERITIES,
    Alert,
    AlertStatus,
    Category,
    Severity,
    can_transition,
)
from cloudguard.models.audit import AuditAction, AuditLogEntry
from cloudguard.repositories.alerts import AlertFilter, AlertRepository
from cloudguard.services.audit import AuditLog, AuditLogFilter
from cloudguard.services.validation import validate_status

DEFAULT_DESCRIPTION = "Security finding detected"

SEVERITY_BY_TYPE: Mapping[str, Severity] = {
    "anomaly": Severity.HIGH,
    "rule-violation": Severity.MEDIUM,
    "cve": Severity.HIGH,
}

CATEGORY_BY_TYPE: Mapping[str, Category] = {
    "anomaly": Category.ACTIVITY,
    "rule-violation": Category.IAM,
    "cve": Category.CVE,
}

logger = logging.getLogger(__name__)


def _finding_type(finding: Mapping[str, Any]) -> str | None:
    finding_type = finding.get("type")
    return finding_type if isinstance(finding_type, str) else None


def _metadata_of(finding: Mapping[str, Any]) -> dict[str, Any]:
    metadata = finding.get("metadata")
    return dict(metadata) if isinstance(metadata, Mapping) else {}


def _description_of(finding: Mapping[str, Any]) -> str:
    description = finding.get("description")
    if description is None or description == "":
        return DEFAULT_DESCRIPTION
    if not isinstance(description, str):
        raise InvalidInputError("Invalid finding: description must be a string")
    return description


def determine_severity(finding: Mapping[str, Any]) -> str:
    """Pick the alert severity for a finding.

    Parameters
    ----------
    finding : Mapping[str, Any]
        Raw finding payload.

    Returns
    -------
    str
        The explicit severity when valid, else the type default, else Medium.
    """
    severity = finding.get("severity")
    if severity and severity in SEVERITIES:
        return Severity(severity).value
    return SEVERITY_BY_TYPE.get(_finding_type(finding), Severity.MEDIUM).value


def determine_category(finding: Mapping[str, Any]) -> str:
    """Pick the alert category for a finding.

    Parameters
    ----------
    finding : Mapping[str, Any]
        Raw finding payload.

    Returns
    -------
    str
        The explicit category when valid, else the type default, else Activity.
    """
    category = finding.get("category")
    if category and category in CATEGORIES:
        return Category(category).value
    return CATEGORY_BY_TYPE.get(_finding_type(finding), Category.ACTIVITY).value


class AlertManager:
    """Create, transition and query alerts while recording an audit trail.

    Parameters
    ----------
    repository : AlertRepository
        Alert store.
    audit_log : AuditLog
        Audit trail receiving one entry per create, update and query.
    """

    def __init__(self, repository: AlertRepository, audit_log: AuditLog) -> None:
        self.repository = repository
        self.audit_log = audit_log
        self._mutation_lock = asyncio.Lock()

    async def create_alert(self, finding: Mapping[str, Any] | None) -> Alert:
        """Create an alert from a finding.

        Parameters
        ----------
        finding : Mapping[str, Any] | None
            Raw finding. ``type`` is required; ``severity``, ``category``,
            ``description`` and ``metadata`` are optional.

        Returns
        -------
        Alert
            Persisted alert in the ``New`` state.
        """
        if not isinstance(finding, Mapping) or not finding.get("type"):
            raise InvalidInputError("Invalid finding: missing required fields")

        alert = Alert(
            severity=determine_severity(finding),
            category=determine_category(finding),
            status=AlertStatus.NEW.value,
            description=_description_of(finding),
            metadata=_metadata_of(finding),
        )
        async with self._mutation_lock:
            saved = await self.repository.save(alert)

        self.audit_log.log(
            AuditAction.CREATE_ALERT.value,
            alert_id=saved.id,
            details={"severity": saved.severity, "category": saved.category},
        )
        logger.info(
            "Created alert %s (%s/%s)", saved.id, saved.severity, saved.category
        )
        return saved

    async def update_alert_status(self, alert_id: str, new_status: str) -> Alert:
        """Move an alert along the lifecycle.

        Parameters
        ----------
        alert_id : str
            Alert identifier.
        new_status : str
            Target status.

        Returns
        -------
        Alert
            Updated alert.
        """
        if not validate_status(new_status):
            raise InvalidInputError(f"Invalid status: {new_status}")

        async with self._mutation_lock:
            current = await self.repository.find_by_id(alert_id)
            if current is None:
                raise NotFoundError(f"Alert not found: {alert_id}")
            if not can_transition(current.status, new_status):
                logger.warning(
                    "Rejected transition for alert %s: %s -> %s",
                    alert_id,
                    current.status,
                    new_status,
                )
                raise InvalidTransitionError(current.status, new_status)
            updated = await self.repository.update_status(alert_id, new_status)

        self.audit_log.log(
            AuditAction.UPDATE_ALERT_STATUS.value,
            alert_id=alert_id,
            details={"oldStatus": current.status, "newStatus": new_status},
        )
        logger.info("Alert %s moved %s -> %s", alert_id, current.status, new_status)
        return updated

    async def get_alerts(self, alert_filter: AlertFilter | None = None) -> list[Alert]:
        """List alerts and record the query.

        Parameters
        ----------
        alert_filter : AlertFilter | None, default=None
            Optional equality constraints; ``None`` lists everything.

        Returns
        -------
        list[Alert]
            Matching alerts, newest first.
        """
        alert_filter = alert_filter or AlertFilter()
        alerts = await self.repository.find_all(alert_filter)
        self.audit_log.log(
            AuditAction.GET_ALERTS.value,
            details={"filter": alert_filter.as_dict(), "count": len(alerts)},
        )
        return alerts

    async def get_alert(self, alert_id: str) -> Alert | None:
        """Return a single alert, or ``None`` when unknown."""
        return await self.repository.find_by_id(alert_id)

    def get_audit_logs(
        self, log_filter: AuditLogFilter | None = None
    ) -> list[AuditLogEntry]:
        """Return audit entries, newest first."""
        return self.audit_log.get_logs(log_filter)
