"""Alert manager tests."""

import asyncio

import pytest

from cloudguard.exceptions import (
    DuplicateKeyError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from cloudguard.models import STATE_TRANSITIONS, STATUSES, Alert, AlertStatus
from cloudguard.repositories.alerts import AlertFilter, InMemoryAlertRepository
from cloudguard.services.alerts import AlertManager
from cloudguard.services.audit import AuditLog, AuditLogFilter

S3_FINDING = {
    "type": "anomaly",
    "severity": "High",
    "category": "S3",
    "description": "Suspicious S3 bucket access",
}


class TestCreateAlert:
    """Alert creation from findings."""

    async def test_creates_new_alert_from_finding(
        self, manager: AlertManager, repository: InMemoryAlertRepository
    ) -> None:
        """Keep explicit severity and category and start in New."""
        alert = await manager.create_alert(S3_FINDING)

        assert alert.status == "New"
        assert alert.severity == "High"
        assert alert.category == "S3"
        assert alert.description == "Suspicious S3 bucket access"
        assert await repository.find_by_id(alert.id) == alert

    @pytest.mark.parametrize(
        ("finding_type", "severity", "category"),
        [
            ("anomaly", "High", "Activity"),
            ("rule-violation", "Medium", "IAM"),
            ("cve", "High", "CVE"),
            ("something-else", "Medium", "Activity"),
        ],
    )
    async def test_derives_severity_and_category_from_type(
        self,
        manager: AlertManager,
        finding_type: str,
        severity: str,
        category: str,
    ) -> None:
        """Map the finding type when no explicit values are given."""
        alert = await manager.create_alert({"type": finding_type})

        assert alert.severity == severity
        assert alert.category == category

    async def test_invalid_explicit_values_fall_back_to_type(
        self, manager: AlertManager
    ) -> None:
        """Ignore out-of-vocabulary severity and category."""
        alert = await manager.create_alert(
            {"type": "cve", "severity": "Critical", "category": "s3"}
        )

        assert alert.severity == "High"
        assert alert.category == "CVE"

    async def test_defaults_and_status_hint(self, manager: AlertManager) -> None:
        """Fill description and metadata and ignore status hints."""
        alert = await manager.create_alert({"type": "anomaly", "status": "Resolved"})

        assert alert.status == "New"
        assert alert.description == "Security finding detected"
        assert alert.metadata == {}

    async def test_metadata_is_stored_opaquely(self, manager: AlertManager) -> None:
        """Store metadata as given."""
        metadata = {"account": "123456789012", "tags": ["prod"], "score": 9.1}

        alert = await manager.create_alert({"type": "anomaly", "metadata": metadata})

        assert alert.metadata == metadata

    async def test_ids_are_unique(self, manager: AlertManager) -> None:
        """Assign a fresh id to every alert."""
        alerts = [await manager.create_alert({"type": "cve"}) for _ in range(20)]
        assert len({alert.id for alert in alerts}) == 20

    async def test_logs_creation(
        self, manager: AlertManager, audit_log: AuditLog
    ) -> None:
        """Record alert id, severity and category."""
        alert = await manager.create_alert(S3_FINDING)

        (entry,) = audit_log.get_logs(AuditLogFilter(action="CREATE_ALERT"))

        assert entry.alert_id == alert.id
        assert entry.details == {"severity": "High", "category": "S3"}

    @pytest.mark.parametrize("finding", [None, {}, {"severity": "High"}, {"type": ""}])
    async def test_rejects_findings_without_type(
        self, manager: AlertManager, audit_log: AuditLog, finding
    ) -> None:
        """Fail with InvalidInputError and record nothing."""
        with pytest.raises(InvalidInputError):
            await manager.create_alert(finding)
        assert len(audit_log) == 0

    @pytest.mark.parametrize("description", [42, {"text": "x"}, ["x"], True])
    async def test_rejects_non_string_description(
        self,
        manager: AlertManager,
        repository: InMemoryAlertRepository,
        audit_log: AuditLog,
        description,
    ) -> None:
        """Fail before storing or auditing anything."""
        with pytest.raises(InvalidInputError):
            await manager.create_alert({"type": "anomaly", "description": description})

        assert await repository.count() == 0
        assert len(audit_log) == 0

    async def test_failures_leave_manager_usable(
        self, manager: AlertManager, repository: InMemoryAlertRepository
    ) -> None:
        """Create alerts normally after rejected input."""
        for finding in (None, {}):
            with pytest.raises(InvalidInputError):
                await manager.create_alert(finding)

        alert = await manager.create_alert({"type": "anomaly"})

        assert alert.status == "New"
        assert await repository.count() == 1

    async def test_repository_failures_propagate(self, audit_log: AuditLog) -> None:
        """Surface storage errors unchanged and skip the audit entry."""

        class RejectingRepository(InMemoryAlertRepository):
            async def save(self, alert: Alert) -> Alert:
                raise DuplicateKeyError(f"Alert with id {alert.id} already exists")

        manager = AlertManager(RejectingRepository(), audit_log)

        with pytest.raises(DuplicateKeyError):
            await manager.create_alert({"type": "anomaly"})
        assert len(audit_log) == 0


class TestUpdateAlertStatus:
    """Lifecycle transitions."""

    async def test_full_lifecycle(
        self, manager: AlertManager, audit_log: AuditLog
    ) -> None:
        """Walk New to Resolved and refuse to leave Resolved."""
        alert = await manager.create_alert(S3_FINDING)

        for status in ("Acknowledged", "In-Progress", "Resolved"):
            updated = await manager.update_alert_status(alert.id, status)
            assert updated.status == status

        with pytest.raises(InvalidTransitionError):
            await manager.update_alert_status(alert.id, "Acknowledged")

        status_logs = audit_log.get_logs(
            AuditLogFilter(action="UPDATE_ALERT_STATUS", alert_id=alert.id)
        )
        assert len(status_logs) == 3
        assert len(
            audit_log.get_logs(
                AuditLogFilter(action="CREATE_ALERT", alert_id=alert.id)
            )
        ) == 1

    async def test_skip_from_new_names_both_states(self, manager: AlertManager) -> None:
        """Reject New to In-Progress with a descriptive message."""
        alert = await manager.create_alert(S3_FINDING)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await manager.update_alert_status(alert.id, "In-Progress")

        assert exc_info.value.current == "New"
        assert exc_info.value.target == "In-Progress"
        assert "New" in str(exc_info.value)
        assert "In-Progress" in str(exc_info.value)

    async def test_logs_old_and_new_status(
        self, manager: AlertManager, audit_log: AuditLog
    ) -> None:
        """Record both ends of the transition."""
        alert = await manager.create_alert(S3_FINDING)

        await manager.update_alert_status(alert.id, "Resolved")

        (entry,) = audit_log.get_logs(AuditLogFilter(action="UPDATE_ALERT_STATUS"))
        assert entry.alert_id == alert.id
        assert entry.details == {"oldStatus": "New", "newStatus": "Resolved"}

    @pytest.mark.parametrize("current", STATUSES)
    async def test_illegal_targets_leave_status_unchanged(
        self,
        manager: AlertManager,
        repository: InMemoryAlertRepository,
        current: str,
    ) -> None:
        """Reject every target outside the table and keep the stored status."""
        allowed = {status.value for status in STATE_TRANSITIONS[AlertStatus(current)]}
        for target in STATUSES:
            if target in allowed:
                continue
            await repository.save(
                Alert(
                    id=f"{current}-{target}",
                    severity="Low",
                    category="IAM",
                    description="x",
                    status=current,
                )
            )

            with pytest.raises(InvalidTransitionError):
                await manager.update_alert_status(f"{current}-{target}", target)

            stored = await repository.find_by_id(f"{current}-{target}")
            assert stored is not None and stored.status == current

    @pytest.mark.parametrize("status", [None, "", "Closed", "resolved"])
    async def test_unknown_status(self, manager: AlertManager, status) -> None:
        """Fail with InvalidInputError before looking up the alert."""
        with pytest.raises(InvalidInputError):
            await manager.update_alert_status("missing", status)

    async def test_unknown_alert(self, manager: AlertManager) -> None:
        """Fail with NotFoundError for unknown ids."""
        with pytest.raises(NotFoundError):
            await manager.update_alert_status("missing", "Resolved")

    async def test_concurrent_updates_apply_once(
        self, manager: AlertManager, audit_log: AuditLog
    ) -> None:
        """Serialize racing updates so only one passes the transition check."""
        alert = await manager.create_alert(S3_FINDING)

        results = await asyncio.gather(
            *(manager.update_alert_status(alert.id, "Resolved") for _ in range(5)),
            return_exceptions=True,
        )

        assert sum(isinstance(result, Alert) for result in results) == 1
        assert (
            sum(isinstance(result, InvalidTransitionError) for result in results) == 4
        )
        assert len(
            audit_log.get_logs(AuditLogFilter(action="UPDATE_ALERT_STATUS"))
        ) == 1


class TestGetAlerts:
    """Querying alerts."""

    async def test_filters_by_severity(self, manager: AlertManager) -> None:
        """Return only the High alert."""
        high = await manager.create_alert({"type": "anomaly", "severity": "High"})
        await manager.create_alert({"type": "anomaly", "severity": "Medium"})
        await manager.create_alert({"type": "anomaly", "severity": "Low"})

        alerts = await manager.get_alerts(AlertFilter(severity="High"))

        assert alerts == [high]

    async def test_logs_filter_and_count(
        self, manager: AlertManager, audit_log: AuditLog
    ) -> None:
        """Record the applied constraints and the result size."""
        await manager.create_alert({"type": "cve"})
        await manager.create_alert({"type": "rule-violation"})

        await manager.get_alerts(AlertFilter(category="CVE", status=None))

        (entry,) = audit_log.get_logs(AuditLogFilter(action="GET_ALERTS"))
        assert entry.alert_id is None
        assert entry.details == {"filter": {"category": "CVE"}, "count": 1}

    async def test_no_filter_returns_everything(self, manager: AlertManager) -> None:
        """List all alerts and succeed on an empty store."""
        assert await manager.get_alerts() == []

        await manager.create_alert({"type": "cve"})
        await manager.create_alert({"type": "anomaly"})

        assert len(await manager.get_alerts()) == 2

    async def test_repeated_reads_are_identical(self, manager: AlertManager) -> None:
        """Return the same sequence without intervening writes."""
        for _ in range(3):
            await manager.create_alert({"type": "anomaly"})

        assert await manager.get_alerts(AlertFilter()) == await manager.get_alerts(
            AlertFilter()
        )

    async def test_get_alert(self, manager: AlertManager, audit_log: AuditLog) -> None:
        """Look up one alert without writing an audit entry."""
        alert = await manager.create_alert({"type": "cve"})

        assert await manager.get_alert(alert.id) == alert
        assert await manager.get_alert("missing") is None
        assert len(audit_log) == 1

    async def test_get_audit_logs(self, manager: AlertManager) -> None:
        """Read the trail through the manager."""
        alert = await manager.create_alert({"type": "cve"})
        await manager.update_alert_status(alert.id, "Acknowledged")

        entries = manager.get_audit_logs(AuditLogFilter(alert_id=alert.id))

        assert len(entries) == 2
        assert {entry.action for entry in entries} == {
            "CREATE_ALERT",
            "UPDATE_ALERT_STATUS",
        }
