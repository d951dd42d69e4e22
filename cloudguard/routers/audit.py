"""Audit log routes."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query

from cloudguard.routers.dependencies import get_alert_manager
from cloudguard.services.alerts import AlertManager
from cloudguard.services.audit import AuditLogFilter

router = APIRouter(prefix="/api/audit-logs", tags=["audit"])


@router.get("", response_model=list[dict[str, Any]])
async def list_audit_logs(
    action: str | None = None,
    alert_id: str | None = Query(default=None, alias="alertId"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    manager: AlertManager = Depends(get_alert_manager),
) -> list[dict[str, Any]]:
    """List audit entries, newest first."""
    entries = manager.get_audit_logs(
        AuditLogFilter(
            action=action,
            alert_id=alert_id,
            start_date=start_date,
            end_date=end_date,
        )
    )
    return [entry.to_dict() for entry in entries]
