"""Alert routes."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from cloudguard.exceptions import InvalidInputError
from cloudguard.repositories.alerts import AlertFilter
from cloudguard.routers.dependencies import get_alert_manager
from cloudguard.schemas.alerts import AlertResponse, StatusUpdateRequest
from cloudguard.schemas.common import ErrorResponse
from cloudguard.services.alerts import AlertManager
from cloudguard.services.validation import validate_finding

router = APIRouter(prefix="/api/alerts", tags=["alerts"])

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=AlertResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_alert(
    finding: dict[str, Any] | None = Body(default=None),
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertResponse:
    """Create an alert from a finding.

    Unlike :meth:`AlertManager.create_alert`, which falls back to type-derived
    values, this route rejects an unknown severity or category with a 400.
    """
    validation = validate_finding(finding)
    if not validation.is_valid:
        raise InvalidInputError("; ".join(validation.errors), validation.errors)
    alert = await manager.create_alert(finding)
    return AlertResponse.from_entity(alert)


@router.get("", response_model=list[AlertResponse])
async def list_alerts(
    severity: str | None = None,
    alert_status: str | None = Query(default=None, alias="status"),
    category: str | None = None,
    manager: AlertManager = Depends(get_alert_manager),
) -> list[AlertResponse]:
    """List alerts, newest first."""
    alerts = await manager.get_alerts(
        AlertFilter(severity=severity, status=alert_status, category=category)
    )
    return [AlertResponse.from_entity(alert) for alert in alerts]


@router.get("/{alert_id}", response_model=AlertResponse, responses=ERROR_RESPONSES)
async def get_alert(
    alert_id: str,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertResponse:
    """Return one alert."""
    alert = await manager.get_alert(alert_id)
    if alert is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Alert not found",
        )
    return AlertResponse.from_entity(alert)


@router.put(
    "/{alert_id}/status", response_model=AlertResponse, responses=ERROR_RESPONSES
)
async def update_alert_status(
    alert_id: str,
    payload: StatusUpdateRequest,
    manager: AlertManager = Depends(get_alert_manager),
) -> AlertResponse:
    """Move an alert to a new status."""
    alert = await manager.update_alert_status(alert_id, payload.status)
    return AlertResponse.from_entity(alert)
