"""Shared router helpers."""

from fastapi import Request

from cloudguard.services.alerts import AlertManager


def get_alert_manager(request: Request) -> AlertManager:
    """Return the application's alert manager.

    Parameters
    ----------
    request : Request
        Incoming request.

    Returns
    -------
    AlertManager
        Manager built by the application lifespan.
    """
    return request.app.state.alert_manager
