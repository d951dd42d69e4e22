"""Synchronous Python SDK client."""

from __future__ import annotations

import os
from datetime import datetime
from time import sleep
from typing import Any

import httpx

from cloudguard_client.exceptions import (
    CloudGuardAPIError,
    CloudGuardConflictError,
    CloudGuardNotFoundError,
    CloudGuardRateLimitError,
    CloudGuardValidationError,
)
from cloudguard_client.types import AlertInfo, AuditLogInfo


class CloudGuardClient:
    """Client for the CloudGuard alert API.

    Parameters
    ----------
    base_url : str
        CloudGuard service base URL.
    timeout : float, default=10.0
        Request timeout in seconds.
    max_retries : int, default=2
        Number of retries for transient errors.
    transport : httpx.BaseTransport | None, default=None
        Optional transport for tests or advanced usage.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        max_retries: int = 2,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )

    @classmethod
    def from_env(cls) -> "CloudGuardClient":
        """Build a client from environment variables.

        Expected variables
        ------------------
        CLOUDGUARD_BASE_URL
            Service base URL. Defaults to ``http://127.0.0.1:8000``.
        CLOUDGUARD_TIMEOUT
            Optional request timeout in seconds.

        Returns
        -------
        CloudGuardClient
            Configured SDK client.
        """
        base_url = os.environ.get("CLOUDGUARD_BASE_URL", "http://127.0.0.1:8000")
        raw_timeout = os.environ.get("CLOUDGUARD_TIMEOUT")
        if raw_timeout is None:
            return cls(base_url=base_url)
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise CloudGuardValidationError(
                f"CLOUDGUARD_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from exc
        return cls(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        """Close the underlying HTTP client.

        Returns
        -------
        None
            Releases HTTP resources.
        """
        self._client.close()

    def health(self) -> dict[str, Any]:
        """Return the service health payload."""
        return self._request("GET", "/health").json()

    def create_alert(
        self,
        finding_type: str,
        *,
        severity: str | None = None,
        category: str | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AlertInfo:
        """Submit a finding and return the created alert.

        Parameters
        ----------
        finding_type : str
            Finding type such as ``anomaly``, ``rule-violation`` or ``cve``.
        severity : str | None, default=None
            Explicit severity; derived from the type when omitted.
        category : str | None, default=None
            Explicit category; derived from the type when omitted.
        description : str | None, default=None
            Free-text description.
        metadata : dict[str, Any] | None, default=None
            Opaque metadata stored with the alert.

        Returns
        -------
        AlertInfo
            Created alert.
        """
        payload: dict[str, Any] = {"type": finding_type}
        if severity is not None:
            payload["severity"] = severity
        if category is not None:
            payload["category"] = category
        if description is not None:
            payload["description"] = description
        if metadata is not None:
            payload["metadata"] = metadata
        response = self._request("POST", "/api/alerts", json=payload)
        return AlertInfo.from_payload(response.json())

    def list_alerts(
        self,
        *,
        severity: str | None = None,
        status: str | None = None,
        category: str | None = None,
    ) -> list[AlertInfo]:
        """List alerts, newest first.

        Parameters
        ----------
        severity : str | None, default=None
            Severity constraint.
        status : str | None, default=None
            Status constraint.
        category : str | None, default=None
            Category constraint.

        Returns
        -------
        list[AlertInfo]
            Matching alerts.
        """
        params = _drop_none(severity=severity, status=status, category=category)
        response = self._request("GET", "/api/alerts", params=params)
        return [AlertInfo.from_payload(item) for item in response.json()]

    def get_alert(self, alert_id: str) -> AlertInfo | None:
        """Fetch one alert.

        Parameters
        ----------
        alert_id : str
            Alert identifier.

        Returns
        -------
        AlertInfo | None
            The alert, or ``None`` when the service reports it missing.
        """
        try:
            response = self._request("GET", f"/api/alerts/{alert_id}")
        except CloudGuardNotFoundError:
            return None
        return AlertInfo.from_payload(response.json())

    def update_alert_status(self, alert_id: str, status: str) -> AlertInfo:
        """Move an alert to a new status.

        Parameters
        ----------
        alert_id : str
            Alert identifier.
        status : str
            Target status.

        Returns
        -------
        AlertInfo
            Updated alert.
        """
        response = self._request(
            "PUT",
            f"/api/alerts/{alert_id}/status",
            json={"status": status},
        )
        return AlertInfo.from_payload(response.json())

    def list_audit_logs(
        self,
        *,
        action: str | None = None,
        alert_id: str | None = None,
        start_date: datetime | str | None = None,
        end_date: datetime | str | None = None,
    ) -> list[AuditLogInfo]:
        """List audit entries, newest first.

        Parameters
        ----------
        action : str | None, default=None
            Action tag constraint.
        alert_id : str | None, default=None
            Alert identifier constraint.
        start_date : datetime | str | None, default=None
            Inclusive lower time bound.
        end_date : datetime | str | None, default=None
            Inclusive upper time bound.

        Returns
        -------
        list[AuditLogInfo]
            Matching entries.
        """
        params = _drop_none(
            action=action,
            alertId=alert_id,
            startDate=_format_bound(start_date),
            endDate=_format_bound(end_date),
        )
        response = self._request("GET", "/api/audit-logs", params=params)
        return [AuditLogInfo.from_payload(item) for item in response.json()]

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an HTTP request with light retry logic.

        Parameters
        ----------
        method : str
            HTTP method.
        path : str
            Relative request path.
        **kwargs : Any
            Additional request arguments.

        Returns
        -------
        httpx.Response
            Successful response.
        """
        attempts = self.max_retries + 1
        last_exception: Exception | None = None
        for attempt in range(attempts):
            try:
                response = self._client.request(method, path, **kwargs)
            except httpx.HTTPError as exc:
                last_exception = exc
                if attempt < self.max_retries:
                    sleep(0.1 * (attempt + 1))
                    continue
                raise CloudGuardAPIError(str(exc)) from exc

            if response.status_code < 400:
                return response
            if _is_transient_response(response) and attempt < self.max_retries:
                sleep(0.1 * (attempt + 1))
                continue
            raise _exception_for_response(response)

        if last_exception is not None:
            raise CloudGuardAPIError(str(last_exception)) from last_exception
        raise CloudGuardAPIError("Request failed")

    def __enter__(self) -> "CloudGuardClient":
        """Enter the client context.

        Returns
        -------
        CloudGuardClient
            This client.
        """
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        """Close the client on context exit."""
        _ = (exc_type, exc_value, traceback)
        self.close()


def _drop_none(**values: str | None) -> dict[str, str]:
    return {key: value for key, value in values.items() if value is not None}


def _format_bound(value: datetime | str | None) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _is_transient_response(response: httpx.Response) -> bool:
    """Return whether a response is transient.

    Parameters
    ----------
    response : httpx.Response
        HTTP response.

    Returns
    -------
    bool
        Whether the response is worth retrying.
    """
    return response.status_code in {429, 502, 503, 504}


def _exception_for_response(response: httpx.Response) -> CloudGuardAPIError:
    """Map an error response to a typed SDK exception.

    Parameters
    ----------
    response : httpx.Response
        HTTP response.

    Returns
    -------
    CloudGuardAPIError
        Typed SDK error.
    """
    try:
        data = response.json()
    except ValueError:
        data = {}
    detail = data.get("detail") if isinstance(data, dict) else None
    if not isinstance(detail, str):
        detail = None
    errors = data.get("errors") if isinstance(data, dict) else None
    message = detail or f"CloudGuard request failed with status {response.status_code}"
    kwargs: dict[str, Any] = {"status_code": response.status_code, "errors": errors}

    if response.status_code == 404:
        return CloudGuardNotFoundError(message, **kwargs)
    if response.status_code == 409:
        return CloudGuardConflictError(message, **kwargs)
    if response.status_code == 429:
        return CloudGuardRateLimitError(message, **kwargs)
    if response.status_code in {400, 422}:
        return CloudGuardValidationError(message, **kwargs)
    return CloudGuardAPIError(message, **kwargs)
