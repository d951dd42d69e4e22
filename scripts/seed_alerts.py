"""Seed demo findings through the alert API."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import anyio
import httpx


@dataclass(frozen=True, slots=True)
class FindingSeed:
    """Demo finding definition.

    Attributes
    ----------
    type : str
        Finding type.
    description : str
        Finding description.
    severity : str | None
        Explicit severity, or ``None`` to let the service derive it.
    category : str | None
        Explicit category, or ``None`` to let the service derive it.
    metadata : dict[str, Any]
        Opaque metadata attached to the alert.
    target_status : str | None
        Status to walk the alert to after creation.
    """

    type: str
    description: str
    severity: str | None = None
    category: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    target_status: str | None = None


FINDINGS: tuple[FindingSeed, ...] = (
    FindingSeed(
        type="anomaly",
        severity="High",
        category="S3",
        description="Suspicious S3 bucket access",
        metadata={"bucket": "customer-exports", "region": "us-east-1"},
    ),
    FindingSeed(
        type="rule-violation",
        description="IAM user without MFA",
        metadata={"user": "ci-deployer"},
        target_status="Acknowledged",
    ),
    FindingSeed(
        type="cve",
        description="CVE-2024-3094 in base image",
        metadata={"package": "xz-utils"},
        target_status="In-Progress",
    ),
    FindingSeed(
        type="anomaly",
        severity="Low",
        category="Network",
        description="Unusual outbound traffic volume",
        target_status="Resolved",
    ),
)

# Intermediate steps needed to reach each target from New.
PATHS: dict[str, tuple[str, ...]] = {
    "Acknowledged": ("Acknowledged",),
    "In-Progress": ("Acknowledged", "In-Progress"),
    "Resolved": ("Resolved",),
}


async def create_finding(client: httpx.AsyncClient, seed: FindingSeed) -> dict[str, Any]:
    """Create one alert and walk it to its target status.

    Parameters
    ----------
    client : httpx.AsyncClient
        API client.
    seed : FindingSeed
        Finding to submit.

    Returns
    -------
    dict[str, Any]
        Final alert payload.
    """
    payload: dict[str, Any] = {
        "type": seed.type,
        "description": seed.description,
        "metadata": seed.metadata,
    }
    if seed.severity is not None:
        payload["severity"] = seed.severity
    if seed.category is not None:
        payload["category"] = seed.category

    response = await client.post("/api/alerts", json=payload)
    response.raise_for_status()
    alert = response.json()

    for status in PATHS.get(seed.target_status or "", ()):
        response = await client.put(
            f"/api/alerts/{alert['id']}/status", json={"status": status}
        )
        response.raise_for_status()
        alert = response.json()
    return alert


async def main() -> None:
    """Seed demo alerts.

    Returns
    -------
    None
        Creates the demo findings and prints a short summary.
    """
    base_url = os.environ.get("CLOUDGUARD_BASE_URL", "http://127.0.0.1:8000")
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        for seed in FINDINGS:
            alert = await create_finding(client, seed)
            print(f"seeded {alert['id']} {alert['severity']} {alert['status']}")


if __name__ == "__main__":
    anyio.run(main)
