"""Alert storage backends."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cloudguard.exceptions import DuplicateKeyError, InvalidInputError, NotFoundError
from cloudguard.models.alert import Alert
from cloudguard.models.tables import AlertRow
from cloudguard.timestamps import timestamp_sort_key, utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AlertFilter:
    """Equality constraints for alert listings.

    A field left as ``None`` places no constraint on the result; it does not
    match alerts with an empty value. Set fields combine with AND.

    Attributes
    ----------
    severity : str | None
        Required severity.
    status : str | None
        Required status.
    category : str | None
        Required category.
    """

    severity: str | None = None
    status: str | None = None
    category: str | None = None

    def as_dict(self) -> dict[str, str]:
        """Return only the constraints that are set.

        Returns
        -------
        dict[str, str]
            Mapping of field name to required value.
        """
        return {
            key: value
            for key, value in (
                ("severity", self.severity),
                ("status", self.status),
                ("category", self.category),
            )
            if value
        }

    def matches(self, alert: Alert) -> bool:
        """Return whether an alert satisfies every set constraint."""
        return all(
            getattr(alert, key) == value for key, value in self.as_dict().items()
        )


class AlertRepository(ABC):
    """Storage contract for alerts.

    Implementations own id uniqueness and query semantics. They apply any
    status value they are given; lifecycle rules are enforced by
    :class:`cloudguard.services.alerts.AlertManager`.
    """

    @abstractmethod
    async def save(self, alert: Alert) -> Alert:
        """Insert a new alert."""

    @abstractmethod
    async def find_by_id(self, alert_id: str) -> Alert | None:
        """Return an alert or ``None``."""

    @abstractmethod
    async def find_all(self, alert_filter: AlertFilter | None = None) -> list[Alert]:
        """Return matching alerts, newest first."""

    @abstractmethod
    async def update_status(self, alert_id: str, status: str) -> Alert:
        """Set an alert status and refresh its update time."""

    @abstractmethod
    async def delete(self, alert_id: str) -> bool:
        """Remove an alert, returning whether it existed."""

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored alerts."""


def _require_id(alert: Alert | None) -> str:
    if alert is None or not getattr(alert, "id", None):
        raise InvalidInputError("Invalid alert: missing id")
    return alert.id


def _newest_first(alerts: list[Alert]) -> list[Alert]:
    """Sort by descending creation time; later insertions win ties."""
    ordered = sorted(
        enumerate(alerts),
        key=lambda pair: (timestamp_sort_key(pair[1].created_at), pair[0]),
        reverse=True,
    )
    return [alert for _, alert in ordered]


class InMemoryAlertRepository(AlertRepository):
    """Process-local alert store.

    Records are held in insertion order and copied on the way in and out, so
    callers never share state with the store.
    """

    def __init__(self) -> None:
        self._alerts: dict[str, Alert] = {}
        self._lock = asyncio.Lock()

    async def save(self, alert: Alert) -> Alert:
        """Insert a new alert.

        Parameters
        ----------
        alert : Alert
            Alert to store.

        Returns
        -------
        Alert
            Stored alert.
        """
        alert_id = _require_id(alert)
        async with self._lock:
            if alert_id in self._alerts:
                raise DuplicateKeyError(f"Alert with id {alert_id} already exists")
            self._alerts[alert_id] = alert.copy()
        return alert

    async def find_by_id(self, alert_id: str) -> Alert | None:
        alert = self._alerts.get(alert_id)
        return alert.copy() if alert is not None else None

    async def find_all(self, alert_filter: AlertFilter | None = None) -> list[Alert]:
        """Return matching alerts, newest first.

        Parameters
        ----------
        alert_filter : AlertFilter | None, default=None
            Optional equality constraints.

        Returns
        -------
        list[Alert]
            Copies of matching alerts ordered by descending creation time.
        """
        alert_filter = alert_filter or AlertFilter()
        matches = [
            alert.copy() for alert in self._alerts.values() if alert_filter.matches(alert)
        ]
        return _newest_first(matches)

    async def update_status(self, alert_id: str, status: str) -> Alert:
        """Set an alert status and refresh its update time.

        Parameters
        ----------
        alert_id : str
            Alert identifier.
        status : str
            New status value.

        Returns
        -------
        Alert
            Copy of the updated alert.
        """
        async with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None:
                raise NotFoundError(f"Alert not found: {alert_id}")
            alert.status = status
            alert.updated_at = utc_now_iso()
            return alert.copy()

    async def delete(self, alert_id: str) -> bool:
        async with self._lock:
            return self._alerts.pop(alert_id, None) is not None

    async def count(self) -> int:
        return len(self._alerts)


class SqlAlchemyAlertRepository(AlertRepository):
    """Alert store backed by the ``alerts`` table.

    Parameters
    ----------
    session_factory : async_sessionmaker[AsyncSession]
        Factory producing sessions for each operation.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, alert: Alert) -> Alert:
        """Insert a new alert.

        Parameters
        ----------
        alert : Alert
            Alert to store.

        Returns
        -------
        Alert
            Stored alert.
        """
        alert_id = _require_id(alert)
        async with self._session_factory() as session:
            if await session.get(AlertRow, alert_id) is not None:
                raise DuplicateKeyError(f"Alert with id {alert_id} already exists")
            session.add(AlertRow.from_entity(alert))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise DuplicateKeyError(
                    f"Alert with id {alert_id} already exists"
                ) from exc
        return alert

    async def find_by_id(self, alert_id: str) -> Alert | None:
        async with self._session_factory() as session:
            row = await session.get(AlertRow, alert_id)
            return row.to_entity() if row is not None else None

    async def find_all(self, alert_filter: AlertFilter | None = None) -> list[Alert]:
        """Return matching alerts, newest first.

        Parameters
        ----------
        alert_filter : AlertFilter | None, default=None
            Optional equality constraints.

        Returns
        -------
        list[Alert]
            Matching alerts ordered by descending creation time.
        """
        alert_filter = alert_filter or AlertFilter()
        # Canonical ``...ffffffZ`` strings sort in time order.
        query = select(AlertRow).order_by(
            AlertRow.created_at.desc(), AlertRow.id.desc()
        )
        constraints: dict[str, Any] = alert_filter.as_dict()
        for key, value in constraints.items():
            query = query.where(getattr(AlertRow, key) == value)
        async with self._session_factory() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def update_status(self, alert_id: str, status: str) -> Alert:
        """Set an alert status and refresh its update time.

        Parameters
        ----------
        alert_id : str
            Alert identifier.
        status : str
            New status value.

        Returns
        -------
        Alert
            Updated alert.
        """
        async with self._session_factory() as session:
            row = await session.get(AlertRow, alert_id)
            if row is None:
                raise NotFoundError(f"Alert not found: {alert_id}")
            row.status = status
            row.updated_at = utc_now_iso()
            await session.commit()
            return row.to_entity()

    async def delete(self, alert_id: str) -> bool:
        async with self._session_factory() as session:
            row = await session.get(AlertRow, alert_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
            logger.debug("Deleted alert %s", alert_id)
            return True

    async def count(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count()).select_from(AlertRow))
            return result.scalar_one()
