"""Audit logging service."""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from cloudguard.exceptions import InvalidInputError
from cloudguard.models.audit import AuditLogEntry
from cloudguard.timestamps import parse_timestamp, timestamp_sort_key, utc_now_iso

DEFAULT_MAX_LOGS = 1000

logger = logging.getLogger("cloudguard.audit")


@dataclass(frozen=True, slots=True)
class AuditLogFilter:
    """Constraints for audit log retrieval.

    Omitted fields impose no constraint. Date bounds are inclusive and
    compared as points in time.

    Attributes
    ----------
    action : str | None
        Exact action tag.
    alert_id : str | None
        Exact alert identifier.
    start_date : datetime | str | None
        Earliest timestamp to include.
    end_date : datetime | str | None
        Latest timestamp to include.
    """

    action: str | None = None
    alert_id: str | None = None
    start_date: datetime | str | None = None
    end_date: datetime | str | None = None


def _coerce_bound(name: str, value: datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Invalid {name}: {value}") from exc


class AuditLog:
    """Bounded, append-only audit trail.

    Parameters
    ----------
    max_logs : int, default=1000
        Number of entries retained. Each insert past capacity drops the
        oldest entry.
    """

    def __init__(self, max_logs: int = DEFAULT_MAX_LOGS) -> None:
        if max_logs < 1:
            raise ValueError("max_logs must be at least 1")
        self._entries: deque[AuditLogEntry] = deque(maxlen=max_logs)
        self._lock = threading.Lock()

    @property
    def max_logs(self) -> int:
        """Capacity of the log."""
        return self._entries.maxlen or DEFAULT_MAX_LOGS

    def __len__(self) -> int:
        return len(self._entries)

    def log(
        self,
        action: str | None,
        *,
        alert_id: str | None = None,
        timestamp: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> AuditLogEntry:
        """Append an audit event.

        Parameters
        ----------
        action : str | None
            Event tag. Stored as given.
        alert_id : str | None, default=None
            Alert the event concerns.
        timestamp : str | None, default=None
            Event time. Kept verbatim when supplied.
        details : Mapping[str, Any] | None, default=None
            Additional event fields.

        Returns
        -------
        AuditLogEntry
            Finalized entry.
        """
        entry = AuditLogEntry(
            id=str(uuid.uuid4()),
            action=action,
            timestamp=timestamp or utc_now_iso(),
            alert_id=alert_id,
            details=details or {},
        )
        with self._lock:
            self._entries.append(entry)
        logger.info("[AUDIT] %s: %s", entry.action, entry.to_dict())
        return entry

    def get_logs(self, log_filter: AuditLogFilter | None = None) -> list[AuditLogEntry]:
        """Return matching entries, newest first.

        Parameters
        ----------
        log_filter : AuditLogFilter | None, default=None
            Optional constraints combined with AND.

        Returns
        -------
        list[AuditLogEntry]
            Matching entries sorted by descending timestamp.

        Raises
        ------
        InvalidInputError
            If a date bound is not an ISO timestamp.
        """
        log_filter = log_filter or AuditLogFilter()
        start = _coerce_bound("startDate", log_filter.start_date)
        end = _coerce_bound("endDate", log_filter.end_date)

        with self._lock:
            results = list(self._entries)

        if log_filter.action:
            results = [entry for entry in results if entry.action == log_filter.action]
        if log_filter.alert_id:
            results = [
                entry for entry in results if entry.alert_id == log_filter.alert_id
            ]
        if start is not None or end is not None:
            results = [
                entry for entry in results if _within(entry.timestamp, start, end)
            ]

        # Later entries come first among equal timestamps.
        ordered = sorted(
            enumerate(results),
            key=lambda pair: (timestamp_sort_key(pair[1].timestamp), pair[0]),
            reverse=True,
        )
        return [entry for _, entry in ordered]

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()


def _within(value: str, start: datetime | None, end: datetime | None) -> bool:
    try:
        moment = parse_timestamp(value)
    except (TypeError, ValueError):
        return False
    if start is not None and moment < start:
        return False
    if end is not None and moment > end:
        return False
    return True
