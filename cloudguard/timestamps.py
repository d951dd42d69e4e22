"""ISO-8601 timestamp helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return the current UTC time as a sortable ISO string.

    Returns
    -------
    str
        Timestamp such as ``2026-02-28T10:00:00.000000Z``.
    """
    return format_timestamp(datetime.now(timezone.utc))


def format_timestamp(value: datetime) -> str:
    """Render a datetime in the canonical UTC form.

    Parameters
    ----------
    value : datetime
        Datetime to render. Naive values are treated as UTC.

    Returns
    -------
    str
        ISO string with microseconds and a ``Z`` suffix.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO timestamp into an aware datetime.

    Parameters
    ----------
    value : str | datetime
        ISO-formatted string or datetime.

    Returns
    -------
    datetime
        Timezone-aware datetime; naive inputs are assumed to be UTC.

    Raises
    ------
    ValueError
        If the string is not ISO-8601.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


_EPOCH_FLOOR = datetime.min.replace(tzinfo=timezone.utc)


def timestamp_sort_key(value: str | datetime | None) -> datetime:
    """Return a sort key for a stored timestamp.

    Values that cannot be parsed sort before every valid timestamp.
    """
    if value is None:
        return _EPOCH_FLOOR
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        return _EPOCH_FLOOR
