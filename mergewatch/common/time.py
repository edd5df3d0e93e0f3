"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp suitable for DB defaults."""
    return dt.datetime.now(dt.UTC)


def parse_github_timestamp(value: str | None) -> dt.datetime | None:
    """Parse an ISO-8601 timestamp as GitHub renders it.

    GitHub emits ``Z``-suffixed UTC timestamps (``2026-02-13T10:00:00Z``).
    Offsets other than UTC are accepted and converted.

    Parameters
    ----------
    value
        Raw timestamp string or ``None``.

    Returns
    -------
    datetime.datetime | None
        Aware UTC datetime, or ``None`` when *value* is ``None``.

    Raises
    ------
    ValueError
        If *value* is not ISO-8601 or lacks an offset.

    Examples
    --------
    >>> parse_github_timestamp("2026-02-13T10:00:00Z").isoformat()
    '2026-02-13T10:00:00+00:00'

    """
    if value is None:
        return None
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        msg = f"timestamp {value!r} must include timezone information"
        raise ValueError(msg)
    return parsed.astimezone(dt.UTC)
