"""Time helpers."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def iso_date(value: datetime | str | None) -> str:
    """Return the ``YYYY-MM-DD`` part of a datetime or ISO string."""
    if value is None:
        return "N/A"
    if isinstance(value, datetime):
        return value.date().isoformat()
    return str(value).split("T", 1)[0]
