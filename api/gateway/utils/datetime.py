"""Datetime parsing helpers for upstream payloads."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def year_from(value: str | None) -> int | None:
    """Return the leading four-digit year of a date string, if any."""
    if not value:
        return None
    prefix = value.strip()[:4]
    if len(prefix) != 4 or not prefix.isdigit():
        return None
    return int(prefix)
