from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return datetime.fromisoformat(value)


def parse_hhmm(value: str) -> time:
    """Parse HH:MM string into time."""
    return datetime.strptime(value.strip(), "%H:%M").time()


def now_local(tz: ZoneInfo) -> datetime:
    """Current wall-clock time in the canonical zone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)


def to_zone(value: datetime, tz: ZoneInfo) -> datetime:
    """Express ``value`` in ``tz``.

    Naive datetimes are taken to already be wall-clock time in ``tz``.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)
