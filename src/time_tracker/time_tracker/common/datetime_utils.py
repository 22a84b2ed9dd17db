from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Elapsed whole minutes (floored), never negative."""
    seconds = (end - start).total_seconds()
    return max(int(seconds // 60), 0)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600

