from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import DataSource
from ..sessions.model import WorkSession


@dataclass(frozen=True)
class HistoryResult:
    sessions: list[WorkSession]
    source: Optional[DataSource] = None
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_local(self) -> bool:
        return self.source == DataSource.LOCAL


@dataclass(frozen=True)
class DailyTotal:
    day: date
    earnings: float
    hours: float
    sessions: int


@dataclass(frozen=True)
class LocationTotal:
    location: str
    earnings: float
    hours: float
    sessions: int


@dataclass(frozen=True)
class Summary:
    total_earnings: float
    total_hours: float
    average_hourly_rate: float
    sessions: int


@dataclass(frozen=True)
class PeriodSummary:
    """Home-screen figures: today, the last seven days and this month."""

    today_earnings: float
    week_earnings: float
    week_sessions: int
    month_hours: float
