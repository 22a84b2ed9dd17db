from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import whole_minutes_between


@dataclass(frozen=True)
class BreakPeriod:
    """A lunch break in progress. Never persisted on its own."""

    start_time: datetime
    planned_duration_minutes: int

    def elapsed_minutes(self, now: datetime) -> int:
        return whole_minutes_between(self.start_time, now)

    def is_due(self, now: datetime) -> bool:
        return self.elapsed_minutes(now) >= self.planned_duration_minutes

    def remaining_minutes(self, now: datetime) -> int:
        return max(self.planned_duration_minutes - self.elapsed_minutes(now), 0)
