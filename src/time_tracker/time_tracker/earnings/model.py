from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class EarningsBreakdown:
    regular_hours: float
    overtime_hours: float
    regular_earnings: float
    overtime_earnings: float
    total_earnings: float
    gross_hours: float = 0.0
    net_hours: float = 0.0
    break_minutes: int = 0

    @property
    def has_overtime(self) -> bool:
        return self.overtime_hours > 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class OvertimePeriod:
    """Overtime slice of a completed session; written once, never updated."""

    session_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    overtime_rate: float
    duration_minutes: int
    earnings: float
    period_id: Optional[str] = None
