from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..model import EarningsBreakdown


class EarningsCalculator(ABC):
    """Calculator interface (Strategy Pattern for earnings rules)."""

    @abstractmethod
    def compute(
        self,
        *,
        start_time: datetime,
        end_time: datetime,
        break_minutes: int,
        hourly_rate: float,
        overtime_rate: float,
        overtime_threshold_hours: float,
    ) -> EarningsBreakdown:
        raise NotImplementedError
