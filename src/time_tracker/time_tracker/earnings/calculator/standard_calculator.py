from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import hours_between
from ...core.exceptions import ValidationError
from ..model import EarningsBreakdown
from .base import EarningsCalculator


class StandardEarningsCalculator(EarningsCalculator):
    """Standard rule: (end - start) - breaks, not below 0; hours above the
    threshold are paid at the overtime rate."""

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
        if break_minutes < 0:
            raise ValidationError("Break minutes must not be negative")

        gross_hours = hours_between(start_time, end_time)
        net_hours = max(gross_hours - break_minutes / 60, 0.0)

        if net_hours > overtime_threshold_hours:
            regular_hours = float(overtime_threshold_hours)
            overtime_hours = net_hours - overtime_threshold_hours
        else:
            regular_hours = net_hours
            overtime_hours = 0.0

        regular_earnings = regular_hours * hourly_rate
        overtime_earnings = overtime_hours * overtime_rate

        return EarningsBreakdown(
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            regular_earnings=regular_earnings,
            overtime_earnings=overtime_earnings,
            total_earnings=regular_earnings + overtime_earnings,
            gross_hours=gross_hours,
            net_hours=net_hours,
            break_minutes=int(break_minutes),
        )
