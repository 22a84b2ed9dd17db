from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from .model import EarningsBreakdown, OvertimePeriod


def build_overtime_period(
    *,
    session_id: str,
    user_id: str,
    start_time: datetime,
    end_time: datetime,
    overtime_threshold_hours: float,
    overtime_rate: float,
    breakdown: EarningsBreakdown,
) -> Optional[OvertimePeriod]:
    """Derive the overtime record for a completed session, if any.

    Overtime starts once the threshold has been worked, pushed back by the
    accumulated break time.
    """

    if not breakdown.has_overtime:
        return None

    overtime_start = start_time + timedelta(
        hours=overtime_threshold_hours,
        minutes=breakdown.break_minutes,
    )
    return OvertimePeriod(
        session_id=str(session_id),
        user_id=str(user_id),
        start_time=overtime_start,
        end_time=end_time,
        overtime_rate=float(overtime_rate),
        duration_minutes=int(math.floor(breakdown.overtime_hours * 60)),
        earnings=breakdown.overtime_earnings,
    )
