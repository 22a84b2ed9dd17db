from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_positive_int
from ..core.exceptions import InvalidTransitionError, ValidationError
from ..core.logging import get_logger
from .model import BreakPeriod

logger = get_logger(__name__)


class BreakTracker:
    """Break sub-state of a running session.

    Only touches break bookkeeping; session identity and rates belong to the
    lifecycle that owns this tracker.
    """

    def __init__(self, *, total_minutes: int = 0, active: Optional[BreakPeriod] = None):
        if total_minutes < 0:
            raise ValidationError("Break minutes must not be negative")
        self._total_minutes = int(total_minutes)
        self._active = active

    @property
    def total_minutes(self) -> int:
        return self._total_minutes

    @property
    def active_break(self) -> Optional[BreakPeriod]:
        return self._active

    @property
    def is_active(self) -> bool:
        return self._active is not None

    def start_break(self, planned_minutes: int, *, now: datetime) -> BreakPeriod:
        if self._active is not None:
            raise InvalidTransitionError("A break is already in progress")
        planned = require_positive_int(planned_minutes, "Break duration")
        self._active = BreakPeriod(start_time=now, planned_duration_minutes=planned)
        logger.info("break_started", planned_minutes=planned)
        return self._active

    def end_break(self, *, now: datetime) -> int:
        """Fold the active break into the total and return its whole minutes.

        Ending when no break is active changes nothing and returns 0.
        """

        if self._active is None:
            return 0
        elapsed = self._active.elapsed_minutes(now)
        self._total_minutes += elapsed
        self._active = None
        logger.info("break_ended", elapsed_minutes=elapsed, total_minutes=self._total_minutes)
        return elapsed

    def end_if_due(self, *, now: datetime) -> Optional[int]:
        if self._active is not None and self._active.is_due(now):
            return self.end_break(now=now)
        return None

    def minutes_so_far(self, now: datetime) -> int:
        """Total including the running part of an active break."""

        if self._active is None:
            return self._total_minutes
        return self._total_minutes + self._active.elapsed_minutes(now)

    def to_dict(self) -> dict:
        active = None
        if self._active is not None:
            active = {
                "start_time": self._active.start_time.isoformat(),
                "planned_duration_minutes": self._active.planned_duration_minutes,
            }
        return {"total_minutes": self._total_minutes, "active": active}

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "BreakTracker":
        if not data:
            return cls()
        active = None
        raw = data.get("active")
        if raw:
            active = BreakPeriod(
                start_time=parse_iso_datetime(raw["start_time"]),
                planned_duration_minutes=int(raw["planned_duration_minutes"]),
            )
        return cls(total_minutes=max(int(data.get("total_minutes") or 0), 0), active=active)
