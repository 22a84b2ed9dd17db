from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional
from uuid import uuid4

from ..common.datetime_utils import hours_between, parse_iso_datetime, to_iso
from ..core.constants import LOCAL_ID_PREFIX, OFFLINE_LOCATION_LABEL, UNKNOWN_LOCATION_LABEL
from ..core.enums import SessionState, SyncStatus
from ..core.exceptions import ValidationError
from ..earnings.model import EarningsBreakdown, OvertimePeriod
from ..rates.model import LocationDetails


@dataclass(frozen=True)
class WorkSession:
    """Domain entity: one tracked work period.

    ``end_time`` and ``earnings`` are either both set (completed) or both
    absent (running). Rates are frozen when the session starts.
    """

    id: str
    user_id: str
    start_time: datetime
    hourly_rate: float
    overtime_rate: float
    overtime_threshold_hours: float
    location: Optional[LocationDetails] = None
    end_time: Optional[datetime] = None
    break_minutes_total: int = 0
    earnings: Optional[float] = None

    def __post_init__(self):
        if (self.end_time is None) != (self.earnings is None):
            raise ValidationError("A session has an end time exactly when it has earnings")
        if self.break_minutes_total < 0:
            raise ValidationError("Break minutes must not be negative")
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValidationError("End time cannot be before start time")

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    @property
    def is_local(self) -> bool:
        return self.id.startswith(LOCAL_ID_PREFIX)

    @property
    def is_manual_entry(self) -> bool:
        return self.location is None or self.location.is_manual_entry

    @property
    def location_label(self) -> str:
        if self.location is None:
            return OFFLINE_LOCATION_LABEL if self.is_local else UNKNOWN_LOCATION_LABEL
        return self.location.label or UNKNOWN_LOCATION_LABEL

    @property
    def worked_hours(self) -> float:
        """Net hours (breaks removed); 0 while running."""

        if self.end_time is None:
            return 0.0
        return max(hours_between(self.start_time, self.end_time) - self.break_minutes_total / 60, 0.0)

    def with_id(self, session_id: str) -> "WorkSession":
        return replace(self, id=str(session_id))

    def complete(self, *, end_time: datetime, earnings: float, break_minutes: int) -> "WorkSession":
        if self.end_time is not None:
            raise ValidationError("Session is already completed")
        return replace(self, end_time=end_time, earnings=float(earnings), break_minutes_total=int(break_minutes))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "start_time": to_iso(self.start_time),
            "end_time": to_iso(self.end_time),
            "hourly_rate": self.hourly_rate,
            "overtime_rate": self.overtime_rate,
            "overtime_threshold_hours": self.overtime_threshold_hours,
            "break_minutes_total": self.break_minutes_total,
            "earnings": self.earnings,
            "location": self.location.to_dict() if self.location else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkSession":
        end_raw = data.get("end_time")
        earnings = data.get("earnings")
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            start_time=parse_iso_datetime(data["start_time"]),
            end_time=parse_iso_datetime(end_raw) if end_raw else None,
            hourly_rate=float(data.get("hourly_rate") or 0.0),
            overtime_rate=float(data.get("overtime_rate") or 0.0),
            overtime_threshold_hours=float(data.get("overtime_threshold_hours") or 0.0),
            break_minutes_total=int(data.get("break_minutes_total") or 0),
            earnings=float(earnings) if earnings is not None and end_raw else None,
            location=LocationDetails.from_dict(data["location"]) if data.get("location") else None,
        )


def new_local_id(now: datetime) -> str:
    """Time-based id for sessions the remote store has not assigned yet."""

    return f"{LOCAL_ID_PREFIX}{int(now.timestamp() * 1000)}-{uuid4().hex[:6]}"


@dataclass(frozen=True)
class ActiveSessionSnapshot:
    """Local mirror of a running session, enough to resume after a reload."""

    session: WorkSession
    sync_status: SyncStatus
    breaks: dict

    def to_dict(self) -> dict:
        return {
            "session": self.session.to_dict(),
            "sync_status": self.sync_status.value,
            "breaks": self.breaks,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActiveSessionSnapshot":
        return cls(
            session=WorkSession.from_dict(data["session"]),
            sync_status=SyncStatus(data.get("sync_status", SyncStatus.PENDING_RETRY.value)),
            breaks=dict(data.get("breaks") or {}),
        )


@dataclass(frozen=True)
class StartResult:
    session: WorkSession
    persisted_remotely: bool
    message: str
    retry_in_seconds: Optional[float] = None


@dataclass(frozen=True)
class StopResult:
    session: WorkSession
    breakdown: EarningsBreakdown
    persisted_remotely: bool
    message: str
    overtime: Optional[OvertimePeriod] = None


@dataclass(frozen=True)
class TimerSnapshot:
    """What the one-second tick shows: elapsed time and live earnings."""

    state: SessionState
    session_id: Optional[str] = None
    start_time: Optional[datetime] = None
    elapsed_seconds: int = 0
    break_active: bool = False
    break_remaining_minutes: int = 0
    break_minutes: int = 0
    earnings: Optional[EarningsBreakdown] = None
    sync_status: Optional[SyncStatus] = None
    retry_attempts: int = 0
    message: Optional[str] = None
