from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from ..earnings.model import OvertimePeriod
from .model import WorkSession


class SessionRepository(Protocol):
    """Remote ``sessions`` / ``overtime_periods`` tables.

    Every method raises RemoteStoreError when the store is unreachable.
    """

    def create_session(self, session: WorkSession) -> str:
        """Insert a running session and return the id assigned by the store."""

        raise NotImplementedError

    def complete_session(self, *, session_id: str, end_time: datetime, earnings: float, break_minutes: int) -> bool:
        raise NotImplementedError

    def create_overtime_period(self, period: OvertimePeriod) -> str:
        raise NotImplementedError

    def list_completed(
        self,
        *,
        user_id: str,
        start: datetime,
        end: datetime,
        with_locations: bool = True,
    ) -> Sequence[WorkSession]:
        """Completed sessions whose start falls in [start, end], newest first."""

        raise NotImplementedError

    def insert_completed_sessions(self, sessions: Sequence[WorkSession]) -> int:
        """Bulk insert sessions recorded offline as manual entries."""

        raise NotImplementedError
