from __future__ import annotations

from datetime import datetime

from ...core.enums import DataSource
from ...sessions.local_store import LocalFallbackStore
from .base import SessionSource, SourceResult


class LocalSessionSource(SessionSource):
    """Completed sessions kept on this device, limited to the user and range."""

    name = DataSource.LOCAL
    is_remote = False

    def __init__(self, local: LocalFallbackStore):
        self._local = local

    def fetch(self, *, user_id: str, start: datetime, end: datetime) -> SourceResult:
        sessions = [
            s
            for s in self._local.list_for_user(user_id)
            if not s.is_running and start <= s.start_time <= end
        ]
        return SourceResult(source=self.name, sessions=sessions)
