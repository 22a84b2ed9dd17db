from __future__ import annotations

from datetime import datetime

from ...core.enums import DataSource
from ...core.exceptions import RemoteStoreError
from ...sessions.repository import SessionRepository
from .base import SessionSource, SourceResult


class RemoteSessionSource(SessionSource):
    """Remote ``sessions`` table, optionally joined with location names."""

    def __init__(self, repo: SessionRepository, *, with_locations: bool = True, name: DataSource = DataSource.REMOTE):
        self._repo = repo
        self._with_locations = with_locations
        self.name = name

    def fetch(self, *, user_id: str, start: datetime, end: datetime) -> SourceResult:
        try:
            sessions = self._repo.list_completed(
                user_id=user_id,
                start=start,
                end=end,
                with_locations=self._with_locations,
            )
        except RemoteStoreError as exc:
            return SourceResult(source=self.name, error=str(exc))
        return SourceResult(source=self.name, sessions=list(sessions))
