from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ...core.enums import DataSource
from ...sessions.model import WorkSession


@dataclass(frozen=True)
class SourceResult:
    source: DataSource
    sessions: list[WorkSession] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SessionSource(ABC):
    """Strategy Pattern: one place completed sessions can be read from.

    Implementations return a failed SourceResult instead of raising.
    """

    name: DataSource
    is_remote: bool = True

    @abstractmethod
    def fetch(self, *, user_id: str, start: datetime, end: datetime) -> SourceResult:
        raise NotImplementedError
