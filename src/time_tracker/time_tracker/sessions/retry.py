from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

from ..core.constants import MAX_RETRY_ATTEMPTS, RETRY_BACKOFF_SECONDS


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff schedule for re-creating a session the store rejected."""

    backoff_seconds: Sequence[float] = RETRY_BACKOFF_SECONDS
    max_attempts: int = MAX_RETRY_ATTEMPTS

    def should_retry(self, attempts_made: int) -> bool:
        return attempts_made < self.max_attempts and bool(self.backoff_seconds)

    def delay_for(self, attempts_made: int) -> float:
        index = min(attempts_made, len(self.backoff_seconds) - 1)
        return float(self.backoff_seconds[index])


class ScheduledCall(Protocol):
    def cancel(self) -> None:
        raise NotImplementedError


class Scheduler(Protocol):
    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError


class ThreadingScheduler(Scheduler):
    """Runs callbacks on daemon timer threads."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ScheduledCall:
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        return timer
