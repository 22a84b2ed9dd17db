from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, Optional

from ..breaks.tracker import BreakTracker
from ..common.datetime_utils import now_local
from ..common.money import format_money
from ..core.constants import COMPLETED_DISPLAY_SECONDS
from ..core.enums import SessionState, SyncStatus
from ..core.exceptions import AuthenticationError, InvalidTransitionError, RemoteStoreError
from ..core.logging import get_logger
from ..earnings.calculator.base import EarningsCalculator
from ..earnings.calculator.standard_calculator import StandardEarningsCalculator
from ..earnings.overtime import build_overtime_period
from ..identity.provider import IdentityProvider
from ..rates.model import LocationDetails
from ..rates.provider import RateProvider
from .local_store import LocalFallbackStore
from .model import (
    ActiveSessionSnapshot,
    StartResult,
    StopResult,
    TimerSnapshot,
    WorkSession,
    new_local_id,
)
from .repository import SessionRepository
from .retry import RetryPolicy, ScheduledCall, Scheduler

logger = get_logger(__name__)


class SessionLifecycle:
    """State machine for one user's work timer: Idle -> Running -> Completed.

    The running session is written locally first and then to the remote
    store. A failed remote create never stops the timer; it is retried on the
    policy's backoff schedule until it succeeds, the cap is reached, or the
    timer is stopped.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        local: LocalFallbackStore,
        rates: RateProvider,
        identity: IdentityProvider,
        scheduler: Scheduler,
        *,
        calculator: Optional[EarningsCalculator] = None,
        retry_policy: Optional[RetryPolicy] = None,
        completed_display_seconds: float = COMPLETED_DISPLAY_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._sessions = sessions
        self._local = local
        self._rates = rates
        self._identity = identity
        self._scheduler = scheduler
        self._calculator = calculator or StandardEarningsCalculator()
        self._retry_policy = retry_policy or RetryPolicy()
        self._completed_display_seconds = float(completed_display_seconds)
        self._clock = clock

        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._session: Optional[WorkSession] = None
        self._breaks = BreakTracker()
        self._sync_status: Optional[SyncStatus] = None
        self._retry_attempts = 0
        self._retry_handle: Optional[ScheduledCall] = None
        self._reset_handle: Optional[ScheduledCall] = None
        # Bumped on every transition; callbacks from an older generation are stale.
        self._generation = 0
        self._last_error: Optional[str] = None
        self._last_result: Optional[StopResult] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state == SessionState.RUNNING

    @property
    def current_session(self) -> Optional[WorkSession]:
        return self._session

    @property
    def sync_status(self) -> Optional[SyncStatus]:
        return self._sync_status

    @property
    def retry_attempts(self) -> int:
        return self._retry_attempts

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def last_result(self) -> Optional[StopResult]:
        return self._last_result

    @property
    def breaks(self) -> BreakTracker:
        return self._breaks

    def start(self, *, now: Optional[datetime] = None, location: Optional[LocationDetails] = None) -> StartResult:
        with self._lock:
            if self._state == SessionState.RUNNING:
                raise InvalidTransitionError("Timer is already running")

            identity = self._identity.current_identity()
            if identity is None:
                raise AuthenticationError("Sign in to start tracking time")

            now = now or self._clock()
            self._supersede_callbacks()

            rates = self._rates.resolve(identity.user_id, location)
            self._session = WorkSession(
                id=new_local_id(now),
                user_id=identity.user_id,
                start_time=now,
                hourly_rate=rates.hourly_rate,
                overtime_rate=rates.overtime_rate,
                overtime_threshold_hours=rates.overtime_threshold_hours,
                location=location,
            )
            self._breaks = BreakTracker()
            self._state = SessionState.RUNNING
            self._sync_status = SyncStatus.PENDING_RETRY
            self._retry_attempts = 0
            self._last_error = None
            self._last_result = None

            # The local mirror is always written before any remote call.
            self._save_mirror()

            created = self._try_create_remote()
            retry_in = None
            if created:
                message = "Timer started"
            else:
                retry_in = self._schedule_retry()
                message = "Error saving session to server, local timer will continue"
            self._save_mirror()

            logger.info(
                "session_started",
                user_id=identity.user_id,
                session_id=self._session.id,
                hourly_rate=rates.hourly_rate,
                rate_source=rates.source,
                synced=created,
            )
            return StartResult(
                session=self._session,
                persisted_remotely=created,
                message=message,
                retry_in_seconds=retry_in,
            )

    def stop(self, *, now: Optional[datetime] = None) -> StopResult:
        with self._lock:
            if self._state != SessionState.RUNNING or self._session is None:
                raise InvalidTransitionError("Timer is not running")

            now = now or self._clock()
            session = self._session
            self._supersede_callbacks()

            self._breaks.end_break(now=now)
            breakdown = self._calculator.compute(
                start_time=session.start_time,
                end_time=now,
                break_minutes=self._breaks.total_minutes,
                hourly_rate=session.hourly_rate,
                overtime_rate=session.overtime_rate,
                overtime_threshold_hours=session.overtime_threshold_hours,
            )
            completed = session.complete(
                end_time=now,
                earnings=breakdown.total_earnings,
                break_minutes=breakdown.break_minutes,
            )

            persisted = False
            overtime = None
            if self._sync_status == SyncStatus.SYNCED:
                persisted = self._try_complete_remote(completed)

            if persisted:
                overtime = build_overtime_period(
                    session_id=completed.id,
                    user_id=completed.user_id,
                    start_time=completed.start_time,
                    end_time=now,
                    overtime_threshold_hours=completed.overtime_threshold_hours,
                    overtime_rate=completed.overtime_rate,
                    breakdown=breakdown,
                )
                if overtime is not None:
                    self._record_overtime(overtime)
                message = f"Timer stopped. Earned: {format_money(breakdown.total_earnings)}"
                if breakdown.has_overtime:
                    message += f" (including {format_money(breakdown.overtime_earnings)} overtime)"
            elif self._keep_locally(completed):
                message = (
                    f"Timer stopped. Approximate earnings: {format_money(breakdown.total_earnings)} "
                    "(saved on this device only)"
                )
            else:
                message = (
                    f"Timer stopped. Approximate earnings: {format_money(breakdown.total_earnings)} "
                    "(could not be saved)"
                )

            try:
                self._local.clear_active(completed.user_id)
            except OSError as exc:
                logger.error("active_session_clear_failed", session_id=completed.id, error=str(exc))

            result = StopResult(
                session=completed,
                breakdown=breakdown,
                persisted_remotely=persisted,
                message=message,
                overtime=overtime,
            )
            self._session = completed
            self._state = SessionState.COMPLETED
            self._sync_status = None
            self._retry_attempts = 0
            self._last_result = result
            self._schedule_reset()

            logger.info(
                "session_stopped",
                user_id=completed.user_id,
                session_id=completed.id,
                total_earnings=round(breakdown.total_earnings, 2),
                overtime_hours=round(breakdown.overtime_hours, 4),
                break_minutes=breakdown.break_minutes,
                persisted_remotely=persisted,
            )
            return result

    def start_break(self, planned_minutes: int, *, now: Optional[datetime] = None):
        with self._lock:
            if self._state != SessionState.RUNNING:
                raise InvalidTransitionError("Start the timer before taking a break")
            period = self._breaks.start_break(planned_minutes, now=now or self._clock())
            self._save_mirror()
            return period

    def end_break(self, *, now: Optional[datetime] = None) -> int:
        with self._lock:
            if self._state != SessionState.RUNNING or not self._breaks.is_active:
                return 0
            minutes = self._breaks.end_break(now=now or self._clock())
            self._save_mirror()
            return minutes

    def tick(self, *, now: Optional[datetime] = None) -> TimerSnapshot:
        """Per-second refresh: ends a due break and reports live earnings.

        Safe to call repeatedly for the same instant.
        """

        with self._lock:
            if self._state != SessionState.RUNNING or self._session is None:
                return TimerSnapshot(
                    state=self._state,
                    session_id=self._session.id if self._session else None,
                    start_time=self._session.start_time if self._session else None,
                    earnings=self._last_result.breakdown if self._last_result else None,
                    message=self._last_result.message if self._last_result else None,
                )

            now = now or self._clock()
            session = self._session
            if self._breaks.end_if_due(now=now) is not None:
                self._save_mirror()

            break_minutes = self._breaks.minutes_so_far(now)
            live = self._calculator.compute(
                start_time=session.start_time,
                end_time=max(now, session.start_time),
                break_minutes=break_minutes,
                hourly_rate=session.hourly_rate,
                overtime_rate=session.overtime_rate,
                overtime_threshold_hours=session.overtime_threshold_hours,
            )
            active = self._breaks.active_break
            return TimerSnapshot(
                state=self._state,
                session_id=session.id,
                start_time=session.start_time,
                elapsed_seconds=max(int((now - session.start_time).total_seconds()), 0),
                break_active=active is not None,
                break_remaining_minutes=active.remaining_minutes(now) if active else 0,
                break_minutes=break_minutes,
                earnings=live,
                sync_status=self._sync_status,
                retry_attempts=self._retry_attempts,
                message=self._last_error,
            )

    def retry_now(self) -> bool:
        """Manual reconnect; does not count against the automatic attempts."""

        with self._lock:
            if self._state != SessionState.RUNNING or self._sync_status == SyncStatus.SYNCED:
                return False
            if not self._try_create_remote():
                return False
            self._cancel(self._retry_handle)
            self._retry_handle = None
            self._retry_attempts = 0
            self._save_mirror()
            logger.info("manual_retry_succeeded", session_id=self._session.id)
            return True

    def restore(self) -> bool:
        """Resume a running session from the local mirror after a reload."""

        with self._lock:
            if self._state == SessionState.RUNNING:
                return False
            identity = self._identity.current_identity()
            if identity is None:
                return False
            snapshot = self._local.load_active(identity.user_id)
            if snapshot is None or not snapshot.session.is_running:
                return False

            self._supersede_callbacks()
            self._session = snapshot.session
            self._breaks = BreakTracker.from_dict(snapshot.breaks)
            self._state = SessionState.RUNNING
            self._sync_status = snapshot.sync_status
            self._retry_attempts = 0
            self._last_result = None
            if self._sync_status != SyncStatus.SYNCED:
                self._schedule_retry()
                self._save_mirror()

            logger.info(
                "session_restored",
                user_id=identity.user_id,
                session_id=self._session.id,
                sync_status=self._sync_status.value,
            )
            return True

    def reset(self) -> None:
        """Completed -> Idle once the result has been shown."""

        with self._lock:
            if self._state != SessionState.COMPLETED:
                return
            self._cancel(self._reset_handle)
            self._reset_handle = None
            self._state = SessionState.IDLE
            self._session = None

    def _try_create_remote(self) -> bool:
        session = self._session
        try:
            remote_id = self._sessions.create_session(session)
        except RemoteStoreError as exc:
            self._last_error = "Server connection issue. Working in offline mode."
            logger.warning("session_create_failed", session_id=session.id, error=str(exc))
            return False

        self._session = session.with_id(remote_id)
        self._sync_status = SyncStatus.SYNCED
        self._last_error = None
        return True

    def _try_complete_remote(self, completed: WorkSession) -> bool:
        try:
            updated = self._sessions.complete_session(
                session_id=completed.id,
                end_time=completed.end_time,
                earnings=completed.earnings,
                break_minutes=completed.break_minutes_total,
            )
        except RemoteStoreError as exc:
            self._last_error = "Error saving to server. Using local calculations."
            logger.warning("session_complete_failed", session_id=completed.id, error=str(exc))
            return False
        if not updated:
            self._last_error = "Session was not found on the server. Using local calculations."
            logger.warning("session_complete_missing", session_id=completed.id)
        return updated

    def _keep_locally(self, completed: WorkSession) -> bool:
        try:
            self._local.save(completed)
        except OSError as exc:
            logger.error("local_save_failed", session_id=completed.id, error=str(exc))
            return False
        return True

    def _record_overtime(self, overtime) -> None:
        try:
            self._sessions.create_overtime_period(overtime)
        except RemoteStoreError as exc:
            logger.warning("overtime_record_failed", session_id=overtime.session_id, error=str(exc))

    def _schedule_retry(self) -> Optional[float]:
        if not self._retry_policy.should_retry(self._retry_attempts):
            self._sync_status = SyncStatus.LOCAL_ONLY
            logger.warning(
                "session_retry_exhausted",
                session_id=self._session.id,
                attempts=self._retry_attempts,
            )
            return None

        delay = self._retry_policy.delay_for(self._retry_attempts)
        generation = self._generation
        self._sync_status = SyncStatus.PENDING_RETRY
        self._retry_handle = self._scheduler.call_later(delay, lambda: self._run_retry(generation))
        logger.info(
            "session_retry_scheduled",
            session_id=self._session.id,
            attempt=self._retry_attempts + 1,
            delay_seconds=delay,
        )
        return delay

    def _run_retry(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state != SessionState.RUNNING:
                return
            if self._sync_status == SyncStatus.SYNCED:
                return
            self._retry_handle = None
            self._retry_attempts += 1
            if self._try_create_remote():
                self._retry_attempts = 0
                logger.info("session_retry_succeeded", session_id=self._session.id)
            else:
                self._schedule_retry()
            self._save_mirror()

    def _schedule_reset(self) -> None:
        generation = self._generation
        self._reset_handle = self._scheduler.call_later(
            self._completed_display_seconds,
            lambda: self._reset_if_current(generation),
        )

    def _reset_if_current(self, generation: int) -> None:
        with self._lock:
            if generation == self._generation:
                self.reset()

    def _supersede_callbacks(self) -> None:
        self._generation += 1
        self._cancel(self._retry_handle)
        self._cancel(self._reset_handle)
        self._retry_handle = None
        self._reset_handle = None

    @staticmethod
    def _cancel(handle: Optional[ScheduledCall]) -> None:
        if handle is not None:
            handle.cancel()

    def _save_mirror(self) -> None:
        if self._session is None or self._state != SessionState.RUNNING:
            return
        self._local.save_active(
            ActiveSessionSnapshot(
                session=self._session,
                sync_status=self._sync_status or SyncStatus.PENDING_RETRY,
                breaks=self._breaks.to_dict(),
            )
        )
