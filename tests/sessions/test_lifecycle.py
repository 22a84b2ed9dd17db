from datetime import timedelta

import pytest

from tests.fakes import T0, InMemoryRateSettings, InMemorySessions, make_lifecycle

from src.time_tracker.time_tracker.core.enums import SessionState, SyncStatus
from src.time_tracker.time_tracker.core.exceptions import AuthenticationError, InvalidTransitionError
from src.time_tracker.time_tracker.rates.model import LocationDetails, RateSettings


def test_start_persists_remotely_and_mirrors_locally():
    lifecycle, sessions, kv, _ = make_lifecycle()

    result = lifecycle.start(now=T0)

    assert lifecycle.state == SessionState.RUNNING
    assert result.persisted_remotely
    assert result.message == "Timer started"
    assert lifecycle.sync_status == SyncStatus.SYNCED
    assert lifecycle.current_session.id == "1"
    assert "activeSession:u-1" in kv.data
    assert len(sessions.sessions) == 1


def test_start_freezes_location_rates():
    lifecycle, _, _, _ = make_lifecycle()

    result = lifecycle.start(now=T0, location=LocationDetails(address="Depot", hourly_rate=20.0, overtime_rate=30.0))

    assert result.session.hourly_rate == 20.0
    assert result.session.overtime_rate == 30.0
    assert result.session.overtime_threshold_hours == 8.0


def test_second_start_rejected_and_single_session_kept():
    lifecycle, sessions, _, _ = make_lifecycle()
    lifecycle.start(now=T0)

    with pytest.raises(InvalidTransitionError):
        lifecycle.start(now=T0 + timedelta(minutes=1))

    assert len(sessions.sessions) == 1


def test_stop_from_idle_rejected_without_creating_session():
    lifecycle, sessions, kv, _ = make_lifecycle()

    with pytest.raises(InvalidTransitionError):
        lifecycle.stop(now=T0)

    assert lifecycle.state == SessionState.IDLE
    assert lifecycle.current_session is None
    assert sessions.sessions == {}
    assert kv.data == {}


def test_start_without_identity_refused():
    lifecycle, sessions, kv, _ = make_lifecycle(signed_in=False)

    with pytest.raises(AuthenticationError):
        lifecycle.start(now=T0)

    assert lifecycle.state == SessionState.IDLE
    assert sessions.sessions == {}
    assert kv.data == {}


def test_remote_failure_keeps_running_and_schedules_retry_at_15s():
    lifecycle, _, kv, scheduler = make_lifecycle(sessions=InMemorySessions(online=False))

    result = lifecycle.start(now=T0)

    assert lifecycle.state == SessionState.RUNNING
    assert not result.persisted_remotely
    assert result.retry_in_seconds == 15
    assert lifecycle.sync_status == SyncStatus.PENDING_RETRY
    assert lifecycle.current_session.is_local
    assert "activeSession:u-1" in kv.data
    assert scheduler.pending_delays() == [15]


def test_retry_creates_remote_session_when_store_recovers():
    sessions = InMemorySessions(online=False)
    lifecycle, _, _, scheduler = make_lifecycle(sessions=sessions)
    lifecycle.start(now=T0)

    sessions.online = True
    scheduler.advance(15)

    assert lifecycle.sync_status == SyncStatus.SYNCED
    assert lifecycle.current_session.id == "1"
    assert lifecycle.retry_attempts == 0
    assert scheduler.pending == []


def test_retries_back_off_and_stop_at_cap():
    lifecycle, _, _, scheduler = make_lifecycle(sessions=InMemorySessions(online=False))
    lifecycle.start(now=T0)

    scheduler.advance(15)
    assert scheduler.pending_delays() == [30]
    scheduler.advance(30)
    assert scheduler.pending_delays() == [45]
    scheduler.advance(45)

    assert lifecycle.retry_attempts == 3
    assert lifecycle.sync_status == SyncStatus.LOCAL_ONLY
    assert scheduler.pending == []
    assert lifecycle.state == SessionState.RUNNING


def test_stop_while_pending_saves_locally():
    lifecycle, sessions, kv, scheduler = make_lifecycle(sessions=InMemorySessions(online=False))
    lifecycle.start(now=T0)

    result = lifecycle.stop(now=T0 + timedelta(hours=2))

    assert not result.persisted_remotely
    assert "saved on this device" in result.message
    assert result.breakdown.total_earnings == pytest.approx(50.0)
    assert "offlineSessions" in kv.data
    assert "activeSession:u-1" not in kv.data
    assert lifecycle.state == SessionState.COMPLETED
    assert scheduler.pending_delays() == [5]


def test_stop_cancels_pending_retry_even_if_store_recovers():
    sessions = InMemorySessions(online=False)
    lifecycle, _, _, scheduler = make_lifecycle(sessions=sessions)
    lifecycle.start(now=T0)
    lifecycle.stop(now=T0 + timedelta(hours=1))

    sessions.online = True
    scheduler.advance(60)

    assert sessions.sessions == {}
    assert lifecycle.state == SessionState.IDLE


def test_stop_with_break_and_overtime_records_overtime_period():
    lifecycle, sessions, _, _ = make_lifecycle()
    lifecycle.start(now=T0)
    lifecycle.start_break(30, now=T0 + timedelta(hours=4))
    lifecycle.end_break(now=T0 + timedelta(hours=4, minutes=30))

    result = lifecycle.stop(now=T0 + timedelta(hours=9))

    assert result.persisted_remotely
    assert result.breakdown.net_hours == pytest.approx(8.5)
    assert result.breakdown.total_earnings == pytest.approx(218.75)
    assert result.message == "Timer stopped. Earned: $218.75 (including $18.75 overtime)"
    assert len(sessions.overtime) == 1
    period = sessions.overtime[0]
    assert period.session_id == "1"
    assert period.start_time == T0 + timedelta(hours=8, minutes=30)
    assert period.duration_minutes == 30
    assert sessions.sessions["1"]["break_minutes"] == 30


def test_stop_force_ends_active_break():
    lifecycle, _, _, _ = make_lifecycle()
    lifecycle.start(now=T0)
    lifecycle.start_break(60, now=T0 + timedelta(hours=1))

    result = lifecycle.stop(now=T0 + timedelta(hours=1, minutes=20))

    assert result.session.break_minutes_total == 20
    assert result.breakdown.net_hours == pytest.approx(1.0)


def test_overtime_record_failure_does_not_fail_stop():
    sessions = InMemorySessions()
    sessions.overtime_fails = True
    lifecycle, _, kv, _ = make_lifecycle(sessions=sessions)
    lifecycle.start(now=T0)

    result = lifecycle.stop(now=T0 + timedelta(hours=10))

    assert result.persisted_remotely
    assert result.overtime is not None
    assert sessions.overtime == []
    assert "offlineSessions" not in kv.data


def test_remote_completion_failure_keeps_earnings_locally():
    sessions = InMemorySessions()
    lifecycle, _, kv, _ = make_lifecycle(sessions=sessions)
    lifecycle.start(now=T0)

    sessions.online = False
    result = lifecycle.stop(now=T0 + timedelta(hours=3))

    assert not result.persisted_remotely
    assert result.breakdown.total_earnings == pytest.approx(75.0)
    assert "offlineSessions" in kv.data


def test_completed_resets_to_idle_after_display_delay():
    lifecycle, _, _, scheduler = make_lifecycle()
    lifecycle.start(now=T0)
    lifecycle.stop(now=T0 + timedelta(hours=1))

    scheduler.advance(4)
    assert lifecycle.state == SessionState.COMPLETED
    scheduler.advance(1)
    assert lifecycle.state == SessionState.IDLE
    assert lifecycle.current_session is None


def test_start_from_completed_is_allowed_and_old_reset_is_ignored():
    lifecycle, sessions, _, scheduler = make_lifecycle()
    lifecycle.start(now=T0)
    lifecycle.stop(now=T0 + timedelta(hours=1))

    lifecycle.start(now=T0 + timedelta(hours=1, seconds=2))
    scheduler.advance(10)

    assert lifecycle.state == SessionState.RUNNING
    assert len(sessions.sessions) == 2


def test_break_requires_running_timer():
    lifecycle, _, _, _ = make_lifecycle()

    with pytest.raises(InvalidTransitionError):
        lifecycle.start_break(15, now=T0)
    assert lifecycle.end_break(now=T0) == 0


def test_tick_reports_live_earnings_and_is_idempotent():
    lifecycle, _, _, _ = make_lifecycle()
    lifecycle.start(now=T0)
    now = T0 + timedelta(hours=2)

    first = lifecycle.tick(now=now)
    second = lifecycle.tick(now=now)

    assert first == second
    assert first.elapsed_seconds == 7200
    assert first.earnings.total_earnings == pytest.approx(50.0)


def test_tick_ends_due_break():
    lifecycle, _, _, _ = make_lifecycle()
    lifecycle.start(now=T0)
    lifecycle.start_break(15, now=T0 + timedelta(hours=1))

    during = lifecycle.tick(now=T0 + timedelta(hours=1, minutes=10))
    assert during.break_active
    assert during.break_remaining_minutes == 5
    assert during.break_minutes == 10

    after = lifecycle.tick(now=T0 + timedelta(hours=1, minutes=15))
    assert not after.break_active
    assert lifecycle.breaks.total_minutes == 15


def test_retry_now_syncs_and_cancels_scheduled_retry():
    sessions = InMemorySessions(online=False)
    lifecycle, _, _, scheduler = make_lifecycle(sessions=sessions)
    lifecycle.start(now=T0)

    assert lifecycle.retry_now() is False
    sessions.online = True
    assert lifecycle.retry_now() is True

    assert lifecycle.sync_status == SyncStatus.SYNCED
    assert scheduler.pending == []
    assert lifecycle.last_error is None


def test_restore_resumes_running_session_from_mirror():
    sessions = InMemorySessions(online=False)
    first, _, kv, _ = make_lifecycle(sessions=sessions)
    first.start(now=T0)
    first.start_break(30, now=T0 + timedelta(minutes=30))
    local_id = first.current_session.id

    second, _, _, scheduler = make_lifecycle(sessions=sessions, kv=kv)

    assert second.restore() is True
    assert second.state == SessionState.RUNNING
    assert second.current_session.id == local_id
    assert second.breaks.is_active
    assert second.sync_status == SyncStatus.PENDING_RETRY
    assert scheduler.pending_delays() == [15]


def test_restore_without_mirror_does_nothing():
    lifecycle, _, _, _ = make_lifecycle()

    assert lifecycle.restore() is False
    assert lifecycle.state == SessionState.IDLE


def test_rate_lookup_failure_falls_back_to_defaults():
    lifecycle, _, _, _ = make_lifecycle(settings=InMemoryRateSettings(online=False))

    result = lifecycle.start(now=T0)

    assert result.session.hourly_rate == 25.0
    assert result.session.overtime_rate == 37.5


def test_rates_are_frozen_when_settings_change_mid_session():
    settings = InMemoryRateSettings()
    settings.upsert(RateSettings(user_id="u-1", hourly_rate=10.0, overtime_rate=15.0))
    lifecycle, _, _, _ = make_lifecycle(settings=settings)
    lifecycle.start(now=T0)

    settings.upsert(RateSettings(user_id="u-1", hourly_rate=99.0, overtime_rate=99.0, overtime_threshold_hours=1.0))
    result = lifecycle.stop(now=T0 + timedelta(hours=2))

    assert result.breakdown.total_earnings == pytest.approx(20.0)
    assert not result.breakdown.has_overtime


def test_restored_session_keeps_rates_from_its_start():
    settings = InMemoryRateSettings()
    settings.upsert(RateSettings(user_id="u-1", hourly_rate=10.0, overtime_rate=15.0))
    sessions = InMemorySessions()
    first, _, kv, _ = make_lifecycle(sessions=sessions, settings=settings)
    first.start(now=T0)

    settings.upsert(RateSettings(user_id="u-1", hourly_rate=99.0, overtime_rate=99.0, overtime_threshold_hours=1.0))
    second, _, _, _ = make_lifecycle(sessions=sessions, settings=settings, kv=kv)
    assert second.restore() is True
    result = second.stop(now=T0 + timedelta(hours=2))

    assert result.session.hourly_rate == 10.0
    assert result.breakdown.total_earnings == pytest.approx(20.0)


def test_stop_completes_even_when_device_storage_fails():
    lifecycle, _, kv, scheduler = make_lifecycle(sessions=InMemorySessions(online=False))
    lifecycle.start(now=T0)
    kv.fail_writes = True

    result = lifecycle.stop(now=T0 + timedelta(hours=1))

    assert lifecycle.state == SessionState.COMPLETED
    assert not result.persisted_remotely
    assert "could not be saved" in result.message
    assert result.breakdown.total_earnings == pytest.approx(25.0)
    assert scheduler.pending_delays() == [5]
