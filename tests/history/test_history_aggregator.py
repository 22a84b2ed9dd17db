from datetime import date, datetime

import pytest

from tests.fakes import InMemoryKeyValueStore, InMemorySessions

from src.time_tracker.time_tracker.core.enums import DataSource
from src.time_tracker.time_tracker.history.service import (
    HistoryAggregator,
    group_by_day,
    group_by_location,
    period_summary,
    summarize,
)
from src.time_tracker.time_tracker.history.sources.local_source import LocalSessionSource
from src.time_tracker.time_tracker.history.sources.remote_source import RemoteSessionSource
from src.time_tracker.time_tracker.rates.model import LocationDetails
from src.time_tracker.time_tracker.sessions.local_store import LocalFallbackStore
from src.time_tracker.time_tracker.sessions.model import WorkSession

RANGE = dict(start=datetime(2026, 3, 1), end=datetime(2026, 3, 31, 23, 59, 59))


def _session(session_id, day, hours, *, user_id="u-1", rate=20.0, location=None):
    start = datetime(2026, 3, day, 9, 0)
    end = datetime(2026, 3, day, 9 + hours, 0)
    return WorkSession(
        id=session_id,
        user_id=user_id,
        start_time=start,
        end_time=end,
        hourly_rate=rate,
        overtime_rate=rate * 1.5,
        overtime_threshold_hours=8.0,
        earnings=hours * rate,
        location=location,
    )


def _aggregator(remote, local):
    return HistoryAggregator(
        [
            RemoteSessionSource(remote, with_locations=True, name=DataSource.REMOTE),
            RemoteSessionSource(remote, with_locations=False, name=DataSource.REMOTE_SIMPLE),
            LocalSessionSource(local),
        ]
    )


def _local_with(*sessions):
    local = LocalFallbackStore(InMemoryKeyValueStore())
    for s in sessions:
        local.save(s)
    return local


def test_remote_sessions_returned_newest_first():
    remote = InMemorySessions()
    remote.insert_completed_sessions([_session("1", 3, 4), _session("2", 5, 2)])

    result = _aggregator(remote, _local_with()).fetch(user_id="u-1", **RANGE)

    assert result.source == DataSource.REMOTE
    assert [s.id for s in result.sessions] == ["2", "1"]


def test_join_failure_falls_back_to_simple_query():
    remote = InMemorySessions()
    remote.join_query_fails = True
    remote.insert_completed_sessions([_session("1", 3, 4)])

    result = _aggregator(remote, _local_with()).fetch(user_id="u-1", **RANGE)

    assert result.source == DataSource.REMOTE_SIMPLE
    assert len(result.errors) == 1


def test_remote_down_uses_local_sessions_in_range_for_user():
    local = _local_with(
        _session("local-1", 2, 3),
        _session("local-2", 4, 3, user_id="u-2"),
        WorkSession(
            id="local-3",
            user_id="u-1",
            start_time=datetime(2026, 2, 20, 9, 0),
            end_time=datetime(2026, 2, 20, 10, 0),
            hourly_rate=20.0,
            overtime_rate=30.0,
            overtime_threshold_hours=8.0,
            earnings=20.0,
        ),
    )

    result = _aggregator(InMemorySessions(online=False), local).fetch(user_id="u-1", **RANGE)

    assert result.is_local
    assert [s.id for s in result.sessions] == ["local-1"]
    assert len(result.errors) == 2


def test_empty_remote_substitutes_local_without_simple_query():
    remote = InMemorySessions()
    remote.simple_query_fails = True
    local = _local_with(_session("local-1", 2, 3))

    result = _aggregator(remote, local).fetch(user_id="u-1", **RANGE)

    assert result.is_local
    assert result.errors == ()


def test_nothing_anywhere_returns_empty_remote_answer():
    result = _aggregator(InMemorySessions(), _local_with()).fetch(user_id="u-1", **RANGE)

    assert result.sessions == []
    assert result.source == DataSource.REMOTE


def test_group_by_day_sums_earnings_and_hours():
    sessions = [_session("1", 3, 4), _session("2", 3, 2), _session("3", 5, 1)]

    days = group_by_day(sessions)

    assert [d.day for d in days] == [date(2026, 3, 5), date(2026, 3, 3)]
    assert days[1].earnings == pytest.approx(120.0)
    assert days[1].hours == pytest.approx(6.0)
    assert days[1].sessions == 2


def test_group_by_location_uses_labels():
    depot = LocationDetails(address="1 Depot Rd", name="Depot", location_id="4")
    sessions = [
        _session("1", 3, 4, location=depot),
        _session("2", 4, 2, location=depot),
        _session("local-3", 5, 1),
    ]

    totals = group_by_location(sessions)

    assert [t.location for t in totals] == ["Depot", "Offline location"]
    assert totals[0].earnings == pytest.approx(120.0)


def test_summarize_average_rate():
    summary = summarize([_session("1", 3, 4, rate=20.0), _session("2", 4, 4, rate=30.0)])

    assert summary.total_earnings == pytest.approx(200.0)
    assert summary.total_hours == pytest.approx(8.0)
    assert summary.average_hourly_rate == pytest.approx(25.0)


def test_summarize_empty():
    summary = summarize([])

    assert summary.average_hourly_rate == 0.0
    assert summary.sessions == 0


def test_period_summary_today_week_and_month():
    sessions = [
        _session("1", 20, 2),
        _session("2", 14, 3),
        _session("3", 13, 1),
        _session("4", 1, 5),
    ]

    summary = period_summary(sessions, date(2026, 3, 20))

    assert summary.today_earnings == pytest.approx(40.0)
    assert summary.week_earnings == pytest.approx(100.0)
    assert summary.week_sessions == 2
    assert summary.month_hours == pytest.approx(11.0)
