from datetime import datetime, timedelta

import pytest

from src.time_tracker.time_tracker.breaks.tracker import BreakTracker
from src.time_tracker.time_tracker.core.exceptions import InvalidTransitionError, ValidationError

T0 = datetime(2026, 3, 2, 12, 0)


def test_end_break_adds_whole_minutes():
    tracker = BreakTracker()
    tracker.start_break(30, now=T0)

    assert tracker.end_break(now=T0 + timedelta(minutes=12, seconds=59)) == 12
    assert tracker.total_minutes == 12
    assert not tracker.is_active


def test_end_break_when_inactive_is_noop():
    tracker = BreakTracker(total_minutes=20)

    assert tracker.end_break(now=T0) == 0
    assert tracker.total_minutes == 20


def test_immediate_end_leaves_total_unchanged():
    tracker = BreakTracker(total_minutes=5)
    tracker.start_break(15, now=T0)

    assert tracker.end_break(now=T0) == 0
    assert tracker.total_minutes == 5


def test_total_accumulates_across_breaks():
    tracker = BreakTracker()
    tracker.start_break(15, now=T0)
    tracker.end_break(now=T0 + timedelta(minutes=15))
    tracker.start_break(10, now=T0 + timedelta(hours=2))
    tracker.end_break(now=T0 + timedelta(hours=2, minutes=10))

    assert tracker.total_minutes == 25


def test_second_break_while_active_rejected():
    tracker = BreakTracker()
    tracker.start_break(15, now=T0)

    with pytest.raises(InvalidTransitionError):
        tracker.start_break(15, now=T0 + timedelta(minutes=1))


def test_break_needs_positive_duration():
    with pytest.raises(ValidationError):
        BreakTracker().start_break(0, now=T0)


def test_end_if_due_only_after_planned_duration():
    tracker = BreakTracker()
    tracker.start_break(15, now=T0)

    assert tracker.end_if_due(now=T0 + timedelta(minutes=14)) is None
    assert tracker.is_active
    assert tracker.end_if_due(now=T0 + timedelta(minutes=15)) == 15
    assert not tracker.is_active


def test_minutes_so_far_includes_running_break():
    tracker = BreakTracker(total_minutes=10)
    tracker.start_break(30, now=T0)

    assert tracker.minutes_so_far(T0 + timedelta(minutes=7)) == 17
    assert tracker.total_minutes == 10


def test_dict_round_trip_keeps_active_break():
    tracker = BreakTracker(total_minutes=10)
    tracker.start_break(30, now=T0)

    restored = BreakTracker.from_dict(tracker.to_dict())

    assert restored.total_minutes == 10
    assert restored.active_break == tracker.active_break
