from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from ..core.constants import RECENT_DAYS
from ..core.logging import get_logger
from ..sessions.model import WorkSession
from .model import DailyTotal, HistoryResult, LocationTotal, PeriodSummary, Summary
from .sources.base import SessionSource

logger = get_logger(__name__)


def _hours(session: WorkSession) -> float:
    return session.worked_hours


def _earnings(session: WorkSession) -> float:
    return float(session.earnings or 0.0)


def group_by_day(sessions: Iterable[WorkSession]) -> list[DailyTotal]:
    """Totals per calendar day of the session start, most recent day first."""

    buckets: dict[date, list[WorkSession]] = {}
    for s in sessions:
        buckets.setdefault(s.start_time.date(), []).append(s)

    return [
        DailyTotal(
            day=day,
            earnings=sum(_earnings(s) for s in items),
            hours=sum(_hours(s) for s in items),
            sessions=len(items),
        )
        for day, items in sorted(buckets.items(), key=lambda kv: kv[0], reverse=True)
    ]


def group_by_location(sessions: Iterable[WorkSession]) -> list[LocationTotal]:
    """Totals per location label, highest earnings first."""

    buckets: dict[str, list[WorkSession]] = {}
    for s in sessions:
        buckets.setdefault(s.location_label, []).append(s)

    totals = [
        LocationTotal(
            location=label,
            earnings=sum(_earnings(s) for s in items),
            hours=sum(_hours(s) for s in items),
            sessions=len(items),
        )
        for label, items in buckets.items()
    ]
    totals.sort(key=lambda t: t.earnings, reverse=True)
    return totals


def summarize(sessions: Iterable[WorkSession]) -> Summary:
    items = list(sessions)
    total_earnings = sum(_earnings(s) for s in items)
    total_hours = sum(_hours(s) for s in items)
    average = total_earnings / total_hours if total_hours > 0 else 0.0
    return Summary(
        total_earnings=total_earnings,
        total_hours=total_hours,
        average_hourly_rate=average,
        sessions=len(items),
    )


def period_summary(sessions: Iterable[WorkSession], today: date) -> PeriodSummary:
    week_start = today - timedelta(days=RECENT_DAYS - 1)
    month_start = today.replace(day=1)

    today_earnings = 0.0
    week_earnings = 0.0
    week_sessions = 0
    month_hours = 0.0
    for s in sessions:
        day = s.start_time.date()
        if day > today:
            continue
        if day == today:
            today_earnings += _earnings(s)
        if day >= week_start:
            week_earnings += _earnings(s)
            week_sessions += 1
        if day >= month_start:
            month_hours += _hours(s)

    return PeriodSummary(
        today_earnings=today_earnings,
        week_earnings=week_earnings,
        week_sessions=week_sessions,
        month_hours=month_hours,
    )


class HistoryAggregator:
    """Completed-session history read from an ordered list of sources.

    Sources are tried in order until one returns sessions. A failing source
    falls through to the next one; an empty answer from a remote source skips
    the remaining remote sources and goes straight to local data.
    """

    def __init__(self, sources: Sequence[SessionSource]):
        self._sources = list(sources)

    def fetch(self, *, user_id: str, start: datetime, end: datetime) -> HistoryResult:
        errors: list[str] = []
        answered = None
        remote_answered_empty = False

        for source in self._sources:
            if source.is_remote and remote_answered_empty:
                continue

            result = source.fetch(user_id=user_id, start=start, end=end)
            if not result.ok:
                logger.warning("history_source_failed", source=result.source.value, error=result.error)
                errors.append(f"{result.source.value}: {result.error}")
                continue

            answered = answered or result
            if result.sessions:
                answered = result
                break
            if source.is_remote:
                remote_answered_empty = True

        if answered is None:
            return HistoryResult(sessions=[], errors=tuple(errors))

        sessions = sorted(answered.sessions, key=lambda s: s.start_time, reverse=True)
        logger.info("history_loaded", user_id=user_id, source=answered.source.value, sessions=len(sessions))
        return HistoryResult(sessions=sessions, source=answered.source, errors=tuple(errors))

    group_by_day = staticmethod(group_by_day)
    group_by_location = staticmethod(group_by_location)
    summarize = staticmethod(summarize)
    period_summary = staticmethod(period_summary)
