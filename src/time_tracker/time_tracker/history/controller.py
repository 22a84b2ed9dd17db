from __future__ import annotations

from datetime import datetime, time, timedelta

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import json_error, login_required
from ..container import Container
from ..core.constants import RECENT_DAYS


def register(app: Flask, container: Container) -> None:
    @app.route("/api/history", methods=["GET"], endpoint="history")
    @login_required
    def history():
        today = now_local().date()
        try:
            end_day = parse_iso_date(request.args["end"]) if request.args.get("end") else today
            start_day = (
                parse_iso_date(request.args["start"])
                if request.args.get("start")
                else end_day - timedelta(days=RECENT_DAYS)
            )
        except ValueError:
            return json_error("Dates must use the YYYY-MM-DD format", 400)
        if start_day > end_day:
            return json_error("Start date must not be after end date", 400)

        user_id = str(session["user_id"])
        result = container.history.fetch(
            user_id=user_id,
            start=datetime.combine(start_day, time.min),
            end=datetime.combine(end_day, time.max),
        )
        aggregator = container.history
        summary = aggregator.summarize(result.sessions)
        # Home-screen figures cover this month and the last week whatever range was asked for.
        period_start = min(today.replace(day=1), today - timedelta(days=RECENT_DAYS - 1))
        recent = aggregator.fetch(
            user_id=user_id,
            start=datetime.combine(period_start, time.min),
            end=datetime.combine(today, time.max),
        )
        period = aggregator.period_summary(recent.sessions, today)

        return jsonify(
            {
                "success": True,
                "source": result.source.value if result.source else None,
                "offline": result.is_local,
                "sessions": [
                    dict(s.to_dict(), location_label=s.location_label, worked_hours=round(s.worked_hours, 2))
                    for s in result.sessions
                ],
                "daily": [
                    {"day": d.day.isoformat(), "earnings": round(d.earnings, 2), "hours": round(d.hours, 2), "sessions": d.sessions}
                    for d in aggregator.group_by_day(result.sessions)
                ],
                "locations": [
                    {"location": loc.location, "earnings": round(loc.earnings, 2), "hours": round(loc.hours, 2), "sessions": loc.sessions}
                    for loc in aggregator.group_by_location(result.sessions)
                ],
                "summary": {
                    "total_earnings": round(summary.total_earnings, 2),
                    "total_hours": round(summary.total_hours, 2),
                    "average_hourly_rate": round(summary.average_hourly_rate, 2),
                    "sessions": summary.sessions,
                },
                "period": {
                    "today_earnings": round(period.today_earnings, 2),
                    "week_earnings": round(period.week_earnings, 2),
                    "week_sessions": period.week_sessions,
                    "month_hours": round(period.month_hours, 2),
                },
            }
        ), 200
