from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_datetime, to_float
from ..earnings.model import OvertimePeriod
from ..rates.model import LocationDetails
from .model import WorkSession
from .repository import SessionRepository


_SELECT_WITH_LOCATIONS = """
    SELECT s.id, s.user_id, s.location_id, s.start_time, s.end_time, s.hourly_rate,
           s.overtime_rate, s.overtime_threshold_hours, s.break_minutes, s.address,
           s.latitude, s.longitude, s.earnings, l.name AS location_name
    FROM sessions s
    LEFT JOIN locations l ON l.id = s.location_id
    WHERE s.user_id=%s AND s.start_time >= %s AND s.start_time <= %s AND s.end_time IS NOT NULL
    ORDER BY s.start_time DESC
"""

_SELECT_SIMPLE = """
    SELECT id, user_id, location_id, start_time, end_time, hourly_rate,
           overtime_rate, overtime_threshold_hours, break_minutes, address,
           latitude, longitude, earnings
    FROM sessions
    WHERE user_id=%s AND start_time >= %s AND start_time <= %s AND end_time IS NOT NULL
    ORDER BY start_time DESC
"""


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_session(self, session: WorkSession) -> str:
        location = session.location
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(user_id, location_id, start_time, hourly_rate, overtime_rate,
                                     overtime_threshold_hours, break_minutes, address, latitude, longitude,
                                     is_manual_entry)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session.user_id,
                    int(location.location_id) if location and location.location_id else None,
                    session.start_time,
                    session.hourly_rate,
                    session.overtime_rate,
                    session.overtime_threshold_hours,
                    session.break_minutes_total,
                    location.address if location else None,
                    location.latitude if location else None,
                    location.longitude if location else None,
                    int(session.is_manual_entry),
                ),
            )
            return str(cur.lastrowid)

    def complete_session(self, *, session_id: str, end_time: datetime, earnings: float, break_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET end_time=%s, earnings=%s, break_minutes=%s
                WHERE id=%s AND end_time IS NULL
                """,
                (end_time, round(float(earnings), 2), int(break_minutes), int(session_id)),
            )
            return cur.rowcount > 0

    def create_overtime_period(self, period: OvertimePeriod) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO overtime_periods(user_id, session_id, start_time, end_time, overtime_rate,
                                             duration_minutes, earnings)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    period.user_id,
                    int(period.session_id),
                    period.start_time,
                    period.end_time,
                    period.overtime_rate,
                    int(period.duration_minutes),
                    round(float(period.earnings), 2),
                ),
            )
            return str(cur.lastrowid)

    def list_completed(
        self,
        *,
        user_id: str,
        start: datetime,
        end: datetime,
        with_locations: bool = True,
    ) -> Sequence[WorkSession]:
        query = _SELECT_WITH_LOCATIONS if with_locations else _SELECT_SIMPLE
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(query, (str(user_id), start, end))
            return [_row_to_session(r) for r in fetchall(cur)]

    def insert_completed_sessions(self, sessions: Sequence[WorkSession]) -> int:
        if not sessions:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO sessions(user_id, start_time, end_time, hourly_rate, overtime_rate,
                                     overtime_threshold_hours, break_minutes, address, earnings, is_manual_entry)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                """,
                [
                    (
                        s.user_id,
                        s.start_time,
                        s.end_time,
                        s.hourly_rate,
                        s.overtime_rate,
                        s.overtime_threshold_hours,
                        s.break_minutes_total,
                        s.location_label,
                        round(float(s.earnings or 0.0), 2),
                    )
                    for s in sessions
                ],
            )
            return len(sessions)


def _row_to_session(r: dict) -> WorkSession:
    location = None
    if r.get("address") or r.get("location_id") or r.get("location_name"):
        location = LocationDetails(
            address=r.get("address") or "",
            hourly_rate=to_float(r.get("hourly_rate")),
            overtime_rate=to_float(r.get("overtime_rate")),
            location_id=str(r["location_id"]) if r.get("location_id") is not None else None,
            name=r.get("location_name"),
            latitude=to_float(r.get("latitude")),
            longitude=to_float(r.get("longitude")),
        )
    return WorkSession(
        id=str(r["id"]),
        user_id=str(r["user_id"]),
        start_time=normalize_mysql_datetime(r["start_time"]),
        end_time=normalize_mysql_datetime(r.get("end_time")),
        hourly_rate=to_float(r.get("hourly_rate")) or 0.0,
        overtime_rate=to_float(r.get("overtime_rate")) or 0.0,
        overtime_threshold_hours=to_float(r.get("overtime_threshold_hours")) or 0.0,
        break_minutes_total=int(r.get("break_minutes") or 0),
        earnings=to_float(r.get("earnings")) or 0.0,
        location=location,
    )
