from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_float
from .model import RateSettings
from .repository import RateSettingsRepository


class MySQLRateSettingsRepository(RateSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user(self, user_id: str) -> Optional[RateSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, hourly_rate, overtime_rate, overtime_threshold_hours
                FROM user_settings
                WHERE user_id=%s
                LIMIT 1
                """,
                (str(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return RateSettings(
                user_id=str(r["user_id"]),
                hourly_rate=to_float(r["hourly_rate"]) or 0.0,
                overtime_rate=to_float(r.get("overtime_rate")),
                overtime_threshold_hours=to_float(r.get("overtime_threshold_hours")),
            )

    def upsert(self, settings: RateSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_settings(user_id, hourly_rate, overtime_rate, overtime_threshold_hours)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    hourly_rate=VALUES(hourly_rate),
                    overtime_rate=VALUES(overtime_rate),
                    overtime_threshold_hours=VALUES(overtime_threshold_hours)
                """,
                (
                    settings.user_id,
                    settings.hourly_rate,
                    settings.overtime_rate,
                    settings.overtime_threshold_hours,
                ),
            )

    def create_if_missing(self, settings: RateSettings) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO user_settings(user_id, hourly_rate, overtime_rate, overtime_threshold_hours)
                VALUES(%s,%s,%s,%s)
                """,
                (
                    settings.user_id,
                    settings.hourly_rate,
                    settings.overtime_rate,
                    settings.overtime_threshold_hours,
                ),
            )
            return cur.rowcount > 0
