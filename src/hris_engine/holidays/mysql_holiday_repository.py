from __future__ import annotations

from typing import Sequence

from ..core.enums import HolidayType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import ACTIVE_ROW, as_bool, as_date, db_cursor, fetchall
from .model import Holiday
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_id, holiday_date, name, holiday_type, is_active, repeat_annually
                FROM holidays
                WHERE is_active=1 AND {ACTIVE_ROW}
                ORDER BY holiday_date
                """
            )
            return [
                Holiday(
                    holiday_id=int(r["holiday_id"]),
                    holiday_date=as_date(r["holiday_date"]),
                    name=r["name"],
                    holiday_type=HolidayType(r["holiday_type"]),
                    is_active=as_bool(r["is_active"]),
                    repeat_annually=as_bool(r["repeat_annually"]),
                )
                for r in fetchall(cur)
            ]

    def create(self, holiday: Holiday) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(holiday_date, name, holiday_type, is_active, repeat_annually)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    holiday.holiday_date,
                    holiday.name,
                    holiday.holiday_type.value,
                    int(holiday.is_active),
                    int(holiday.repeat_annually),
                ),
            )
            return int(cur.lastrowid)

    def set_active(self, holiday_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE holidays SET is_active=%s WHERE holiday_id=%s AND {ACTIVE_ROW}",
                (int(is_active), holiday_id),
            )
            return cur.rowcount > 0
