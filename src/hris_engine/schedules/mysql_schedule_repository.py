from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    ACTIVE_ROW,
    as_date,
    as_optional_bool,
    as_optional_int,
    db_cursor,
    fetchall,
    fetchone,
    soft_delete,
)
from .model import EmployeeShiftSchedule
from .repository import ScheduleRepository

_COLUMNS = (
    "schedule_id, employee_id, work_date, rule_id, is_wfh_allowed, "
    "is_overtime_allowed, is_attendance_mandatory, note"
)


def _optional_flag(value: Optional[bool]) -> Optional[int]:
    return None if value is None else int(value)


def _row_to_schedule(r: Dict[str, Any]) -> EmployeeShiftSchedule:
    return EmployeeShiftSchedule(
        schedule_id=int(r["schedule_id"]),
        employee_id=int(r["employee_id"]),
        work_date=as_date(r["work_date"]),
        rule_id=as_optional_int(r.get("rule_id")),
        is_wfh_allowed=as_optional_bool(r.get("is_wfh_allowed")),
        is_overtime_allowed=as_optional_bool(r.get("is_overtime_allowed")),
        is_attendance_mandatory=as_optional_bool(r.get("is_attendance_mandatory")),
        note=r.get("note"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[EmployeeShiftSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_shift_schedules
                WHERE employee_id=%s AND work_date=%s AND {ACTIVE_ROW}
                """,
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_schedule(r) if r else None

    def upsert(self, schedule: EmployeeShiftSchedule) -> int:
        values = (
            schedule.rule_id,
            _optional_flag(schedule.is_wfh_allowed),
            _optional_flag(schedule.is_overtime_allowed),
            _optional_flag(schedule.is_attendance_mandatory),
            schedule.note,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if schedule.schedule_id is not None:
                cur.execute(
                    f"""
                    UPDATE employee_shift_schedules
                    SET rule_id=%s, is_wfh_allowed=%s, is_overtime_allowed=%s,
                        is_attendance_mandatory=%s, note=%s
                    WHERE schedule_id=%s AND {ACTIVE_ROW}
                    """,
                    values + (schedule.schedule_id,),
                )
                return int(schedule.schedule_id)

            cur.execute(
                """
                INSERT INTO employee_shift_schedules(
                    employee_id, work_date, rule_id, is_wfh_allowed,
                    is_overtime_allowed, is_attendance_mandatory, note
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (schedule.employee_id, schedule.work_date) + values,
            )
            return int(cur.lastrowid)

    def delete(self, *, schedule_id: int) -> bool:
        return soft_delete(self._conn_factory, "employee_shift_schedules", "schedule_id", schedule_id)

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[EmployeeShiftSchedule]:
        sql = f"""
            SELECT {_COLUMNS}
            FROM employee_shift_schedules
            WHERE work_date BETWEEN %s AND %s AND {ACTIVE_ROW}
        """
        params: list = [start, end]
        if employee_id is not None:
            sql += " AND employee_id=%s"
            params.append(employee_id)
        sql += " ORDER BY work_date, employee_id"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_schedule(r) for r in fetchall(cur)]
