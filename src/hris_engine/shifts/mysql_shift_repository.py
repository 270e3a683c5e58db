from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    ACTIVE_ROW,
    as_bool,
    as_date,
    as_decimal,
    as_optional_int,
    db_cursor,
    fetchall,
    fetchone,
    normalize_mysql_time,
)
from .model import EmployeeShiftSetting, ShiftPackage, ShiftPattern, WorkingHoursRule
from .repository import ShiftAssignmentRepository, ShiftCatalogRepository

_WEEKDAY_COLUMNS = (
    "monday_rule_id",
    "tuesday_rule_id",
    "wednesday_rule_id",
    "thursday_rule_id",
    "friday_rule_id",
    "saturday_rule_id",
    "sunday_rule_id",
)


def _row_to_setting(r: Dict[str, Any]) -> EmployeeShiftSetting:
    return EmployeeShiftSetting(
        setting_id=int(r["setting_id"]),
        employee_id=int(r["employee_id"]),
        pattern_id=int(r["pattern_id"]),
        effective_from=as_date(r["effective_from"]),
        effective_to=as_date(r.get("effective_to")),
        reason=r.get("reason"),
        notes=r.get("notes"),
    )


class MySQLShiftCatalogRepository(ShiftCatalogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_rule(self, rule_id: int) -> Optional[WorkingHoursRule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT rule_id, name, start_time, end_time, is_overnight, required_work_minutes, break_minutes
                FROM working_hours_rules
                WHERE rule_id=%s AND {ACTIVE_ROW}
                """,
                (rule_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return WorkingHoursRule(
                rule_id=int(r["rule_id"]),
                name=r["name"],
                start_time=normalize_mysql_time(r.get("start_time")),
                end_time=normalize_mysql_time(r.get("end_time")),
                is_overnight=as_bool(r.get("is_overnight")),
                required_work_minutes=as_optional_int(r.get("required_work_minutes")),
                break_minutes=int(r.get("break_minutes") or 0),
            )

    def get_package(self, package_id: int) -> Optional[ShiftPackage]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT package_id, name, {", ".join(_WEEKDAY_COLUMNS)}
                FROM shift_packages
                WHERE package_id=%s AND {ACTIVE_ROW}
                """,
                (package_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ShiftPackage(
                package_id=int(r["package_id"]),
                name=r["name"],
                day_rule_ids=tuple(as_optional_int(r.get(col)) for col in _WEEKDAY_COLUMNS),
            )

    def get_pattern(self, pattern_id: int) -> Optional[ShiftPattern]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT * FROM shift_patterns WHERE pattern_id=%s AND {ACTIVE_ROW}", (pattern_id,))
            r = fetchone(cur)
            if not r:
                return None
            return ShiftPattern(
                pattern_id=int(r["pattern_id"]),
                name=r["name"],
                package_id=int(r["package_id"]),
                late_tolerance_minutes=int(r.get("late_tolerance_minutes") or 0),
                early_leave_tolerance_minutes=int(r.get("early_leave_tolerance_minutes") or 0),
                late_deduction_per_minute=as_decimal(r.get("late_deduction_per_minute")),
                late_deduction_max_amount=as_decimal(r.get("late_deduction_max_amount")),
                early_leave_deduction_per_minute=as_decimal(r.get("early_leave_deduction_per_minute")),
                early_leave_deduction_max_amount=as_decimal(r.get("early_leave_deduction_max_amount")),
                underwork_deduction_per_minute=as_decimal(r.get("underwork_deduction_per_minute")),
                underwork_deduction_max_amount=as_decimal(r.get("underwork_deduction_max_amount")),
                is_overtime_allowed=as_bool(r.get("is_overtime_allowed")),
                is_wfh_allowed=as_bool(r.get("is_wfh_allowed")),
                is_attendance_mandatory=as_bool(r.get("is_attendance_mandatory", 1)),
                override_national_holiday=as_bool(r.get("override_national_holiday")),
                override_company_holiday=as_bool(r.get("override_company_holiday")),
                override_collective_leave=as_bool(r.get("override_collective_leave")),
                override_weekly_off=as_bool(r.get("override_weekly_off")),
            )


class MySQLShiftAssignmentRepository(ShiftAssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_employee(self, employee_id: int) -> Sequence[EmployeeShiftSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT setting_id, employee_id, pattern_id, effective_from, effective_to, reason, notes
                FROM employee_shift_settings
                WHERE employee_id=%s AND {ACTIVE_ROW}
                ORDER BY effective_from DESC
                """,
                (employee_id,),
            )
            return [_row_to_setting(r) for r in fetchall(cur)]

    def get_active_on(self, *, employee_id: int, work_date: date) -> Optional[EmployeeShiftSetting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT setting_id, employee_id, pattern_id, effective_from, effective_to, reason, notes
                FROM employee_shift_settings
                WHERE employee_id=%s
                  AND effective_from <= %s
                  AND (effective_to IS NULL OR effective_to >= %s)
                  AND {ACTIVE_ROW}
                ORDER BY effective_from DESC
                LIMIT 1
                """,
                (employee_id, work_date, work_date),
            )
            r = fetchone(cur)
            return _row_to_setting(r) if r else None

    def create(self, setting: EmployeeShiftSetting) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee_shift_settings(employee_id, pattern_id, effective_from, effective_to, reason, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    setting.employee_id,
                    setting.pattern_id,
                    setting.effective_from,
                    setting.effective_to,
                    setting.reason,
                    setting.notes,
                ),
            )
            return int(cur.lastrowid)

    def close(self, *, setting_id: int, effective_to: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE employee_shift_settings
                SET effective_to=%s
                WHERE setting_id=%s AND effective_to IS NULL AND {ACTIVE_ROW}
                """,
                (effective_to, setting_id),
            )
            return cur.rowcount > 0
