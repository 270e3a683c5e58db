from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
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
from .model import AttendanceRecord, ClockEvent, DerivedAttendance, PatternSnapshot, ShiftSnapshot
from .repository import AttendanceRepository

_DERIVED_COLUMNS = (
    "late_minutes",
    "billable_late_minutes",
    "late_deduction_amount",
    "early_leave_minutes",
    "billable_early_leave_minutes",
    "early_leave_deduction_amount",
    "overtime_minutes",
    "actual_work_minutes",
    "required_work_minutes",
    "underwork_minutes",
    "underwork_deduction_amount",
)

_PATTERN_COLUMNS = (
    "late_tolerance_minutes",
    "early_leave_tolerance_minutes",
    "late_deduction_per_minute",
    "late_deduction_max_amount",
    "early_leave_deduction_per_minute",
    "early_leave_deduction_max_amount",
    "underwork_deduction_per_minute",
    "underwork_deduction_max_amount",
)


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _derived_values(d: DerivedAttendance) -> tuple:
    return tuple(getattr(d, col) for col in _DERIVED_COLUMNS)


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    clock_out = None
    if r.get("clock_out_at") is not None:
        clock_out = ClockEvent(
            at=r["clock_out_at"],
            latitude=_optional_float(r.get("clock_out_latitude")),
            longitude=_optional_float(r.get("clock_out_longitude")),
            device_info=r.get("clock_out_device"),
            photo_ref=r.get("clock_out_photo"),
        )

    pattern_kwargs = {}
    for col in _PATTERN_COLUMNS:
        pattern_kwargs[col] = int(r.get(col) or 0) if col.endswith("_minutes") else as_decimal(r.get(col))

    derived_kwargs = {}
    for col in _DERIVED_COLUMNS:
        derived_kwargs[col] = as_decimal(r.get(col)) if col.endswith("_amount") else int(r.get(col) or 0)

    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=as_date(r["work_date"]),
        clock_in=ClockEvent(
            at=r["clock_in_at"],
            latitude=_optional_float(r.get("clock_in_latitude")),
            longitude=_optional_float(r.get("clock_in_longitude")),
            device_info=r.get("clock_in_device"),
            photo_ref=r.get("clock_in_photo"),
        ),
        clock_out=clock_out,
        status=AttendanceStatus(r["status"]),
        shift=ShiftSnapshot(
            rule_id=as_optional_int(r.get("rule_id")),
            start_time=normalize_mysql_time(r.get("shift_start")),
            end_time=normalize_mysql_time(r.get("shift_end")),
            is_overnight=as_bool(r.get("is_overnight")),
            required_work_minutes=int(r.get("required_work_minutes") or 0),
            break_minutes=int(r.get("break_minutes") or 0),
            is_overtime_allowed=as_bool(r.get("is_overtime_allowed")),
            is_wfh_allowed=as_bool(r.get("is_wfh_allowed")),
        ),
        pattern=PatternSnapshot(
            pattern_id=as_optional_int(r.get("pattern_id")),
            pattern_name=r.get("pattern_name"),
            **pattern_kwargs,
        ),
        derived=DerivedAttendance(**derived_kwargs),
        is_wfh=as_bool(r.get("is_wfh")),
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT * FROM attendance_records WHERE employee_id=%s AND work_date=%s AND {ACTIVE_ROW}",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT * FROM attendance_records
                WHERE employee_id=%s AND {ACTIVE_ROW}
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_range(self, *, employee_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT * FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s AND {ACTIVE_ROW}
                ORDER BY work_date
                """,
                (employee_id, start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def create_clock_in(self, record: AttendanceRecord) -> int:
        s, p, c = record.shift, record.pattern, record.clock_in
        columns = (
            "employee_id, work_date, status, is_wfh, note, "
            "clock_in_at, clock_in_latitude, clock_in_longitude, clock_in_device, clock_in_photo, "
            "rule_id, shift_start, shift_end, is_overnight, break_minutes, is_overtime_allowed, is_wfh_allowed, "
            "pattern_id, pattern_name, " + ", ".join(_PATTERN_COLUMNS) + ", " + ", ".join(_DERIVED_COLUMNS)
        )
        values = (
            record.employee_id,
            record.work_date,
            record.status.value,
            int(record.is_wfh),
            record.note,
            c.at,
            c.latitude,
            c.longitude,
            c.device_info,
            c.photo_ref,
            s.rule_id,
            s.start_time,
            s.end_time,
            int(s.is_overnight),
            s.break_minutes,
            int(s.is_overtime_allowed),
            int(s.is_wfh_allowed),
            p.pattern_id,
            p.pattern_name,
        ) + tuple(getattr(p, col) for col in _PATTERN_COLUMNS) + _derived_values(record.derived)

        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO attendance_records({columns}) VALUES({placeholders})", values)
            return int(cur.lastrowid)

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: ClockEvent,
        status: AttendanceStatus,
        derived: DerivedAttendance,
        note: Optional[str] = None,
    ) -> bool:
        assignments = ", ".join(f"{col}=%s" for col in _DERIVED_COLUMNS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET clock_out_at=%s, clock_out_latitude=%s, clock_out_longitude=%s,
                    clock_out_device=%s, clock_out_photo=%s, status=%s, note=%s, {assignments}
                WHERE attendance_id=%s AND clock_out_at IS NULL AND {ACTIVE_ROW}
                """,
                (
                    clock_out.at,
                    clock_out.latitude,
                    clock_out.longitude,
                    clock_out.device_info,
                    clock_out.photo_ref,
                    status.value,
                    note,
                )
                + _derived_values(derived)
                + (attendance_id,),
            )
            return cur.rowcount > 0
