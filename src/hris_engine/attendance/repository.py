from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, ClockEvent, DerivedAttendance


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_range(self, *, employee_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_clock_in(self, record: AttendanceRecord) -> int:
        """Insert the record; fails if (employee, date) already has one."""

        raise NotImplementedError

    def update_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: ClockEvent,
        status: AttendanceStatus,
        derived: DerivedAttendance,
        note: Optional[str] = None,
    ) -> bool:
        """Conditional update: only applies while no clock-out is stored."""

        raise NotImplementedError
