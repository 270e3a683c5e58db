from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import EmployeeShiftSchedule


class ScheduleRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[EmployeeShiftSchedule]:
        raise NotImplementedError

    def upsert(self, schedule: EmployeeShiftSchedule) -> int:
        """Create or update the single override for (employee, date).

        Returns schedule_id.
        """

        raise NotImplementedError

    def delete(self, *, schedule_id: int) -> bool:
        """Soft delete."""

        raise NotImplementedError

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[EmployeeShiftSchedule]:
        raise NotImplementedError
