from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class EmployeeShiftSchedule:
    """Per-date override for one employee.

    ``rule_id is None`` forces a day off. Flags left as None fall back to the
    employee's active pattern.
    """

    schedule_id: Optional[int]
    employee_id: int
    work_date: date
    rule_id: Optional[int] = None
    is_wfh_allowed: Optional[bool] = None
    is_overtime_allowed: Optional[bool] = None
    is_attendance_mandatory: Optional[bool] = None
    note: Optional[str] = None
