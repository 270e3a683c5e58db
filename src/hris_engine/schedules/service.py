from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import clean_note, require_date_range
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..shifts.repository import ShiftCatalogRepository
from ..users.repository import EmployeeRepository
from .model import EmployeeShiftSchedule
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

_PLANNER_ROLES = (Role.ADMIN, Role.HR)


class ScheduleService:
    """Maintains per-date shift overrides."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        catalog: ShiftCatalogRepository,
        employees: EmployeeRepository,
    ):
        self._schedules = schedules
        self._catalog = catalog
        self._employees = employees

    def upsert_override(
        self,
        *,
        current_role: Role,
        employee_id: int,
        work_date: date,
        rule_id: Optional[int],
        is_wfh_allowed: Optional[bool] = None,
        is_overtime_allowed: Optional[bool] = None,
        is_attendance_mandatory: Optional[bool] = None,
        note: Optional[str] = None,
    ) -> int:
        if current_role not in _PLANNER_ROLES:
            raise AuthorizationError("Only HR or admin may edit schedules")

        if self._employees.get_by_id(int(employee_id)) is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        if rule_id is not None and self._catalog.get_rule(int(rule_id)) is None:
            raise NotFoundError(f"Working hours rule {rule_id} not found")

        existing = self._schedules.get_for_employee_and_date(employee_id=int(employee_id), work_date=work_date)
        schedule = EmployeeShiftSchedule(
            schedule_id=existing.schedule_id if existing else None,
            employee_id=int(employee_id),
            work_date=work_date,
            rule_id=int(rule_id) if rule_id is not None else None,
            is_wfh_allowed=is_wfh_allowed,
            is_overtime_allowed=is_overtime_allowed,
            is_attendance_mandatory=is_attendance_mandatory,
            note=clean_note(note),
        )
        schedule_id = self._schedules.upsert(schedule)
        logger.info(
            "Schedule override %s for employee %s on %s (rule=%s)",
            "updated" if existing else "created",
            employee_id,
            work_date,
            rule_id,
        )
        return schedule_id

    def delete_override(self, *, current_role: Role, schedule_id: int) -> None:
        if current_role not in _PLANNER_ROLES:
            raise AuthorizationError("Only HR or admin may edit schedules")

        if not self._schedules.delete(schedule_id=int(schedule_id)):
            raise ValidationError(f"Schedule {schedule_id} could not be deleted")
        logger.info("Schedule override %s deleted", schedule_id)

    def list_range(self, *, start: date, end: date, employee_id: Optional[int] = None) -> Sequence[EmployeeShiftSchedule]:
        require_date_range(start, end)
        return self._schedules.list_range(start=start, end=end, employee_id=employee_id)
