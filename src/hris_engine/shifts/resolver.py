from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, time
from typing import Optional

from ..core.enums import HolidayType, ShiftSource
from ..core.exceptions import NotFoundError
from ..holidays.service import HolidayCalendar
from ..schedules.model import EmployeeShiftSchedule
from ..schedules.repository import ScheduleRepository
from .model import ShiftPattern, WorkingHoursRule
from .repository import ShiftAssignmentRepository, ShiftCatalogRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedShift:
    """Effective working-hours rule of one employee on one date.

    ``rule is None`` means OFF. ``allows_attendance`` stays True on an OFF
    weekday when the pattern overrides the weekly off.
    """

    employee_id: int
    work_date: date
    source: ShiftSource
    rule: Optional[WorkingHoursRule]
    pattern: Optional[ShiftPattern]
    is_wfh_allowed: bool = False
    is_overtime_allowed: bool = False
    is_attendance_mandatory: bool = True
    holiday_type: Optional[HolidayType] = None
    allows_attendance: bool = False
    note: Optional[str] = None

    @property
    def is_off(self) -> bool:
        return self.rule is None or self.rule.is_off

    @property
    def is_working_day(self) -> bool:
        return not self.is_off

    @property
    def start_time(self) -> Optional[time]:
        return None if self.is_off else self.rule.start_time

    @property
    def end_time(self) -> Optional[time]:
        return None if self.is_off else self.rule.end_time

    @property
    def is_overnight(self) -> bool:
        return bool(self.rule and self.rule.is_overnight)

    @property
    def required_minutes(self) -> int:
        return 0 if self.is_off else self.rule.effective_required_minutes


def _pick(override: Optional[bool], fallback: bool) -> bool:
    return fallback if override is None else bool(override)


class ShiftResolver:
    """Per-date override > date-ranged pattern assignment > OFF, then holidays."""

    def __init__(
        self,
        catalog: ShiftCatalogRepository,
        assignments: ShiftAssignmentRepository,
        schedules: ScheduleRepository,
        calendar: HolidayCalendar,
    ):
        self._catalog = catalog
        self._assignments = assignments
        self._schedules = schedules
        self._calendar = calendar

    def resolve(self, employee_id: int, work_date: date) -> ResolvedShift:
        schedule = self._schedules.get_for_employee_and_date(employee_id=employee_id, work_date=work_date)
        setting = self._assignments.get_active_on(employee_id=employee_id, work_date=work_date)

        pattern: Optional[ShiftPattern] = None
        if setting is not None:
            pattern = self._catalog.get_pattern(setting.pattern_id)
            if pattern is None:
                if schedule is None:
                    raise NotFoundError(f"Shift pattern {setting.pattern_id} not found")
                logger.warning(
                    "Assignment %s points to missing pattern %s; using schedule override only",
                    setting.setting_id,
                    setting.pattern_id,
                )

        if schedule is not None:
            resolved = self._from_schedule(schedule, pattern)
        elif pattern is not None:
            resolved = self._from_pattern(employee_id, work_date, pattern)
        else:
            resolved = ResolvedShift(
                employee_id=employee_id,
                work_date=work_date,
                source=ShiftSource.NONE,
                rule=None,
                pattern=None,
                is_attendance_mandatory=False,
                note="no shift assigned",
            )

        resolved = self._apply_holiday(resolved)
        logger.debug(
            "Resolved shift employee=%s date=%s source=%s rule=%s off=%s",
            employee_id,
            work_date,
            resolved.source.value,
            resolved.rule.rule_id if resolved.rule else None,
            resolved.is_off,
        )
        return resolved

    def _load_rule(self, rule_id: Optional[int]) -> Optional[WorkingHoursRule]:
        if rule_id is None:
            return None
        rule = self._catalog.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(f"Working hours rule {rule_id} not found")
        return rule

    def _from_schedule(self, schedule: EmployeeShiftSchedule, pattern: Optional[ShiftPattern]) -> ResolvedShift:
        rule = self._load_rule(schedule.rule_id)
        return ResolvedShift(
            employee_id=schedule.employee_id,
            work_date=schedule.work_date,
            source=ShiftSource.SCHEDULE,
            rule=rule,
            pattern=pattern,
            is_wfh_allowed=_pick(schedule.is_wfh_allowed, pattern.is_wfh_allowed if pattern else False),
            is_overtime_allowed=_pick(
                schedule.is_overtime_allowed, pattern.is_overtime_allowed if pattern else False
            ),
            is_attendance_mandatory=_pick(
                schedule.is_attendance_mandatory, pattern.is_attendance_mandatory if pattern else True
            ),
            allows_attendance=rule is not None and not rule.is_off,
            note=schedule.note or ("day off (override)" if rule is None else None),
        )

    def _from_pattern(self, employee_id: int, work_date: date, pattern: ShiftPattern) -> ResolvedShift:
        package = self._catalog.get_package(pattern.package_id)
        if package is None:
            raise NotFoundError(f"Shift package {pattern.package_id} not found")

        rule = self._load_rule(package.rule_id_for(work_date))
        is_off = rule is None or rule.is_off
        return ResolvedShift(
            employee_id=employee_id,
            work_date=work_date,
            source=ShiftSource.SETTING,
            rule=rule,
            pattern=pattern,
            is_wfh_allowed=pattern.is_wfh_allowed,
            is_overtime_allowed=pattern.is_overtime_allowed,
            is_attendance_mandatory=pattern.is_attendance_mandatory,
            allows_attendance=(not is_off) or pattern.override_weekly_off,
            note="weekly off" if is_off else None,
        )

    def _apply_holiday(self, resolved: ResolvedShift) -> ResolvedShift:
        is_holiday, holiday_type = self._calendar.is_holiday(resolved.work_date)
        if not is_holiday:
            return resolved

        pattern = resolved.pattern
        if pattern is not None and pattern.overrides_holiday(holiday_type):
            return replace(resolved, holiday_type=holiday_type)

        return replace(
            resolved,
            rule=None,
            is_attendance_mandatory=False,
            holiday_type=holiday_type,
            allows_attendance=False,
            note=f"holiday ({holiday_type.value.lower()})",
        )
