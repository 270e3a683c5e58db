from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

import pytest

from hris_engine.core.enums import HolidayType, ShiftSource
from hris_engine.core.exceptions import NotFoundError
from hris_engine.holidays.model import Holiday
from hris_engine.holidays.service import HolidayCalendar
from hris_engine.schedules.model import EmployeeShiftSchedule
from hris_engine.shifts.model import EmployeeShiftSetting, ShiftPackage, ShiftPattern, WorkingHoursRule
from hris_engine.shifts.resolver import ShiftResolver

MONDAY = date(2026, 2, 2)
SATURDAY = date(2026, 2, 7)

OFFICE = WorkingHoursRule(rule_id=1, name="Office", start_time=time(8, 0), end_time=time(17, 0), break_minutes=60)
NIGHT = WorkingHoursRule(
    rule_id=2, name="Night", start_time=time(22, 0), end_time=time(6, 0), is_overnight=True, break_minutes=60
)
WEEKDAYS = ShiftPackage(package_id=10, name="Mon-Fri", day_rule_ids=(1, 1, 1, 1, 1, None, None))


@dataclass
class InMemoryCatalog:
    rules: dict[int, WorkingHoursRule] = field(default_factory=lambda: {1: OFFICE, 2: NIGHT})
    packages: dict[int, ShiftPackage] = field(default_factory=lambda: {10: WEEKDAYS})
    patterns: dict[int, ShiftPattern] = field(default_factory=dict)

    def get_rule(self, rule_id: int) -> Optional[WorkingHoursRule]:
        return self.rules.get(rule_id)

    def get_package(self, package_id: int) -> Optional[ShiftPackage]:
        return self.packages.get(package_id)

    def get_pattern(self, pattern_id: int) -> Optional[ShiftPattern]:
        return self.patterns.get(pattern_id)


@dataclass
class InMemoryAssignments:
    settings: list[EmployeeShiftSetting] = field(default_factory=list)

    def get_active_on(self, *, employee_id: int, work_date: date) -> Optional[EmployeeShiftSetting]:
        hits = [s for s in self.settings if s.employee_id == employee_id and s.covers(work_date)]
        hits.sort(key=lambda s: s.effective_from, reverse=True)
        return hits[0] if hits else None


@dataclass
class InMemorySchedules:
    by_employee_date: dict[tuple[int, date], EmployeeShiftSchedule] = field(default_factory=dict)

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[EmployeeShiftSchedule]:
        return self.by_employee_date.get((employee_id, work_date))


@dataclass
class InMemoryHolidays:
    holidays: list[Holiday] = field(default_factory=list)

    def list_active(self):
        return [h for h in self.holidays if h.is_active]


def _pattern(**overrides) -> ShiftPattern:
    values = dict(pattern_id=100, name="Standard", package_id=10)
    values.update(overrides)
    return ShiftPattern(**values)


def _resolver(*, pattern=None, schedules=None, holidays=None, setting=True) -> ShiftResolver:
    catalog = InMemoryCatalog()
    assignments = InMemoryAssignments()
    if pattern is not None:
        catalog.patterns[pattern.pattern_id] = pattern
        if setting:
            assignments.settings.append(
                EmployeeShiftSetting(setting_id=1, employee_id=1, pattern_id=pattern.pattern_id, effective_from=date(2026, 1, 1))
            )
    return ShiftResolver(
        catalog,
        assignments,
        InMemorySchedules(schedules or {}),
        HolidayCalendar(InMemoryHolidays(holidays or [])),
    )


def test_weekday_resolves_from_pattern():
    resolved = _resolver(pattern=_pattern()).resolve(1, MONDAY)

    assert resolved.source is ShiftSource.SETTING
    assert resolved.rule == OFFICE
    assert resolved.is_working_day
    assert resolved.allows_attendance
    assert resolved.required_minutes == 480


def test_weekend_is_off_without_override():
    resolved = _resolver(pattern=_pattern()).resolve(1, SATURDAY)

    assert resolved.is_off
    assert not resolved.allows_attendance


def test_weekly_off_override_allows_attendance():
    resolved = _resolver(pattern=_pattern(override_weekly_off=True)).resolve(1, SATURDAY)

    assert resolved.is_off
    assert resolved.allows_attendance


def test_schedule_override_beats_pattern():
    schedule = EmployeeShiftSchedule(schedule_id=5, employee_id=1, work_date=MONDAY, rule_id=2, is_overtime_allowed=True)

    resolved = _resolver(pattern=_pattern(), schedules={(1, MONDAY): schedule}).resolve(1, MONDAY)

    assert resolved.source is ShiftSource.SCHEDULE
    assert resolved.rule == NIGHT
    assert resolved.is_overnight
    assert resolved.is_overtime_allowed
    # Unset flags fall back to the pattern
    assert resolved.is_wfh_allowed is False


def test_schedule_without_rule_forces_day_off():
    schedule = EmployeeShiftSchedule(schedule_id=5, employee_id=1, work_date=MONDAY, rule_id=None)

    resolved = _resolver(
        pattern=_pattern(override_weekly_off=True), schedules={(1, MONDAY): schedule}
    ).resolve(1, MONDAY)

    assert resolved.is_off
    assert not resolved.allows_attendance


def test_no_assignment_is_off():
    resolved = _resolver().resolve(1, MONDAY)

    assert resolved.source is ShiftSource.NONE
    assert resolved.is_off
    assert not resolved.allows_attendance


def test_holiday_turns_working_day_off():
    holiday = Holiday(holiday_id=1, holiday_date=MONDAY, name="Founders day", holiday_type=HolidayType.COMPANY)

    resolved = _resolver(pattern=_pattern(), holidays=[holiday]).resolve(1, MONDAY)

    assert resolved.is_off
    assert resolved.holiday_type is HolidayType.COMPANY
    assert not resolved.allows_attendance
    assert not resolved.is_attendance_mandatory


def test_holiday_override_keeps_the_shift():
    holiday = Holiday(holiday_id=1, holiday_date=MONDAY, name="Founders day", holiday_type=HolidayType.COMPANY)

    resolved = _resolver(pattern=_pattern(override_company_holiday=True), holidays=[holiday]).resolve(1, MONDAY)

    assert resolved.rule == OFFICE
    assert resolved.holiday_type is HolidayType.COMPANY
    assert resolved.allows_attendance


def test_override_only_applies_to_its_holiday_type():
    holiday = Holiday(holiday_id=1, holiday_date=MONDAY, name="New year", holiday_type=HolidayType.NATIONAL)

    resolved = _resolver(pattern=_pattern(override_company_holiday=True), holidays=[holiday]).resolve(1, MONDAY)

    assert resolved.is_off


def test_missing_pattern_raises():
    catalog = InMemoryCatalog()
    assignments = InMemoryAssignments(
        [EmployeeShiftSetting(setting_id=1, employee_id=1, pattern_id=999, effective_from=date(2026, 1, 1))]
    )
    resolver = ShiftResolver(catalog, assignments, InMemorySchedules(), HolidayCalendar(InMemoryHolidays()))

    with pytest.raises(NotFoundError):
        resolver.resolve(1, MONDAY)


def test_schedule_override_survives_a_missing_pattern():
    catalog = InMemoryCatalog()
    assignments = InMemoryAssignments(
        [EmployeeShiftSetting(setting_id=1, employee_id=1, pattern_id=999, effective_from=date(2026, 1, 1))]
    )
    schedule = EmployeeShiftSchedule(schedule_id=5, employee_id=1, work_date=MONDAY, rule_id=1)
    resolver = ShiftResolver(
        catalog, assignments, InMemorySchedules({(1, MONDAY): schedule}), HolidayCalendar(InMemoryHolidays())
    )

    resolved = resolver.resolve(1, MONDAY)

    assert resolved.source is ShiftSource.SCHEDULE
    assert resolved.rule == OFFICE
    assert resolved.pattern is None
    assert resolved.allows_attendance
