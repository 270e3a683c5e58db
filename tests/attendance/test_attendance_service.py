from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import pytest

from hris_engine.attendance.service import AttendanceService
from hris_engine.core.enums import AttendanceStatus, EmployeeStatus, ShiftSource
from hris_engine.core.exceptions import NotFoundError, ValidationError
from hris_engine.shifts.model import ShiftPattern, WorkingHoursRule
from hris_engine.shifts.resolver import ResolvedShift
from hris_engine.users.model import Employee

OFFICE = WorkingHoursRule(
    rule_id=1, name="Office", start_time=time(8, 0), end_time=time(17, 0), required_work_minutes=480, break_minutes=60
)
NIGHT = WorkingHoursRule(
    rule_id=2,
    name="Night",
    start_time=time(22, 0),
    end_time=time(6, 0),
    is_overnight=True,
    required_work_minutes=420,
    break_minutes=60,
)
PATTERN = ShiftPattern(
    pattern_id=1,
    name="Standard",
    package_id=1,
    late_tolerance_minutes=10,
    late_deduction_per_minute=Decimal("1000"),
    late_deduction_max_amount=Decimal("50000"),
    is_overtime_allowed=True,
)


@dataclass
class InMemoryEmployees:
    by_id: dict[int, Employee] = field(default_factory=dict)

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.by_id.get(employee_id)


class InMemoryAttendance:
    def __init__(self):
        self._by_employee_date = {}
        self._id = 0

    def get_for_employee_and_date(self, employee_id, work_date):
        return self._by_employee_date.get((employee_id, work_date))

    def get_recent_for_employee(self, employee_id, limit):
        items = [r for r in self._by_employee_date.values() if r.employee_id == employee_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def list_range(self, *, employee_id, start, end):
        return [r for r in self.get_recent_for_employee(employee_id, 1000) if start <= r.work_date <= end]

    def create_clock_in(self, record):
        self._id += 1
        self._by_employee_date[(record.employee_id, record.work_date)] = replace(record, attendance_id=self._id)
        return self._id

    def update_clock_out(self, *, attendance_id, clock_out, status, derived, note=None):
        for key, rec in self._by_employee_date.items():
            if rec.attendance_id == attendance_id and rec.clock_out is None:
                self._by_employee_date[key] = replace(
                    rec, clock_out=clock_out, status=status, derived=derived, note=note
                )
                return True
        return False


class StubResolver:
    def __init__(self, rules_by_date, *, pattern=PATTERN, wfh_allowed=False):
        self._rules_by_date = rules_by_date
        self._pattern = pattern
        self._wfh_allowed = wfh_allowed

    def resolve(self, employee_id, work_date):
        rule = self._rules_by_date.get(work_date)
        return ResolvedShift(
            employee_id=employee_id,
            work_date=work_date,
            source=ShiftSource.SETTING,
            rule=rule,
            pattern=self._pattern,
            is_wfh_allowed=self._wfh_allowed,
            is_overtime_allowed=self._pattern.is_overtime_allowed,
            allows_attendance=rule is not None,
            note=None if rule else "weekly off",
        )


class StubWfh:
    def __init__(self, approved_days=()):
        self._approved = set(approved_days)

    def has_approved_for_date(self, employee_id, day):
        return day in self._approved


class RecordingOvertime:
    def __init__(self):
        self.calls = []

    def record_actual_duration(self, *, employee_id, work_date, minutes):
        self.calls.append((employee_id, work_date, minutes))
        return True


def _service(rules_by_date, *, employees=None, wfh_allowed=False, **kwargs):
    repo = InMemoryAttendance()
    svc = AttendanceService(
        repo,
        employees or InMemoryEmployees({1: Employee(employee_id=1, full_name="A")}),
        StubResolver(rules_by_date, wfh_allowed=wfh_allowed),
        **kwargs,
    )
    return svc, repo


def test_late_clock_in_snapshots_shift_and_deduction():
    day = date(2026, 2, 2)
    svc, repo = _service({day: OFFICE})

    record = svc.clock_in(1, now=datetime(2026, 2, 2, 9, 40), latitude=10.5, device_info="phone")

    assert record.status == AttendanceStatus.LATE
    assert record.note == "late 90 min"
    assert record.shift.rule_id == 1
    assert record.pattern.pattern_name == "Standard"
    assert record.derived.late_deduction_amount == Decimal("50000.00")
    assert record.clock_in.latitude == 10.5
    assert repo.get_for_employee_and_date(1, day).attendance_id == record.attendance_id


def test_full_day_with_overtime_updates_overtime_request():
    day = date(2026, 2, 2)
    overtime = RecordingOvertime()
    svc, _ = _service({day: OFFICE}, overtime_requests=overtime)

    svc.clock_in(1, now=datetime(2026, 2, 2, 8, 0))
    record = svc.clock_out(1, now=datetime(2026, 2, 2, 19, 0))

    assert record.status == AttendanceStatus.PRESENT
    assert record.derived.actual_work_minutes == 660
    assert record.derived.overtime_minutes == 180
    assert overtime.calls == [(1, day, 180)]


def test_early_leave_changes_status_on_clock_out():
    day = date(2026, 2, 2)
    svc, _ = _service({day: OFFICE})

    svc.clock_in(1, now=datetime(2026, 2, 2, 8, 0))
    record = svc.clock_out(1, now=datetime(2026, 2, 2, 15, 0))

    assert record.status == AttendanceStatus.EARLY_LEAVE
    assert record.derived.early_leave_minutes == 120
    assert record.derived.underwork_minutes == 60


def test_overnight_clock_out_lands_on_previous_day():
    day = date(2026, 2, 2)
    svc, repo = _service({day: NIGHT})

    svc.clock_in(1, now=datetime(2026, 2, 2, 22, 0))
    record = svc.clock_out(1, now=datetime(2026, 2, 3, 6, 0))

    assert record.work_date == day
    assert record.derived.actual_work_minutes == 480
    assert record.derived.early_leave_minutes == 0
    assert repo.get_for_employee_and_date(1, date(2026, 2, 3)) is None


def test_second_clock_in_and_clock_out_are_refused():
    day = date(2026, 2, 2)
    svc, _ = _service({day: OFFICE})

    svc.clock_in(1, now=datetime(2026, 2, 2, 8, 0))
    with pytest.raises(ValidationError):
        svc.clock_in(1, now=datetime(2026, 2, 2, 8, 5))

    svc.clock_out(1, now=datetime(2026, 2, 2, 17, 0))
    with pytest.raises(ValidationError):
        svc.clock_out(1, now=datetime(2026, 2, 2, 17, 5))


def test_clock_out_without_clock_in_is_refused():
    svc, _ = _service({})

    with pytest.raises(ValidationError):
        svc.clock_out(1, now=datetime(2026, 2, 2, 17, 0))


def test_clock_in_after_shift_end_is_refused():
    day = date(2026, 2, 2)
    svc, _ = _service({day: OFFICE})

    with pytest.raises(ValidationError):
        svc.clock_in(1, now=datetime(2026, 2, 2, 17, 30))


def test_off_day_refuses_clock_in():
    svc, _ = _service({})

    with pytest.raises(ValidationError):
        svc.clock_in(1, now=datetime(2026, 2, 7, 9, 0))


def test_unknown_and_inactive_employees():
    employees = InMemoryEmployees(
        {2: Employee(employee_id=2, full_name="Gone", status=EmployeeStatus.RESIGNED)}
    )
    svc, _ = _service({date(2026, 2, 2): OFFICE}, employees=employees)

    with pytest.raises(NotFoundError):
        svc.clock_in(1, now=datetime(2026, 2, 2, 8, 0))
    with pytest.raises(ValidationError):
        svc.clock_in(2, now=datetime(2026, 2, 2, 8, 0))


def test_wfh_shift_needs_an_approved_request():
    day = date(2026, 2, 2)
    refused, _ = _service({day: OFFICE}, wfh_allowed=True, wfh_requests=StubWfh())
    allowed, _ = _service({day: OFFICE}, wfh_allowed=True, wfh_requests=StubWfh([day]))

    with pytest.raises(ValidationError):
        refused.clock_in(1, now=datetime(2026, 2, 2, 8, 0))

    record = allowed.clock_in(1, now=datetime(2026, 2, 2, 8, 0))
    assert record.status == AttendanceStatus.WFH
    assert record.is_wfh


def test_recent_lists_newest_first():
    days = {date(2026, 2, 2): OFFICE, date(2026, 2, 3): OFFICE}
    svc, _ = _service(days)
    svc.clock_in(1, now=datetime(2026, 2, 2, 8, 0))
    svc.clock_in(1, now=datetime(2026, 2, 3, 8, 0))

    assert [r.work_date for r in svc.recent(1, limit=5)] == [date(2026, 2, 3), date(2026, 2, 2)]
