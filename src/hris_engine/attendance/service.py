from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, minutes_of, now_local
from ..common.locks import KeyedLock
from ..core.exceptions import NotFoundError, ValidationError
from ..requests.service import OvertimeRequestService, WfhRequestService
from ..shifts.resolver import ShiftResolver
from ..users.repository import EmployeeRepository
from .calculator.base import AttendanceCalculator
from .calculator.standard_calculator import StandardAttendanceCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, ClockEvent, PatternSnapshot, ShiftSnapshot
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Clock-in / clock-out use cases.

    The shift and pattern are snapshotted on the record at clock-in and every
    later computation uses that snapshot.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        resolver: ShiftResolver,
        *,
        wfh_requests: Optional[WfhRequestService] = None,
        overtime_requests: Optional[OvertimeRequestService] = None,
        calculator: Optional[AttendanceCalculator] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        locks: Optional[KeyedLock] = None,
        clock: Clock = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._resolver = resolver
        self._wfh = wfh_requests
        self._overtime = overtime_requests
        self._calculator = calculator or StandardAttendanceCalculator()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._locks = locks or KeyedLock()
        self._clock = clock

    def clock_in(
        self,
        employee_id: int,
        *,
        now: Optional[datetime] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        device_info: Optional[str] = None,
        photo_ref: Optional[str] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        if not employee.is_active:
            raise ValidationError(f"Employee {employee_id} is {employee.status.value}")

        with self._locks.hold((employee_id, today)):
            if self._attendance.get_for_employee_and_date(employee_id, today) is not None:
                raise ValidationError("Already clocked in today")

            resolved = self._resolver.resolve(employee_id, today)
            if not resolved.allows_attendance:
                logger.warning("Clock-in refused for employee %s on %s: %s", employee_id, today, resolved.note)
                raise ValidationError(f"Cannot clock in on a non-working day ({resolved.note or 'off'})")

            if (
                resolved.is_working_day
                and not resolved.is_overnight
                and minutes_of(now.time()) > minutes_of(resolved.end_time)
            ):
                raise ValidationError(f"Shift already ended at {resolved.end_time:%H:%M}")

            is_wfh = False
            if resolved.is_wfh_allowed:
                is_wfh = bool(self._wfh and self._wfh.has_approved_for_date(employee_id, today))
                if not is_wfh:
                    raise ValidationError("Shift allows WFH but no approved WFH request exists for today")

            shift = ShiftSnapshot.from_resolved(resolved)
            pattern = PatternSnapshot.from_pattern(resolved.pattern)
            derived = self._calculator.calculate(shift, now.time(), None, pattern)

            strategy = self._factory.for_clock_in(derived=derived, is_wfh=is_wfh)
            decision = strategy.decide_clock_in(derived=derived, is_wfh=is_wfh)

            record = AttendanceRecord(
                attendance_id=None,
                employee_id=employee_id,
                work_date=today,
                clock_in=ClockEvent(
                    at=now,
                    latitude=latitude,
                    longitude=longitude,
                    device_info=device_info,
                    photo_ref=photo_ref,
                ),
                clock_out=None,
                status=decision.status,
                shift=shift,
                pattern=pattern,
                derived=derived,
                is_wfh=is_wfh,
                note=decision.note,
            )
            attendance_id = self._attendance.create_clock_in(record)

        logger.info(
            "Clock-in employee=%s date=%s status=%s late=%d",
            employee_id,
            today,
            decision.status.value,
            derived.billable_late_minutes,
        )
        return replace(record, attendance_id=attendance_id)

    def _find_open_record(self, employee_id: int, now: datetime) -> Optional[AttendanceRecord]:
        today = now.date()
        record = self._attendance.get_for_employee_and_date(employee_id, today)
        if record is not None:
            return record

        # Overnight shifts are clocked out after midnight on yesterday's record
        previous = self._attendance.get_for_employee_and_date(employee_id, today - timedelta(days=1))
        if previous is not None and previous.is_open and previous.shift.is_overnight:
            return previous
        return None

    def clock_out(
        self,
        employee_id: int,
        *,
        now: Optional[datetime] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        device_info: Optional[str] = None,
        photo_ref: Optional[str] = None,
    ) -> AttendanceRecord:
        now = now or self._clock()

        record = self._find_open_record(employee_id, now)
        if record is None:
            raise ValidationError("No clock-in record found")

        with self._locks.hold((employee_id, record.work_date)):
            record = self._attendance.get_for_employee_and_date(employee_id, record.work_date)
            if record is None:
                raise ValidationError("No clock-in record found")
            if not record.is_open:
                raise ValidationError("Already clocked out")

            derived = self._calculator.calculate(record.shift, record.clock_in.at.time(), now.time(), record.pattern)
            strategy = self._factory.for_clock_out(derived=derived, current_status=record.status)
            decision = strategy.decide_clock_out(derived=derived, current=record.status)

            clock_out = ClockEvent(
                at=now,
                latitude=latitude,
                longitude=longitude,
                device_info=device_info,
                photo_ref=photo_ref,
            )
            note = decision.note or record.note
            if not self._attendance.update_clock_out(
                attendance_id=record.attendance_id,
                clock_out=clock_out,
                status=decision.status,
                derived=derived,
                note=note,
            ):
                raise ValidationError("Already clocked out")

        if derived.is_overtime and self._overtime is not None:
            self._overtime.record_actual_duration(
                employee_id=employee_id,
                work_date=record.work_date,
                minutes=derived.overtime_minutes,
            )

        logger.info(
            "Clock-out employee=%s date=%s status=%s worked=%d overtime=%d underwork=%d",
            employee_id,
            record.work_date,
            decision.status.value,
            derived.actual_work_minutes,
            derived.overtime_minutes,
            derived.underwork_minutes,
        )
        return replace(record, clock_out=clock_out, status=decision.status, derived=derived, note=note)

    def get_record(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, work_date)

    def recent(self, employee_id: int, *, limit: int = 15) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_employee(employee_id, limit)
