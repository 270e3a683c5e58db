from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core.constants import ZERO_AMOUNT
from ..core.enums import AttendanceStatus
from ..shifts.model import ShiftPattern
from ..shifts.resolver import ResolvedShift


@dataclass(frozen=True)
class ShiftSnapshot:
    """Working-hours rule fields frozen at clock-in.

    ``rule_id is None`` means the employee clocked in on an off day the
    pattern allows (weekly-off override).
    """

    rule_id: Optional[int]
    start_time: Optional[time]
    end_time: Optional[time]
    is_overnight: bool = False
    required_work_minutes: int = 0
    break_minutes: int = 0
    is_overtime_allowed: bool = False
    is_wfh_allowed: bool = False

    @property
    def has_rule(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    @classmethod
    def from_resolved(cls, resolved: ResolvedShift) -> "ShiftSnapshot":
        rule = resolved.rule if resolved.is_working_day else None
        return cls(
            rule_id=rule.rule_id if rule else None,
            start_time=rule.start_time if rule else None,
            end_time=rule.end_time if rule else None,
            is_overnight=bool(rule and rule.is_overnight),
            required_work_minutes=resolved.required_minutes,
            break_minutes=int(rule.break_minutes or 0) if rule else 0,
            is_overtime_allowed=resolved.is_overtime_allowed,
            is_wfh_allowed=resolved.is_wfh_allowed,
        )


@dataclass(frozen=True)
class PatternSnapshot:
    """Deduction-relevant pattern fields copied at clock-in.

    Later edits to the pattern never change an existing record.
    """

    pattern_id: Optional[int] = None
    pattern_name: Optional[str] = None
    late_tolerance_minutes: int = 0
    early_leave_tolerance_minutes: int = 0
    late_deduction_per_minute: Decimal = ZERO_AMOUNT
    late_deduction_max_amount: Decimal = ZERO_AMOUNT
    early_leave_deduction_per_minute: Decimal = ZERO_AMOUNT
    early_leave_deduction_max_amount: Decimal = ZERO_AMOUNT
    underwork_deduction_per_minute: Decimal = ZERO_AMOUNT
    underwork_deduction_max_amount: Decimal = ZERO_AMOUNT

    @classmethod
    def from_pattern(cls, pattern: Optional[ShiftPattern]) -> "PatternSnapshot":
        if pattern is None:
            return cls()
        return cls(
            pattern_id=pattern.pattern_id,
            pattern_name=pattern.name,
            late_tolerance_minutes=int(pattern.late_tolerance_minutes or 0),
            early_leave_tolerance_minutes=int(pattern.early_leave_tolerance_minutes or 0),
            late_deduction_per_minute=pattern.late_deduction_per_minute,
            late_deduction_max_amount=pattern.late_deduction_max_amount,
            early_leave_deduction_per_minute=pattern.early_leave_deduction_per_minute,
            early_leave_deduction_max_amount=pattern.early_leave_deduction_max_amount,
            underwork_deduction_per_minute=pattern.underwork_deduction_per_minute,
            underwork_deduction_max_amount=pattern.underwork_deduction_max_amount,
        )


@dataclass(frozen=True)
class DerivedAttendance:
    """Durations and deductions computed from clock events."""

    late_minutes: int = 0
    billable_late_minutes: int = 0
    late_deduction_amount: Decimal = ZERO_AMOUNT
    early_leave_minutes: int = 0
    billable_early_leave_minutes: int = 0
    early_leave_deduction_amount: Decimal = ZERO_AMOUNT
    overtime_minutes: int = 0
    actual_work_minutes: int = 0
    required_work_minutes: int = 0
    underwork_minutes: int = 0
    underwork_deduction_amount: Decimal = ZERO_AMOUNT

    @property
    def is_late(self) -> bool:
        return self.billable_late_minutes > 0

    @property
    def is_early_leave(self) -> bool:
        return self.billable_early_leave_minutes > 0

    @property
    def is_overtime(self) -> bool:
        return self.overtime_minutes > 0

    @property
    def total_deduction(self) -> Decimal:
        return self.late_deduction_amount + self.early_leave_deduction_amount + self.underwork_deduction_amount


@dataclass(frozen=True)
class ClockEvent:
    """Raw clock event; location, device and photo are stored, not validated."""

    at: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    device_info: Optional[str] = None
    photo_ref: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per (employee, work_date)."""

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    clock_in: ClockEvent
    clock_out: Optional[ClockEvent]
    status: AttendanceStatus
    shift: ShiftSnapshot
    pattern: PatternSnapshot
    derived: DerivedAttendance
    is_wfh: bool = False
    note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None
