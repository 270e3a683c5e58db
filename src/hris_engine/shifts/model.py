from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Optional, Tuple

from ..common.datetime_utils import span_minutes
from ..core.constants import ZERO_AMOUNT
from ..core.enums import HolidayType


@dataclass(frozen=True)
class WorkingHoursRule:
    """Start/end window of one working day. ``start_time is None`` means OFF."""

    rule_id: int
    name: str
    start_time: Optional[time]
    end_time: Optional[time]
    is_overnight: bool = False
    required_work_minutes: Optional[int] = None
    break_minutes: int = 0

    @property
    def is_off(self) -> bool:
        return self.start_time is None or self.end_time is None

    @property
    def span_minutes(self) -> int:
        if self.is_off:
            return 0
        return span_minutes(self.start_time, self.end_time, overnight=self.is_overnight)

    @property
    def effective_required_minutes(self) -> int:
        # Unconfigured rules expect the whole window minus the break
        if self.required_work_minutes is not None:
            return int(self.required_work_minutes)
        return max(0, self.span_minutes - int(self.break_minutes or 0))


@dataclass(frozen=True)
class ShiftPackage:
    """Weekly template: Monday..Sunday -> optional WorkingHoursRule id."""

    package_id: int
    name: str
    day_rule_ids: Tuple[Optional[int], ...] = (None,) * 7

    def __post_init__(self) -> None:
        if len(self.day_rule_ids) != 7:
            raise ValueError("day_rule_ids must have exactly 7 entries (Mon..Sun)")

    def rule_id_for(self, day: date) -> Optional[int]:
        return self.day_rule_ids[day.weekday()]


@dataclass(frozen=True)
class ShiftPattern:
    """Tolerance, deduction and permission configuration around a package."""

    pattern_id: int
    name: str
    package_id: int

    late_tolerance_minutes: int = 0
    early_leave_tolerance_minutes: int = 0

    late_deduction_per_minute: Decimal = ZERO_AMOUNT
    late_deduction_max_amount: Decimal = ZERO_AMOUNT
    early_leave_deduction_per_minute: Decimal = ZERO_AMOUNT
    early_leave_deduction_max_amount: Decimal = ZERO_AMOUNT
    underwork_deduction_per_minute: Decimal = ZERO_AMOUNT
    underwork_deduction_max_amount: Decimal = ZERO_AMOUNT

    is_overtime_allowed: bool = False
    is_wfh_allowed: bool = False
    is_attendance_mandatory: bool = True

    override_national_holiday: bool = False
    override_company_holiday: bool = False
    override_collective_leave: bool = False
    override_weekly_off: bool = False

    def overrides_holiday(self, holiday_type: HolidayType) -> bool:
        """True when attendance is still required on this kind of holiday."""
        if holiday_type is HolidayType.NATIONAL:
            return self.override_national_holiday
        if holiday_type is HolidayType.COMPANY:
            return self.override_company_holiday
        if holiday_type is HolidayType.COLLECTIVE_LEAVE:
            return self.override_collective_leave
        return False


@dataclass(frozen=True)
class EmployeeShiftSetting:
    """Pattern assignment over ``[effective_from, effective_to]``; open-ended when ``effective_to`` is None."""

    setting_id: Optional[int]
    employee_id: int
    pattern_id: int
    effective_from: date
    effective_to: Optional[date] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.effective_to is None

    def covers(self, day: date) -> bool:
        if day < self.effective_from:
            return False
        return self.effective_to is None or day <= self.effective_to
