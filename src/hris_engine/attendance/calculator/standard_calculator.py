from __future__ import annotations

from datetime import time
from typing import Optional

from ...common.datetime_utils import minutes_of
from ...common.money import capped_deduction
from ...core.constants import MINUTES_PER_DAY
from ...core.exceptions import ValidationError
from ..model import DerivedAttendance, PatternSnapshot, ShiftSnapshot
from .base import AttendanceCalculator


class StandardAttendanceCalculator(AttendanceCalculator):
    """Standard rule: worked = out - in; the break is already excluded from required minutes.

    Lateness and early leave are measured against the scheduled window minus
    their tolerances; underwork has no tolerance. Overtime is the excess over
    required minutes and only counts when the shift allows overtime.
    """

    def duration_minutes(self, clock_in: time, clock_out: time, *, overnight: bool) -> int:
        in_m = minutes_of(clock_in)
        out_m = minutes_of(clock_out)
        if out_m >= in_m:
            return out_m - in_m
        if overnight:
            return (MINUTES_PER_DAY - in_m) + out_m
        raise ValidationError(f"Clock-out {clock_out} is before clock-in {clock_in} on a day shift")

    def _timeline(self, value: time, shift: ShiftSnapshot) -> int:
        """Minutes on the shift's own axis; after-midnight times of overnight shifts get +1440.

        Times in the off-gap between end and start are split at its midpoint:
        the half nearer the end belongs to the next day.
        """
        m = minutes_of(value)
        start_m = minutes_of(shift.start_time)
        end_m = minutes_of(shift.end_time)
        if not shift.is_overnight or end_m >= start_m:
            return m
        if m >= start_m:
            return m
        gap_mid = end_m + (start_m - end_m) // 2
        return m + MINUTES_PER_DAY if m <= gap_mid else m

    def calculate(
        self,
        shift: ShiftSnapshot,
        clock_in: time,
        clock_out: Optional[time],
        pattern: PatternSnapshot,
    ) -> DerivedAttendance:
        if not shift.has_rule:
            return self._calculate_unscheduled(shift, clock_in, clock_out)

        start_m = minutes_of(shift.start_time)
        end_m = minutes_of(shift.end_time)
        if shift.is_overnight and end_m < start_m:
            end_m += MINUTES_PER_DAY

        late = max(0, self._timeline(clock_in, shift) - start_m)
        billable_late = max(0, late - int(pattern.late_tolerance_minutes))
        late_amount = capped_deduction(
            pattern.late_deduction_per_minute, billable_late, pattern.late_deduction_max_amount
        )
        required = int(shift.required_work_minutes)

        if clock_out is None:
            return DerivedAttendance(
                late_minutes=late,
                billable_late_minutes=billable_late,
                late_deduction_amount=late_amount,
                required_work_minutes=required,
            )

        early = max(0, end_m - self._timeline(clock_out, shift))
        billable_early = max(0, early - int(pattern.early_leave_tolerance_minutes))
        early_amount = capped_deduction(
            pattern.early_leave_deduction_per_minute, billable_early, pattern.early_leave_deduction_max_amount
        )

        actual = self.duration_minutes(clock_in, clock_out, overnight=shift.is_overnight)

        underwork = max(0, required - actual)
        underwork_amount = capped_deduction(
            pattern.underwork_deduction_per_minute, underwork, pattern.underwork_deduction_max_amount
        )
        overtime = max(0, actual - required) if shift.is_overtime_allowed else 0

        return DerivedAttendance(
            late_minutes=late,
            billable_late_minutes=billable_late,
            late_deduction_amount=late_amount,
            early_leave_minutes=early,
            billable_early_leave_minutes=billable_early,
            early_leave_deduction_amount=early_amount,
            overtime_minutes=overtime,
            actual_work_minutes=actual,
            required_work_minutes=required,
            underwork_minutes=underwork,
            underwork_deduction_amount=underwork_amount,
        )

    def _calculate_unscheduled(
        self, shift: ShiftSnapshot, clock_in: time, clock_out: Optional[time]
    ) -> DerivedAttendance:
        # Weekly-off override: nothing is required, everything worked may be overtime
        if clock_out is None:
            return DerivedAttendance()
        actual = self.duration_minutes(clock_in, clock_out, overnight=True)
        return DerivedAttendance(
            actual_work_minutes=actual,
            overtime_minutes=actual if shift.is_overtime_allowed else 0,
        )
