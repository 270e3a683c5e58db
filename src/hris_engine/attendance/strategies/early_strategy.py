from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DerivedAttendance
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Early leave on clock-out (only when the day was PRESENT so far)."""

    def decide_clock_in(self, *, derived: DerivedAttendance, is_wfh: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_clock_out(self, *, derived: DerivedAttendance, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.EARLY_LEAVE,
            note=f"left {derived.billable_early_leave_minutes} min early",
        )
