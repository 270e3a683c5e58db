from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DerivedAttendance
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Clock-in past start plus tolerance."""

    def decide_clock_in(self, *, derived: DerivedAttendance, is_wfh: bool) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            note=f"late {derived.billable_late_minutes} min",
        )

    def decide_clock_out(self, *, derived: DerivedAttendance, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
