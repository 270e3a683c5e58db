from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DerivedAttendance
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time clock-in, status unchanged on clock-out."""

    def decide_clock_in(self, *, derived: DerivedAttendance, is_wfh: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_clock_out(self, *, derived: DerivedAttendance, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
