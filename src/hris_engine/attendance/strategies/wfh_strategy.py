from __future__ import annotations

from ...core.enums import AttendanceStatus
from ..model import DerivedAttendance
from .base import AttendanceStrategy, StatusDecision


class WfhStrategy(AttendanceStrategy):
    """On-time clock-in under an approved work-from-home request."""

    def decide_clock_in(self, *, derived: DerivedAttendance, is_wfh: bool) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.WFH)

    def decide_clock_out(self, *, derived: DerivedAttendance, current: AttendanceStatus) -> StatusDecision:
        return StatusDecision(status=current)
