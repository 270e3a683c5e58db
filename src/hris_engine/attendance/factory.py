from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import AttendanceStatus
from .model import DerivedAttendance
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.wfh_strategy import WfhStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, derived: DerivedAttendance, is_wfh: bool) -> AttendanceStrategy:
        if derived.is_late:
            return LateStrategy()
        if is_wfh:
            return WfhStrategy()
        return NormalStrategy()

    def for_clock_out(self, *, derived: DerivedAttendance, current_status: AttendanceStatus) -> AttendanceStrategy:
        if derived.is_early_leave and current_status == AttendanceStatus.PRESENT:
            return EarlyLeaveStrategy()
        return NormalStrategy()
