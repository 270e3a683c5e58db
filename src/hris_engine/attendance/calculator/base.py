from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import time
from typing import Optional

from ..model import DerivedAttendance, PatternSnapshot, ShiftSnapshot


class AttendanceCalculator(ABC):
    """Calculator interface (Strategy Pattern for time accounting)."""

    @abstractmethod
    def duration_minutes(self, clock_in: time, clock_out: time, *, overnight: bool) -> int:
        raise NotImplementedError

    @abstractmethod
    def calculate(
        self,
        shift: ShiftSnapshot,
        clock_in: time,
        clock_out: Optional[time],
        pattern: PatternSnapshot,
    ) -> DerivedAttendance:
        raise NotImplementedError
