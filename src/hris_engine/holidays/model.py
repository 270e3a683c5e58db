from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import HolidayType


@dataclass(frozen=True)
class Holiday:
    """A non-working calendar day.

    ``repeat_annually`` holidays match the same month/day in every year.
    """

    holiday_id: Optional[int]
    holiday_date: date
    name: str
    holiday_type: HolidayType
    is_active: bool = True
    repeat_annually: bool = False

    def falls_on(self, day: date) -> bool:
        if not self.is_active:
            return False
        if self.repeat_annually:
            return (self.holiday_date.month, self.holiday_date.day) == (day.month, day.day)
        return self.holiday_date == day
