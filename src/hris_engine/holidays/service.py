from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Tuple

from ..common.datetime_utils import iter_days
from ..common.validators import require_date_range, require_non_empty
from ..core.enums import HolidayType
from ..core.exceptions import OverlapConflictError
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayCalendar:
    """Answers "is this date a non-working day, and of what kind"."""

    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def find(self, day: date) -> Optional[Holiday]:
        # Exact-date rows win over annual repeats when both exist.
        matches = [h for h in self._holidays.list_active() if h.falls_on(day)]
        if not matches:
            return None
        matches.sort(key=lambda h: (h.repeat_annually, h.holiday_date != day))
        return matches[0]

    def is_holiday(self, day: date) -> Tuple[bool, Optional[HolidayType]]:
        holiday = self.find(day)
        if holiday is None:
            return False, None
        return True, holiday.holiday_type

    def holidays_between(self, start: date, end: date) -> List[Tuple[date, Holiday]]:
        require_date_range(start, end)
        active = self._holidays.list_active()
        result: List[Tuple[date, Holiday]] = []
        for day in iter_days(start, end):
            hit = next((h for h in active if h.falls_on(day)), None)
            if hit is not None:
                result.append((day, hit))
        return result

    def add_holiday(
        self,
        *,
        holiday_date: date,
        name: str,
        holiday_type: HolidayType,
        repeat_annually: bool = False,
    ) -> Holiday:
        name = require_non_empty(name, "name")
        if self.find(holiday_date) is not None:
            raise OverlapConflictError(f"A holiday already exists on {holiday_date}")

        holiday = Holiday(
            holiday_id=None,
            holiday_date=holiday_date,
            name=name,
            holiday_type=holiday_type,
            repeat_annually=repeat_annually,
        )
        holiday_id = self._holidays.create(holiday)
        logger.info("Holiday added: %s %s (%s)", holiday_date, name, holiday_type.value)
        return replace(holiday, holiday_id=holiday_id)

    def deactivate(self, holiday_id: int) -> bool:
        changed = self._holidays.set_active(holiday_id, is_active=False)
        if changed:
            logger.info("Holiday %s deactivated", holiday_id)
        return changed
