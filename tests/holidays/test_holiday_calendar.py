from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from hris_engine.core.enums import HolidayType
from hris_engine.core.exceptions import OverlapConflictError, ValidationError
from hris_engine.holidays.model import Holiday
from hris_engine.holidays.service import HolidayCalendar


class InMemoryHolidays:
    def __init__(self, holidays=None):
        self._rows: dict[int, Holiday] = {h.holiday_id: h for h in holidays or []}
        self._id = max(self._rows, default=0)

    def list_active(self):
        return [h for h in self._rows.values() if h.is_active]

    def create(self, holiday: Holiday) -> int:
        self._id += 1
        self._rows[self._id] = replace(holiday, holiday_id=self._id)
        return self._id

    def set_active(self, holiday_id: int, *, is_active: bool) -> bool:
        if holiday_id not in self._rows:
            return False
        self._rows[holiday_id] = replace(self._rows[holiday_id], is_active=is_active)
        return True


NEW_YEAR = Holiday(
    holiday_id=1,
    holiday_date=date(2020, 1, 1),
    name="New year",
    holiday_type=HolidayType.NATIONAL,
    repeat_annually=True,
)


def test_annual_holiday_matches_every_year():
    calendar = HolidayCalendar(InMemoryHolidays([NEW_YEAR]))

    assert calendar.is_holiday(date(2026, 1, 1)) == (True, HolidayType.NATIONAL)
    assert calendar.is_holiday(date(2026, 1, 2)) == (False, None)


def test_exact_date_wins_over_annual_repeat():
    company = Holiday(holiday_id=2, holiday_date=date(2026, 1, 1), name="Closure", holiday_type=HolidayType.COMPANY)
    calendar = HolidayCalendar(InMemoryHolidays([NEW_YEAR, company]))

    assert calendar.find(date(2026, 1, 1)).holiday_id == 2


def test_holidays_between_lists_each_hit():
    calendar = HolidayCalendar(InMemoryHolidays([NEW_YEAR]))

    hits = calendar.holidays_between(date(2025, 12, 30), date(2026, 1, 3))

    assert [day for day, _ in hits] == [date(2026, 1, 1)]

    with pytest.raises(ValidationError):
        calendar.holidays_between(date(2026, 1, 3), date(2026, 1, 1))


def test_add_holiday_rejects_a_taken_date():
    calendar = HolidayCalendar(InMemoryHolidays([NEW_YEAR]))

    with pytest.raises(OverlapConflictError):
        calendar.add_holiday(holiday_date=date(2027, 1, 1), name="Dup", holiday_type=HolidayType.COMPANY)

    added = calendar.add_holiday(holiday_date=date(2026, 5, 1), name="Labour day", holiday_type=HolidayType.NATIONAL)
    assert added.holiday_id is not None
    assert calendar.is_holiday(date(2026, 5, 1))[0]


def test_deactivated_holiday_no_longer_matches():
    calendar = HolidayCalendar(InMemoryHolidays([NEW_YEAR]))

    assert calendar.deactivate(1)
    assert calendar.find(date(2026, 1, 1)) is None
