from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Generic, List, Optional, TypeVar

from ..common.money import to_amount
from ..common.validators import clean_note, require_date_range
from ..core.exceptions import InvalidTransitionError, ValidationError
from .model import HistoryEntry, SalaryHistory
from .repository import HistoryRepository

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=HistoryEntry)


class HistoryLedger(Generic[E]):
    """Append-only per-employee ledger (contract, job or salary)."""

    def __init__(self, entries: HistoryRepository[E]):
        self._entries = entries

    def timeline(self, employee_id: int) -> List[E]:
        return sorted(self._entries.list_for_employee(employee_id), key=lambda e: e.start_date)

    def current(self, employee_id: int) -> Optional[E]:
        return next((e for e in reversed(self.timeline(employee_id)) if e.is_current), None)

    def as_of(self, employee_id: int, day: date) -> Optional[E]:
        return next((e for e in reversed(self.timeline(employee_id)) if e.covers(day)), None)

    def record(self, entry: E) -> E:
        """Close the current row the day before ``entry`` starts, then append it."""
        require_date_range(entry.start_date, entry.end_date, field_name="history period")

        current = self.current(entry.employee_id)
        if current is not None:
            if entry.start_date <= current.start_date:
                raise ValidationError(
                    f"New {entry.kind.value.lower()} entry must start after {current.start_date}"
                )
            if not self._entries.close(entry_id=current.entry_id, end_date=entry.start_date - timedelta(days=1)):
                raise InvalidTransitionError(f"{entry.kind.value} history {current.entry_id} was closed concurrently")

        entry_id = self._entries.create(entry)
        logger.info(
            "%s history recorded for employee %s from %s (previous=%s)",
            entry.kind.value,
            entry.employee_id,
            entry.start_date,
            current.entry_id if current else None,
        )
        return replace(entry, entry_id=entry_id)


class SalaryLedger(HistoryLedger[SalaryHistory]):
    def record_change(
        self,
        *,
        employee_id: int,
        new_salary: Decimal,
        effective_date: date,
        change_type: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> SalaryHistory:
        new_salary = to_amount(new_salary)
        if new_salary < 0:
            raise ValidationError("Salary must not be negative")

        current = self.current(employee_id)
        old_salary = current.new_salary if current else None
        difference = new_salary - old_salary if old_salary is not None else new_salary
        percentage = None
        if old_salary is not None and old_salary > 0:
            percentage = to_amount(difference / old_salary * 100)

        return self.record(
            SalaryHistory(
                entry_id=None,
                employee_id=employee_id,
                start_date=effective_date,
                change_type=change_type,
                reason=clean_note(reason),
                old_salary=old_salary,
                new_salary=new_salary,
                salary_difference=to_amount(difference),
                change_percentage=percentage,
            )
        )
