from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import ClassVar, Optional

from ..core.constants import ZERO_AMOUNT
from ..core.enums import EmployeeStatus, HistoryKind


@dataclass(frozen=True)
class HistoryEntry:
    """One row of an append-only ledger; the current row has no ``end_date``."""

    kind: ClassVar[HistoryKind]

    entry_id: Optional[int]
    employee_id: int
    start_date: date
    end_date: Optional[date] = None
    change_type: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_current(self) -> bool:
        return self.end_date is None

    def covers(self, day: date) -> bool:
        return self.start_date <= day and (self.end_date is None or day <= self.end_date)


@dataclass(frozen=True)
class ContractHistory(HistoryEntry):
    kind: ClassVar[HistoryKind] = HistoryKind.CONTRACT

    contract_number: Optional[str] = None
    old_status: Optional[EmployeeStatus] = None
    new_status: Optional[EmployeeStatus] = None


@dataclass(frozen=True)
class JobHistory(HistoryEntry):
    kind: ClassVar[HistoryKind] = HistoryKind.JOB

    department_id: Optional[int] = None
    position_id: Optional[int] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class SalaryHistory(HistoryEntry):
    kind: ClassVar[HistoryKind] = HistoryKind.SALARY

    old_salary: Optional[Decimal] = None
    new_salary: Decimal = ZERO_AMOUNT
    salary_difference: Decimal = ZERO_AMOUNT
    change_percentage: Optional[Decimal] = None
