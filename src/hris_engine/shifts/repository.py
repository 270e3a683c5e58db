from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import EmployeeShiftSetting, ShiftPackage, ShiftPattern, WorkingHoursRule


class ShiftCatalogRepository(Protocol):
    """Working-hours rules, weekly packages and patterns (read only here)."""

    def get_rule(self, rule_id: int) -> Optional[WorkingHoursRule]:
        raise NotImplementedError

    def get_package(self, package_id: int) -> Optional[ShiftPackage]:
        raise NotImplementedError

    def get_pattern(self, pattern_id: int) -> Optional[ShiftPattern]:
        raise NotImplementedError


class ShiftAssignmentRepository(Protocol):
    def list_for_employee(self, employee_id: int) -> Sequence[EmployeeShiftSetting]:
        raise NotImplementedError

    def get_active_on(self, *, employee_id: int, work_date: date) -> Optional[EmployeeShiftSetting]:
        """The setting whose range contains ``work_date`` (latest start wins)."""
        raise NotImplementedError

    def create(self, setting: EmployeeShiftSetting) -> int:
        raise NotImplementedError

    def close(self, *, setting_id: int, effective_to: date) -> bool:
        """Set ``effective_to`` on a still-open setting."""
        raise NotImplementedError
