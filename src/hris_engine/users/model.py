from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    Note: plain data object, master data is maintained elsewhere.
    ``approver_id`` is an optional backup approver and never equals ``employee_id``.
    """

    employee_id: int
    full_name: str
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    department_id: Optional[int] = None
    position_id: Optional[int] = None
    approver_id: Optional[int] = None
    role: Role = Role.STAFF

    @property
    def is_active(self) -> bool:
        return self.status is EmployeeStatus.ACTIVE


@dataclass(frozen=True)
class Department:
    """Department tree node; ``parent_id`` is None for roots."""

    department_id: int
    name: str
    parent_id: Optional[int] = None
    head_id: Optional[int] = None

