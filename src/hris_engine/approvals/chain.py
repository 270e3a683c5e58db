from __future__ import annotations

import logging
from typing import List, Optional, Set

from ..core.constants import MAX_CHAIN_DEPTH
from ..core.exceptions import NotFoundError
from ..users.model import Employee
from ..users.repository import DepartmentRepository, EmployeeRepository

logger = logging.getLogger(__name__)


class ApprovalChainResolver:
    """Ordered candidate approvers for an employee's requests.

    Order: backup approver, own department head, then each ancestor
    department's head up to the root. The requester and duplicates are
    skipped, so nobody approves their own request.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        departments: DepartmentRepository,
        *,
        max_depth: int = MAX_CHAIN_DEPTH,
    ):
        self._employees = employees
        self._departments = departments
        self._max_depth = int(max_depth)

    def resolve_chain_for(self, employee_id: int) -> List[int]:
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return self.resolve_chain(employee)

    def resolve_chain(self, employee: Employee) -> List[int]:
        chain: List[int] = []

        def add(candidate: Optional[int]) -> None:
            if candidate is None or candidate == employee.employee_id or candidate in chain:
                return
            chain.append(candidate)

        add(employee.approver_id)

        visited: Set[int] = set()
        department_id = employee.department_id
        depth = 0
        while department_id is not None:
            if department_id in visited:
                logger.warning("Department cycle detected at %s while resolving approvers", department_id)
                break
            if depth >= self._max_depth:
                logger.warning("Department walk stopped at depth %d for employee %s", depth, employee.employee_id)
                break
            visited.add(department_id)
            depth += 1

            department = self._departments.get_by_id(department_id)
            if department is None:
                break
            add(department.head_id)
            department_id = department.parent_id

        logger.debug("Approval chain for employee %s: %s", employee.employee_id, chain)
        return chain
