from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import ACTIVE_ROW, as_optional_int, db_cursor, fetchall, fetchone
from .model import Department, Employee
from .repository import DepartmentRepository, EmployeeRepository

_EMPLOYEE_COLUMNS = "employee_id, full_name, status, department_id, position_id, approver_id, role"


def _row_to_employee(row: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        status=EmployeeStatus(row["status"]),
        department_id=as_optional_int(row.get("department_id")),
        position_id=as_optional_int(row.get("position_id")),
        approver_id=as_optional_int(row.get("approver_id")),
        role=Role(row.get("role") or Role.STAFF.value),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id=%s AND {ACTIVE_ROW}",
                (employee_id,),
            )
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EMPLOYEE_COLUMNS}
                FROM employees
                WHERE status=%s AND {ACTIVE_ROW}
                ORDER BY employee_id
                """,
                (EmployeeStatus.ACTIVE.value,),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, department_id: int) -> Optional[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT department_id, name, parent_id, head_id
                FROM departments
                WHERE department_id=%s AND {ACTIVE_ROW}
                """,
                (department_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Department(
                department_id=int(r["department_id"]),
                name=r["name"],
                parent_id=as_optional_int(r.get("parent_id")),
                head_id=as_optional_int(r.get("head_id")),
            )

